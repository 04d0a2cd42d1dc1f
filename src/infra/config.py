"""
Runtime settings for the task scheduler.

Values come from the process environment. The CLI entry point calls
load_dotenv() first, so a local .env file can provide them too.

Environment Variables:
- LOG_LEVEL: Logging level (default: INFO)
- LOG_DIR: Directory for daily log files (default: logs)
- CF_CREDENTIALS_SERVICE: Bound service holding the platform login (default: scheduler-cf-login)
- CF_HTTP_TIMEOUT: Per-request API timeout in seconds (default: 30)
- CF_POLL_MIN_SECONDS: Smallest delay between task status checks (default: 2)
- CF_POLL_MAX_SECONDS: Largest delay between task status checks (default: 10)
- CF_POLL_FACTOR: Delay growth factor per check (default: 1.1)
"""

import logging
import os
from dataclasses import dataclass
from functools import partial

from src.cloudfoundry.backoff import (
    DEFAULT_FACTOR,
    DEFAULT_MAX_DELAY_SECONDS,
    DEFAULT_MIN_DELAY_SECONDS,
    Backoff,
)
from src.cloudfoundry.client import DEFAULT_TIMEOUT_SECONDS
from src.cloudfoundry.environment import DEFAULT_CREDENTIALS_SERVICE

logger = logging.getLogger(__name__)


def _get_env_str(key: str, default: str) -> str:
    """Get non-empty string value from environment variable."""
    val = os.getenv(key, "").strip()
    return val or default


def _get_env_float(key: str, default: float) -> float:
    """Get float value from environment variable."""
    val = os.getenv(key)
    if val is not None:
        try:
            return float(val)
        except ValueError:
            logger.warning(f"[Config] Invalid number for {key}: {val}, using default: {default}")
    return default


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, read once at startup."""

    log_level: str = "INFO"
    log_dir: str = "logs"
    credentials_service: str = DEFAULT_CREDENTIALS_SERVICE
    http_timeout: float = DEFAULT_TIMEOUT_SECONDS
    poll_min_seconds: float = DEFAULT_MIN_DELAY_SECONDS
    poll_max_seconds: float = DEFAULT_MAX_DELAY_SECONDS
    poll_factor: float = DEFAULT_FACTOR

    @classmethod
    def from_env(cls) -> "Settings":
        """Build Settings from the current environment."""
        return cls(
            log_level=_get_env_str("LOG_LEVEL", "INFO").upper(),
            log_dir=_get_env_str("LOG_DIR", "logs"),
            credentials_service=_get_env_str(
                "CF_CREDENTIALS_SERVICE", DEFAULT_CREDENTIALS_SERVICE
            ),
            http_timeout=_get_env_float("CF_HTTP_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
            poll_min_seconds=_get_env_float("CF_POLL_MIN_SECONDS", DEFAULT_MIN_DELAY_SECONDS),
            poll_max_seconds=_get_env_float("CF_POLL_MAX_SECONDS", DEFAULT_MAX_DELAY_SECONDS),
            poll_factor=_get_env_float("CF_POLL_FACTOR", DEFAULT_FACTOR),
        )

    def backoff_factory(self):
        """Return a factory building a fresh poll Backoff per run."""
        return partial(
            Backoff,
            min_delay=self.poll_min_seconds,
            max_delay=self.poll_max_seconds,
            factor=self.poll_factor,
            jitter=True,
        )
