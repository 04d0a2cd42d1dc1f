"""
Pytest configuration and shared fixtures.
"""

import pytest


SETTINGS_ENV_VARS = (
    "LOG_LEVEL",
    "LOG_DIR",
    "CF_CREDENTIALS_SERVICE",
    "CF_HTTP_TIMEOUT",
    "CF_POLL_MIN_SECONDS",
    "CF_POLL_MAX_SECONDS",
    "CF_POLL_FACTOR",
    "VCAP_APPLICATION",
    "VCAP_SERVICES",
)


@pytest.fixture(autouse=True, scope="function")
def isolate_environment(monkeypatch):
    """
    Clear scheduler and platform variables before each test.

    Tests run as if outside Cloud Foundry with default settings, unless
    the test explicitly sets variables itself.
    """
    for key in SETTINGS_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    yield
