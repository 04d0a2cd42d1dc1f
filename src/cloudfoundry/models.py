"""
Cloud Foundry task domain values.

- TaskSpec: What to run (task name, command, target app name)
- Credentials / SpaceContext: Where and as whom to run it
- AppIdentity: The resolved target app
- TaskState / RemoteTask: Snapshot of the remote task as last reported

All values are immutable. A RemoteTask is never updated in place; every
status fetch yields a new snapshot.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from .errors import InvalidCredentialsError, InvalidTaskSpecError


# Job configuration keys
CONFIG_NAME = "name"
CONFIG_COMMAND = "command"
CONFIG_APP_NAME = "cf-appname"
CONFIG_CREDENTIALS_SERVICE = "cf-credentials-service"


class TaskState(str, Enum):
    """
    Remote task states understood by the poll loop.

    - RUNNING: Non-terminal, keep polling
    - SUCCEEDED: Terminal, success
    - FAILED: Terminal, failure
    - UNKNOWN: Any other platform value; terminal, error
    """

    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "TaskState":
        """Map a platform state literal onto the closed set."""
        if raw in (cls.RUNNING.value, cls.SUCCEEDED.value, cls.FAILED.value):
            return cls(raw)
        return cls.UNKNOWN


def _require_str(section: Mapping[str, Any], key: str) -> str:
    value = section.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InvalidTaskSpecError(key)
    return value


@dataclass(frozen=True)
class TaskSpec:
    """A one-shot task to run against a named app."""

    name: str
    command: str
    target_app_name: str

    @classmethod
    def from_config(cls, section: Mapping[str, Any]) -> "TaskSpec":
        """
        Build a TaskSpec from a job configuration section.

        Args:
            section: Mapping with "name", "command" and "cf-appname"

        Raises:
            InvalidTaskSpecError: If a key is missing or blank
        """
        return cls(
            name=_require_str(section, CONFIG_NAME),
            command=_require_str(section, CONFIG_COMMAND),
            target_app_name=_require_str(section, CONFIG_APP_NAME),
        )


@dataclass(frozen=True)
class Credentials:
    """Platform login credentials taken from a service binding."""

    username: str
    password: str

    @classmethod
    def from_binding(cls, credentials: Mapping[str, Any]) -> "Credentials":
        """
        Validate a binding's credential map once, up front.

        Raises:
            InvalidCredentialsError: If username or password is absent,
                not a string, or empty
        """
        values = {}
        for key in ("username", "password"):
            if key not in credentials:
                raise InvalidCredentialsError(key, "missing")
            value = credentials[key]
            if not isinstance(value, str):
                raise InvalidCredentialsError(
                    key, f"expected string, got {type(value).__name__}"
                )
            if not value:
                raise InvalidCredentialsError(key, "empty")
            values[key] = value
        return cls(**values)

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class SpaceContext:
    """Space identity, API endpoint and login for one run."""

    space_id: str
    space_name: str
    api_address: str
    credentials: Credentials


@dataclass(frozen=True)
class AppIdentity:
    """A Cloud Foundry app resolved by name within a space."""

    guid: str
    name: str


@dataclass(frozen=True)
class RemoteTask:
    """
    Snapshot of a remote task.

    raw_state keeps the literal platform value so an UNKNOWN state can be
    reported exactly as observed.
    """

    guid: str
    state: TaskState
    raw_state: str
    name: Optional[str] = None
    failure_reason: Optional[str] = None

    @classmethod
    def from_state(
        cls,
        guid: str,
        raw_state: str,
        name: Optional[str] = None,
        failure_reason: Optional[str] = None,
    ) -> "RemoteTask":
        """Create a snapshot, parsing the literal state."""
        return cls(
            guid=guid,
            state=TaskState.parse(raw_state),
            raw_state=raw_state,
            name=name,
            failure_reason=failure_reason,
        )

    def is_terminal(self) -> bool:
        """Check if the snapshot ends polling."""
        return self.state != TaskState.RUNNING
