"""
Cloud Foundry task exceptions.

Every error is fatal to the run. The job handler raises it unchanged and
the scheduler Executor records it on the JobRun.
"""

from typing import Optional

from src.scheduler.errors import SchedulerError


class CloudFoundryTaskError(SchedulerError):
    """Base exception for all Cloud Foundry task errors."""
    pass


class PlatformEnvironmentError(CloudFoundryTaskError):
    """
    Raised when the process is not running inside Cloud Foundry, or when the
    VCAP_APPLICATION / VCAP_SERVICES data is missing or malformed.
    """
    pass


class CredentialServiceNotFoundError(CloudFoundryTaskError):
    """Raised when the named credential service is not bound to the app."""

    def __init__(self, service_name: str):
        self.service_name = service_name
        super().__init__(f"'{service_name}' service not found")


class InvalidCredentialsError(CloudFoundryTaskError):
    """Raised when a credential binding lacks a usable username or password."""

    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(f"Invalid credential '{key}': {reason}")


class InvalidTaskSpecError(CloudFoundryTaskError):
    """Raised when the job configuration is missing a required key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Task configuration is missing required key '{key}'")


class AppNotFoundError(CloudFoundryTaskError):
    """Raised when no app with the configured name exists in the space."""

    def __init__(self, app_name: str, space_name: str):
        self.app_name = app_name
        self.space_name = space_name
        super().__init__(f"app '{app_name}' not found in space '{space_name}'")


class AppNotUniqueError(CloudFoundryTaskError):
    """
    Raised when the space-scoped app query matches more than one app.

    App names are unique within a space, so this means the query was not
    space-scoped. Never resolved by picking one of the matches.
    """

    def __init__(self, app_name: str, space_name: str, count: int):
        self.app_name = app_name
        self.space_name = space_name
        self.count = count
        super().__init__(
            f"app '{app_name}' not unique in space '{space_name}' ({count} matches)"
        )


class CloudFoundryAPIError(CloudFoundryTaskError):
    """Raised when the Cloud Foundry API answers with a non-2xx status."""

    def __init__(self, method: str, url: str, status_code: int, body: str):
        self.method = method
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"{method} {url} failed with HTTP {status_code}: {body[:200]}"
        )


class TaskFailedError(CloudFoundryTaskError):
    """Raised when the remote task reports the FAILED state."""

    def __init__(self, task_guid: str, failure_reason: Optional[str] = None):
        self.task_guid = task_guid
        self.failure_reason = failure_reason
        message = f"task {task_guid} failed"
        if failure_reason:
            message += f": {failure_reason}"
        super().__init__(message)


class UnknownTaskStateError(CloudFoundryTaskError):
    """Raised when the remote task reports a state outside the known set."""

    def __init__(self, task_guid: str, state: str):
        self.task_guid = task_guid
        self.state = state
        super().__init__(f"task state unknown: {state}")


class TaskCancelledError(CloudFoundryTaskError):
    """
    Raised when a run is cancelled before submission or between status checks.

    The remote task, if one was submitted, is not cancelled and may keep running.
    """

    def __init__(self, task_guid: Optional[str] = None):
        self.task_guid = task_guid
        if task_guid is None:
            message = "run cancelled before the task was submitted"
        else:
            message = f"polling cancelled for task {task_guid}; remote task may still be running"
        super().__init__(message)
