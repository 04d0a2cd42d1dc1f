"""
Cloud Foundry task job type.

Launches a one-shot task against a Cloud Foundry app and blocks until the
task finishes.
"""

from .backoff import Backoff
from .client import CloudFoundryClient
from .environment import (
    DEFAULT_CREDENTIALS_SERVICE,
    Environment,
    PlatformApp,
    ServiceBinding,
    ServiceBindings,
    build_space_context,
)
from .errors import (
    CloudFoundryTaskError,
    PlatformEnvironmentError,
    CredentialServiceNotFoundError,
    InvalidCredentialsError,
    InvalidTaskSpecError,
    AppNotFoundError,
    AppNotUniqueError,
    CloudFoundryAPIError,
    TaskFailedError,
    UnknownTaskStateError,
    TaskCancelledError,
)
from .models import (
    AppIdentity,
    Credentials,
    RemoteTask,
    SpaceContext,
    TaskSpec,
    TaskState,
)
from .resolver import AppResolver
from .task import JOB_TYPE, CloudFoundryTaskHandler, TaskRunner

__all__ = [
    # Models
    "AppIdentity",
    "Credentials",
    "RemoteTask",
    "SpaceContext",
    "TaskSpec",
    "TaskState",
    # Errors
    "CloudFoundryTaskError",
    "PlatformEnvironmentError",
    "CredentialServiceNotFoundError",
    "InvalidCredentialsError",
    "InvalidTaskSpecError",
    "AppNotFoundError",
    "AppNotUniqueError",
    "CloudFoundryAPIError",
    "TaskFailedError",
    "UnknownTaskStateError",
    "TaskCancelledError",
    # Environment
    "DEFAULT_CREDENTIALS_SERVICE",
    "Environment",
    "PlatformApp",
    "ServiceBinding",
    "ServiceBindings",
    "build_space_context",
    # Client
    "CloudFoundryClient",
    # Runner
    "Backoff",
    "AppResolver",
    "TaskRunner",
    "CloudFoundryTaskHandler",
    "JOB_TYPE",
]
