"""
Cloud Foundry Test Fixtures.

Base fixtures:
  - Fake platform client with scripted app query and task snapshots
  - Recording wait (no real sleeping)
  - VCAP_* environment builders
"""

import json
from typing import Callable, Dict, List, Optional

import pytest

from src.cloudfoundry import (
    AppIdentity,
    Backoff,
    Credentials,
    Environment,
    RemoteTask,
    SpaceContext,
    TaskSpec,
)


SPACE_ID = "space-guid-1"
SPACE_NAME = "production"
API_ADDRESS = "https://api.cf.example.com"


class FakeCloudFoundryClient:
    """
    Fake platform client.

    Returns the configured app list for every query and hands out task
    snapshots in order, one per get_task_by_guid() call. An Exception in
    the snapshot list is raised instead of returned.
    """

    def __init__(
        self,
        apps: Optional[List[AppIdentity]] = None,
        created: Optional[RemoteTask] = None,
        snapshots: Optional[list] = None,
    ):
        self.apps = apps if apps is not None else [AppIdentity(guid="g1", name="svc")]
        self.created = created or RemoteTask.from_state("t1", "RUNNING")
        self.snapshots = list(snapshots or [])
        self.queries: List[Dict[str, str]] = []
        self.created_tasks: List[dict] = []
        self.fetched: List[str] = []
        self.closed = False
        self.query_error: Optional[Exception] = None
        self.create_error: Optional[Exception] = None

    def __enter__(self) -> "FakeCloudFoundryClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.closed = True

    def list_apps_by_query(self, filters: Dict[str, str]) -> List[AppIdentity]:
        self.queries.append(dict(filters))
        if self.query_error is not None:
            raise self.query_error
        return list(self.apps)

    def create_task(self, name: str, command: str, droplet_guid: str) -> RemoteTask:
        self.created_tasks.append(
            {"name": name, "command": command, "droplet_guid": droplet_guid}
        )
        if self.create_error is not None:
            raise self.create_error
        return self.created

    def get_task_by_guid(self, guid: str) -> RemoteTask:
        self.fetched.append(guid)
        if not self.snapshots:
            raise AssertionError("no more task snapshots scripted")
        snapshot = self.snapshots.pop(0)
        if isinstance(snapshot, Exception):
            raise snapshot
        return snapshot


class RecordingWait:
    """Stands in for the inter-poll sleep: records delays, never blocks."""

    def __init__(self, cancel_after: Optional[int] = None):
        self.delays: List[float] = []
        self._cancel_after = cancel_after

    def __call__(self, seconds: float) -> bool:
        self.delays.append(seconds)
        return self._cancel_after is not None and len(self.delays) > self._cancel_after


def snapshot(state: str, guid: str = "t1", failure_reason: Optional[str] = None) -> RemoteTask:
    """Build a task snapshot with the given literal state."""
    return RemoteTask.from_state(guid, state, failure_reason=failure_reason)


def vcap_environ(
    services: Optional[dict] = None,
    application: Optional[dict] = None,
) -> Dict[str, str]:
    """Build a VCAP_* environment mapping."""
    app = {
        "name": "scheduler",
        "cf_api": API_ADDRESS,
        "space_id": SPACE_ID,
        "space_name": SPACE_NAME,
    }
    if application is not None:
        app = application
    if services is None:
        services = {
            "user-provided": [
                {
                    "name": "scheduler-cf-login",
                    "label": "user-provided",
                    "credentials": {"username": "admin", "password": "s3cret"},
                }
            ]
        }
    return {
        "VCAP_APPLICATION": json.dumps(app),
        "VCAP_SERVICES": json.dumps(services),
    }


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def space() -> SpaceContext:
    """A resolved space context."""
    return SpaceContext(
        space_id=SPACE_ID,
        space_name=SPACE_NAME,
        api_address=API_ADDRESS,
        credentials=Credentials(username="admin", password="s3cret"),
    )


@pytest.fixture
def task_spec() -> TaskSpec:
    return TaskSpec(name="nightly", command="bin/nightly", target_app_name="svc")


@pytest.fixture
def fake_client() -> FakeCloudFoundryClient:
    return FakeCloudFoundryClient()


@pytest.fixture
def recording_wait() -> RecordingWait:
    return RecordingWait()


@pytest.fixture
def no_jitter_backoff() -> Callable[[], Backoff]:
    """Backoff factory with the production bounds but without jitter."""
    return lambda: Backoff(min_delay=2.0, max_delay=10.0, factor=1.1, jitter=False)


@pytest.fixture
def environment() -> Environment:
    """An environment that looks like a Cloud Foundry container."""
    return Environment(vcap_environ())
