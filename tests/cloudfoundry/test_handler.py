"""
CloudFoundryTaskHandler tests.

Runs "cloudfoundry-task" jobs through the scheduler Executor with a fake
environment and fake platform client.
"""

import pytest

from src.cloudfoundry import (
    JOB_TYPE,
    Backoff,
    CloudFoundryTaskHandler,
    Environment,
)
from src.scheduler import Executor, Job, JobRunStatus

from .conftest import FakeCloudFoundryClient, SPACE_NAME, snapshot, vcap_environ


def zero_backoff() -> Backoff:
    return Backoff(min_delay=0.0, max_delay=0.0)


class ClientFactory:
    """Records the space each client is built for."""

    def __init__(self, client: FakeCloudFoundryClient):
        self.client = client
        self.spaces = []

    def __call__(self, space):
        self.spaces.append(space)
        return self.client


def make_job(**params) -> Job:
    return Job.create(
        name="nightly",
        command="bin/nightly",
        job_type=JOB_TYPE,
        params={"cf-appname": "svc", **params},
    )


def make_executor(client, environ=None):
    factory = ClientFactory(client)
    handler = CloudFoundryTaskHandler(
        environment=Environment(vcap_environ() if environ is None else environ),
        client_factory=factory,
        backoff_factory=zero_backoff,
    )
    executor = Executor()
    executor.register(JOB_TYPE, handler)
    return executor, handler, factory


class TestHandlerExecution:
    """End-to-end runs through the Executor."""

    def test_successful_run_completes(self):
        client = FakeCloudFoundryClient(
            snapshots=[snapshot("RUNNING"), snapshot("SUCCEEDED")],
        )
        executor, _, factory = make_executor(client)

        job_run = executor.execute(make_job())

        assert job_run.status == JobRunStatus.COMPLETED
        assert job_run.error is None
        assert job_run.finished_at is not None
        assert client.fetched == ["t1", "t1"]
        assert client.closed is True
        assert factory.spaces[0].credentials.username == "admin"

    def test_app_not_found_fails_run(self):
        client = FakeCloudFoundryClient(apps=[])
        executor, _, _ = make_executor(client)

        job_run = executor.execute(make_job())

        assert job_run.status == JobRunStatus.FAILED
        assert job_run.error == f"app 'svc' not found in space '{SPACE_NAME}'"
        assert client.created_tasks == []

    def test_failed_task_fails_run(self):
        client = FakeCloudFoundryClient(snapshots=[snapshot("FAILED")])
        executor, _, _ = make_executor(client)

        job_run = executor.execute(make_job())

        assert job_run.status == JobRunStatus.FAILED
        assert job_run.error == "task t1 failed"

    def test_unknown_state_fails_run(self):
        client = FakeCloudFoundryClient(snapshots=[snapshot("WEIRD")])
        executor, _, _ = make_executor(client)

        job_run = executor.execute(make_job())

        assert job_run.status == JobRunStatus.FAILED
        assert "WEIRD" in job_run.error

    def test_outside_platform_makes_no_calls(self):
        client = FakeCloudFoundryClient()
        executor, _, factory = make_executor(client, environ={})

        job_run = executor.execute(make_job())

        assert job_run.status == JobRunStatus.FAILED
        assert "not running in Cloud Foundry" in job_run.error
        assert factory.spaces == []
        assert client.queries == []

    def test_missing_credential_service(self):
        client = FakeCloudFoundryClient()
        executor, _, factory = make_executor(client)

        job_run = executor.execute(make_job(**{"cf-credentials-service": "other-login"}))

        assert job_run.status == JobRunStatus.FAILED
        assert job_run.error == "'other-login' service not found"
        assert factory.spaces == []

    def test_missing_app_name(self):
        client = FakeCloudFoundryClient()
        executor, _, _ = make_executor(client)
        job = Job.create(name="nightly", command="bin/nightly", job_type=JOB_TYPE)

        job_run = executor.execute(job)

        assert job_run.status == JobRunStatus.FAILED
        assert "cf-appname" in job_run.error


class TestHandlerCancel:
    """Handler cancellation."""

    def test_cancel_without_run_returns_false(self):
        _, handler, _ = make_executor(FakeCloudFoundryClient())

        assert handler.cancel() is False

    def test_cancel_during_poll_fails_run(self):
        client = FakeCloudFoundryClient(snapshots=[snapshot("RUNNING")] * 3)
        executor, handler, _ = make_executor(client)

        original_fetch = client.get_task_by_guid

        def fetch_then_cancel(guid):
            task = original_fetch(guid)
            assert executor.cancel_current() is True
            return task

        client.get_task_by_guid = fetch_then_cancel

        job_run = executor.execute(make_job())

        assert job_run.status == JobRunStatus.FAILED
        assert "polling cancelled" in job_run.error
        assert client.fetched == ["t1"]
        assert handler.cancel() is False

    def test_cancel_during_client_setup_stops_before_submit(self):
        client = FakeCloudFoundryClient(snapshots=[snapshot("SUCCEEDED")])
        executor, handler, factory = make_executor(client)
        cancelled = []

        def build_then_cancel(space):
            cancelled.append(executor.cancel_current())
            return factory(space)

        handler._client_factory = build_then_cancel

        job_run = executor.execute(make_job())

        assert cancelled == [True]
        assert job_run.status == JobRunStatus.FAILED
        assert "before the task was submitted" in job_run.error
        assert client.created_tasks == []
        assert client.fetched == []
        assert client.closed is True
        assert handler.cancel() is False
