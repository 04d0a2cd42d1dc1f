"""
Scheduler Test Fixtures.

Base fixtures:
  - Mock job handler with a controllable outcome
  - Executor with the mock handler registered
"""

from typing import Callable, Optional

import pytest

from src.scheduler import (
    ExecutionContext,
    Executor,
    Job,
    SchedulerError,
)


MOCK_JOB_TYPE = "mock"


class MockJobHandler:
    """
    Mock job handler for testing.

    Allows controlling execution outcome without any remote calls.
    """

    def __init__(self):
        self.jobs_executed = []
        self.contexts = []
        self._error: Optional[Exception] = None
        self.cancelled = False

    def fail_with(self, error: Exception) -> None:
        """Make execute() raise the given error."""
        self._error = error

    def execute(self, job: Job, context: ExecutionContext) -> None:
        """Mock execute that records the call and raises the configured error."""
        self.jobs_executed.append(job)
        self.contexts.append(context)
        if self._error is not None:
            raise self._error

    def cancel(self) -> bool:
        self.cancelled = True
        return True


@pytest.fixture
def mock_handler() -> MockJobHandler:
    """Create a mock job handler."""
    return MockJobHandler()


@pytest.fixture
def executor(mock_handler: MockJobHandler) -> Executor:
    """Create an Executor with mock handler."""
    return Executor({MOCK_JOB_TYPE: mock_handler})


@pytest.fixture
def create_job() -> Callable:
    """Factory fixture for creating jobs."""

    def _create(
        name: str = "test-job",
        command: str = "echo hello",
        job_type: str = MOCK_JOB_TYPE,
        params: dict = None,
    ) -> Job:
        return Job.create(
            name=name,
            command=command,
            job_type=job_type,
            params=params or {"test": True},
        )

    return _create


class ExampleJobError(SchedulerError):
    """Job-level error raised by the mock handler."""
    pass
