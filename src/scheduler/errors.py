"""
Scheduler-specific exceptions.

Every error raised by a job handler should derive from SchedulerError so the
Executor can record it on the JobRun without special cases.
"""


class SchedulerError(Exception):
    """Base exception for all scheduler errors."""
    pass


class InvalidOperationError(SchedulerError):
    """
    Raised when an operation violates scheduler invariants.

    Examples:
    - Registering two handlers for the same job type
    - Executing a job before any handler is registered
    """
    pass


class HandlerNotFoundError(SchedulerError):
    """Raised when no handler is registered for a job type."""

    def __init__(self, job_type: str):
        self.job_type = job_type
        super().__init__(f"No handler registered for job type: {job_type}")
