"""
Job Scheduler Core Module.

Generic job abstraction shared by every job type:
- Job / JobRun entities
- JobHandler plugin interface
- Executor with a per-job-type handler registry
"""

from .entities import (
    JobRunStatus,
    Job,
    JobRun,
)
from .errors import (
    SchedulerError,
    InvalidOperationError,
    HandlerNotFoundError,
)
from .executor import Executor, ExecutionContext, JobHandler

__all__ = [
    # Entities
    "JobRunStatus",
    "Job",
    "JobRun",
    # Errors
    "SchedulerError",
    "InvalidOperationError",
    "HandlerNotFoundError",
    # Executor
    "Executor",
    "ExecutionContext",
    "JobHandler",
]
