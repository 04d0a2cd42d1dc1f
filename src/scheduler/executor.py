"""
Executor for Job Scheduler.

- Runs the actual job work through the handler registered for its type
- Produces a terminal JobRun
- Respects cancellation

What Executor MUST NOT do:
- Modify the Job entity
- Retry failed jobs
- Swallow handler errors without recording them on the JobRun
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from .entities import (
    Job,
    JobRun,
    JobRunStatus,
    now_iso,
)
from .errors import (
    HandlerNotFoundError,
    InvalidOperationError,
    SchedulerError,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionContext:
    """
    Shared context handed to a handler for one execution.

    Handlers log through context.logger so every line of a run can be
    traced back to its run_id.
    """

    job_run: JobRun
    logger: logging.Logger


class JobHandler(ABC):
    """
    Abstract base class for job type handlers.

    Each job type implements this interface. execute() returns normally on
    success and raises on failure.
    """

    @abstractmethod
    def execute(self, job: Job, context: ExecutionContext) -> None:
        """
        Execute the job.

        Args:
            job: The job to execute
            context: Execution context for this run

        Raises:
            SchedulerError: On any job-level failure
        """
        ...

    @abstractmethod
    def cancel(self) -> bool:
        """
        Cancel the currently executing job.

        Returns:
            True if cancellation was initiated
        """
        ...


class Executor:
    """
    Executes jobs and manages JobRun lifecycle.

    1. Look up the handler for the job type
    2. Execute work via handler
    3. Record the result on a JobRun

    Execution happens synchronously - the caller blocks until the handler
    returns or raises.
    """

    def __init__(self, handlers: Optional[Dict[str, JobHandler]] = None):
        """
        Initialize Executor.

        Args:
            handlers: Initial job_type -> JobHandler mapping (injectable for testing)
        """
        self._handlers: Dict[str, JobHandler] = dict(handlers or {})
        self._current_job: Optional[Job] = None

    def register(self, job_type: str, handler: JobHandler) -> None:
        """Register the handler for a job type."""
        if job_type in self._handlers:
            raise InvalidOperationError(
                f"Handler already registered for job type: {job_type}"
            )
        self._handlers[job_type] = handler

    def get_handler(self, job_type: str) -> JobHandler:
        """Return the handler for a job type."""
        handler = self._handlers.get(job_type)
        if handler is None:
            raise HandlerNotFoundError(job_type)
        return handler

    def execute(self, job: Job) -> JobRun:
        """
        Execute a job and return the completed JobRun.

        Args:
            job: The job to execute

        Returns:
            The completed JobRun with terminal status
        """
        handler = self.get_handler(job.job_type)
        job_run = JobRun.create(job.job_id)
        context = ExecutionContext(
            job_run=job_run,
            logger=logging.getLogger(f"{__name__}.{job.job_type}"),
        )

        logger.info(
            f"[Executor] Starting job {job.name} "
            f"(type={job.job_type}, run={job_run.run_id})"
        )

        self._current_job = job

        try:
            handler.execute(job, context)
            job_run.status = JobRunStatus.COMPLETED

        except SchedulerError as e:
            logger.error(f"[Executor] Job {job.name} failed: {e}")
            job_run.status = JobRunStatus.FAILED
            job_run.error = str(e)

        except Exception as e:
            logger.exception(f"[Executor] Unexpected error executing job {job.name}")
            job_run.status = JobRunStatus.FAILED
            job_run.error = f"Execution error: {str(e)}"

        finally:
            job_run.finished_at = now_iso()
            self._current_job = None

        logger.info(
            f"[Executor] Job {job.name} execution completed: "
            f"status={job_run.status.value}"
        )

        return job_run

    def cancel_current(self) -> bool:
        """
        Cancel the currently executing job.

        Returns:
            True if cancellation was initiated
        """
        if self._current_job is None:
            return False

        return self.get_handler(self._current_job.job_type).cancel()

    @property
    def is_executing(self) -> bool:
        """Check if executor is currently running a job."""
        return self._current_job is not None
