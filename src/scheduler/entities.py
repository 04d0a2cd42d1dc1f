"""
Scheduler Domain Entities.

- Job: A configured unit of work (name, command, job type, params)
- JobRun: Historical record of a single execution attempt

Status values are the canonical execution results reported by the Executor.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
import uuid


class JobRunStatus(str, Enum):
    """
    JobRun status values (execution result).

    - COMPLETED: Execution finished successfully
    - FAILED: Execution failed
    """

    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def now_iso() -> str:
    """Get current time as ISO format string."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


@dataclass
class Job:
    """
    Single unit of work handed to a JobHandler.

    The generic fields (name, command) are shared by every job type.
    Type-specific configuration lives in params, keyed exactly as it
    appears in the job configuration (e.g. "cf-appname").
    """

    job_id: str
    name: str
    command: str
    job_type: str
    params: dict = field(default_factory=dict)
    created_at: str = field(default_factory=now_iso)

    @classmethod
    def create(
        cls,
        name: str,
        command: str,
        job_type: str,
        params: Optional[dict] = None,
    ) -> "Job":
        """Create a new Job with generated ID."""
        return cls(
            job_id=generate_uuid(),
            name=name,
            command=command,
            job_type=job_type,
            params=params or {},
        )


@dataclass
class JobRun:
    """
    Historical record of a single execution attempt.

    status, finished_at and error are written once when the run ends.
    """

    run_id: str
    job_id: str
    started_at: str
    status: Optional[JobRunStatus] = None
    finished_at: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def create(cls, job_id: str) -> "JobRun":
        """Create a new JobRun with generated ID."""
        return cls(
            run_id=generate_uuid(),
            job_id=job_id,
            started_at=now_iso(),
        )

    def is_terminal(self) -> bool:
        """Check if run has a terminal status."""
        return self.status in (
            JobRunStatus.COMPLETED,
            JobRunStatus.FAILED,
        )
