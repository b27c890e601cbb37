# plan_wizard/models/jobs.py
"""
Job status and handle models.

A JobHandle is created once when create_job succeeds and is never mutated.
Status snapshots are fetched fresh on every poll (see models.responses).
"""

from dataclasses import dataclass
from enum import Enum


class JobStatus(str, Enum):
    """Server-side job lifecycle states."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """True if no further polling should follow this status."""
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED}
)


@dataclass(frozen=True)
class JobHandle:
    """Opaque reference to a submitted generation job."""

    job_id: str
    user_id: str
