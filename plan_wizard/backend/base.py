# plan_wizard/backend/base.py
"""
Plan backend protocol definition.

Defines the abstract interface that both HttpPlanBackend and LocalPlanBackend
implement. The wizard only ever talks to a backend through these methods.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from plan_wizard.models.request import TrainingPlanRequest
    from plan_wizard.models.responses import (
        CancelJobResponse,
        CreateJobResponse,
        JobStatusSnapshot,
    )


class PlanBackend(ABC):
    """
    Abstract base class for plan generation backends.

    Implementations raise BackendError on any failure.
    """

    @abstractmethod
    async def create_job(self, request: "TrainingPlanRequest") -> "CreateJobResponse":
        """
        Start a plan generation job.

        Must not be retried by callers: submission idempotency is a server concern.

        Args:
            request: Validated request payload

        Returns:
            CreateJobResponse with the new job_id

        Raises:
            BackendError: On validation, auth, or transport failure
        """
        pass

    @abstractmethod
    async def get_job_status(self, job_id: str, user_id: str) -> "JobStatusSnapshot":
        """
        Fetch the current status of a job. Idempotent.

        Args:
            job_id: Job identifier from create_job
            user_id: Owning user

        Returns:
            Fresh JobStatusSnapshot

        Raises:
            BackendError: On any failure
        """
        pass

    @abstractmethod
    async def cancel_job(self, job_id: str, user_id: str) -> "CancelJobResponse":
        """
        Ask the backend to cancel a job. Best-effort.

        Args:
            job_id: Job identifier from create_job
            user_id: Owning user

        Returns:
            CancelJobResponse

        Raises:
            BackendError: On any failure
        """
        pass

    async def close(self) -> None:
        """Release any held resources."""
