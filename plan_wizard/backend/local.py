# plan_wizard/backend/local.py
"""
In-process plan backend.

Simulates the generation service: each job runs on its own asyncio task
that walks a fixed phase schedule and then produces a plan reference.
Used for offline CLI runs (plan-wizard create --local) and in tests.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from plan_wizard.backend.base import PlanBackend
from plan_wizard.backend.errors import BackendError
from plan_wizard.models.jobs import JobStatus
from plan_wizard.models.request import TrainingPlanRequest
from plan_wizard.models.responses import (
    CancelJobResponse,
    CreateJobResponse,
    JobStatusSnapshot,
)

logger = logging.getLogger(__name__)

# (progress, phase label) pairs walked in order by every simulated job
PHASE_SCHEDULE: list[tuple[int, str]] = [
    (5, "Analyzing your fitness profile..."),
    (15, "Selecting optimal race preparation strategy..."),
    (30, "Creating periodized training phases..."),
    (50, "Generating weekly workout schedules..."),
    (65, "Optimizing workout intensity and volume..."),
    (80, "Adding structured workout details..."),
    (95, "Finalizing your personalized plan..."),
]


def generate_job_id() -> str:
    """
    Generate a unique job ID.

    Returns:
        12-character hex string (UUID4 truncated)
    """
    return uuid4().hex[:12]


@dataclass
class LocalJob:
    """Simulated job record."""

    job_id: str
    user_id: str
    request: TrainingPlanRequest
    status: JobStatus
    created_at: datetime
    progress: int = 0
    current_step: str | None = None
    error_message: str | None = None
    result_plan_id: str | None = None
    task: asyncio.Task | None = field(default=None, repr=False)

    def snapshot(self) -> JobStatusSnapshot:
        return JobStatusSnapshot(
            status=self.status,
            progress=self.progress,
            current_step=self.current_step,
            error_message=self.error_message,
            retry_count=0,
            result_plan_id=self.result_plan_id,
        )


class LocalPlanBackend(PlanBackend):
    """
    Simulated generation service.

    Jobs are kept in memory for the lifetime of the backend instance.
    """

    def __init__(
        self,
        step_delay: float = 0.5,
        fail_with: str | None = None,
        fail_at_progress: int = 50,
    ) -> None:
        """
        Initialize the simulator.

        Args:
            step_delay: Seconds spent in each phase
            fail_with: If set, every job fails with this message
            fail_at_progress: Progress at which failing jobs give up
        """
        self._step_delay = step_delay
        self._fail_with = fail_with
        self._fail_at_progress = fail_at_progress
        self._jobs: dict[str, LocalJob] = {}
        logger.info(f"Initialized LocalPlanBackend (step_delay={step_delay}s)")

    def get_job(self, job_id: str) -> LocalJob | None:
        """Direct access to a job record (for inspection/testing)."""
        return self._jobs.get(job_id)

    async def create_job(self, request: TrainingPlanRequest) -> CreateJobResponse:
        job = LocalJob(
            job_id=generate_job_id(),
            user_id=request.user_id,
            request=request,
            status=JobStatus.PENDING,
            created_at=datetime.now(timezone.utc),
        )
        self._jobs[job.job_id] = job
        job.task = asyncio.create_task(self._run_job(job))
        logger.info(f"Created local job {job.job_id} for race {request.race_id}")

        return CreateJobResponse(
            job_id=job.job_id, status=job.status, created_at=job.created_at
        )

    def _lookup(self, job_id: str, user_id: str) -> LocalJob:
        job = self._jobs.get(job_id)
        if job is None or job.user_id != user_id:
            raise BackendError(f"Job '{job_id}' not found", status_code=404)
        return job

    async def get_job_status(self, job_id: str, user_id: str) -> JobStatusSnapshot:
        return self._lookup(job_id, user_id).snapshot()

    async def cancel_job(self, job_id: str, user_id: str) -> CancelJobResponse:
        job = self._lookup(job_id, user_id)
        if job.status.is_terminal:
            return CancelJobResponse(message=f"Job already {job.status.value}")

        if job.task is not None:
            job.task.cancel()
        job.status = JobStatus.CANCELLED
        job.current_step = None
        logger.info(f"Cancelled local job {job_id}")
        return CancelJobResponse(message="Job cancelled")

    async def _run_job(self, job: LocalJob) -> None:
        """Walk the phase schedule, then complete or fail the job."""
        try:
            await asyncio.sleep(self._step_delay)
            job.status = JobStatus.PROCESSING

            for progress, label in PHASE_SCHEDULE:
                if self._fail_with and progress >= self._fail_at_progress:
                    job.status = JobStatus.FAILED
                    job.error_message = self._fail_with
                    logger.info(f"Local job {job.job_id} failed: {self._fail_with}")
                    return

                job.progress = progress
                job.current_step = label
                await asyncio.sleep(self._step_delay)

            job.progress = 100
            job.current_step = None
            job.result_plan_id = uuid4().hex
            job.status = JobStatus.COMPLETED
            logger.info(f"Local job {job.job_id} completed: plan {job.result_plan_id}")

        except asyncio.CancelledError:
            if not job.status.is_terminal:
                job.status = JobStatus.CANCELLED
            raise

    async def close(self) -> None:
        """Cancel every running job task."""
        tasks = [j.task for j in self._jobs.values() if j.task and not j.task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
