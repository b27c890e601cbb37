# plan_wizard/models/responses.py
"""
Pydantic models for backend responses.

All models use extra="ignore" so new server fields don't break parsing.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from plan_wizard.models.jobs import JobStatus


class CreateJobResponse(BaseModel):
    """Response from create_job."""

    model_config = ConfigDict(extra="ignore")

    job_id: str = Field(description="Unique job identifier for polling")
    status: JobStatus = Field(description="Initial job status (normally 'pending')")
    created_at: datetime | None = Field(default=None, description="Server creation time")


class JobStatusSnapshot(BaseModel):
    """
    One self-contained status record for a job.

    progress is not range-checked here: servers have been seen to report
    values slightly outside 0-100, and the progress interpreter clamps.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    status: JobStatus = Field(description="Current job status")
    progress: int = Field(default=0, description="Completion percentage (0-100)")
    current_step: str | None = Field(
        default=None, description="Human phase label supplied by the server"
    )
    error_message: str | None = Field(
        default=None, description="Error text if the job failed"
    )
    retry_count: int = Field(default=0, ge=0, description="Server-side retry counter")
    result_plan_id: str | None = Field(
        default=None, description="Generated plan reference (completed jobs only)"
    )


class CancelJobResponse(BaseModel):
    """Response from cancel_job."""

    model_config = ConfigDict(extra="ignore")

    message: str = Field(default="", description="Human-readable confirmation")
