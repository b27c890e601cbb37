# plan_wizard/models/__init__.py
"""
Data models for plan-wizard.

Provides the request payload, job handle/status types and backend responses.
"""

from plan_wizard.models.jobs import TERMINAL_STATUSES, JobHandle, JobStatus
from plan_wizard.models.request import (
    DAYS_OF_WEEK,
    EquipmentType,
    ExperienceLevel,
    TrainingDisruption,
    TrainingPlanRequest,
    TrainingTimePreference,
)
from plan_wizard.models.responses import (
    CancelJobResponse,
    CreateJobResponse,
    JobStatusSnapshot,
)

__all__ = [
    # Request
    "TrainingPlanRequest",
    "TrainingDisruption",
    "ExperienceLevel",
    "TrainingTimePreference",
    "EquipmentType",
    "DAYS_OF_WEEK",
    # Jobs
    "JobStatus",
    "JobHandle",
    "TERMINAL_STATUSES",
    # Responses
    "CreateJobResponse",
    "JobStatusSnapshot",
    "CancelJobResponse",
]
