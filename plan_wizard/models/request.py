# plan_wizard/models/request.py
"""
Training plan request models.

TrainingPlanRequest is the wire payload sent to create_job. The wizard
accumulates a loose dict across steps (see wizard.form_store) and only
builds this model once validation has passed.
"""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ExperienceLevel(str, Enum):
    """Athlete experience tiers accepted by the generator."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    EXPERIENCED = "experienced"


class TrainingTimePreference(str, Enum):
    """Preferred time of day for sessions."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


class EquipmentType(str, Enum):
    """Equipment and facility flags."""

    BIKE_TRAINER = "bike_trainer"
    TREADMILL = "treadmill"
    HEART_RATE_MONITOR = "heart_rate_monitor"
    POWER_METER = "power_meter"
    GPS_WATCH = "gps_watch"
    POOL_ACCESS = "pool_access"
    GYM_ACCESS = "gym_access"
    STRENGTH_EQUIPMENT = "strength_equipment"


DAYS_OF_WEEK = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


class TrainingDisruption(BaseModel):
    """A period where training is interrupted (travel, work, illness)."""

    model_config = ConfigDict(extra="ignore")

    start_date: date = Field(description="First day of the disruption")
    end_date: date = Field(description="Last day of the disruption (after start_date)")
    description: str = Field(description="Free-text reason")


class TrainingPlanRequest(BaseModel):
    """Payload for the create_job call."""

    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    user_id: str = Field(description="Owning user reference")
    race_id: int = Field(description="Target race")

    days_per_week: int = Field(ge=1, le=7, description="Training days per week")
    max_hours_per_week: float = Field(
        gt=0.0, le=30.0, description="Weekly hour ceiling"
    )
    years_experience: ExperienceLevel = Field(description="Experience tier")

    preferred_training_days: list[str] | None = Field(default=None)
    preferred_rest_days: list[str] | None = Field(default=None)
    preferred_training_time: TrainingTimePreference | None = Field(default=None)

    upcoming_disruptions: list[TrainingDisruption] | None = Field(default=None)
    injury_limitations: list[str] | None = Field(default=None)

    available_equipment: list[EquipmentType] | None = Field(default=None)
    safe_outdoor_routes: bool = Field(default=True)

    include_strength_training: bool = Field(default=True)
    include_cross_training: bool = Field(default=False)

    def to_payload(self) -> dict:
        """JSON-ready dict with unset optional fields omitted."""
        return self.model_dump(mode="json", exclude_none=True)
