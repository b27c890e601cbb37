# plan_wizard/validation/form.py
"""
Field validation for the assembled wizard request.

Returns human-readable messages instead of raising, so the submission gate
can render them next to the step without touching the network.
"""

from datetime import date
from typing import Any, Mapping

from plan_wizard.models.request import (
    DAYS_OF_WEEK,
    EquipmentType,
    ExperienceLevel,
    TrainingTimePreference,
)

MIN_DAYS_PER_WEEK = 1
MAX_DAYS_PER_WEEK = 7
MAX_HOURS_PER_WEEK = 30.0

_EXPERIENCE_VALUES = {e.value for e in ExperienceLevel}
_TIME_VALUES = {t.value for t in TrainingTimePreference}
_EQUIPMENT_VALUES = {e.value for e in EquipmentType}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _as_date(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def _disruption_field(disruption: Any, name: str) -> Any:
    if isinstance(disruption, Mapping):
        return disruption.get(name)
    return getattr(disruption, name, None)


def _validate_disruptions(disruptions: Any) -> list[str]:
    if not disruptions:
        return []

    for disruption in disruptions:
        start = _disruption_field(disruption, "start_date")
        end = _disruption_field(disruption, "end_date")
        description = _disruption_field(disruption, "description")
        if not start or not end or not description:
            return ["All disruption fields are required"]

        start_date = _as_date(start)
        end_date = _as_date(end)
        if start_date is None or end_date is None:
            return ["Disruption dates must be valid dates (YYYY-MM-DD)"]
        if end_date <= start_date:
            return ["Disruption end date must be after start date"]

    return []


def validate_request(data: Mapping[str, Any]) -> list[str]:
    """
    Validate a fully merged wizard request.

    Args:
        data: Accumulated wizard fields

    Returns:
        List of violation messages (empty when the request is valid)
    """
    errors: list[str] = []

    if not data.get("race_id"):
        errors.append("Please select a race")

    days = data.get("days_per_week")
    days_valid = _is_number(days) and MIN_DAYS_PER_WEEK <= days <= MAX_DAYS_PER_WEEK
    if not days_valid:
        errors.append("Training days per week must be between 1 and 7")

    hours = data.get("max_hours_per_week")
    if not (_is_number(hours) and 0 < hours <= MAX_HOURS_PER_WEEK):
        errors.append("Max hours per week must be greater than 0 and at most 30")

    if _enum_value(data.get("years_experience")) not in _EXPERIENCE_VALUES:
        errors.append("Please select your experience level")

    training_days = list(data.get("preferred_training_days") or [])
    rest_days = list(data.get("preferred_rest_days") or [])
    unknown_days = [d for d in training_days + rest_days if d not in DAYS_OF_WEEK]
    if unknown_days:
        errors.append(f"Unknown day(s) of week: {', '.join(map(str, unknown_days))}")

    if days_valid and len(training_days) > days:
        errors.append(
            "Cannot have more preferred training days than total training days per week"
        )

    time_pref = data.get("preferred_training_time")
    if time_pref is not None and _enum_value(time_pref) not in _TIME_VALUES:
        errors.append("Preferred training time must be morning, afternoon or evening")

    equipment = [_enum_value(e) for e in data.get("available_equipment") or []]
    unknown_equipment = [e for e in equipment if e not in _EQUIPMENT_VALUES]
    if unknown_equipment:
        errors.append(f"Unknown equipment: {', '.join(map(str, unknown_equipment))}")

    errors.extend(_validate_disruptions(data.get("upcoming_disruptions")))

    return errors
