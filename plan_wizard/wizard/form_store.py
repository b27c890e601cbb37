# plan_wizard/wizard/form_store.py
"""
Form step store: the request accumulator shared by all wizard steps.

Pure data. Steps merge their partial data in; nothing here talks to the
backend or knows about polling.
"""

import copy
from typing import Any, Mapping

DEFAULT_FORM_DATA: dict[str, Any] = {
    "days_per_week": 4,
    "max_hours_per_week": 6,
    "years_experience": "intermediate",
    "preferred_training_days": [],
    "preferred_rest_days": ["Sunday"],
    "upcoming_disruptions": [],
    "injury_limitations": [],
    "available_equipment": [],
    "safe_outdoor_routes": True,
    "include_strength_training": True,
    "include_cross_training": False,
}


class FormStepStore:
    """Holds the partially completed request across wizard steps."""

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(DEFAULT_FORM_DATA)
        if initial:
            self.merge(initial)

    def merge(self, partial: Mapping[str, Any]) -> None:
        """
        Merge one step's data into the accumulator.

        Known keys are overwritten, unknown keys are kept. Values are copied
        so later edits to the caller's objects don't leak in.
        """
        for key, value in partial.items():
            self._data[key] = copy.deepcopy(value)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def snapshot(self) -> dict[str, Any]:
        """Deep copy of the current accumulator."""
        return copy.deepcopy(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __repr__(self) -> str:
        return f"FormStepStore({self._data!r})"
