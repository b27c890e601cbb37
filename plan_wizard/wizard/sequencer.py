# plan_wizard/wizard/sequencer.py
"""
Step sequencer: the wizard's step state machine.

    selection -> constraints -> equipment -> generating

generating is only entered by the submission gate once a job handle exists,
and only left through return_to_input() (back to equipment) or finish().
"""

import logging
from enum import Enum
from typing import Any, Mapping

from plan_wizard.wizard.form_store import FormStepStore

logger = logging.getLogger(__name__)


class Step(str, Enum):
    """Wizard steps."""

    SELECTION = "selection"
    CONSTRAINTS = "constraints"
    EQUIPMENT = "equipment"
    GENERATING = "generating"


LAST_INPUT_STEP = Step.EQUIPMENT

_NEXT = {
    Step.SELECTION: Step.CONSTRAINTS,
    Step.CONSTRAINTS: Step.EQUIPMENT,
    Step.EQUIPMENT: Step.GENERATING,
}

_PREVIOUS = {
    Step.CONSTRAINTS: Step.SELECTION,
    Step.EQUIPMENT: Step.CONSTRAINTS,
}


def next_step(current: Step) -> Step:
    """Step that follows current (generating maps to itself)."""
    return _NEXT.get(current, current)


def previous_step(current: Step) -> Step:
    """Step before current; selection and generating map to themselves."""
    return _PREVIOUS.get(current, current)


class StepSequencer:
    """
    Tracks the current wizard step and owns writes to the form store.

    Error-agnostic: components report failures through typed results and the
    wizard only tells the sequencer where to go.
    """

    def __init__(self, store: FormStepStore, start: Step = Step.SELECTION) -> None:
        self._store = store
        self._current = start
        self._finished = False

    @property
    def current(self) -> Step:
        return self._current

    @property
    def finished(self) -> bool:
        """True once a job completed and the wizard has been exited."""
        return self._finished

    def advance(self, partial_data: Mapping[str, Any] | None = None) -> Step:
        """
        Merge the current step's data and compute the next step.

        From equipment this returns Step.GENERATING as the requested step
        without entering it; the submission gate decides whether it does.
        From generating (or after finish) it is a no-op.

        Args:
            partial_data: Fields collected by the current step

        Returns:
            The next step
        """
        if self._current is Step.GENERATING or self._finished:
            logger.debug(f"advance() ignored at step {self._current.value}")
            return self._current

        if partial_data:
            self._store.merge(partial_data)

        requested = next_step(self._current)
        if requested is not Step.GENERATING:
            self._current = requested
        return requested

    def retreat(self) -> Step:
        """Go back one input step. No-op from selection and generating."""
        if not self._finished:
            self._current = previous_step(self._current)
        return self._current

    def enter_generating(self) -> Step:
        """
        Move from equipment into generating.

        Raises:
            RuntimeError: If not at the last input step
        """
        if self._current is not LAST_INPUT_STEP or self._finished:
            raise RuntimeError(
                f"Cannot start generating from step '{self._current.value}'"
            )
        self._current = Step.GENERATING
        return self._current

    def return_to_input(self) -> Step:
        """Leave generating after failure, timeout or cancellation."""
        if not self._finished:
            self._current = LAST_INPUT_STEP
        return self._current

    def finish(self) -> None:
        """Mark the wizard as exited after a successful job."""
        self._finished = True
