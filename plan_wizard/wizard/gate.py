# plan_wizard/wizard/gate.py
"""
Job submission gate.

Validates the assembled request, then issues exactly one create_job call.
Never raises: every failure comes back as a SubmissionResult so the
sequencer stays error-agnostic.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from pydantic import ValidationError

from plan_wizard.backend.base import PlanBackend
from plan_wizard.backend.errors import BackendError
from plan_wizard.models.jobs import JobHandle
from plan_wizard.models.request import TrainingPlanRequest
from plan_wizard.validation.form import validate_request
from plan_wizard.validation.sanitize import JobIdError, sanitize_job_id
from plan_wizard.wizard.sequencer import LAST_INPUT_STEP, StepSequencer

logger = logging.getLogger(__name__)

SUBMISSION_FALLBACK_MESSAGE = "Failed to start training plan generation"
SIGNED_OUT_MESSAGE = "You must be signed in to generate a training plan"

# Optional list fields sent only when non-empty
_OPTIONAL_LISTS = (
    "preferred_training_days",
    "preferred_rest_days",
    "upcoming_disruptions",
    "injury_limitations",
    "available_equipment",
)


class SubmissionKind(str, Enum):
    SUBMITTED = "submitted"
    INVALID = "invalid"
    REJECTED = "rejected"
    ABANDONED = "abandoned"  # job created after the wizard left equipment


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of one submission attempt."""

    kind: SubmissionKind
    handle: JobHandle | None = None
    errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.kind is SubmissionKind.SUBMITTED

    @classmethod
    def submitted(cls, handle: JobHandle) -> "SubmissionResult":
        return cls(SubmissionKind.SUBMITTED, handle=handle)

    @classmethod
    def invalid(cls, errors: list[str]) -> "SubmissionResult":
        return cls(SubmissionKind.INVALID, errors=tuple(errors))

    @classmethod
    def rejected(cls, message: str) -> "SubmissionResult":
        return cls(SubmissionKind.REJECTED, errors=(message,))

    @classmethod
    def abandoned(cls, handle: JobHandle) -> "SubmissionResult":
        return cls(SubmissionKind.ABANDONED, handle=handle)


def build_request(user_id: str, data: Mapping[str, Any]) -> TrainingPlanRequest:
    """
    Build the wire payload from accumulated form data.

    Empty optional lists are dropped so the server applies its own defaults.

    Raises:
        pydantic.ValidationError: If data doesn't fit the payload schema
    """
    fields = dict(data)
    for name in _OPTIONAL_LISTS:
        if not fields.get(name):
            fields.pop(name, None)
    fields["user_id"] = user_id
    return TrainingPlanRequest.model_validate(fields)


class JobSubmissionGate:
    """Validates and submits the wizard request, once per call."""

    def __init__(
        self, backend: PlanBackend, user_id: str | None, sequencer: StepSequencer
    ) -> None:
        self._backend = backend
        self._user_id = user_id
        self._sequencer = sequencer

    async def submit(self, data: Mapping[str, Any]) -> SubmissionResult:
        """
        Validate data and start a generation job.

        On success the sequencer is moved into generating. On any failure it
        is left at (or returned to) the last input step and no handle exists.
        If the sequencer moved off equipment while create_job was in flight,
        the result is ABANDONED and carries the handle so the caller can
        cancel the job.

        Args:
            data: Fully merged wizard request

        Returns:
            SubmissionResult
        """
        if not self._user_id:
            return SubmissionResult.invalid([SIGNED_OUT_MESSAGE])

        errors = validate_request(data)
        if errors:
            logger.info(f"Submission blocked by {len(errors)} validation error(s)")
            return SubmissionResult.invalid(errors)

        try:
            request = build_request(self._user_id, data)
        except ValidationError as e:
            messages = [err.get("msg", "Invalid value") for err in e.errors()]
            return SubmissionResult.invalid(messages)

        try:
            response = await self._backend.create_job(request)
            job_id = sanitize_job_id(response.job_id)
        except BackendError as e:
            logger.warning(f"create_job failed: {e.message}")
            self._sequencer.return_to_input()
            return SubmissionResult.rejected(e.message or SUBMISSION_FALLBACK_MESSAGE)
        except JobIdError as e:
            logger.error(f"create_job returned a malformed job id: {e}")
            self._sequencer.return_to_input()
            return SubmissionResult.rejected(SUBMISSION_FALLBACK_MESSAGE)
        except Exception:
            logger.exception("Unexpected error during create_job")
            self._sequencer.return_to_input()
            return SubmissionResult.rejected(SUBMISSION_FALLBACK_MESSAGE)

        handle = JobHandle(job_id=job_id, user_id=self._user_id)
        if self._sequencer.current is not LAST_INPUT_STEP or self._sequencer.finished:
            logger.warning(
                f"Job {handle.job_id} created after the wizard left "
                f"{LAST_INPUT_STEP.value}; abandoning it"
            )
            return SubmissionResult.abandoned(handle)

        self._sequencer.enter_generating()
        logger.info(f"Submitted training plan job {handle.job_id}")
        return SubmissionResult.submitted(handle)
