# plan_wizard/wizard/controller.py
"""
Plan wizard: one training plan generation session.

Owns the form store, step sequencer, submission gate, poll loop and
cancellation coordinator for a single wizard instance. Nothing here is
process-wide, so two wizards in one process never interfere.

Typical use:

    wizard = PlanWizard(backend, user_id, on_success=show_plan)
    await wizard.complete_step({"race_id": 7})
    await wizard.complete_step({"days_per_week": 5, "max_hours_per_week": 8})
    await wizard.complete_step({"available_equipment": ["gps_watch"]})
    outcome = await wizard.wait()
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Mapping

from plan_wizard.backend.base import PlanBackend
from plan_wizard.config.schema import WizardConfig
from plan_wizard.models.jobs import JobHandle
from plan_wizard.models.responses import JobStatusSnapshot
from plan_wizard.wizard.cancellation import CancellationCoordinator
from plan_wizard.wizard.form_store import FormStepStore
from plan_wizard.wizard.gate import JobSubmissionGate, SubmissionKind, SubmissionResult
from plan_wizard.wizard.poller import OutcomeKind, PollLoopController, PollOutcome
from plan_wizard.wizard.progress import interpret
from plan_wizard.wizard.sequencer import Step, StepSequencer

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[str], None]
CloseCallback = Callable[[], None]
ProgressCallback = Callable[[JobStatusSnapshot, str], None]


class PlanWizard:
    """
    Client-side job lifecycle controller for training plan generation.

    Features:
        - Staged input collection with back navigation
        - One create_job call per submission, validation first
        - Bounded single-flight status polling with readable progress
        - Cancel at any point, including mid-fetch
        - Failures return to the equipment step with all inputs kept
    """

    def __init__(
        self,
        backend: PlanBackend,
        user_id: str | None,
        config: WizardConfig | None = None,
        on_success: SuccessCallback | None = None,
        on_close: CloseCallback | None = None,
        on_progress: ProgressCallback | None = None,
        initial_data: Mapping[str, Any] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize a wizard session.

        Args:
            backend: Plan generation backend
            user_id: Identity from the session provider (None = signed out)
            config: Optional WizardConfig (polling and cancel settings)
            on_success: Called with result_plan_id when a job completes
            on_close: Called once when the wizard is closed
            on_progress: Called with every applied snapshot and its message
            initial_data: Prefilled form fields
            sleep: Delay function for the poll loop (tests substitute a no-op)
        """
        self._backend = backend
        self._config = config or WizardConfig()
        self._on_success = on_success
        self._on_close = on_close
        self._on_progress = on_progress
        self._sleep = sleep

        self.store = FormStepStore(initial_data)
        self.sequencer = StepSequencer(self.store)
        self._gate = JobSubmissionGate(backend, user_id, self.sequencer)
        self._canceller = CancellationCoordinator(
            backend, retry_attempts=self._config.cancel.retry_attempts
        )
        self._poller: PollLoopController | None = None

        self.errors: list[str] = []
        self.message: str | None = None
        self.result_plan_id: str | None = None
        self.last_submission: SubmissionResult | None = None
        self._submitting = False
        self._cancel_requested = False
        self._closed = False

    @property
    def step(self) -> Step:
        return self.sequencer.current

    @property
    def handle(self) -> JobHandle | None:
        """Live job handle (None unless a job is being polled)."""
        return self._poller.handle if self._poller else None

    @property
    def poller(self) -> PollLoopController | None:
        return self._poller

    @property
    def is_busy(self) -> bool:
        """True while submitting or polling."""
        return self._submitting or (self._poller is not None and self._poller.is_polling)

    @property
    def can_retry(self) -> bool:
        """True after a submission or job failure that retrying might fix."""
        if self._closed or self.is_busy or self.step is not Step.EQUIPMENT:
            return False
        return (
            self.last_submission is not None
            and self.last_submission.kind is not SubmissionKind.INVALID
        )

    @property
    def finished(self) -> bool:
        return self.sequencer.finished

    @property
    def closed(self) -> bool:
        return self._closed

    async def complete_step(self, data: Mapping[str, Any] | None = None) -> Step:
        """
        Finish the current step with its data.

        From equipment this submits the job; validation or submission errors
        land in self.errors and the wizard stays at equipment.

        Returns:
            The step the wizard is on afterwards
        """
        if self._closed or self.is_busy:
            return self.step

        self.errors = []
        requested = self.sequencer.advance(data)
        if requested is Step.GENERATING and self.step is Step.EQUIPMENT:
            await self._submit()
        return self.step

    def back(self) -> Step:
        """Go back one input step (no-op from selection, while busy, or once closed)."""
        if not self._closed and not self.is_busy:
            self.errors = []
            self.sequencer.retreat()
        return self.step

    async def retry(self) -> Step:
        """Resubmit the stored request after a failure, timeout or cancel."""
        if self._closed or self.is_busy or self.step is not Step.EQUIPMENT:
            return self.step

        self.errors = []
        await self._submit()
        return self.step

    async def wait(self) -> PollOutcome | None:
        """Wait for the current poll session to stop."""
        if self._poller is None:
            return None
        return await self._poller.wait()

    async def cancel(self) -> None:
        """
        Cancel the running job.

        Polling stops immediately, the backend is told to cancel in the
        background, and the wizard returns to equipment with no error banner.
        A cancel during submission takes effect once create_job returns.
        """
        if self._submitting:
            self._cancel_requested = True
            self.errors = []
            self.message = None
            return

        if self._poller is None or not self._poller.is_polling:
            return

        self._canceller.cancel(self._poller)
        self.errors = []
        self.message = None
        self.sequencer.return_to_input()

    async def close(self) -> None:
        """
        Tear the wizard down (dismissal, navigation away, shutdown).

        Takes the same path as cancel(), then calls on_close. Safe to call twice.
        """
        if self._closed:
            return
        self._closed = True

        await self.cancel()
        if self._on_close is not None:
            self._on_close()

        await self._canceller.drain()
        logger.info("Plan wizard closed")

    async def _submit(self) -> None:
        self._submitting = True
        self._cancel_requested = False
        try:
            result = await self._gate.submit(self.store.snapshot())
        finally:
            self._submitting = False

        self.last_submission = result
        withdrawn = self._closed or self._cancel_requested
        self._cancel_requested = False

        if result.kind is SubmissionKind.ABANDONED:
            self._canceller.cancel_job(result.handle)
            return

        if not result.ok:
            if not withdrawn:
                self.errors = list(result.errors)
            return

        if withdrawn:
            # Cancelled or torn down while create_job was in flight
            self.sequencer.return_to_input()
            self._canceller.cancel_job(result.handle)
            return

        self.message = None
        self.result_plan_id = None
        self._poller = PollLoopController(
            self._backend,
            interval=self._config.polling.interval_seconds,
            max_attempts=self._config.polling.max_attempts,
            on_snapshot=self._handle_snapshot,
            on_stopped=self._handle_outcome,
            sleep=self._sleep,
        )
        self._poller.start(result.handle)

    def _handle_snapshot(self, snapshot: JobStatusSnapshot) -> None:
        self.message = interpret(snapshot)
        if self._on_progress is not None:
            self._on_progress(snapshot, self.message)

    def _handle_outcome(self, outcome: PollOutcome) -> None:
        if outcome.kind is OutcomeKind.ABORTED:
            return

        if outcome.kind is OutcomeKind.COMPLETED:
            self.result_plan_id = outcome.result_plan_id
            self.sequencer.finish()
            logger.info(f"Training plan ready: {outcome.result_plan_id}")
            if self._on_success is not None:
                self._on_success(outcome.result_plan_id)
            return

        self.errors = [outcome.message] if outcome.message else []
        self.message = None
        self.sequencer.return_to_input()
