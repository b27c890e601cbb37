# plan_wizard/wizard/poller.py
"""
Poll loop controller.

Owns the repeating status fetch for one job:

    Idle --start(handle)--> Polling --terminal/ceiling/stop()--> Stopped

The loop runs on a single asyncio task that fetches, applies the snapshot,
then sleeps before re-arming. A new fetch is never issued while the previous
one is unresolved, so snapshots apply in issue order. Transient fetch errors
are logged and counted toward the attempt ceiling; they never stop the loop.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable

from plan_wizard.backend.base import PlanBackend
from plan_wizard.models.jobs import JobHandle, JobStatus
from plan_wizard.models.responses import JobStatusSnapshot

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Training plan generation timed out. Please try again."
FAILED_FALLBACK_MESSAGE = "Training plan generation failed"
CANCELLED_MESSAGE = "Training plan generation was cancelled"
MISSING_RESULT_MESSAGE = "Training plan generation finished without a plan"


class OutcomeKind(str, Enum):
    """Why a poll session stopped."""

    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"
    ABORTED = "aborted"  # stopped locally (user cancel or teardown)


@dataclass(frozen=True)
class PollOutcome:
    """Terminal result of a poll session."""

    kind: OutcomeKind
    message: str | None = None
    result_plan_id: str | None = None
    attempts: int = 0

    @property
    def is_error(self) -> bool:
        """True for outcomes the user should see as a retryable error."""
        return self.kind in (OutcomeKind.FAILED, OutcomeKind.CANCELLED, OutcomeKind.TIMED_OUT)


@dataclass
class PollSession:
    """Ephemeral bookkeeping for one polling run."""

    started_at: float
    attempts: int = 0
    task: asyncio.Task | None = field(default=None, repr=False)

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at


@dataclass(frozen=True)
class Idle:
    """No job yet."""


@dataclass(frozen=True)
class Polling:
    """A job handle exists and the loop is running."""

    handle: JobHandle
    session: PollSession


@dataclass(frozen=True)
class Stopped:
    """Loop finished; the handle has been discarded."""

    outcome: PollOutcome


PollState = Idle | Polling | Stopped

SnapshotCallback = Callable[[JobStatusSnapshot], None]
OutcomeCallback = Callable[[PollOutcome], None]


def outcome_for(snapshot: JobStatusSnapshot, attempts: int) -> PollOutcome | None:
    """Terminal outcome implied by a snapshot, or None to keep polling."""
    if snapshot.status is JobStatus.COMPLETED:
        if not snapshot.result_plan_id:
            return PollOutcome(OutcomeKind.FAILED, MISSING_RESULT_MESSAGE, attempts=attempts)
        return PollOutcome(
            OutcomeKind.COMPLETED, result_plan_id=snapshot.result_plan_id, attempts=attempts
        )
    if snapshot.status is JobStatus.FAILED:
        return PollOutcome(
            OutcomeKind.FAILED,
            snapshot.error_message or FAILED_FALLBACK_MESSAGE,
            attempts=attempts,
        )
    if snapshot.status is JobStatus.CANCELLED:
        return PollOutcome(OutcomeKind.CANCELLED, CANCELLED_MESSAGE, attempts=attempts)
    return None


class PollLoopController:
    """
    Bounded, single-flight status poller for one job.

    One controller serves one poll session; create a new one per submission.
    """

    def __init__(
        self,
        backend: PlanBackend,
        interval: float = 2.0,
        max_attempts: int = 60,
        on_snapshot: SnapshotCallback | None = None,
        on_stopped: OutcomeCallback | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize poll loop controller.

        Args:
            backend: Backend to fetch status from
            interval: Seconds between the end of one fetch and the next
            max_attempts: Fetches allowed before declaring a timeout
            on_snapshot: Called with every applied snapshot
            on_stopped: Called once when the session stops, for any reason
            sleep: Delay function (tests substitute a no-op)
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self._backend = backend
        self._interval = interval
        self._max_attempts = max_attempts
        self._on_snapshot = on_snapshot
        self._on_stopped = on_stopped
        self._sleep = sleep
        self._state: PollState = Idle()

    @property
    def state(self) -> PollState:
        return self._state

    @property
    def is_polling(self) -> bool:
        return isinstance(self._state, Polling)

    @property
    def handle(self) -> JobHandle | None:
        """Live job handle (None unless polling)."""
        return self._state.handle if isinstance(self._state, Polling) else None

    @property
    def outcome(self) -> PollOutcome | None:
        return self._state.outcome if isinstance(self._state, Stopped) else None

    def start(self, handle: JobHandle) -> None:
        """
        Begin polling for handle.

        Raises:
            RuntimeError: If this controller has already been started
        """
        if not isinstance(self._state, Idle):
            raise RuntimeError("Poll loop already started")

        session = PollSession(started_at=time.monotonic())
        self._state = Polling(handle=handle, session=session)
        session.task = asyncio.create_task(self._run(handle, session))
        logger.info(
            f"Polling job {handle.job_id} every {self._interval}s "
            f"(max {self._max_attempts} attempts)"
        )

    def stop(self) -> PollOutcome | None:
        """
        Stop polling immediately without waiting for an in-flight fetch.

        Any snapshot that arrives afterwards is discarded.

        Returns:
            The aborted outcome, or None if the loop wasn't polling
        """
        if not isinstance(self._state, Polling):
            return None

        session = self._state.session
        outcome = PollOutcome(OutcomeKind.ABORTED, attempts=session.attempts)
        self._finish(session, outcome)
        if session.task is not None and not session.task.done():
            session.task.cancel()
        return outcome

    async def wait(self) -> PollOutcome | None:
        """Wait for the session to stop and return its outcome."""
        if isinstance(self._state, Polling) and self._state.session.task is not None:
            await asyncio.wait({self._state.session.task})
        return self.outcome

    def _is_current(self, session: PollSession) -> bool:
        return isinstance(self._state, Polling) and self._state.session is session

    def _finish(self, session: PollSession, outcome: PollOutcome) -> None:
        self._state = Stopped(outcome=outcome)
        logger.info(
            f"Poll loop stopped: {outcome.kind.value} after {outcome.attempts} "
            f"attempt(s) in {session.elapsed:.1f}s"
        )
        if self._on_stopped is not None:
            try:
                self._on_stopped(outcome)
            except Exception:
                logger.exception("on_stopped callback failed")

    def _apply(self, snapshot: JobStatusSnapshot) -> None:
        if self._on_snapshot is None:
            return
        try:
            self._on_snapshot(snapshot)
        except Exception:
            logger.exception("on_snapshot callback failed")

    async def _run(self, handle: JobHandle, session: PollSession) -> None:
        while True:
            session.attempts += 1
            attempt = session.attempts

            snapshot: JobStatusSnapshot | None = None
            try:
                snapshot = await self._backend.get_job_status(handle.job_id, handle.user_id)
            except Exception as e:
                logger.warning(
                    f"Status fetch {attempt}/{self._max_attempts} for job "
                    f"{handle.job_id} failed: {e}"
                )

            if not self._is_current(session):
                logger.debug(f"Discarding late status for job {handle.job_id}")
                return

            if snapshot is not None:
                self._apply(snapshot)
                if not self._is_current(session):
                    return
                outcome = outcome_for(snapshot, attempt)
                if outcome is not None:
                    self._finish(session, outcome)
                    return

            if attempt >= self._max_attempts:
                self._finish(
                    session,
                    PollOutcome(OutcomeKind.TIMED_OUT, TIMEOUT_MESSAGE, attempts=attempt),
                )
                return

            await self._sleep(self._interval)
            if not self._is_current(session):
                return
