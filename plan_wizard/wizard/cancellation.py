# plan_wizard/wizard/cancellation.py
"""
Cancellation coordinator.

Stops the poll loop synchronously, then tells the backend to cancel the job
on a fire-and-forget task. A failed remote cancel is logged, never surfaced:
by then the user has already moved on.
"""

import asyncio
import logging

from plan_wizard.backend.base import PlanBackend
from plan_wizard.backend.retry import call_with_retry
from plan_wizard.models.jobs import JobHandle
from plan_wizard.wizard.poller import PollLoopController

logger = logging.getLogger(__name__)


class CancellationCoordinator:
    """Routes user cancels and teardown through one path."""

    def __init__(self, backend: PlanBackend, retry_attempts: int = 2) -> None:
        self._backend = backend
        self._retry_attempts = retry_attempts
        self._pending: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Remote cancel calls still in flight."""
        return len(self._pending)

    def cancel(self, poller: PollLoopController) -> asyncio.Task | None:
        """
        Stop poller now and request remote cancellation of its job.

        Returns:
            The background cancel task, or None if nothing was polling
        """
        handle = poller.handle
        poller.stop()
        if handle is None:
            return None
        return self.cancel_job(handle)

    def cancel_job(self, handle: JobHandle) -> asyncio.Task:
        """Fire a best-effort cancel_job for handle."""
        task = asyncio.create_task(self._cancel_remote(handle))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _cancel_remote(self, handle: JobHandle) -> None:
        try:
            response = await call_with_retry(
                lambda: self._backend.cancel_job(handle.job_id, handle.user_id),
                attempts=self._retry_attempts,
            )
            logger.info(f"Cancelled job {handle.job_id}: {response.message or 'ok'}")
        except Exception as e:
            logger.warning(f"Best-effort cancel of job {handle.job_id} failed: {e}")

    async def drain(self, timeout: float | None = 5.0) -> None:
        """Wait for in-flight cancel calls (used on teardown before the loop closes)."""
        if not self._pending:
            return
        _, pending = await asyncio.wait(set(self._pending), timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            logger.warning(f"Abandoned {len(pending)} cancel call(s) after {timeout}s")
