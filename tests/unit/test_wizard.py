# tests/unit/test_wizard.py
"""
End-to-end tests for PlanWizard against a scripted backend.

Tests cover:
    - Happy path: progress messages in order, then on_success
    - Failure, timeout and rejection return to equipment with data kept
    - Cancel mid-fetch discards the late snapshot
    - close() teardown cancels the job and calls on_close once
    - Independent wizard instances
"""

import asyncio

import pytest

from helpers import (
    JOB_ID,
    USER_ID,
    VALID_CONSTRAINTS,
    VALID_EQUIPMENT,
    VALID_SELECTION,
    Blocked,
    ScriptedBackend,
    snap,
)
from plan_wizard.backend.errors import BackendError
from plan_wizard.wizard import PlanWizard, Step
from plan_wizard.wizard.gate import SIGNED_OUT_MESSAGE
from plan_wizard.wizard.poller import TIMEOUT_MESSAGE, OutcomeKind
from plan_wizard.wizard.progress import COMPLETED_MESSAGE


class Recorder:
    """Collects wizard callbacks."""

    def __init__(self):
        self.successes: list[str] = []
        self.closes = 0
        self.messages: list[str] = []

    def on_success(self, plan_id):
        self.successes.append(plan_id)

    def on_close(self):
        self.closes += 1

    def on_progress(self, snapshot, message):
        self.messages.append(message)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def make_wizard(fast_config, recorder):
    def _make(backend, user_id=USER_ID, **kwargs) -> PlanWizard:
        return PlanWizard(
            backend,
            user_id,
            config=fast_config,
            on_success=recorder.on_success,
            on_close=recorder.on_close,
            on_progress=recorder.on_progress,
            **kwargs,
        )

    return _make


async def _fill(wizard: PlanWizard, constraints=VALID_CONSTRAINTS) -> Step:
    await wizard.complete_step(VALID_SELECTION)
    await wizard.complete_step(constraints)
    return await wizard.complete_step(VALID_EQUIPMENT)


@pytest.mark.asyncio
async def test_happy_path(make_wizard, recorder):
    backend = ScriptedBackend(script=[
        snap("processing", 0),
        snap("processing", 25, "validating inputs"),
        snap("processing", 60, "generating plan"),
        snap("completed", 100, result_plan_id="p1"),
    ])
    wizard = make_wizard(backend)

    assert await _fill(wizard) is Step.GENERATING
    outcome = await wizard.wait()

    assert outcome.kind is OutcomeKind.COMPLETED
    assert recorder.messages == [
        "Starting up...",
        "validating inputs",
        "generating plan",
        COMPLETED_MESSAGE,
    ]
    assert recorder.successes == ["p1"]
    assert backend.status_calls == 4
    assert len(backend.create_calls) == 1
    assert wizard.finished
    assert wizard.result_plan_id == "p1"
    assert wizard.errors == []


@pytest.mark.asyncio
async def test_navigation_keeps_data(make_wizard):
    wizard = make_wizard(ScriptedBackend())

    await wizard.complete_step(VALID_SELECTION)
    await wizard.complete_step(VALID_CONSTRAINTS)
    assert wizard.step is Step.EQUIPMENT

    assert wizard.back() is Step.CONSTRAINTS
    assert wizard.back() is Step.SELECTION
    assert wizard.back() is Step.SELECTION
    assert wizard.store.get("race_id") == 42
    assert wizard.store.get("days_per_week") == 4


@pytest.mark.asyncio
async def test_validation_errors_block_submission(make_wizard):
    backend = ScriptedBackend()
    wizard = make_wizard(backend)

    step = await _fill(wizard, constraints={**VALID_CONSTRAINTS, "days_per_week": 9})

    assert step is Step.EQUIPMENT
    assert "Training days per week must be between 1 and 7" in wizard.errors
    assert backend.create_calls == []
    assert wizard.handle is None
    assert not wizard.can_retry


@pytest.mark.asyncio
async def test_signed_out(make_wizard):
    backend = ScriptedBackend()
    wizard = make_wizard(backend, user_id=None)

    await _fill(wizard)
    assert wizard.errors == [SIGNED_OUT_MESSAGE]
    assert backend.create_calls == []


@pytest.mark.asyncio
async def test_rejected_submission_stays_at_equipment(make_wizard):
    backend = ScriptedBackend(create_error=BackendError("rate limited", status_code=429))
    wizard = make_wizard(backend)

    step = await _fill(wizard)

    assert step is Step.EQUIPMENT
    assert wizard.errors == ["rate limited"]
    assert wizard.handle is None
    assert wizard.poller is None
    assert backend.status_calls == 0
    assert wizard.can_retry


@pytest.mark.asyncio
async def test_failure_then_retry_with_same_inputs(make_wizard, recorder):
    backend = ScriptedBackend(
        script=[snap("processing", 20), snap("failed", 30, error_message="Model overloaded")],
        default=snap("completed", 100, result_plan_id="p2"),
    )
    wizard = make_wizard(backend)

    await _fill(wizard)
    await wizard.wait()

    assert wizard.step is Step.EQUIPMENT
    assert wizard.errors == ["Model overloaded"]
    assert wizard.store.get("injury_limitations") == ["knee pain"]
    assert wizard.can_retry

    await wizard.retry()
    assert wizard.step is Step.GENERATING
    await wizard.wait()

    assert recorder.successes == ["p2"]
    assert len(backend.create_calls) == 2
    assert backend.create_calls[0] == backend.create_calls[1]


@pytest.mark.asyncio
async def test_timeout_after_transient_failures(make_wizard, transient_error, recorder):
    backend = ScriptedBackend(default=transient_error)
    wizard = make_wizard(backend)

    await _fill(wizard)
    outcome = await wizard.wait()

    assert outcome.kind is OutcomeKind.TIMED_OUT
    assert backend.status_calls == 60
    assert wizard.errors == [TIMEOUT_MESSAGE]
    assert wizard.step is Step.EQUIPMENT
    assert recorder.successes == []


@pytest.mark.asyncio
async def test_cancel_mid_fetch_discards_late_completion(make_wizard, recorder):
    release = asyncio.Event()
    backend = ScriptedBackend(script=[
        snap("processing", 10),
        snap("processing", 20),
        Blocked(release, snap("completed", 100, result_plan_id="p1")),
    ])
    wizard = make_wizard(backend)
    await _fill(wizard)

    while backend.status_calls < 3:
        await asyncio.sleep(0)

    await wizard.cancel()
    assert wizard.step is Step.EQUIPMENT
    assert wizard.errors == []
    assert wizard.handle is None
    assert not wizard.is_busy

    release.set()
    await asyncio.sleep(0.01)

    assert recorder.successes == []
    assert wizard.result_plan_id is None
    assert not wizard.finished
    assert len(recorder.messages) == 2
    assert backend.cancel_calls == [(JOB_ID, USER_ID)]
    assert wizard.store.get("race_id") == 42
    assert wizard.store.get("available_equipment") == ["gps_watch", "treadmill"]


@pytest.mark.asyncio
async def test_steps_ignored_while_generating(make_wizard):
    backend = ScriptedBackend(default=snap("processing", 50))
    wizard = make_wizard(backend)
    await _fill(wizard)

    assert await wizard.complete_step(VALID_EQUIPMENT) is Step.GENERATING
    assert wizard.back() is Step.GENERATING
    assert len(backend.create_calls) == 1

    await wizard.close()


@pytest.mark.asyncio
async def test_close_cancels_and_notifies_once(make_wizard, recorder):
    backend = ScriptedBackend(default=snap("processing", 50))
    wizard = make_wizard(backend)
    await _fill(wizard)
    await asyncio.sleep(0)

    await wizard.close()
    await wizard.close()

    assert wizard.closed
    assert recorder.closes == 1
    assert backend.cancel_calls == [(JOB_ID, USER_ID)]
    assert not wizard.is_busy
    assert await wizard.complete_step(VALID_EQUIPMENT) is Step.EQUIPMENT
    assert len(backend.create_calls) == 1


@pytest.mark.asyncio
async def test_close_before_submit_skips_remote_cancel(make_wizard, recorder):
    backend = ScriptedBackend()
    wizard = make_wizard(backend)
    await wizard.complete_step(VALID_SELECTION)

    await wizard.close()

    assert recorder.closes == 1
    assert backend.cancel_calls == []


class SlowCreateBackend(ScriptedBackend):
    def __init__(self, release: asyncio.Event, **kwargs):
        super().__init__(**kwargs)
        self.release = release

    async def create_job(self, request):
        self.create_calls.append(request)
        await self.release.wait()
        self.create_calls.pop()
        return await super().create_job(request)


@pytest.mark.asyncio
async def test_close_during_create_cancels_created_job(make_wizard):
    release = asyncio.Event()
    backend = SlowCreateBackend(release)
    wizard = make_wizard(backend)
    await wizard.complete_step(VALID_SELECTION)
    await wizard.complete_step(VALID_CONSTRAINTS)

    submit = asyncio.create_task(wizard.complete_step(VALID_EQUIPMENT))
    while not backend.create_calls:
        await asyncio.sleep(0)

    await wizard.close()
    release.set()
    await submit
    await asyncio.sleep(0.01)

    assert wizard.step is Step.EQUIPMENT
    assert wizard.poller is None
    assert backend.status_calls == 0
    assert backend.cancel_calls == [(JOB_ID, USER_ID)]


@pytest.mark.asyncio
async def test_two_wizards_are_independent(make_wizard):
    slow = ScriptedBackend(default=snap("processing", 40))
    fast = ScriptedBackend(script=[snap("completed", 100, result_plan_id="p7")])
    first = make_wizard(slow)
    second = make_wizard(fast)

    await _fill(first)
    await _fill(second)
    await first.cancel()
    await second.wait()

    assert first.step is Step.EQUIPMENT
    assert second.finished
    assert second.result_plan_id == "p7"
    assert fast.cancel_calls == []

    await first.close()
    assert slow.cancel_calls == [(JOB_ID, USER_ID)]


@pytest.mark.asyncio
async def test_back_is_ignored_while_creating_job(make_wizard):
    release = asyncio.Event()
    backend = SlowCreateBackend(release, default=snap("processing", 50))
    wizard = make_wizard(backend)
    await wizard.complete_step(VALID_SELECTION)
    await wizard.complete_step(VALID_CONSTRAINTS)

    submit = asyncio.create_task(wizard.complete_step(VALID_EQUIPMENT))
    while not backend.create_calls:
        await asyncio.sleep(0)

    assert wizard.back() is Step.EQUIPMENT
    release.set()
    assert await submit is Step.GENERATING
    assert wizard.handle is not None

    await wizard.close()


@pytest.mark.asyncio
async def test_cancel_during_create_cancels_created_job(make_wizard, recorder):
    release = asyncio.Event()
    backend = SlowCreateBackend(release, default=snap("processing", 50))
    wizard = make_wizard(backend)
    await wizard.complete_step(VALID_SELECTION)
    await wizard.complete_step(VALID_CONSTRAINTS)

    submit = asyncio.create_task(wizard.complete_step(VALID_EQUIPMENT))
    while not backend.create_calls:
        await asyncio.sleep(0)

    await wizard.cancel()
    release.set()
    assert await submit is Step.EQUIPMENT
    await asyncio.sleep(0.01)

    assert wizard.poller is None
    assert not wizard.is_busy
    assert wizard.errors == []
    assert backend.status_calls == 0
    assert backend.cancel_calls == [(JOB_ID, USER_ID)]
    assert wizard.store.get("race_id") == 42

    # The next submission is not affected by the earlier cancel
    await wizard.retry()
    assert wizard.step is Step.GENERATING
    await wizard.close()


@pytest.mark.asyncio
async def test_job_created_off_equipment_is_cancelled_quietly(make_wizard):
    class RetreatingBackend(ScriptedBackend):
        wizard = None

        async def create_job(self, request):
            self.wizard.sequencer.retreat()
            return await super().create_job(request)

    backend = RetreatingBackend()
    wizard = make_wizard(backend)
    backend.wizard = wizard

    step = await _fill(wizard)
    await asyncio.sleep(0.01)

    assert step is Step.CONSTRAINTS
    assert wizard.errors == []
    assert wizard.poller is None
    assert backend.cancel_calls == [(JOB_ID, USER_ID)]
