# tests/unit/helpers.py
"""Shared fakes and builders for wizard tests."""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone

from plan_wizard.backend.base import PlanBackend
from plan_wizard.models.jobs import JobStatus
from plan_wizard.models.responses import (
    CancelJobResponse,
    CreateJobResponse,
    JobStatusSnapshot,
)

JOB_ID = "job-abc12345"
USER_ID = "user-1"

VALID_SELECTION = {"race_id": 42}
VALID_CONSTRAINTS = {
    "days_per_week": 4,
    "max_hours_per_week": 8,
    "years_experience": "intermediate",
    "preferred_training_days": ["Monday", "Wednesday"],
    "upcoming_disruptions": [
        {"start_date": "2026-11-02", "end_date": "2026-11-06", "description": "Work trip"}
    ],
    "injury_limitations": ["knee pain"],
}
VALID_EQUIPMENT = {"available_equipment": ["gps_watch", "treadmill"]}


def snap(status="processing", progress=0, step=None, **kwargs) -> JobStatusSnapshot:
    """Build a status snapshot."""
    return JobStatusSnapshot(
        status=JobStatus(status), progress=progress, current_step=step, **kwargs
    )


@dataclass
class Blocked:
    """Script item: wait for event, then return result."""

    event: asyncio.Event
    result: object


class ScriptedBackend(PlanBackend):
    """
    Backend returning scripted status results.

    Each get_job_status call consumes the next script item: a snapshot is
    returned, an exception is raised, a Blocked item waits first. When the
    script runs out, `default` is used.
    """

    def __init__(self, script=None, default=None, create_error=None, cancel_error=None):
        self.script = list(script or [])
        self.default = default if default is not None else snap("processing", 10)
        self.create_error = create_error
        self.cancel_error = cancel_error
        self.create_calls = []
        self.status_calls = 0
        self.cancel_calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def create_job(self, request):
        self.create_calls.append(request)
        if self.create_error is not None:
            raise self.create_error
        return CreateJobResponse(
            job_id=JOB_ID, status=JobStatus.PENDING, created_at=datetime.now(timezone.utc)
        )

    async def get_job_status(self, job_id, user_id):
        self.status_calls += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            item = self.script.pop(0) if self.script else self.default
            if isinstance(item, Blocked):
                await item.event.wait()
                item = item.result
            await asyncio.sleep(0)
            if isinstance(item, BaseException):
                raise item
            return item
        finally:
            self.in_flight -= 1

    async def cancel_job(self, job_id, user_id):
        self.cancel_calls.append((job_id, user_id))
        if self.cancel_error is not None:
            raise self.cancel_error
        return CancelJobResponse(message="Job cancelled")


