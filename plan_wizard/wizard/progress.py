# plan_wizard/wizard/progress.py
"""
Progress interpreter: job status snapshot -> display message.

Server phase labels win. Without one, progress falls into a fixed band
table covering 0-100 with no gaps.
"""

from dataclasses import dataclass

from plan_wizard.models.jobs import JobStatus
from plan_wizard.models.responses import JobStatusSnapshot


@dataclass(frozen=True)
class ProgressBand:
    """Inclusive progress range and its message."""

    low: int
    high: int
    message: str

    def contains(self, progress: int) -> bool:
        return self.low <= progress <= self.high


PROGRESS_BANDS: tuple[ProgressBand, ...] = (
    ProgressBand(0, 9, "Starting up..."),
    ProgressBand(10, 39, "Validating inputs..."),
    ProgressBand(40, 54, "Analyzing training history..."),
    ProgressBand(55, 89, "Generating training plan..."),
    ProgressBand(90, 99, "Finalizing plan..."),
    ProgressBand(100, 100, "Training plan complete"),
)

COMPLETED_MESSAGE = PROGRESS_BANDS[-1].message


def clamp_progress(progress: int) -> int:
    return min(max(progress, 0), 100)


def band_for(progress: int) -> ProgressBand:
    """Band containing progress (clamped into 0-100)."""
    progress = clamp_progress(progress)
    for band in PROGRESS_BANDS:
        if band.contains(progress):
            return band
    raise ValueError(f"No progress band covers {progress}")


def interpret(snapshot: JobStatusSnapshot) -> str:
    """
    Map a status snapshot to a display message.

    Pure: looks only at the snapshot. Only a completed status may produce
    the completion message; progress 100 on a running job reads as finalizing.
    Regressions (60 then 40) just show the band of the new value.
    """
    if snapshot.current_step and snapshot.current_step.strip():
        return snapshot.current_step

    if snapshot.status is JobStatus.COMPLETED:
        return COMPLETED_MESSAGE

    return band_for(min(clamp_progress(snapshot.progress), 99)).message
