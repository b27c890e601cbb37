# plan_wizard/wizard/__init__.py
"""
Training plan wizard: staged input, job submission, polling and cancellation.

Exports:
    - PlanWizard: One wizard session wiring all components together
    - StepSequencer / Step: Wizard step state machine
    - FormStepStore: Request accumulator
    - JobSubmissionGate / SubmissionResult: Validate-then-submit
    - PollLoopController / PollOutcome: Bounded single-flight status polling
    - CancellationCoordinator: Stop polling and cancel remotely
    - interpret: Snapshot -> progress message
"""

from plan_wizard.wizard.cancellation import CancellationCoordinator
from plan_wizard.wizard.controller import PlanWizard
from plan_wizard.wizard.form_store import DEFAULT_FORM_DATA, FormStepStore
from plan_wizard.wizard.gate import JobSubmissionGate, SubmissionKind, SubmissionResult
from plan_wizard.wizard.poller import (
    Idle,
    OutcomeKind,
    Polling,
    PollLoopController,
    PollOutcome,
    Stopped,
)
from plan_wizard.wizard.progress import PROGRESS_BANDS, interpret
from plan_wizard.wizard.sequencer import Step, StepSequencer

__all__ = [
    "PlanWizard",
    "Step",
    "StepSequencer",
    "FormStepStore",
    "DEFAULT_FORM_DATA",
    "JobSubmissionGate",
    "SubmissionKind",
    "SubmissionResult",
    "PollLoopController",
    "PollOutcome",
    "OutcomeKind",
    "Idle",
    "Polling",
    "Stopped",
    "CancellationCoordinator",
    "interpret",
    "PROGRESS_BANDS",
]
