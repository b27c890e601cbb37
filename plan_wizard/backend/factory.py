# plan_wizard/backend/factory.py
"""Factory for creating the configured plan backend."""

from plan_wizard.config.schema import WizardConfig

from .base import PlanBackend
from .http import HttpPlanBackend
from .local import LocalPlanBackend


def create_backend(config: WizardConfig, local: bool = False) -> PlanBackend:
    """
    Create the plan backend for a wizard session.

    Args:
        config: Root WizardConfig
        local: Use the in-process simulator instead of the HTTP API

    Returns:
        LocalPlanBackend when local=True, HttpPlanBackend otherwise
    """
    if local:
        return LocalPlanBackend()
    return HttpPlanBackend(
        base_url=config.backend.base_url,
        timeout=config.backend.timeout,
        token=config.backend.api_token,
    )
