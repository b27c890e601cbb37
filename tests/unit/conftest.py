# tests/unit/conftest.py
"""Shared fixtures for wizard tests."""

import pytest

from helpers import ScriptedBackend
from plan_wizard.backend.errors import BackendError
from plan_wizard.config.schema import PollingConfig, WizardConfig


@pytest.fixture
def backend_factory():
    """Factory for ScriptedBackend instances."""
    return ScriptedBackend


@pytest.fixture
def fast_config() -> WizardConfig:
    """Config with zero poll interval and the default 60-attempt ceiling."""
    return WizardConfig(polling=PollingConfig(interval_seconds=0.0, max_attempts=60))


@pytest.fixture
def transient_error() -> BackendError:
    return BackendError("upstream timeout", status_code=504)
