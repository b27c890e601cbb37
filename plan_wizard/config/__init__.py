# plan_wizard/config/__init__.py
"""Configuration system for plan-wizard."""

from .loader import CONFIG_ENVVAR, ConfigError, get_config_path, load_config
from .schema import (
    BackendConfig,
    CancelConfig,
    OutputConfig,
    PollingConfig,
    WizardConfig,
)

__all__ = [
    "WizardConfig",
    "BackendConfig",
    "PollingConfig",
    "CancelConfig",
    "OutputConfig",
    "ConfigError",
    "CONFIG_ENVVAR",
    "load_config",
    "get_config_path",
]
