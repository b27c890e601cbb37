# plan_wizard/config/loader.py
"""
Configuration loading.

The config file lives in the platformdirs user config dir unless
PLAN_WIZARD_CONFIG points elsewhere. A missing file is written out with
defaults on first use so users have something to edit.
"""

import logging
import os
from pathlib import Path

import yaml
from platformdirs import user_config_path
from pydantic import ValidationError

from .schema import WizardConfig

logger = logging.getLogger(__name__)

CONFIG_ENVVAR = "PLAN_WIZARD_CONFIG"


class ConfigError(ValueError):
    """Config file exists but can't be parsed or validated."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Invalid config at {path}: {reason}")
        self.path = path


def get_config_path() -> Path:
    """Config file location: $PLAN_WIZARD_CONFIG, else the user config dir."""
    override = os.environ.get(CONFIG_ENVVAR)
    if override:
        return Path(override).expanduser()
    return user_config_path("plan-wizard", ensure_exists=True) / "config.yaml"


def _write_defaults(config_path: Path) -> WizardConfig:
    config = WizardConfig()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w") as f:
        yaml.safe_dump(
            config.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False
        )
    logger.info(f"Wrote default config to {config_path}")
    return config


def load_config(config_path: Path | None = None) -> WizardConfig:
    """
    Load and validate the config file, creating it with defaults if missing.

    Args:
        config_path: Explicit file location (default: get_config_path())

    Raises:
        ConfigError: If the file isn't valid YAML or fails validation
    """
    config_path = config_path or get_config_path()
    if not config_path.exists():
        return _write_defaults(config_path)

    try:
        with config_path.open("r") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(config_path, f"not valid YAML ({e})") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(config_path, "top level must be a mapping")

    try:
        config = WizardConfig.model_validate(raw)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(config_path, problems) from e

    logger.debug(f"Loaded config from {config_path}")
    return config
