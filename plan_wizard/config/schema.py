# plan_wizard/config/schema.py
"""
Pydantic configuration models for plan-wizard.

All models use extra="ignore" to allow unknown YAML keys without crashing.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class BackendConfig(BaseModel):
    """Plan generation backend configuration."""

    model_config = ConfigDict(extra="ignore")

    base_url: str = Field(
        default="http://localhost:8000", description="Plan generation API base URL"
    )
    timeout: float = Field(
        default=10.0, gt=0.0, description="Per-request timeout in seconds"
    )
    api_token: str | None = Field(
        default=None,
        description="Bearer token from the session provider (None = anonymous)",
    )


class PollingConfig(BaseModel):
    """Job status polling configuration."""

    model_config = ConfigDict(extra="ignore")

    interval_seconds: float = Field(
        default=2.0,
        ge=0.0,
        le=60.0,
        description="Delay between the end of one status fetch and the next",
    )
    max_attempts: int = Field(
        default=60,
        ge=1,
        le=1000,
        description="Status fetches allowed before the job is declared timed out",
    )


class CancelConfig(BaseModel):
    """Best-effort job cancellation configuration."""

    model_config = ConfigDict(extra="ignore")

    retry_attempts: int = Field(
        default=2,
        ge=1,
        le=5,
        description="Attempts for the cancel call on connection errors",
    )


class OutputConfig(BaseModel):
    """Terminal output configuration."""

    model_config = ConfigDict(extra="ignore")

    verbosity: Literal["quiet", "normal", "verbose"] = Field(
        default="quiet",
        description="Logging verbosity level (quiet keeps the live progress panel clean)",
    )
    json_logs: bool = Field(
        default=False, description="Emit stderr logs as JSON lines instead of plain text"
    )


class WizardConfig(BaseModel):
    """Root configuration for plan-wizard."""

    model_config = ConfigDict(extra="ignore")

    backend: BackendConfig = Field(default_factory=BackendConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    cancel: CancelConfig = Field(default_factory=CancelConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
