# tests/unit/test_cli.py
"""
CLI unit tests.

Tests each command via typer's CliRunner, with load_config and
create_backend patched so no config file or network is touched.
"""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from helpers import JOB_ID, USER_ID, ScriptedBackend, snap
from plan_wizard.backend.errors import BackendError
from plan_wizard.cli import app
from plan_wizard.config.loader import ConfigError
from plan_wizard.config.schema import PollingConfig, WizardConfig
from plan_wizard.wizard.gate import SIGNED_OUT_MESSAGE

runner = CliRunner()

PLAN_ID = "plan-xyz789"

CREATE_ARGS = [
    "create",
    "--race-id", "7",
    "--days", "5",
    "--hours", "9.5",
    "--experience", "experienced",
    "--training-days", "Monday, Wednesday,Friday",
    "--time", "morning",
    "--disruption", "2026-11-02:2026-11-06:Work trip",
    "--injury", "achilles",
    "--equipment", "gps_watch,heart_rate_monitor",
    "--no-strength",
]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> WizardConfig:
    return WizardConfig(polling=PollingConfig(interval_seconds=0.0, max_attempts=5))


@pytest.fixture
def patched(config):
    """Patch config loading and backend creation; yields a setter for the backend."""
    state = {"backend": ScriptedBackend()}

    def _create_backend(cfg, local=False):
        state["local"] = local
        return state["backend"]

    with patch("plan_wizard.cli.load_config", return_value=config), patch(
        "plan_wizard.cli.create_backend", side_effect=_create_backend
    ):
        yield state


def _invoke(args, user_id=USER_ID):
    return runner.invoke(app, args, env={"PLAN_WIZARD_USER_ID": user_id})


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestHelp:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "Generate personalized training plans" in result.output

    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "create" in result.output
        assert "status" in result.output
        assert "cancel" in result.output


class TestCreate:
    def test_create_success(self, patched):
        backend = ScriptedBackend(script=[
            snap("processing", 30, "Creating periodized training phases..."),
            snap("completed", 100, result_plan_id=PLAN_ID),
        ])
        patched["backend"] = backend

        result = _invoke(CREATE_ARGS)

        assert result.exit_code == 0, result.output
        assert PLAN_ID in result.output
        assert patched["local"] is False

        request = backend.create_calls[0]
        assert request.user_id == USER_ID
        assert request.race_id == 7
        assert request.days_per_week == 5
        assert request.preferred_training_days == ["Monday", "Wednesday", "Friday"]
        assert request.preferred_training_time == "morning"
        assert request.injury_limitations == ["achilles"]
        assert request.available_equipment == ["gps_watch", "heart_rate_monitor"]
        assert request.upcoming_disruptions[0].description == "Work trip"
        assert request.include_strength_training is False

    def test_create_job_failure_exits_nonzero(self, patched):
        patched["backend"] = ScriptedBackend(
            script=[snap("failed", 40, error_message="Model overloaded")]
        )

        result = _invoke(CREATE_ARGS)

        assert result.exit_code == 1
        assert "Model overloaded" in result.output

    def test_create_timeout(self, patched):
        patched["backend"] = ScriptedBackend(default=BackendError("upstream", status_code=504))

        result = _invoke(CREATE_ARGS)

        assert result.exit_code == 1
        assert "timed out" in result.output
        assert patched["backend"].status_calls == 5

    def test_validation_errors_skip_backend(self, patched):
        backend = patched["backend"]
        args = [a if a != "5" else "9" for a in CREATE_ARGS]

        result = _invoke(args)

        assert result.exit_code == 1
        assert "Training days per week must be between 1 and 7" in result.output
        assert backend.create_calls == []

    def test_signed_out(self, patched):
        result = _invoke(CREATE_ARGS, user_id=None)

        assert result.exit_code == 1
        assert SIGNED_OUT_MESSAGE in result.output
        assert patched["backend"].create_calls == []

    def test_local_uses_simulator_user(self, patched):
        backend = ScriptedBackend(script=[snap("completed", 100, result_plan_id=PLAN_ID)])
        patched["backend"] = backend

        result = _invoke(CREATE_ARGS + ["--local"], user_id=None)

        assert result.exit_code == 0, result.output
        assert patched["local"] is True
        assert backend.create_calls[0].user_id == "local-user"

    def test_bad_disruption_format(self, patched):
        result = _invoke(["create", "--race-id", "7", "--disruption", "next week"])
        assert result.exit_code != 0
        assert patched["backend"].create_calls == []


class TestStatus:
    def test_status(self, patched):
        patched["backend"] = ScriptedBackend(
            script=[snap("processing", 60, "generating plan", retry_count=1)]
        )

        result = _invoke(["status", JOB_ID])

        assert result.exit_code == 0
        assert JOB_ID in result.output
        assert "processing" in result.output
        assert "60%" in result.output
        assert "generating plan" in result.output
        assert "Retries:  1" in result.output

    def test_status_completed_shows_plan(self, patched):
        patched["backend"] = ScriptedBackend(
            script=[snap("completed", 100, result_plan_id=PLAN_ID)]
        )

        result = _invoke(["status", JOB_ID])
        assert PLAN_ID in result.output

    def test_status_invalid_job_id(self, patched):
        result = _invoke(["status", "bad/id"])
        assert result.exit_code == 1
        assert "Invalid job ID" in result.output
        assert patched["backend"].status_calls == 0

    def test_status_requires_user(self, patched):
        result = _invoke(["status", JOB_ID], user_id=None)
        assert result.exit_code == 1
        assert "--user-id" in result.output

    def test_status_backend_error(self, patched):
        patched["backend"] = ScriptedBackend(
            default=BackendError("Job not found", status_code=404)
        )

        result = _invoke(["status", JOB_ID])
        assert result.exit_code == 1
        assert "Job not found" in result.output


class TestCancel:
    def test_cancel(self, patched):
        result = _invoke(["cancel", JOB_ID])

        assert result.exit_code == 0
        assert f"Job {JOB_ID}: Job cancelled" in result.output
        assert patched["backend"].cancel_calls == [(JOB_ID, USER_ID)]

    def test_cancel_not_found(self, patched):
        patched["backend"] = ScriptedBackend(
            cancel_error=BackendError("Job not found", status_code=404)
        )

        result = _invoke(["cancel", JOB_ID])
        assert result.exit_code == 1
        assert "Job not found" in result.output


class TestConfig:
    def test_shows_effective_config(self, patched):
        with patch("plan_wizard.cli.get_config_path", return_value="/tmp/plan-wizard/config.yaml"):
            result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "/tmp/plan-wizard/config.yaml" in result.output
        assert "max_attempts: 5" in result.output


class TestLogging:
    def test_config_verbosity_is_used(self, patched, config):
        config.output.verbosity = "normal"
        with patch("plan_wizard.cli.configure_cli_logging") as cli_logging, patch(
            "plan_wizard.cli.configure_logging"
        ) as json_logging:
            _invoke(["status", JOB_ID])

        cli_logging.assert_called_once_with("normal")
        json_logging.assert_not_called()

    def test_verbose_flag_overrides_config(self, patched):
        patched["backend"] = ScriptedBackend(script=[snap("completed", 100, result_plan_id=PLAN_ID)])
        with patch("plan_wizard.cli.configure_cli_logging") as cli_logging:
            result = _invoke(CREATE_ARGS + ["--verbose"])

        assert result.exit_code == 0, result.output
        cli_logging.assert_called_once_with("verbose")

    def test_json_logs_flag(self, patched):
        patched["backend"] = ScriptedBackend(script=[snap("completed", 100, result_plan_id=PLAN_ID)])
        with patch("plan_wizard.cli.configure_logging") as json_logging, patch(
            "plan_wizard.cli.configure_cli_logging"
        ) as cli_logging:
            result = _invoke(CREATE_ARGS + ["--json-logs"])

        assert result.exit_code == 0, result.output
        json_logging.assert_called_once_with("quiet")
        cli_logging.assert_not_called()

    def test_json_logs_from_config(self, patched, config):
        config.output.json_logs = True
        with patch("plan_wizard.cli.configure_logging") as json_logging:
            _invoke(["cancel", JOB_ID])

        json_logging.assert_called_once_with("quiet")


class TestConfigErrors:
    def test_invalid_config_exits_with_message(self, tmp_path):
        path = tmp_path / "config.yaml"
        with patch(
            "plan_wizard.cli.load_config",
            side_effect=ConfigError(path, "polling.max_attempts: too small"),
        ):
            result = _invoke(["status", JOB_ID])

        assert result.exit_code == 1
        assert "Invalid config" in result.output
        assert "polling.max_attempts" in result.output
