# plan_wizard/cli.py
"""
CLI interface for plan-wizard.

Thin presentation layer over the wizard/ and backend/ packages. The create
command walks the three input steps from command-line options, then shows
live progress until the job reaches a terminal state.
"""

import asyncio
import sys
import time

import typer

from plan_wizard.backend import BackendError, PlanBackend, call_with_retry, create_backend
from plan_wizard.config.loader import ConfigError, get_config_path, load_config
from plan_wizard.config.schema import WizardConfig
from plan_wizard.logging_config import configure_cli_logging, configure_logging
from plan_wizard.models.responses import JobStatusSnapshot
from plan_wizard.validation.sanitize import JobIdError, sanitize_job_id
from plan_wizard.wizard import PROGRESS_BANDS, PlanWizard, Step, interpret

app = typer.Typer(
    name="plan-wizard",
    help="Generate personalized training plans and track their progress.",
    no_args_is_help=True,
)

USER_ENVVAR = "PLAN_WIZARD_USER_ID"


def _run(coro):
    """Run async function from sync CLI context."""
    return asyncio.run(coro)


def _fmt_duration(seconds: float) -> str:
    """Format seconds as human-readable duration (e.g. '5m17s', '42s')."""
    s = int(seconds)
    if s < 60:
        return f"{s}s"
    m, s = divmod(s, 60)
    return f"{m}m{s:02d}s"


def _status_color(status: str) -> str:
    """Return ANSI color for job status."""
    colors = {
        "completed": typer.colors.GREEN,
        "processing": typer.colors.YELLOW,
        "pending": typer.colors.CYAN,
        "failed": typer.colors.RED,
        "cancelled": typer.colors.MAGENTA,
    }
    return colors.get(status, typer.colors.WHITE)


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _parse_disruption(value: str) -> dict:
    """Parse 'START:END:REASON' (ISO dates) into a disruption dict."""
    parts = value.split(":", 2)
    if len(parts) != 3:
        raise typer.BadParameter(
            f"Disruption '{value}' must look like YYYY-MM-DD:YYYY-MM-DD:reason"
        )
    start, end, reason = (p.strip() for p in parts)
    return {"start_date": start, "end_date": end, "description": reason}


def _make_live_display(
    snapshot: JobStatusSnapshot | None,
    message: str,
    elapsed: float,
    attempts: int,
    max_attempts: int,
):
    """Build a rich renderable for the live progress display."""
    from rich.console import Group
    from rich.panel import Panel
    from rich.table import Table
    from rich.text import Text

    progress = min(max(snapshot.progress, 0), 100) if snapshot else 0
    completed = snapshot is not None and snapshot.status.value == "completed"

    table = Table.grid(padding=(0, 2))
    table.add_column(width=3)
    table.add_column()

    for band in PROGRESS_BANDS[:-1]:
        if progress > band.high or completed:
            icon, style = Text("✓", style="green"), "dim"
        elif band.contains(progress):
            icon, style = Text("⟳", style="yellow"), "bold"
        else:
            icon, style = Text("○", style="dim"), "dim"
        table.add_row(icon, Text(band.message.rstrip("."), style=style))

    bar_width = 36
    filled = int(progress / 100 * bar_width)
    bar = "█" * filled + "░" * (bar_width - filled)

    parts: list = [
        table,
        Text(f"\n  {bar}  {progress}%", style="cyan"),
        Text(f"\n  {message}", style="dim italic") if message else Text(""),
        Text(
            f"  {_fmt_duration(elapsed)} elapsed, poll {attempts}/{max_attempts}",
            style="dim",
        ),
        Text(""),
    ]

    return Panel(
        Group(*parts),
        title=Text(" Generating training plan ", style="bold"),
        border_style="bright_black",
    )


async def _track(wizard: PlanWizard, state: dict, max_attempts: int, console) -> None:
    """Refresh a live display until the wizard's poll loop stops."""
    from rich.live import Live

    start = time.monotonic()

    def _render():
        poller = wizard.poller
        attempts = poller.state.session.attempts if poller and poller.is_polling else 0
        return _make_live_display(
            state.get("snapshot"),
            wizard.message or "Submitting...",
            time.monotonic() - start,
            attempts,
            max_attempts,
        )

    with Live(_render(), console=console, refresh_per_second=4) as live:
        while wizard.is_busy:
            live.update(_render())
            await asyncio.sleep(0.25)
        live.update(_render())


def _load_config() -> WizardConfig:
    try:
        return load_config()
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _setup_logging(config: WizardConfig, verbose: bool = False, json_logs: bool = False) -> None:
    """Install stderr logging from the output config; CLI flags win."""
    verbosity = "verbose" if verbose else config.output.verbosity
    if json_logs or config.output.json_logs:
        configure_logging(verbosity)
    else:
        configure_cli_logging(verbosity)


def _print_errors(errors: list[str]) -> None:
    typer.echo(typer.style("Please fix the following errors:", fg=typer.colors.RED), err=True)
    for error in errors:
        typer.echo(f"  • {error}", err=True)


@app.command()
def create(
    race_id: int = typer.Option(..., "--race-id", "-r", prompt="Race ID", help="Target race"),
    days_per_week: int = typer.Option(4, "--days", "-d", help="Training days per week (1-7)"),
    max_hours: float = typer.Option(6.0, "--hours", help="Maximum training hours per week"),
    experience: str = typer.Option(
        "intermediate", "--experience", "-e", help="beginner, intermediate or experienced"
    ),
    training_days: str = typer.Option(
        None, "--training-days", help="Preferred training days, comma-separated"
    ),
    rest_days: str = typer.Option("Sunday", "--rest-days", help="Rest days, comma-separated"),
    training_time: str = typer.Option(
        None, "--time", help="Preferred time: morning, afternoon or evening"
    ),
    disruptions: list[str] = typer.Option(
        None, "--disruption", help="START:END:REASON, repeatable"
    ),
    injuries: list[str] = typer.Option(None, "--injury", help="Injury or limitation, repeatable"),
    equipment: str = typer.Option(None, "--equipment", help="Available equipment, comma-separated"),
    outdoor: bool = typer.Option(True, "--outdoor/--no-outdoor", help="Safe outdoor routes available"),
    strength: bool = typer.Option(True, "--strength/--no-strength", help="Include strength training"),
    cross_training: bool = typer.Option(
        False, "--cross-training/--no-cross-training", help="Include cross-training"
    ),
    user_id: str = typer.Option(None, "--user-id", "-u", envvar=USER_ENVVAR, help="Your user ID"),
    local: bool = typer.Option(False, "--local", help="Use the built-in simulator backend"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Log to stderr as JSON lines"),
):
    """Build a training plan request and generate it with live progress."""
    from rich.console import Console

    config = _load_config()
    _setup_logging(config, verbose=verbose, json_logs=json_logs)
    console = Console(stderr=True)

    selection = {"race_id": race_id}
    constraints = {
        "days_per_week": days_per_week,
        "max_hours_per_week": max_hours,
        "years_experience": experience,
        "preferred_training_days": _split_csv(training_days),
        "preferred_rest_days": _split_csv(rest_days),
        "preferred_training_time": training_time,
        "upcoming_disruptions": [_parse_disruption(d) for d in disruptions or []],
        "injury_limitations": list(injuries or []),
    }
    equipment_step = {
        "available_equipment": _split_csv(equipment),
        "safe_outdoor_routes": outdoor,
        "include_strength_training": strength,
        "include_cross_training": cross_training,
    }

    effective_user = user_id or ("local-user" if local else None)

    async def _create() -> str | None:
        backend = create_backend(config, local=local)
        state: dict = {}
        wizard = PlanWizard(
            backend,
            effective_user,
            config=config,
            on_progress=lambda snap, msg: state.update(snapshot=snap),
        )
        try:
            await wizard.complete_step(selection)
            await wizard.complete_step(constraints)
            await wizard.complete_step(equipment_step)

            while True:
                if wizard.step is Step.GENERATING:
                    await _track(wizard, state, config.polling.max_attempts, console)
                    await wizard.wait()

                if wizard.finished:
                    return wizard.result_plan_id

                if not wizard.errors:
                    return None
                _print_errors(wizard.errors)
                if not wizard.can_retry or not sys.stdin.isatty():
                    raise typer.Exit(1)
                if not typer.confirm("Retry with the same inputs?", default=True):
                    raise typer.Exit(1)
                state.clear()
                await wizard.retry()

        except asyncio.CancelledError:
            raise KeyboardInterrupt
        finally:
            await wizard.close()
            await backend.close()

    try:
        plan_id = _run(_create())
    except KeyboardInterrupt:
        typer.echo("\nCancelled.", err=True)
        raise typer.Exit(130)

    if plan_id:
        console.print(f"[green]✓ Done[/green]  plan: {plan_id}")
        typer.echo(plan_id)


async def _with_backend(fn, config: WizardConfig, local: bool = False):
    backend: PlanBackend = create_backend(config, local=local)
    try:
        return await fn(backend, config)
    finally:
        await backend.close()


def _require_user(user_id: str | None) -> str:
    if not user_id:
        typer.echo(f"Error: --user-id (or {USER_ENVVAR}) is required", err=True)
        raise typer.Exit(1)
    return user_id


@app.command()
def status(
    job_id: str = typer.Argument(..., help="Job ID to check"),
    user_id: str = typer.Option(None, "--user-id", "-u", envvar=USER_ENVVAR, help="Your user ID"),
):
    """Check the status of a generation job."""
    user = _require_user(user_id)
    config = _load_config()
    _setup_logging(config)

    try:
        job_id = sanitize_job_id(job_id)
        snapshot = _run(_with_backend(lambda b, c: b.get_job_status(job_id, user), config))
    except (BackendError, JobIdError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    state = snapshot.status.value
    typer.echo(f"Job:      {job_id}")
    typer.echo(typer.style(f"Status:   {state}", fg=_status_color(state)))
    typer.echo(f"Progress: {snapshot.progress}%")
    typer.echo(f"Message:  {interpret(snapshot)}")
    if snapshot.retry_count:
        typer.echo(f"Retries:  {snapshot.retry_count}")
    if snapshot.result_plan_id:
        typer.echo(f"Plan:     {snapshot.result_plan_id}")
    if snapshot.error_message:
        typer.echo(typer.style(f"Error:    {snapshot.error_message}", fg=typer.colors.RED))


@app.command()
def cancel(
    job_id: str = typer.Argument(..., help="Job ID to cancel"),
    user_id: str = typer.Option(None, "--user-id", "-u", envvar=USER_ENVVAR, help="Your user ID"),
):
    """Cancel a running generation job."""
    user = _require_user(user_id)
    config = _load_config()
    _setup_logging(config)

    async def _cancel(backend: PlanBackend, config):
        return await call_with_retry(
            lambda: backend.cancel_job(job_id, user),
            attempts=config.cancel.retry_attempts,
        )

    try:
        job_id = sanitize_job_id(job_id)
        response = _run(_with_backend(_cancel, config))
    except (BackendError, JobIdError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Job {job_id}: {response.message or 'cancel requested'}")


@app.command("config")
def show_config():
    """Show the config file location and effective settings."""
    import yaml

    config = _load_config()
    typer.echo(f"# {get_config_path()}")
    typer.echo(yaml.safe_dump(config.model_dump(mode="json"), sort_keys=False).rstrip())


if __name__ == "__main__":
    app()
