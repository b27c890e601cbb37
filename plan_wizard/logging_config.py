# plan_wizard/logging_config.py
"""
Stderr-only logging configuration.

stdout is reserved for command output (job IDs, plan IDs) so it stays pipeable.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

_VERBOSITY_LEVELS = {
    "quiet": logging.WARNING,
    "normal": logging.INFO,
    "verbose": logging.DEBUG,
}


class JsonFormatter(logging.Formatter):
    """Formats log records as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON line."""
        log_data: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if record.exc_info:
            log_data["exc"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def _install(handler: logging.Handler, level: int) -> None:
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # httpx logs every request at INFO; keep it out of normal output
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def configure_logging(verbosity: str = "normal") -> None:
    """
    Configure logging to output JSON to stderr only.

    Clears existing handlers to prevent stdout pollution.

    Args:
        verbosity: One of quiet/normal/verbose
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())
    _install(handler, _VERBOSITY_LEVELS.get(verbosity, logging.INFO))


def configure_cli_logging(verbosity: str = "normal") -> None:
    """Simple human-readable logging to stderr for interactive CLI runs."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter("%(asctime)s  %(levelname)-7s  %(message)s", datefmt="%H:%M:%S")
    )
    _install(handler, _VERBOSITY_LEVELS.get(verbosity, logging.INFO))
