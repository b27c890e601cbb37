# plan_wizard/__main__.py
"""Entry point for `python -m plan_wizard`."""

from plan_wizard.cli import app

if __name__ == "__main__":
    app()
