# plan_wizard/__init__.py
"""plan-wizard: submit and track training plan generation jobs."""

__version__ = "0.1.0"
