# plan_wizard/validation/__init__.py
"""Input validation for wizard requests and job identifiers."""

from plan_wizard.validation.form import validate_request
from plan_wizard.validation.sanitize import JobIdError, sanitize_job_id

__all__ = ["validate_request", "sanitize_job_id", "JobIdError"]
