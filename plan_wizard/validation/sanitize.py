# plan_wizard/validation/sanitize.py
"""
Input sanitization for values that end up in backend URLs.
"""

import re


class JobIdError(ValueError):
    """Raised when a job ID is malformed."""


_JOB_ID_PATTERN = re.compile(r"^[a-zA-Z0-9-]{8,64}$")


def sanitize_job_id(job_id: str) -> str:
    """
    Sanitize and validate job ID.

    Job IDs must be alphanumeric with hyphens only, 8-64 characters.

    Args:
        job_id: Job ID from the backend or the user

    Returns:
        Validated job ID (surrounding whitespace stripped)

    Raises:
        JobIdError: If job ID format is invalid
    """
    cleaned = (job_id or "").strip()
    if not _JOB_ID_PATTERN.match(cleaned):
        raise JobIdError(
            f"Invalid job ID '{job_id}': must be 8-64 alphanumeric characters or hyphens"
        )

    return cleaned
