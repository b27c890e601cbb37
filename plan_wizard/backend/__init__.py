# plan_wizard/backend/__init__.py
"""Plan generation backend boundary: protocol, HTTP client, local simulator, retry."""

from .base import PlanBackend
from .errors import BackendError
from .factory import create_backend
from .http import HttpPlanBackend
from .local import LocalPlanBackend
from .retry import call_with_retry, is_retryable

__all__ = [
    "PlanBackend",
    "BackendError",
    "HttpPlanBackend",
    "LocalPlanBackend",
    "create_backend",
    "call_with_retry",
    "is_retryable",
]
