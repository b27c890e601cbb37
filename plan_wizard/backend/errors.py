# plan_wizard/backend/errors.py
"""Errors raised at the backend boundary."""


class BackendError(Exception):
    """
    A backend call failed.

    status_code is None for transport failures (connection refused,
    timeouts) and the HTTP status otherwise.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_transport_error(self) -> bool:
        """True if the request never got an HTTP response."""
        return self.status_code is None
