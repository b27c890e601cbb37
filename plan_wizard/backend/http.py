# plan_wizard/backend/http.py
"""
HTTP plan backend using httpx.

Talks to the training plan generation API. Every failure, including
transport errors, surfaces as BackendError so callers deal with one type.
"""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from plan_wizard.backend.base import PlanBackend
from plan_wizard.backend.errors import BackendError
from plan_wizard.models.request import TrainingPlanRequest
from plan_wizard.models.responses import (
    CancelJobResponse,
    CreateJobResponse,
    JobStatusSnapshot,
)
from plan_wizard.validation.sanitize import JobIdError, sanitize_job_id

logger = logging.getLogger(__name__)

GENERATE_PATH = "/api/training-plans/generate"
JOB_STATUS_PATH = "/api/training-plans/jobs/{job_id}"
JOB_CANCEL_PATH = "/api/training-plans/jobs/{job_id}/cancel"


def _error_message(response: httpx.Response) -> str:
    """Extract the server's 'detail' message, falling back to the status code."""
    try:
        data = response.json()
    except ValueError:
        data = {}

    detail = data.get("detail") if isinstance(data, dict) else None
    if isinstance(detail, str) and detail.strip():
        return detail
    if isinstance(detail, list) and detail:
        # FastAPI-style validation errors: [{"msg": ...}, ...]
        msgs = [d.get("msg", str(d)) if isinstance(d, dict) else str(d) for d in detail]
        return "; ".join(msgs)
    return f"API request failed: {response.status_code}"


class HttpPlanBackend(PlanBackend):
    """Async client for the plan generation API."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 10.0,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize HTTP backend.

        Args:
            base_url: API base URL
            timeout: Per-request timeout in seconds
            token: Bearer token from the session provider (optional)
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._token = token
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-loaded httpx client."""
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self._token:
                headers["Authorization"] = f"Bearer {self._token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self._timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict:
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.debug(f"{method} {path} transport error: {e!r}")
            raise BackendError(f"Could not reach plan service: {e}") from e

        if response.is_error:
            message = _error_message(response)
            logger.debug(f"{method} {path} -> {response.status_code}: {message}")
            raise BackendError(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise BackendError(
                "Plan service returned an invalid response", status_code=response.status_code
            ) from e

        if not isinstance(data, dict):
            raise BackendError(
                "Plan service returned an invalid response", status_code=response.status_code
            )
        return data

    @staticmethod
    def _job_path(template: str, job_id: str) -> str:
        try:
            return template.format(job_id=sanitize_job_id(job_id))
        except JobIdError as e:
            raise BackendError(str(e)) from e

    async def create_job(self, request: TrainingPlanRequest) -> CreateJobResponse:
        data = await self._request("POST", GENERATE_PATH, json=request.to_payload())
        try:
            return CreateJobResponse.model_validate(data)
        except ValidationError as e:
            raise BackendError(f"Unexpected create_job response: {e}") from e

    async def get_job_status(self, job_id: str, user_id: str) -> JobStatusSnapshot:
        path = self._job_path(JOB_STATUS_PATH, job_id)
        data = await self._request("GET", path, params={"user_id": user_id})
        try:
            return JobStatusSnapshot.model_validate(data)
        except ValidationError as e:
            raise BackendError(f"Unexpected job status response: {e}") from e

    async def cancel_job(self, job_id: str, user_id: str) -> CancelJobResponse:
        path = self._job_path(JOB_CANCEL_PATH, job_id)
        data = await self._request("POST", path, params={"user_id": user_id})
        try:
            return CancelJobResponse.model_validate(data)
        except ValidationError as e:
            raise BackendError(f"Unexpected cancel_job response: {e}") from e

    async def close(self) -> None:
        """Close the httpx client if initialized."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
