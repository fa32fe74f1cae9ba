"""Async HTTP client for the workflow replay API."""
from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from workflow_replay import config
from workflow_replay.models import ReplayArtifact, TranscriptInfo

logger = logging.getLogger("replay.client")


class WorkflowClientError(Exception):
    """Base error for failed replay API calls."""

    def __init__(self, message: str = "Request failed", status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class WorkflowNotFoundError(WorkflowClientError):
    """Session transcript not found (404)."""

    def __init__(self, message: str = "Session not found"):
        super().__init__(message, status_code=404)


class WorkflowConnectionError(WorkflowClientError):
    """Network failure or timeout."""

    def __init__(self, message: str = "Connection error"):
        super().__init__(message, status_code=None)


class WorkflowClient:
    """Fetches replay artifacts and transcript listings.

    Pass ``http_client`` to share a configured ``httpx.AsyncClient`` (tests use
    one backed by ``httpx.MockTransport``); otherwise the client owns its own.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self._timeout = timeout or float(config.CLIENT_TIMEOUT_SECONDS)
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=self._timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    def _handle_response(self, response: httpx.Response) -> Any:
        if response.is_success:
            return response.json()

        status = response.status_code
        if status == 404:
            raise WorkflowNotFoundError()
        raise WorkflowClientError(f"HTTP {status}: {response.text}", status_code=status)

    async def _get(self, path: str) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = await self._http.get(url)
        except httpx.TimeoutException as exc:
            raise WorkflowConnectionError("Request timed out") from exc
        except httpx.TransportError as exc:
            raise WorkflowConnectionError(str(exc)) from exc
        try:
            return self._handle_response(response)
        except ValueError as exc:
            raise WorkflowClientError(f"Invalid JSON from {url}: {exc}", status_code=response.status_code) from exc

    async def get_session(self, session_id: str) -> ReplayArtifact:
        """Fetch one session's replay artifact."""
        payload = await self._get(f"/workflow/sessions/{quote(session_id, safe='')}")
        try:
            return ReplayArtifact.model_validate(payload)
        except ValidationError as exc:
            raise WorkflowClientError(f"Malformed artifact for session {session_id}: {exc}") from exc

    async def list_transcripts(self) -> list[TranscriptInfo]:
        """Fetch available transcripts, newest first."""
        payload = await self._get("/workflow/transcripts")
        if not isinstance(payload, list):
            raise WorkflowClientError("Malformed transcript listing")
        try:
            return [TranscriptInfo.model_validate(item) for item in payload]
        except ValidationError as exc:
            raise WorkflowClientError(f"Malformed transcript listing: {exc}") from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> WorkflowClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
