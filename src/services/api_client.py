"""
Asynchronous HTTP client for the transcription backend API.

Uses ``httpx.AsyncClient`` so every backend call is a non-blocking
coroutine driven by the caller's event loop. The bearer token is passed
into each method and attached verbatim; the client never stores it.
"""

import logging
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx
from pydantic import ValidationError

from src.core.config import Settings, get_settings
from src.core.exceptions import BackendRejection, TransportError
from src.core.models import (
    AudioFile,
    HistoryItem,
    IncompleteTask,
    PollResponse,
    SubmitAcknowledgement,
)
from src.core.utils import extract_error_message

logger = logging.getLogger(__name__)

ProgressListener = Callable[[int], None]

SUBMIT_PATH = "transcription/transcribe/"
PROGRESS_PATH = "transcription/progress/"
HISTORY_PATH = "transcription/history/"


class _ProgressStream(httpx.AsyncByteStream):
    """Wraps a request body and reports upload percentage per chunk sent."""

    def __init__(
        self,
        stream: httpx.AsyncByteStream,
        total: int,
        listener: ProgressListener,
        chunk_size: int,
    ) -> None:
        self._stream = stream
        self._total = total
        self._listener = listener
        self._chunk_size = chunk_size

    async def __aiter__(self) -> AsyncIterator[bytes]:
        sent = 0
        async for part in self._stream:
            for offset in range(0, len(part), self._chunk_size):
                chunk = part[offset : offset + self._chunk_size]
                sent += len(chunk)
                if self._total:
                    self._listener(min(100, round(sent * 100 / self._total)))
                yield chunk


class TranscriptionAPIClient:
    """Thin async wrapper around httpx for calling the transcription backend.

    All methods return parsed models or raise ``TransportError`` (no
    response) / ``BackendRejection`` (explicit failure from the backend).

    Args:
        settings: Optional Settings instance (defaults to get_settings()).
        transport: Optional httpx transport, used to inject a mock in tests.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._chunk_size = self._settings.upload_chunk_size
        self._client = httpx.AsyncClient(
            base_url=self._settings.api_base_url,
            timeout=self._settings.request_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "TranscriptionAPIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _auth(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    async def _send(self, request: httpx.Request) -> httpx.Response:
        """Send a prepared request with user-friendly error handling.

        Raises:
            TransportError: When no response was received.
            BackendRejection: On a non-2xx response.
        """
        try:
            resp = await self._client.send(request)
        except httpx.TimeoutException:
            logger.warning("%s %s timed out", request.method, request.url)
            raise TransportError(
                "Request timed out. The server may be overloaded."
            ) from None
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", request.method, request.url, exc)
            raise TransportError() from None

        if resp.is_error:
            detail = extract_error_message(_body(resp))
            logger.warning(
                "%s %s rejected (%s): %s", request.method, request.url, resp.status_code, detail
            )
            raise BackendRejection(detail, status_code=resp.status_code)
        return resp

    async def _request(self, method: str, path: str, token: str, **kwargs) -> httpx.Response:
        request = self._client.build_request(method, path, headers=self._auth(token), **kwargs)
        return await self._send(request)

    # -- transcription --

    async def submit_audio(
        self,
        file: AudioFile,
        token: str,
        on_progress: ProgressListener | None = None,
    ) -> SubmitAcknowledgement:
        """Upload an audio file as multipart field ``audio``.

        Args:
            file: A validated audio file.
            token: Bearer credential.
            on_progress: Called synchronously with 0-100 for every chunk sent.

        Returns:
            The backend's acknowledgement carrying the new task id.
        """
        request = self._client.build_request(
            "POST",
            SUBMIT_PATH,
            headers=self._auth(token),
            files={"audio": (file.filename, file.data, file.content_type)},
        )
        if on_progress is not None:
            total = int(request.headers.get("Content-Length", 0))
            request.stream = _ProgressStream(
                request.stream, total, on_progress, self._chunk_size
            )

        logger.info("Submitting %s (%d bytes)", file.filename, file.size)
        body = _body(await self._send(request))

        if isinstance(body, dict) and body.get("success") is False:
            raise BackendRejection(body.get("message") or extract_error_message(body))
        data = body.get("data", body) if isinstance(body, dict) else body
        try:
            ack = SubmitAcknowledgement.model_validate(data)
        except ValidationError:
            raise BackendRejection("Malformed response from server") from None
        logger.info("Upload acknowledged as task %s", ack.task_id)
        return ack

    async def list_incomplete(self, token: str) -> list[IncompleteTask]:
        """Return the backend's unfinished tasks, most recent first."""
        body = _body(await self._request("GET", PROGRESS_PATH, token))
        try:
            return [IncompleteTask.model_validate(item) for item in _items(body)]
        except ValidationError:
            raise BackendRejection("Malformed response from server") from None

    async def get_progress(self, task_id: str, token: str) -> PollResponse:
        """Poll the status of a single task."""
        body = _body(await self._request("GET", f"{PROGRESS_PATH}{task_id}/", token))
        try:
            return PollResponse.model_validate(body)
        except ValidationError:
            raise BackendRejection("Malformed response from server") from None

    # -- history --

    async def list_history(self, token: str) -> list[HistoryItem]:
        body = _body(await self._request("GET", HISTORY_PATH, token))
        try:
            return [HistoryItem.model_validate(item) for item in _items(body)]
        except ValidationError:
            raise BackendRejection("Malformed response from server") from None

    async def delete_history_item(self, item_id: str, token: str) -> None:
        resp = await self._request("DELETE", f"{HISTORY_PATH}{item_id}/", token)
        if resp.status_code != 204:
            raise BackendRejection(
                "An error occurred while deleting the transcription",
                status_code=resp.status_code,
            )

    async def bookmark_history_item(self, item_id: str, token: str) -> None:
        resp = await self._request("POST", f"{HISTORY_PATH}{item_id}/bookmark/", token, json={})
        if resp.status_code != 200:
            raise BackendRejection(
                "An error occurred while bookmarking the transcription",
                status_code=resp.status_code,
            )


def _body(resp: httpx.Response) -> Any:
    """Decode a JSON body, falling back to the raw text."""
    if not resp.content:
        return {}
    try:
        return resp.json()
    except ValueError:
        return resp.text


def _items(body: Any) -> list:
    """Unwrap a list payload, accepting a bare list or a ``data`` envelope."""
    if isinstance(body, dict):
        body = body.get("data", [])
    if not isinstance(body, list):
        raise BackendRejection("Malformed response from server")
    return body
