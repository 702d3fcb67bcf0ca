"""
Async HTTP client for the Plainly processing service.

Uses ``httpx.AsyncClient`` so the orchestrator can run title requests in
the background while the UI stays responsive.
"""

import asyncio
import logging
from pathlib import Path
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from plainly.core.models import (
    GenerateOutputsResponse,
    TimedSegment,
    TranscribeResponse,
)

logger = logging.getLogger(__name__)

_ResponseT = TypeVar("_ResponseT", bound=BaseModel)

_CONTENT_TYPES = {
    ".m4a": "audio/m4a",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".webm": "audio/webm",
    ".ogg": "audio/ogg",
}


class APIError(Exception):
    """User-facing API error with categorized message.

    Categories: "connection", "timeout", "http", "network", "file".
    ``status_code`` is set only for the "http" category.
    """

    def __init__(
        self, message: str, category: str = "unknown", status_code: int | None = None
    ) -> None:
        self.message = message
        self.category = category
        self.status_code = status_code
        super().__init__(message)


def _unexpected_response(resp: httpx.Response) -> APIError:
    logger.warning("Unparseable %d response from %s", resp.status_code, resp.request.url)
    return APIError(
        "Unexpected response from the Plainly server.",
        category="http",
        status_code=resp.status_code,
    )


class APIClient:
    """Thin async wrapper around httpx for calling the processing service.

    All methods return parsed responses or raise ``APIError`` carrying the
    server's ``error`` message where one was sent.

    Args:
        base_url: Base URL of the Plainly service.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests use ``ASGITransport``).
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3001",
        timeout: float = 150.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "APIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @staticmethod
    def _json(resp: httpx.Response) -> dict:
        """Decode a JSON object body, raising ``APIError`` on anything else."""
        try:
            body = resp.json()
        except ValueError:
            raise _unexpected_response(resp) from None
        if not isinstance(body, dict):
            raise _unexpected_response(resp)
        return body

    @classmethod
    def _parse(cls, resp: httpx.Response, model: type[_ResponseT]) -> _ResponseT:
        try:
            return model.model_validate(cls._json(resp))
        except ValidationError:
            raise _unexpected_response(resp) from None

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request, translating failures to ``APIError``."""
        try:
            resp = await self._client.request(method, path, **kwargs)
            resp.raise_for_status()
            return resp
        except httpx.ConnectError:
            raise APIError(
                "Could not connect to the Plainly server.",
                category="connection",
            ) from None
        except httpx.TimeoutException:
            raise APIError(
                "Request timed out. The server may be overloaded.",
                category="timeout",
            ) from None
        except httpx.HTTPStatusError as exc:
            try:
                detail = exc.response.json().get("error") or exc.response.text
            except ValueError:
                detail = exc.response.text or str(exc)
            raise APIError(
                str(detail),
                category="http",
                status_code=exc.response.status_code,
            ) from None
        except httpx.HTTPError as exc:
            raise APIError(f"Network error: {exc}", category="network") from None

    @staticmethod
    async def _audio_file(audio_path: str) -> tuple[str, bytes, str]:
        path = Path(audio_path)
        try:
            content = await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise APIError(f"Could not read audio file: {exc}", category="file") from None
        content_type = _CONTENT_TYPES.get(path.suffix.lower(), "audio/m4a")
        return path.name, content, content_type

    # -- health --

    async def health_check(self) -> dict:
        return self._json(await self._request("GET", "/health"))

    # -- processing --

    async def transcribe(self, audio_path: str) -> TranscribeResponse:
        """Upload audio and return the validated transcript with timed segments."""
        files = {"audio": await self._audio_file(audio_path)}
        resp = await self._request("POST", "/api/transcribe", files=files)
        return self._parse(resp, TranscribeResponse)

    async def generate_outputs(
        self,
        transcript: str,
        segments: list[TimedSegment] | None = None,
    ) -> GenerateOutputsResponse:
        body = {
            "transcript": transcript,
            "segments": [s.model_dump() for s in segments or []],
        }
        resp = await self._request("POST", "/api/generate-outputs", json=body)
        return self._parse(resp, GenerateOutputsResponse)

    async def process_recording(self, audio_path: str, format: str | None = None) -> dict:
        """Single-call pipeline; returns the raw response body."""
        files = {"audio": await self._audio_file(audio_path)}
        data = {"format": format} if format else None
        resp = await self._request("POST", "/api/process-recording", files=files, data=data)
        return self._json(resp)

    async def generate_title(
        self, transcript: str | None = None, summary: str | dict | None = None
    ) -> str:
        body = {"transcript": transcript, "summary": summary}
        resp = await self._request("POST", "/api/generate-title", json=body)
        title = self._json(resp).get("title")
        return title if isinstance(title, str) else ""
