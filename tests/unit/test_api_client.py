"""Unit tests for the async APIClient using ``httpx.MockTransport``."""

import json

import httpx
import pytest

from plainly.client.api_client import APIClient, APIError
from plainly.core.models import TimedSegment


def _client(handler) -> APIClient:
    return APIClient(base_url="http://test", transport=httpx.MockTransport(handler))


class TestProcessingCalls:
    """Verify request construction and response parsing."""

    async def test_transcribe_uploads_audio(self, sample_audio_path):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = request.content
            return httpx.Response(
                200,
                json={
                    "transcript": "Hello there friend",
                    "segments": [{"text": "Hello there friend", "start": 0.0, "end": 1.2}],
                },
            )

        async with _client(handler) as api:
            result = await api.transcribe(sample_audio_path)

        assert seen["path"] == "/api/transcribe"
        assert b'name="audio"; filename="recording.m4a"' in seen["body"]
        assert result.transcript == "Hello there friend"
        assert result.segments[0].end == 1.2

    async def test_generate_outputs_sends_segments(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["json"] = json.loads(request.content)
            return httpx.Response(200, json={"summary": "{}", "structuredTranscript": "{}"})

        async with _client(handler) as api:
            result = await api.generate_outputs(
                "Hello there", [TimedSegment(text="Hello there", start=0.0, end=1.0)]
            )

        assert seen["json"]["segments"] == [{"text": "Hello there", "start": 0.0, "end": 1.0}]
        assert result.structured_transcript == "{}"

    async def test_generate_title(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert json.loads(request.content) == {"transcript": "abc", "summary": None}
            return httpx.Response(200, json={"title": "Errands"})

        async with _client(handler) as api:
            assert await api.generate_title(transcript="abc") == "Errands"

    async def test_process_recording_with_format(self, sample_audio_path):
        def handler(request: httpx.Request) -> httpx.Response:
            assert b'name="format"' in request.content
            return httpx.Response(200, json={"transcript": "t", "output": "{}"})

        async with _client(handler) as api:
            body = await api.process_recording(sample_audio_path, format="summary")

        assert body == {"transcript": "t", "output": "{}"}


class TestErrors:
    """Failures surface as categorized ``APIError``s."""

    async def test_server_error_message(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "No speech detected in recording"})

        async with _client(handler) as api:
            with pytest.raises(APIError) as exc_info:
                await api.generate_title(transcript="x")

        assert exc_info.value.category == "http"
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "No speech detected in recording"

    async def test_non_json_error_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        async with _client(handler) as api:
            with pytest.raises(APIError, match="Bad Gateway"):
                await api.health_check()

    async def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as api:
            with pytest.raises(APIError) as exc_info:
                await api.health_check()

        assert exc_info.value.category == "connection"

    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        async with _client(handler) as api:
            with pytest.raises(APIError) as exc_info:
                await api.health_check()

        assert exc_info.value.category == "timeout"

    async def test_missing_audio_file(self, tmp_path):
        async with _client(lambda request: httpx.Response(200)) as api:
            with pytest.raises(APIError) as exc_info:
                await api.transcribe(str(tmp_path / "gone.m4a"))

        assert exc_info.value.category == "file"

    async def test_html_success_body(self, sample_audio_path):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html><body>Proxy login</body></html>")

        async with _client(handler) as api:
            with pytest.raises(APIError) as exc_info:
                await api.transcribe(sample_audio_path)

        assert exc_info.value.category == "http"
        assert exc_info.value.status_code == 200

    async def test_success_body_with_wrong_shape(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"summary": 42})

        async with _client(handler) as api:
            with pytest.raises(APIError, match="Unexpected response"):
                await api.generate_outputs("Hello there friend")

    async def test_title_from_non_object_body(self):
        async with _client(lambda request: httpx.Response(200, json=["x"])) as api:
            with pytest.raises(APIError) as exc_info:
                await api.generate_title(transcript="Hello there friend")

        assert exc_info.value.category == "http"
