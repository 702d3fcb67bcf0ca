"""
Recording processing endpoints.

Thin HTTP layer over ``ProcessingPipeline``: multipart parsing, format
validation and response shaping. Failures are raised as ``PlainlyError``
subclasses and rendered by the global error handlers.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from plainly.api.dependencies import get_optional_pipeline, get_pipeline
from plainly.core.exceptions import InvalidRequestError
from plainly.core.models import (
    AudioPayload,
    GenerateOutputsRequest,
    GenerateOutputsResponse,
    GenerateTitleRequest,
    GenerateTitleResponse,
    ProcessAllResponse,
    ProcessOneResponse,
    TranscribeResponse,
)
from plainly.core.structured import OutputKind
from plainly.services.pipeline import ProcessingPipeline
from plainly.services.pipeline.processor import DEFAULT_TITLE, QUICK_NOTE_TITLE, title_source

logger = logging.getLogger(__name__)

router = APIRouter(tags=["processing"])


async def _read_audio(audio: UploadFile | None) -> AudioPayload:
    """Read an uploaded file into an ``AudioPayload`` or raise 400."""
    if audio is None:
        raise InvalidRequestError("No audio file provided")
    content = await audio.read()
    return AudioPayload(
        content=content,
        filename=audio.filename or "recording.m4a",
        content_type=audio.content_type or "audio/m4a",
    )


def _parse_format(value: str | None) -> OutputKind | None:
    if not value:
        return None
    try:
        return OutputKind(value)
    except ValueError:
        raise InvalidRequestError("Invalid format specified") from None


@router.post(
    "/process-recording",
    response_model=ProcessAllResponse | ProcessOneResponse,
)
async def process_recording(
    audio: UploadFile | None = File(None),
    format: str | None = Form(None),
    pipeline: ProcessingPipeline = Depends(get_pipeline),
):
    """Transcribe and generate outputs in one call.

    Without ``format`` the summary and structured transcript are generated
    together; with it the legacy ``{transcript, output}`` shape is returned.
    """
    payload = await _read_audio(audio)
    kind = _parse_format(format)
    logger.info("Processing recording: format=%s, size=%d bytes", kind, payload.size)

    if kind is None:
        return await pipeline.process_all(payload)
    return await pipeline.process_one(payload, kind)


@router.post("/transcribe", response_model=TranscribeResponse)
async def transcribe(
    audio: UploadFile | None = File(None),
    pipeline: ProcessingPipeline = Depends(get_pipeline),
):
    """Stage 1: audio to validated transcript with timed segments."""
    payload = await _read_audio(audio)
    result = await pipeline.transcribe(payload, verbose=True)
    return TranscribeResponse(transcript=result.text, segments=result.segments)


@router.post(
    "/generate-outputs",
    response_model=GenerateOutputsResponse,
    response_model_exclude_none=True,
)
async def generate_outputs(
    body: GenerateOutputsRequest,
    pipeline: ProcessingPipeline = Depends(get_pipeline),
):
    """Stage 3: transcript to structured outputs (JSON strings)."""
    if body.format is not None:
        output = await pipeline.generate_one(body.format, body.transcript, body.segments)
        return GenerateOutputsResponse(output=output.model_dump_json())

    outputs = await pipeline.generate_all(body.transcript, body.segments)
    return GenerateOutputsResponse(
        summary=outputs.summary.model_dump_json(),
        structured_transcript=outputs.transcript.model_dump_json(),
    )


@router.post("/generate-title", response_model=GenerateTitleResponse)
async def generate_title(
    request: Request,
    pipeline: ProcessingPipeline | None = Depends(get_optional_pipeline),
):
    """Return a short title; falls back to a placeholder instead of erroring."""
    try:
        body = GenerateTitleRequest.model_validate(await request.json())
    except ValueError:
        body = GenerateTitleRequest()

    if not title_source(body.transcript, body.summary):
        return GenerateTitleResponse(title=QUICK_NOTE_TITLE)
    if pipeline is None:
        return GenerateTitleResponse(title=DEFAULT_TITLE)

    title = await pipeline.generate_title(body.transcript, body.summary)
    return GenerateTitleResponse(title=title)
