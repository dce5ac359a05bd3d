import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from nora_api.ai.llm_client import LLMClientError, LLMRateLimitError
from nora_api.ai.transcriber import TranscriptionError
from nora_api.api.dependencies import (
    UsageContext,
    get_assistant_service,
    read_upload,
    track_usage,
)
from nora_api.api.errors import ApiError
from nora_api.api.schemas import parse_history
from nora_api.services.assistant_service import AssistantService
from nora_api.usage import RequestType

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/transcribe-voice", summary="Transcribe a voice message and reply")
async def transcribe_voice(
    usage: UsageContext = Depends(track_usage(RequestType.VOICE)),
    audio: Optional[UploadFile] = File(None),
    history: Optional[str] = Form(None),
    assistant: AssistantService = Depends(get_assistant_service),
):
    """
    Handle voice input: Whisper STT -> chat model -> text reply.
    Counts as one voice message against the daily quota.
    """
    if audio is None:
        raise ApiError(400, "Audio file is required")

    audio_bytes = await read_upload(audio)
    logger.info(
        "Audio file uploaded: %s (%s, %d bytes)",
        audio.filename,
        audio.content_type,
        len(audio_bytes),
    )
    if not audio_bytes:
        raise ApiError(400, "Uploaded audio file is empty")

    try:
        parsed_history = parse_history(history)
    except ValueError:
        raise ApiError(400, "History must be a JSON list of messages")

    try:
        answer = await assistant.reply_to_voice(
            audio_bytes=audio_bytes,
            filename=audio.filename,
            content_type=audio.content_type,
            tier=usage.tier,
            history=parsed_history,
            device_type=usage.user.context.deviceType,
        )
    except LLMRateLimitError:
        raise
    except (LLMClientError, TranscriptionError) as exc:
        logger.error("Error in voice endpoint: %s", exc)
        raise ApiError(500, "Sorry, I'm having trouble right now. Please try again in a moment.")

    return usage.decorate(answer)
