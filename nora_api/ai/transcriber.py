import logging
from typing import Optional

from openai import AsyncOpenAI, OpenAIError, RateLimitError

from nora_api.ai.llm_client import LLMRateLimitError
from nora_api.config import settings

logger = logging.getLogger(__name__)


class TranscriptionError(Exception):
    """Raised when audio cannot be transcribed."""


class Transcriber:
    """
    Speech-to-text through the OpenAI Whisper API.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ):
        try:
            self.client = AsyncOpenAI(api_key=api_key or settings.OPENAI_API_KEY)
        except OpenAIError as exc:
            raise TranscriptionError(str(exc)) from exc
        self.model = model or settings.OPENAI_TRANSCRIPTION_MODEL

    async def transcribe(
        self,
        audio_bytes: bytes,
        *,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
        language: str = "en",
    ) -> str:
        """
        Transcribe an uploaded audio clip.
        """
        if not audio_bytes:
            raise TranscriptionError("Uploaded audio file is empty")

        logger.info(
            "Calling Whisper: %d bytes, filename=%s, type=%s",
            len(audio_bytes),
            filename,
            content_type,
        )

        try:
            # OpenAI accepts a (filename, content, content_type) tuple
            transcription = await self.client.audio.transcriptions.create(
                model=self.model,
                file=(
                    filename or "audio.m4a",
                    audio_bytes,
                    content_type or "audio/m4a",
                ),
                language=language,
            )
        except RateLimitError as exc:
            raise LLMRateLimitError(
                "OpenAI rate limit exceeded",
                retry_after=exc.response.headers.get("retry-after"),
            ) from exc
        except OpenAIError as exc:
            logger.error("Transcription failed: %s", exc)
            raise TranscriptionError(str(exc)) from exc

        text = (transcription.text or "").strip()
        logger.info("Transcription complete (%d chars)", len(text))
        return text


class DevelopmentTranscriber(Transcriber):
    """
    Fixed transcription for local work without an OpenAI key.
    """

    PHRASE = "How do I make the text on my phone bigger?"

    def __init__(self, **kwargs):
        self.client = None
        self.model = settings.OPENAI_TRANSCRIPTION_MODEL

    async def transcribe(self, audio_bytes: bytes, **kwargs) -> str:
        if not audio_bytes:
            raise TranscriptionError("Uploaded audio file is empty")
        return self.PHRASE


def build_transcriber() -> Transcriber:
    if not settings.OPENAI_API_KEY and settings.is_development:
        logger.warning("OPENAI_API_KEY is not set - using a development mock for Whisper.")
        return DevelopmentTranscriber()
    return Transcriber()
