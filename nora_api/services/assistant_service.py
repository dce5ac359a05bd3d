import logging
from typing import Any, Dict, List, Optional

from nora_api.ai.llm_client import LLMClient
from nora_api.ai.prompt_templates.chat import build_chat_messages
from nora_api.ai.response_parser import analyze_response
from nora_api.ai.transcriber import Transcriber
from nora_api.config import settings
from nora_api.usage.tiers import Tier, tier_features

logger = logging.getLogger(__name__)


FALLBACK_REPLY = "I'm having trouble understanding. Could you try again?"


class AssistantService:
    """
    Conversational help for elderly users.

    Flow:
    (audio → text) → tier model → reply + render hints
    """

    # Keep replies short (2-3 sentences) and conversational
    TEMPERATURE = 0.8
    MAX_TOKENS = 150

    def __init__(self, llm: LLMClient, transcriber: Optional[Transcriber] = None):
        self.llm = llm
        self.transcriber = transcriber

    # ─────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────

    async def reply(
        self,
        *,
        message: str,
        tier: Tier,
        history: Optional[List[Dict[str, Any]]] = None,
        device_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Answer a text message.
        """
        messages = build_chat_messages(
            message=message,
            history=history,
            device_type=device_type,
        )

        raw = await self.llm.complete(
            messages=messages,
            model=self.model_for(tier),
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )
        text = raw or FALLBACK_REPLY

        return {"response": text, **analyze_response(text)}

    async def reply_to_voice(
        self,
        *,
        audio_bytes: bytes,
        tier: Tier,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
        history: Optional[List[Dict[str, Any]]] = None,
        device_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Transcribe a voice message, then answer it like a text message.
        """
        if self.transcriber is None:
            raise RuntimeError("AssistantService has no transcriber configured")

        transcription = await self.transcriber.transcribe(
            audio_bytes,
            filename=filename,
            content_type=content_type,
        )

        answer = await self.reply(
            message=transcription,
            tier=tier,
            history=history,
            device_type=device_type,
        )

        return {"transcription": transcription, **answer}

    def model_for(self, tier: Tier) -> str:
        if tier_features(tier).use_advanced_model:
            return settings.OPENAI_ADVANCED_MODEL
        return settings.OPENAI_MODEL
