import logging
from typing import Any, Dict, Optional

from nora_api.ai.llm_client import LLMClient
from nora_api.ai.prompt_templates.vision import build_scam_messages, build_screenshot_messages
from nora_api.ai.response_parser import assess_scam
from nora_api.config import settings

logger = logging.getLogger(__name__)


class VisionService:
    """
    Image analysis on the vision model: phone screenshots and
    photos of suspicious messages.
    """

    def __init__(self, llm: LLMClient):
        self.llm = llm

    async def analyze_screenshot(
        self,
        *,
        image: bytes,
        mime_type: Optional[str],
        question: Optional[str] = None,
    ) -> Dict[str, Any]:
        logger.info("Analyzing screenshot (%d bytes) for question: %r", len(image), question)

        analysis = await self.llm.complete(
            messages=build_screenshot_messages(
                image=image,
                mime_type=mime_type,
                question=question,
            ),
            model=settings.OPENAI_VISION_MODEL,
            temperature=0.7,
            max_tokens=200,
        )

        return {
            "analysis": analysis
            or "I'm having trouble seeing your screen. Could you try taking another photo?",
            "feature": "screenshot-analysis",
        }

    async def analyze_scam(
        self,
        *,
        image: bytes,
        mime_type: Optional[str],
    ) -> Dict[str, Any]:
        logger.info("Analyzing potential scam (%d bytes)", len(image))

        # Lower temperature for consistent safety verdicts
        analysis = await self.llm.complete(
            messages=build_scam_messages(image=image, mime_type=mime_type),
            model=settings.OPENAI_VISION_MODEL,
            temperature=0.5,
            max_tokens=250,
        )
        analysis = analysis or "I couldn't analyze this image. Please try again."

        return {
            "analysis": analysis,
            **assess_scam(analysis),
            "feature": "scam-detection",
        }
