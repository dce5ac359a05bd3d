import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from nora_api.ai.llm_client import LLMClientError, LLMRateLimitError
from nora_api.api.dependencies import (
    UsageContext,
    get_vision_service,
    read_upload,
    track_usage,
)
from nora_api.api.errors import ApiError
from nora_api.services.vision_service import VisionService
from nora_api.usage import FeatureNotAvailableError, RequestType, tier_features

logger = logging.getLogger(__name__)

router = APIRouter()


# ─────────────────────────────────────────────
# Screenshot analysis (premium)
# ─────────────────────────────────────────────

@router.post("/analyze-screenshot", summary="Explain a phone screenshot")
async def analyze_screenshot(
    usage: UsageContext = Depends(track_usage(RequestType.SCREENSHOT)),
    image: Optional[UploadFile] = File(None),
    question: Optional[str] = Form(None),
    vision: VisionService = Depends(get_vision_service),
):
    """
    Tell the user what is on their screen and the one thing to do next.
    """
    if not tier_features(usage.tier).screenshot_analysis:
        raise FeatureNotAvailableError(RequestType.SCREENSHOT.display_name)

    if image is None:
        raise ApiError(400, "Screenshot image is required")

    image_bytes = await read_upload(image)

    try:
        result = await vision.analyze_screenshot(
            image=image_bytes,
            mime_type=image.content_type,
            question=question,
        )
    except LLMRateLimitError:
        raise
    except LLMClientError as exc:
        logger.error("Error in screenshot analysis: %s", exc)
        raise ApiError(500, "Sorry, I had trouble analyzing your screenshot. Please try again.")

    return usage.decorate(result)


# ─────────────────────────────────────────────
# Scam detection (premium)
# ─────────────────────────────────────────────

@router.post("/analyze-scam", summary="Check a photo of a suspicious message")
async def analyze_scam(
    usage: UsageContext = Depends(track_usage(RequestType.SCAM)),
    image: Optional[UploadFile] = File(None),
    vision: VisionService = Depends(get_vision_service),
):
    """
    Judge whether a photographed message or email is a scam.
    """
    if not tier_features(usage.tier).scam_detection:
        raise FeatureNotAvailableError(RequestType.SCAM.display_name)

    if image is None:
        raise ApiError(400, "Image is required")

    image_bytes = await read_upload(image)

    try:
        result = await vision.analyze_scam(
            image=image_bytes,
            mime_type=image.content_type,
        )
    except LLMRateLimitError:
        raise
    except LLMClientError as exc:
        logger.error("Error in scam analysis: %s", exc)
        raise ApiError(500, "Sorry, I had trouble analyzing this image. Please try again.")

    return usage.decorate(result)
