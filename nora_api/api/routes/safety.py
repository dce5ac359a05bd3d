import logging

from fastapi import APIRouter, Depends

from nora_api.ai.llm_client import LLMClientError, LLMRateLimitError
from nora_api.api.dependencies import get_safety_service
from nora_api.api.errors import ApiError
from nora_api.api.schemas import SafetyRequest
from nora_api.services.safety_service import SafetyService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/analyze-safety", summary="Check a message, call or email for scams")
async def analyze_safety(
    payload: SafetyRequest,
    safety: SafetyService = Depends(get_safety_service),
):
    if not payload.content:
        raise ApiError(400, "Content is required")

    try:
        return await safety.analyze(payload.content)
    except LLMRateLimitError:
        raise
    except LLMClientError as exc:
        logger.error("Error in safety analysis: %s", exc)
        raise ApiError(500, "Failed to analyze safety")
