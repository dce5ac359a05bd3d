import logging

from fastapi import APIRouter, Depends

from nora_api.ai.llm_client import LLMClientError, LLMRateLimitError
from nora_api.api.dependencies import UsageContext, get_assistant_service, track_usage
from nora_api.api.errors import ApiError
from nora_api.api.schemas import ChatRequest, parse_history
from nora_api.services.assistant_service import AssistantService
from nora_api.usage import RequestType

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/chat", summary="Send a chat message to Nora")
async def chat(
    payload: ChatRequest,
    usage: UsageContext = Depends(track_usage(RequestType.TEXT)),
    assistant: AssistantService = Depends(get_assistant_service),
):
    """
    Main chat endpoint. Counts as one text message against the daily quota.
    """
    if not payload.message:
        raise ApiError(400, "Message is required")

    try:
        history = parse_history(payload.history)
    except ValueError:
        raise ApiError(400, "History must be a JSON list of messages")

    try:
        answer = await assistant.reply(
            message=payload.message,
            tier=usage.tier,
            history=history,
            device_type=usage.user.context.deviceType,
        )
    except LLMRateLimitError:
        raise
    except LLMClientError as exc:
        logger.error("Error in chat endpoint: %s", exc)
        raise ApiError(500, "Sorry, I'm having trouble right now. Please try again in a moment.")

    return usage.decorate(answer)
