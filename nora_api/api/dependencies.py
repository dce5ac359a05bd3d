import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import Depends, Request, UploadFile

from nora_api.ai.llm_client import LLMClient, build_llm_client
from nora_api.ai.transcriber import Transcriber, build_transcriber
from nora_api.api.errors import ApiError
from nora_api.api.schemas import UserContext, parse_user_context
from nora_api.config import settings
from nora_api.services.assistant_service import AssistantService
from nora_api.services.safety_service import SafetyService
from nora_api.services.vision_service import VisionService
from nora_api.usage import (
    InMemoryUsageStore,
    QuotaGate,
    RequestType,
    Tier,
    UsageDecorator,
    UsageRecord,
    UsageStore,
    parse_tier,
)

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────
# Usage tracking
# ─────────────────────────────────────────────

@lru_cache(maxsize=None)
def get_usage_store() -> UsageStore:
    """
    Process-wide usage store.
    """
    return InMemoryUsageStore(retention_days=settings.USAGE_RETENTION_DAYS)


@lru_cache(maxsize=None)
def get_quota_gate() -> QuotaGate:
    return QuotaGate(get_usage_store())


def get_usage_decorator(gate: QuotaGate = Depends(get_quota_gate)) -> UsageDecorator:
    return UsageDecorator(gate)


# ─────────────────────────────────────────────
# Model provider
# ─────────────────────────────────────────────

@lru_cache(maxsize=None)
def get_llm_client() -> LLMClient:
    return build_llm_client()


@lru_cache(maxsize=None)
def get_transcriber() -> Transcriber:
    return build_transcriber()


def get_assistant_service(
    llm: LLMClient = Depends(get_llm_client),
    transcriber: Transcriber = Depends(get_transcriber),
) -> AssistantService:
    return AssistantService(llm, transcriber)


def get_vision_service(llm: LLMClient = Depends(get_llm_client)) -> VisionService:
    return VisionService(llm)


def get_safety_service(llm: LLMClient = Depends(get_llm_client)) -> SafetyService:
    return SafetyService(llm)


# ─────────────────────────────────────────────
# Requesting user
# ─────────────────────────────────────────────

@dataclass
class RequestUser:
    """
    Who is calling and on which tier.
    """

    user_id: str
    tier: Tier
    context: UserContext


async def get_request_user(request: Request) -> RequestUser:
    """
    Resolve the user from a JSON body or a multipart form.

    The id comes from `userId`, then `userContext.userId`, then
    falls back to "anonymous"; the tier defaults to free.
    """
    body = await _read_body(request)
    context = parse_user_context(body.get("userContext"))

    user_id = body.get("userId") or context.userId or "anonymous"
    return RequestUser(
        user_id=str(user_id),
        tier=parse_tier(context.tier),
        context=context,
    )


@dataclass
class UsageContext:
    """
    Result of the quota gate for one request; decorates the response.
    """

    user: RequestUser
    record: Optional[UsageRecord]
    decorator: UsageDecorator

    @property
    def user_id(self) -> str:
        return self.user.user_id

    @property
    def tier(self) -> Tier:
        return self.user.tier

    def decorate(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self.decorator.decorate(
            payload,
            user_id=self.user.user_id,
            tier=self.user.tier,
        )


def track_usage(request_type: RequestType):
    """
    Dependency factory: run the quota gate for `request_type` before
    the route body. Rejections propagate as UsageError.
    """

    async def dependency(
        user: RequestUser = Depends(get_request_user),
        gate: QuotaGate = Depends(get_quota_gate),
        decorator: UsageDecorator = Depends(get_usage_decorator),
    ) -> UsageContext:
        record = gate.check(user.user_id, user.tier, request_type)
        return UsageContext(user=user, record=record, decorator=decorator)

    return dependency


# ─────────────────────────────────────────────
# Uploads
# ─────────────────────────────────────────────

async def read_upload(upload: UploadFile, max_bytes: Optional[int] = None) -> bytes:
    """
    Read an uploaded file fully, refusing anything over the size cap.
    """
    limit = max_bytes if max_bytes is not None else settings.UPLOAD_MAX_BYTES
    data = await upload.read(limit + 1)
    if len(data) > limit:
        raise ApiError(413, f"File too large (max {limit // (1024 * 1024)}MB)")
    return data


# ─────────────────────────────────────────────
# Internal helpers
# ─────────────────────────────────────────────

async def _read_body(request: Request) -> Dict[str, Any]:
    content_type = request.headers.get("content-type", "")

    try:
        if "application/json" in content_type:
            body = await request.json()
        elif "multipart/form-data" in content_type or "application/x-www-form-urlencoded" in content_type:
            body = dict(await request.form())
        else:
            body = {}
    except ValueError:
        logger.debug("Unreadable request body on %s", request.url.path)
        body = {}

    return body if isinstance(body, dict) else {}
