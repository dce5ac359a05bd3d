import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError


# ─────────────────────────────────────────────
# User context
# ─────────────────────────────────────────────

class UserContext(BaseModel):
    """
    Client-supplied context sent with every request.
    """

    model_config = ConfigDict(extra="ignore")

    userId: Optional[str] = None
    tier: Optional[str] = Field(None, examples=["free", "premium"])
    deviceType: Optional[str] = Field(None, examples=["iOS", "Android"])
    deviceModel: Optional[str] = None
    osVersion: Optional[str] = None


def parse_user_context(raw: Any) -> UserContext:
    """
    Accept a dict (JSON bodies) or a JSON string (multipart forms).
    Anything unreadable yields an empty context, i.e. the free tier.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raw = None

    if not isinstance(raw, dict):
        return UserContext()

    try:
        return UserContext.model_validate(raw)
    except ValidationError:
        return UserContext()


def parse_history(raw: Any) -> List[Dict[str, Any]]:
    """
    Conversation history from a JSON body or a JSON-encoded form field.
    Raises ValueError on malformed input.
    """
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        raw = json.loads(raw)
    if not isinstance(raw, list):
        raise ValueError("history must be a list of messages")
    return raw


# ─────────────────────────────────────────────
# Request Schemas
# ─────────────────────────────────────────────

class ChatRequest(BaseModel):
    message: Optional[str] = Field(None, examples=["How do I connect to WiFi?"])
    # Loosely typed; parse_history and parse_user_context do the checking
    history: Any = None
    userContext: Any = None
    userId: Optional[str] = None


class SafetyRequest(BaseModel):
    content: Optional[str] = Field(
        None,
        examples=["Your bank account is locked. Call this number now to verify."],
    )
