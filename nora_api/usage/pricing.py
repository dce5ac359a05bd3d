from enum import Enum

from nora_api.usage.tiers import Tier


class RequestType(str, Enum):
    TEXT = "text"
    VOICE = "voice"
    SCREENSHOT = "screenshot"
    SCAM = "scam"

    @property
    def is_message(self) -> bool:
        return self in (RequestType.TEXT, RequestType.VOICE)

    @property
    def is_image(self) -> bool:
        return self in (RequestType.SCREENSHOT, RequestType.SCAM)

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    RequestType.TEXT: "Chat",
    RequestType.VOICE: "Voice Chat",
    RequestType.SCREENSHOT: "Screenshot Analysis",
    RequestType.SCAM: "Scam Detection",
}


class UsageCost:
    """
    Estimated provider cost per request, in GBP.
    """

    # Text on the basic chat model (free tier)
    BASIC_TEXT = 0.008

    # Text on the advanced chat model
    ADVANCED_TEXT = 0.025

    # Whisper transcription
    VOICE_TRANSCRIPTION = 0.031

    # Vision model, shared by screenshot and scam analysis
    VISION = 0.045


def request_cost(request_type: RequestType, tier: Tier) -> float:
    if request_type is RequestType.TEXT:
        if tier is Tier.FREE:
            return UsageCost.BASIC_TEXT
        return UsageCost.ADVANCED_TEXT
    if request_type is RequestType.VOICE:
        return UsageCost.VOICE_TRANSCRIPTION
    return UsageCost.VISION
