from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


UNLIMITED = "unlimited"


class Tier(str, Enum):
    FREE = "free"
    PREMIUM = "premium"
    FAMILY = "family"


# ─────────────────────────────────────────────
# Limits
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class Limited:
    """
    A finite daily cap. A maximum of 0 means the feature is unavailable.
    """

    maximum: int

    def allows(self, used: int) -> bool:
        return used < self.maximum

    def remaining(self, used: int) -> int:
        return max(0, self.maximum - used)

    def to_json(self) -> int:
        return self.maximum


@dataclass(frozen=True)
class Unlimited:
    def allows(self, used: int) -> bool:
        return True

    def remaining(self, used: int) -> str:
        return UNLIMITED

    def to_json(self) -> str:
        return UNLIMITED


Limit = Union[Limited, Unlimited]


@dataclass(frozen=True)
class TierLimits:
    max_messages_per_day: Limit
    max_image_analysis_per_day: Limit


@dataclass(frozen=True)
class TierFeatures:
    use_advanced_model: bool
    screenshot_analysis: bool
    scam_detection: bool
    emergency_features: bool
    quick_actions: bool
    family_portal: bool
    limits: TierLimits


# ─────────────────────────────────────────────
# Policy tables
# ─────────────────────────────────────────────

TIER_LIMITS = {
    Tier.FREE: TierLimits(
        max_messages_per_day=Limited(20),
        max_image_analysis_per_day=Limited(0),
    ),
    # Premium carries a soft limit of 500 messages/month, not enforced here.
    Tier.PREMIUM: TierLimits(
        max_messages_per_day=Unlimited(),
        max_image_analysis_per_day=Unlimited(),
    ),
    Tier.FAMILY: TierLimits(
        max_messages_per_day=Unlimited(),
        max_image_analysis_per_day=Unlimited(),
    ),
}

# Family has quota entries but no feature set of its own; it resolves to free.
_FEATURE_FLAGS = {
    Tier.PREMIUM: dict(
        use_advanced_model=True,
        screenshot_analysis=True,
        scam_detection=True,
        emergency_features=True,
        quick_actions=True,
        family_portal=True,
    ),
    Tier.FREE: dict(
        use_advanced_model=False,
        screenshot_analysis=False,
        scam_detection=False,
        emergency_features=False,
        quick_actions=False,
        family_portal=False,
    ),
}


# ─────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────

def parse_tier(value: Any) -> Tier:
    """
    Resolve a raw tier value from a request. Missing or unknown
    values fall back to the free tier.
    """
    if isinstance(value, Tier):
        return value
    if isinstance(value, str):
        try:
            return Tier(value.strip().lower())
        except ValueError:
            pass
    return Tier.FREE


def tier_limits(tier: Any) -> TierLimits:
    return TIER_LIMITS[parse_tier(tier)]


def tier_features(tier: Any) -> TierFeatures:
    resolved = parse_tier(tier)
    flags = _FEATURE_FLAGS.get(resolved, _FEATURE_FLAGS[Tier.FREE])
    return TierFeatures(limits=tier_limits(resolved), **flags)
