"""
Usage Module

Daily usage tracking and tier-based quota enforcement.
"""

from nora_api.usage.decorator import UsageDecorator, usage_snapshot
from nora_api.usage.errors import (
    FeatureNotAvailableError,
    QuotaExceededError,
    UsageError,
    UsageTrackingError,
)
from nora_api.usage.gate import QuotaGate, utc_today
from nora_api.usage.pricing import RequestType, UsageCost, request_cost
from nora_api.usage.store import InMemoryUsageStore, UsageRecord, UsageStore
from nora_api.usage.tiers import (
    Limited,
    Tier,
    TierFeatures,
    TierLimits,
    Unlimited,
    parse_tier,
    tier_features,
    tier_limits,
)

__all__ = [
    "UsageDecorator",
    "usage_snapshot",
    "FeatureNotAvailableError",
    "QuotaExceededError",
    "UsageError",
    "UsageTrackingError",
    "QuotaGate",
    "utc_today",
    "RequestType",
    "UsageCost",
    "request_cost",
    "InMemoryUsageStore",
    "UsageRecord",
    "UsageStore",
    "Limited",
    "Tier",
    "TierFeatures",
    "TierLimits",
    "Unlimited",
    "parse_tier",
    "tier_features",
    "tier_limits",
]
