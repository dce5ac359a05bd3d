from fastapi import APIRouter, Depends, Query

from nora_api.api.dependencies import get_quota_gate
from nora_api.usage import QuotaGate, parse_tier, usage_snapshot

router = APIRouter()


@router.get("/usage/{user_id}", summary="Today's usage for a user")
async def get_user_usage(
    user_id: str,
    tier: str = Query("free", description="Tier used to compute the limit"),
    gate: QuotaGate = Depends(get_quota_gate),
):
    """
    Inspect today's counters and remaining allowance without
    consuming any quota.
    """
    resolved = parse_tier(tier)
    record = gate.today(user_id)

    return {
        "userId": user_id,
        "tier": resolved.value,
        **record.to_json(),
        "usage": usage_snapshot(record, resolved),
    }
