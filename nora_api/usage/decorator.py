import logging
from typing import Any, Dict

from nora_api.usage.gate import QuotaGate
from nora_api.usage.store import UsageRecord
from nora_api.usage.tiers import tier_limits

logger = logging.getLogger(__name__)


def usage_snapshot(record: UsageRecord, tier) -> Dict[str, Any]:
    """
    Build the `usage` block for a record under a tier's limits.
    """
    cap = tier_limits(tier).max_messages_per_day
    messages = record.messages

    return {
        "today": {
            "messages": messages,
            "limit": cap.to_json(),
            "remaining": cap.remaining(messages),
        },
        "cost": f"{record.total_cost:.4f}",
    }


class UsageDecorator:
    """
    Appends today's usage to outgoing payloads.
    """

    def __init__(self, gate: QuotaGate):
        self.gate = gate

    def decorate(
        self,
        payload: Dict[str, Any],
        *,
        user_id: str,
        tier,
    ) -> Dict[str, Any]:
        try:
            record = self.gate.today(user_id)
            usage = usage_snapshot(record, tier)
        except Exception:
            logger.exception("Could not attach usage stats for user '%s'", user_id)
            return dict(payload)

        return {**payload, "usage": usage}
