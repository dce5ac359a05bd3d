import logging
from datetime import date, datetime, timezone
from threading import Lock
from typing import Callable, Optional

from nora_api.usage.errors import (
    FeatureNotAvailableError,
    QuotaExceededError,
    UsageError,
    UsageTrackingError,
)
from nora_api.usage.pricing import RequestType, request_cost
from nora_api.usage.store import UsageRecord, UsageStore
from nora_api.usage.tiers import Tier, parse_tier, tier_limits

logger = logging.getLogger(__name__)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class QuotaGate:
    """
    Request-time quota check.

    Rejects free-tier requests over the daily message cap or for
    image features, otherwise records one unit of usage and its
    estimated cost. Faults inside the check never block a request.
    """

    def __init__(
        self,
        store: UsageStore,
        *,
        clock: Callable[[], date] = utc_today,
    ):
        self.store = store
        self.clock = clock
        self._lock = Lock()

    # ─────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────

    def check(
        self,
        user_id: str,
        tier,
        request_type: RequestType,
    ) -> Optional[UsageRecord]:
        """
        Gate and record a request.

        Returns the updated record, or None when tracking failed and
        the request was let through.
        """
        try:
            return self._check_and_record(user_id, parse_tier(tier), RequestType(request_type))
        except (QuotaExceededError, FeatureNotAvailableError):
            raise
        except UsageError as exc:
            logger.error("Usage tracking failed for user '%s': %s", user_id, exc)
            return None
        except Exception:
            logger.exception("Usage quota check error for user '%s'", user_id)
            return None

    def today(self, user_id: str) -> UsageRecord:
        try:
            return self.store.get_or_create(user_id, self.clock())
        except UsageError:
            raise
        except Exception as exc:
            raise UsageTrackingError(f"Could not read usage for '{user_id}': {exc}") from exc

    # ─────────────────────────────────────────────
    # Internal helpers
    # ─────────────────────────────────────────────

    def _check_and_record(
        self,
        user_id: str,
        tier: Tier,
        request_type: RequestType,
    ) -> UsageRecord:
        with self._lock:
            record = self.today(user_id)

            if tier is Tier.FREE:
                self._enforce_free_limits(record, request_type)

            self._increment(record, request_type)
            record.total_cost += request_cost(request_type, tier)

            self.store.save(user_id, record)
            return record

    def _enforce_free_limits(
        self,
        record: UsageRecord,
        request_type: RequestType,
    ) -> None:
        limits = tier_limits(Tier.FREE)

        if request_type.is_message:
            cap = limits.max_messages_per_day
            if not cap.allows(record.messages):
                raise QuotaExceededError(limit=cap.to_json(), current=record.messages)

        if request_type.is_image:
            raise FeatureNotAvailableError(request_type.display_name)

    def _increment(
        self,
        record: UsageRecord,
        request_type: RequestType,
    ) -> None:
        if request_type is RequestType.TEXT:
            record.text_messages += 1
        elif request_type is RequestType.VOICE:
            record.voice_messages += 1
        elif request_type is RequestType.SCREENSHOT:
            record.screenshot_analyses += 1
        elif request_type is RequestType.SCAM:
            record.scam_detections += 1
