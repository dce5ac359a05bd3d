import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import date, timedelta
from threading import Lock
from typing import Any, Dict, Optional

from nora_api.usage.errors import UsageTrackingError

logger = logging.getLogger(__name__)


@dataclass
class UsageRecord:
    """
    One user's consumption for one calendar day.
    """

    date: date
    text_messages: int = 0
    voice_messages: int = 0
    screenshot_analyses: int = 0
    scam_detections: int = 0
    total_cost: float = 0.0

    @property
    def messages(self) -> int:
        """Text and voice messages combined; the quantity the daily cap applies to."""
        return self.text_messages + self.voice_messages

    def counters(self) -> tuple:
        return (
            self.text_messages,
            self.voice_messages,
            self.screenshot_analyses,
            self.scam_detections,
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "textMessages": self.text_messages,
            "voiceMessages": self.voice_messages,
            "screenshotAnalysis": self.screenshot_analyses,
            "scamDetections": self.scam_detections,
            "totalCost": self.total_cost,
        }


def usage_key(user_id: str, day: date) -> str:
    return f"{user_id}:{day.isoformat()}"


class UsageStore(ABC):
    """
    Key-value storage for usage records, keyed by (user_id, day).

    Implementations only provide `get` and `put`; the quota gate
    works against `get_or_create` and `save`.
    """

    @abstractmethod
    def get(self, user_id: str, day: date) -> Optional[UsageRecord]:
        ...

    @abstractmethod
    def put(self, user_id: str, record: UsageRecord) -> None:
        ...

    # ─────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────

    def get_or_create(self, user_id: str, day: date) -> UsageRecord:
        record = self.get(user_id, day)
        if record is None:
            record = UsageRecord(date=day)
            self.put(user_id, record)
        return record

    def save(self, user_id: str, record: UsageRecord) -> None:
        """
        Replace the stored record for (user_id, record.date).

        Counters within a day only grow; a record that would move
        any of them backwards is refused.
        """
        existing = self.get(user_id, record.date)
        if existing is not None and _is_regression(existing, record):
            raise UsageTrackingError(
                f"Refusing to overwrite usage for '{usage_key(user_id, record.date)}' "
                "with lower counters"
            )
        self.put(user_id, record)


class InMemoryUsageStore(UsageStore):
    """
    Process-lifetime usage store.

    Records older than `retention_days` are dropped the first time
    a later day is seen. Pass `retention_days=None` to keep everything.
    """

    def __init__(self, retention_days: Optional[int] = 7):
        self.retention_days = retention_days
        self._records: Dict[str, UsageRecord] = {}
        self._latest_day: Optional[date] = None
        self._lock = Lock()

    def get(self, user_id: str, day: date) -> Optional[UsageRecord]:
        with self._lock:
            self._observe_day(day)
            record = self._records.get(usage_key(user_id, day))
            # Hand out copies so callers must go through save().
            return replace(record) if record is not None else None

    def put(self, user_id: str, record: UsageRecord) -> None:
        with self._lock:
            self._observe_day(record.date)
            self._records[usage_key(user_id, record.date)] = replace(record)

    def prune(self, before: date) -> int:
        """
        Drop every record dated strictly before `before`.
        Returns the number of records removed.
        """
        with self._lock:
            return self._prune(before)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    # ─────────────────────────────────────────────
    # Internal helpers
    # ─────────────────────────────────────────────

    def _observe_day(self, day: date) -> None:
        if self._latest_day is not None and day <= self._latest_day:
            return
        self._latest_day = day
        if self.retention_days is not None:
            removed = self._prune(day - timedelta(days=self.retention_days))
            if removed:
                logger.info("Pruned %d usage records older than %d days", removed, self.retention_days)

    def _prune(self, before: date) -> int:
        stale = [key for key, record in self._records.items() if record.date < before]
        for key in stale:
            del self._records[key]
        return len(stale)


def _is_regression(existing: UsageRecord, updated: UsageRecord) -> bool:
    if updated.total_cost < existing.total_cost:
        return True
    return any(new < old for new, old in zip(updated.counters(), existing.counters()))
