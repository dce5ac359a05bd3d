from typing import Any, Dict


class UsageError(Exception):
    """
    Base exception for usage tracking and quota enforcement.
    """

    status_code = 500

    def to_payload(self) -> Dict[str, Any]:
        return {"error": str(self)}


class QuotaExceededError(UsageError):
    """
    Raised when a user has used up the daily message allowance of their tier.
    """

    status_code = 429

    def __init__(self, limit: int, current: int):
        super().__init__("Daily limit reached")
        self.limit = limit
        self.current = current

    def to_payload(self) -> Dict[str, Any]:
        return {
            "error": str(self),
            "upgradePrompt": True,
            "limit": self.limit,
            "current": self.current,
            "message": (
                f"You've reached your daily limit of {self.limit} messages. "
                "Upgrade to Premium for unlimited conversations!"
            ),
        }


class FeatureNotAvailableError(UsageError):
    """
    Raised when a tier has no access to a feature.
    """

    status_code = 403

    def __init__(self, feature_name: str):
        super().__init__("Premium feature")
        self.feature_name = feature_name

    def to_payload(self) -> Dict[str, Any]:
        return {
            "error": str(self),
            "requiresPremium": True,
            "message": (
                f"{self.feature_name} is a Premium feature. "
                "Upgrade to access this feature!"
            ),
        }


class UsageTrackingError(UsageError):
    """
    Raised when the usage store cannot read or write a record.

    Never surfaced to clients: the quota gate logs it and lets the
    request through.
    """
