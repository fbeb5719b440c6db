from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from streamvault.core.common.enums import NotificationKind


@dataclass(frozen=True)
class NotificationEvent:
    kind: NotificationKind
    asset_id: int
    message: str
    name: str = "Upload Status"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def upload_succeeded(cls, asset_id: int) -> "NotificationEvent":
        return cls(NotificationKind.SUCCESS, asset_id, "The upload was successful.")

    @classmethod
    def upload_failed(cls, asset_id: int) -> "NotificationEvent":
        return cls(NotificationKind.ERROR, asset_id, "The upload has failed.")


@dataclass
class DeliveryResult:
    """Outcome of one dispatched notification."""
    event: NotificationEvent
    delivered: bool
    error: Optional[str] = None
