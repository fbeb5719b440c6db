from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from streamvault.core.common.enums import VideoStatus

# Allowed moves within one ingestion attempt. There is no way back to PROCESSING.
ALLOWED_TRANSITIONS = {
    VideoStatus.PROCESSING: {VideoStatus.PROCESSED, VideoStatus.FAILED},
    VideoStatus.PROCESSED: set(),
    VideoStatus.FAILED: set(),
}


def can_transition(current: VideoStatus, target: VideoStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


@dataclass
class VideoAsset:
    """
    One uploaded video and where it is in its lifecycle.
    """
    name: str
    content_hash: str
    description: str = ""
    status: VideoStatus = VideoStatus.PROCESSING
    duration: float = 0.0
    id: Optional[int] = None
    uuid: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def disabled(self) -> bool:
        return self.deleted_at is not None

    @property
    def playable(self) -> bool:
        return self.status == VideoStatus.PROCESSED and not self.disabled

    def to_dict(self) -> dict:
        return {
            "uuid": str(self.uuid) if self.uuid else None,
            "name": self.name,
            "description": self.description,
            "status": self.status.value,
            "duration": self.duration,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
