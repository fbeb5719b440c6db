import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, Boolean, DateTime, Uuid, Enum as SQLEnum
from streamvault.core.database.base import Base
from streamvault.core.common.enums import NotificationKind

def utc_now():
    return datetime.now(timezone.utc)

class NotificationModel(Base):
    __tablename__ = "notifications"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Plain integer, not a FK: notifications outlive hard-deleted videos
    video_id = Column(Integer, nullable=False, index=True)

    name = Column(String, nullable=False)
    body = Column(String, nullable=False)
    kind = Column(SQLEnum(NotificationKind), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
