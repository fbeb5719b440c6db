import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, Float, DateTime, Text, Uuid, Enum as SQLEnum
from streamvault.core.database.base import Base
from streamvault.core.common.enums import VideoStatus

def utc_now():
    return datetime.now(timezone.utc)

class VideoModel(Base):
    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uuid = Column(Uuid(as_uuid=True), nullable=False, unique=True, index=True, default=uuid.uuid4)

    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")

    # Storage directory key. Assigned once at ingestion, never rewritten.
    hash_name = Column(String, nullable=False, index=True)

    status = Column(SQLEnum(VideoStatus), nullable=False, default=VideoStatus.PROCESSING, index=True)
    duration = Column(Float, nullable=False, default=0.0)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    # Soft delete ("disabled"): orthogonal to status
    deleted_at = Column(DateTime(timezone=True), nullable=True)
