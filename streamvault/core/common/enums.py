# File: streamvault/core/common/enums.py

from enum import Enum, unique

@unique
class VideoStatus(str, Enum):
    PROCESSING = "processing"
    PROCESSED = "processed"
    FAILED = "failed"

@unique
class NotificationKind(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    SUCCESS = "success"
    MESSAGE = "message"

@unique
class RequestKind(str, Enum):
    SEGMENT = "segment"
    VARIANT_PLAYLIST = "variant_playlist"
    MASTER_PLAYLIST = "master_playlist"
