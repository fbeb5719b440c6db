from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class TranscodeTask:
    """
    "Transcode this upload into every configured rendition."

    Lives only inside the TranscodeQueue. Ownership moves from ingestion
    to exactly one worker on dequeue. Never persisted: a crash loses
    queued and in-flight tasks, and their assets stay in Processing.
    """
    upload_path: Path   # {root}/{hash}: the working directory
    asset_id: int
    source_path: Path   # {root}/{hash}/{original filename}
    content_hash: str
