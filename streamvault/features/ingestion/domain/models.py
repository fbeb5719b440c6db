from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO


@dataclass(frozen=True)
class UploadMetadata:
    """Display fields supplied by the uploader."""
    name: str
    description: str = ""


@dataclass(frozen=True)
class UploadRequest:
    """
    One inbound upload as handed over by the HTTP layer.
    `size_bytes` is the declared size and takes part in the content hash.
    """
    stream: BinaryIO
    original_filename: str
    size_bytes: int
    metadata: UploadMetadata

    def __post_init__(self):
        name = Path(self.original_filename).name
        if not name or name in {".", ".."}:
            raise ValueError(f"Invalid upload filename: {self.original_filename!r}")
        if self.size_bytes < 0:
            raise ValueError(f"Upload size cannot be negative: {self.size_bytes}")
