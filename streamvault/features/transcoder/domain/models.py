from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from streamvault.core.common.enums import VideoStatus
from streamvault.features.content_store.domain.models import RenditionLayout


@dataclass(frozen=True)
class Resolution:
    """
    One configured rendition target, e.g. Resolution("854x480", "480").
    """
    size: str
    label: str

    def __post_init__(self):
        width, x, height = self.size.partition("x")
        if not x or not width.isdigit() or not height.isdigit():
            raise ValueError(f"Resolution must be WIDTHxHEIGHT, got {self.size!r}")

    @property
    def width(self) -> int:
        return int(self.size.split("x")[0])

    @property
    def height(self) -> int:
        return int(self.size.split("x")[1])


def parse_resolutions(mapping: Dict[str, str]) -> List[Resolution]:
    """Converts the configured {"WIDTHxHEIGHT": label} map, keeping its order."""
    return [Resolution(size=size, label=label) for size, label in mapping.items()]


def sorted_by_height(resolutions: List[Resolution]) -> List[Resolution]:
    return sorted(resolutions, key=lambda r: r.height)


@dataclass(frozen=True)
class EncodeRequest:
    source: Path
    output_dir: Path
    resolution: Resolution
    segment_seconds: int = 10

    @property
    def layout(self) -> RenditionLayout:
        # output_dir is {root}/{content_hash}
        return RenditionLayout(self.output_dir.name)

    @property
    def playlist_path(self) -> Path:
        return self.output_dir / self.layout.variant_playlist(self.resolution.label)

    @property
    def segment_template(self) -> Path:
        return self.output_dir / self.layout.segment_pattern(self.resolution.label)


@dataclass(frozen=True)
class RenditionEntry:
    """One line pair of a master playlist."""
    label: str
    size: str
    bandwidth: int


@dataclass
class TranscodeOutcome:
    """
    What a worker learned from running one task.
    """
    asset_id: int
    status: VideoStatus
    encoded_labels: List[str]
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == VideoStatus.PROCESSED
