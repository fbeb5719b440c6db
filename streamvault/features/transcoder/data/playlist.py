import logging
from pathlib import Path
from typing import List, Optional

from streamvault.features.content_store.domain.models import RenditionLayout
from ..domain.models import Resolution, RenditionEntry

logger = logging.getLogger(__name__)

# The renditions every master playlist advertises in "fixed" mode,
# whether or not they were configured and encoded.
FIXED_RENDITIONS: List[RenditionEntry] = [
    RenditionEntry(label="360", size="640x360", bandwidth=800000),
    RenditionEntry(label="480", size="854x480", bandwidth=1400000),
    RenditionEntry(label="720", size="1280x720", bandwidth=2800000),
    RenditionEntry(label="1080", size="1920x1080", bandwidth=5000000),
]

NOMINAL_BANDWIDTH = {entry.size: entry.bandwidth for entry in FIXED_RENDITIONS}
DEFAULT_BANDWIDTH = 1400000


class MasterPlaylistWriter:
    """
    Writes {hash}/playlist.m3u8.

    mode="fixed":      the four FIXED_RENDITIONS at nominal bandwidth.
    mode="configured": one entry per encoded resolution, bandwidth measured
                       from the produced segments.
    """

    MODES = ("fixed", "configured")

    def __init__(self, mode: str = "fixed"):
        if mode not in self.MODES:
            raise ValueError(f"Unknown MASTER_PLAYLIST_MODE: {mode}")
        self.mode = mode

    def build_entries(self, output_dir: Path, encoded: List[Resolution], duration: float) -> List[RenditionEntry]:
        if self.mode == "fixed":
            return list(FIXED_RENDITIONS)

        return [
            RenditionEntry(
                label=res.label,
                size=res.size,
                bandwidth=self._measure_bandwidth(output_dir, res, duration)
            )
            for res in encoded
        ]

    def render(self, layout: RenditionLayout, entries: List[RenditionEntry]) -> str:
        lines = ["#EXTM3U", "#EXT-X-VERSION:3"]
        for entry in entries:
            lines.append(f"#EXT-X-STREAM-INF:BANDWIDTH={entry.bandwidth},RESOLUTION={entry.size}")
            lines.append(layout.master_entry(entry.label))
        return "\n".join(lines) + "\n"

    def write(self, output_dir: Path, content_hash: str, encoded: List[Resolution],
              duration: Optional[float] = None) -> Path:
        layout = RenditionLayout(content_hash)
        entries = self.build_entries(output_dir, encoded, duration or 0.0)

        target = Path(output_dir) / layout.master_playlist
        target.write_text(self.render(layout, entries))

        logger.info(f"Master playlist written ({self.mode}, {len(entries)} renditions): {target}")
        return target

    @staticmethod
    def _measure_bandwidth(output_dir: Path, res: Resolution, duration: float) -> int:
        if duration <= 0:
            return NOMINAL_BANDWIDTH.get(res.size, DEFAULT_BANDWIDTH)

        total_bytes = sum(p.stat().st_size for p in Path(output_dir).glob(f"{res.label}_*.ts"))
        if total_bytes == 0:
            return NOMINAL_BANDWIDTH.get(res.size, DEFAULT_BANDWIDTH)

        return int(total_bytes * 8 / duration)
