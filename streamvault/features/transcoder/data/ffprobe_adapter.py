import subprocess
import logging
from pathlib import Path
from streamvault.core.config.settings import settings
from ..domain.interfaces import IDurationProber

logger = logging.getLogger(__name__)


class FFprobeDurationProber(IDurationProber):
    """
    Reads format=duration with ffprobe. Exit 0 plus a float on stdout is the only success.
    """

    def __init__(self, binary: str = None):
        self.binary = binary or settings.FFPROBE_BINARY

    def probe(self, path: Path) -> float:
        cmd = [
            self.binary,
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(path)
        ]

        logger.info(f"Probing duration: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                check=True,
                capture_output=True,
                text=True
            )
        except (subprocess.CalledProcessError, OSError) as e:
            error_message = getattr(e, "stderr", None) or str(e)
            logger.error(f"ffprobe failed for {path}: {error_message}")
            raise RuntimeError(f"Duration probe failed: {error_message}") from e

        raw = result.stdout.strip()
        try:
            return float(raw)
        except ValueError as e:
            raise RuntimeError(f"ffprobe returned a non-numeric duration: {raw!r}") from e
