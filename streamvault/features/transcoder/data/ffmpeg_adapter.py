import subprocess
import logging
from streamvault.core.config.settings import settings
from streamvault.core.common.errors import EncodeError
from ..domain.interfaces import IHlsEncoder
from ..domain.models import EncodeRequest

logger = logging.getLogger(__name__)


class FFmpegHlsEncoder(IHlsEncoder):
    """
    Concrete implementation of IHlsEncoder using FFmpeg's HLS muxer.
    One call produces one variant playlist and its numbered segments.
    """

    def __init__(self, binary: str = None):
        self.binary = binary or settings.FFMPEG_BINARY

    def build_command(self, request: EncodeRequest) -> list:
        # -profile:v baseline -level 3.0: widest player compatibility
        # -start_number 0: first segment is {label}_000.ts
        # -hls_list_size 0: keep every segment in the playlist (VOD)
        return [
            self.binary,
            "-i", str(request.source),
            "-profile:v", "baseline",
            "-level", "3.0",
            "-s", request.resolution.size,
            "-start_number", "0",
            "-hls_time", str(request.segment_seconds),
            "-hls_list_size", "0",
            "-f", "hls",
            "-hls_segment_filename", str(request.segment_template),
            str(request.playlist_path)
        ]

    def encode(self, request: EncodeRequest) -> None:
        request.output_dir.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(request)

        logger.info(f"Executing FFmpeg HLS [{request.resolution.label}]: {' '.join(cmd)}")

        try:
            subprocess.run(
                cmd,
                check=True,
                capture_output=True,
                text=True
            )
        except subprocess.CalledProcessError as e:
            error_message = e.stderr if e.stderr else "Unknown FFmpeg error"
            logger.error(f"FFmpeg HLS encode failed for {request.resolution.label}. STDERR: {error_message}")
            raise EncodeError(
                "FFmpegHlsEncoder.encode",
                f"failed to transcode video for resolution {request.resolution.label}",
                label=request.resolution.label
            ) from e
        except OSError as e:
            raise EncodeError(
                "FFmpegHlsEncoder.encode",
                f"could not start encoder: {e}",
                label=request.resolution.label
            ) from e
