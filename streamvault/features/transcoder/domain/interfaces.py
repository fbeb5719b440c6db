from abc import ABC, abstractmethod
from pathlib import Path
from .models import EncodeRequest


class IDurationProber(ABC):
    """
    Contract for the prober tool.
    """

    @abstractmethod
    def probe(self, path: Path) -> float:
        """
        Returns the media duration in seconds.

        Raises:
            RuntimeError: If the tool exits non-zero or prints something that isn't a float.
        """
        pass


class IHlsEncoder(ABC):
    """
    Contract for the encoder tool.
    Abstracts away FFmpeg from the orchestration logic.
    """

    @abstractmethod
    def encode(self, request: EncodeRequest) -> None:
        """
        Writes {label}.m3u8 and {label}_NNN.ts into request.output_dir.
        Synchronous and blocking; no timeout.

        Raises:
            EncodeError: If the encoder exits non-zero.
        """
        pass
