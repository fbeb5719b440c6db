# File: streamvault/core/config/settings.py

import os
import shutil
from pathlib import Path
from typing import Dict


def parse_resolution_map(raw: str) -> Dict[str, str]:
    """
    Parses "640x360:360,854x480:480" into {"640x360": "360", "854x480": "480"}.
    Insertion order of the env string is preserved.
    """
    resolutions: Dict[str, str] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        size, sep, label = entry.partition(":")
        if not sep or not label.strip():
            raise ValueError(f"Invalid resolution entry (expected WIDTHxHEIGHT:label): {entry!r}")
        width, x, height = size.strip().partition("x")
        if not x or not width.isdigit() or not height.isdigit():
            raise ValueError(f"Invalid resolution size: {size!r}")
        resolutions[size.strip()] = label.strip()
    return resolutions


class Settings:
    # --- Paths ---
    # streamvault/core/config/settings.py -> config -> core -> streamvault -> ROOT
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent.parent
    STORAGE_PATH: Path = Path(os.getenv("STORAGE_PATH", str(BASE_DIR / "storage")))
    VIDEO_PATH: str = os.getenv("VIDEO_PATH", "videos")

    # --- Database ---
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "postgres")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "password")
    POSTGRES_SERVER: str = os.getenv("POSTGRES_SERVER", "localhost")
    POSTGRES_PORT: str = os.getenv("POSTGRES_PORT", "5432")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "streamvault_db")

    @property
    def DATABASE_URL(self) -> str:
        explicit = os.getenv("DATABASE_URL")
        if explicit:
            return explicit

        if os.getenv("USE_SQLITE", "false").lower() == "true":
            return "sqlite:///./streamvault.db"

        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # --- Transcode Pipeline ---
    TRANSCODE_WORKER_COUNT: int = int(os.getenv("TRANSCODE_WORKER_COUNT", "1"))
    TRANSCODE_QUEUE_CAPACITY: int = int(os.getenv("TRANSCODE_QUEUE_CAPACITY", "50"))
    HLS_SEGMENT_SECONDS: int = int(os.getenv("HLS_SEGMENT_SECONDS", "10"))
    RESOLUTIONS: Dict[str, str] = parse_resolution_map(
        os.getenv("RESOLUTIONS", "640x360:360,854x480:480,1280x720:720,1920x1080:1080")
    )

    # "metadata" hashes filename+size, "digest" hashes the uploaded bytes
    CONTENT_HASH_MODE: str = os.getenv("CONTENT_HASH_MODE", "metadata")
    # "fixed" always lists 360/480/720/1080, "configured" lists what was encoded
    MASTER_PLAYLIST_MODE: str = os.getenv("MASTER_PLAYLIST_MODE", "fixed")

    # --- External Tools ---
    FFMPEG_BINARY: str = os.getenv("FFMPEG_BINARY_PATH", shutil.which("ffmpeg") or "ffmpeg")
    FFPROBE_BINARY: str = os.getenv("FFPROBE_BINARY_PATH", shutil.which("ffprobe") or "ffprobe")

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def video_root(self) -> Path:
        return Path(self.STORAGE_PATH) / self.VIDEO_PATH

    def ensure_dirs(self):
        """Creates necessary storage directories if they don't exist."""
        self.video_root.mkdir(parents=True, exist_ok=True)


settings = Settings()
