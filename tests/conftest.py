# File: tests/conftest.py

import os
import sys
from pathlib import Path

# 1. Never touch a real database from the test suite
os.environ.setdefault("DATABASE_URL", "sqlite://")

# 2. Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from streamvault.core.config.settings import Settings
from streamvault.core.database.base import Base
from tests.fakes import FakeEncoder, FakeProber

# Register tables on Base.metadata
import streamvault.features.status_tracker.data.sql_models  # noqa: F401
import streamvault.features.notifications.data.sql_models  # noqa: F401


@pytest.fixture(scope="function")
def session_factory(tmp_path):
    """
    File-backed SQLite per test: worker and notifier threads each get
    their own connection from the pool.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'streamvault_test.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)

    yield sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def video_root(tmp_path):
    root = tmp_path / "storage" / "videos"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def test_settings(tmp_path):
    cfg = Settings()
    cfg.STORAGE_PATH = tmp_path / "storage"
    cfg.VIDEO_PATH = "videos"
    cfg.RESOLUTIONS = {"640x360": "360", "854x480": "480"}
    cfg.TRANSCODE_WORKER_COUNT = 1
    cfg.TRANSCODE_QUEUE_CAPACITY = 50
    cfg.CONTENT_HASH_MODE = "metadata"
    cfg.MASTER_PLAYLIST_MODE = "fixed"
    cfg.LOG_LEVEL = "DEBUG"
    return cfg


@pytest.fixture
def fake_prober():
    return FakeProber()


@pytest.fixture
def fake_encoder():
    return FakeEncoder()
