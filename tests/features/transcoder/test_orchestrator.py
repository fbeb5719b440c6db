import io
import pytest

from streamvault.core.common.enums import NotificationKind, VideoStatus
from streamvault.features.content_store.data.hasher import MetadataHasher
from streamvault.features.content_store.data.local_fs import LocalContentStore
from streamvault.features.notifications.data.sinks import SqlNotificationSink
from streamvault.features.notifications.service.dispatcher import NotificationDispatcher
from streamvault.features.status_tracker.data.repository import SqlVideoRepository
from streamvault.features.status_tracker.service.tracker import StatusTracker
from streamvault.features.task_queue.domain.models import TranscodeTask
from streamvault.features.transcoder.data.playlist import MasterPlaylistWriter
from streamvault.features.transcoder.service.orchestrator import TranscodeOrchestrator
from tests.fakes import FakeEncoder

RESOLUTIONS = {"854x480": "480", "640x360": "360"}

# --- FIXTURES ---

@pytest.fixture
def store(video_root):
    return LocalContentStore(video_root)


@pytest.fixture
def tracker(session_factory):
    return StatusTracker(SqlVideoRepository(session_factory))


@pytest.fixture
def sink(session_factory):
    return SqlNotificationSink(session_factory)


@pytest.fixture
def dispatcher(sink):
    d = NotificationDispatcher(sink)
    yield d
    d.shutdown()


@pytest.fixture
def staged_task(store, tracker):
    """An upload already copied in and registered, as ingestion leaves it."""
    content_hash = MetadataHasher().compute("sample.mp4", 4096)
    source = store.write_upload(io.BytesIO(b"\x00" * 4096), content_hash, "sample.mp4")
    asset = tracker.register("Sample", "", content_hash, 12.5)
    return TranscodeTask(
        upload_path=store.asset_dir(content_hash),
        asset_id=asset.id,
        source_path=source,
        content_hash=content_hash,
    )


def build(encoder, tracker, store, dispatcher, mode="fixed"):
    return TranscodeOrchestrator(
        encoder=encoder,
        tracker=tracker,
        store=store,
        dispatcher=dispatcher,
        resolutions=RESOLUTIONS,
        playlist_writer=MasterPlaylistWriter(mode),
    )

# --- TESTS ---

def test_all_resolutions_succeed(staged_task, tracker, store, dispatcher, sink):
    """
    Every rendition lands, the master playlist is written, the raw upload is
    removed and a success notification is stored.
    """
    encoder = FakeEncoder()
    outcome = build(encoder, tracker, store, dispatcher)(staged_task)

    assert outcome.succeeded
    assert outcome.encoded_labels == ["360", "480"]
    # Lowest height first, regardless of configuration order
    assert encoder.calls == ["360", "480"]

    out = staged_task.upload_path
    assert (out / "360.m3u8").exists()
    assert (out / "480.m3u8").exists()
    assert (out / "360_000.ts").exists()
    assert (out / "playlist.m3u8").exists()
    assert not staged_task.source_path.exists()

    assert tracker.get(staged_task.asset_id).status == VideoStatus.PROCESSED

    assert dispatcher.flush(timeout=5)
    notes = sink.list_for_video(staged_task.asset_id)
    assert [n.kind for n in notes] == [NotificationKind.SUCCESS]
    assert notes[0].body == "The upload was successful."


def test_failure_on_second_resolution_discards_everything(staged_task, tracker, store, dispatcher, sink):
    encoder = FakeEncoder(fail_on="480")
    outcome = build(encoder, tracker, store, dispatcher)(staged_task)

    assert outcome.status == VideoStatus.FAILED
    assert outcome.encoded_labels == ["360"]
    assert "480" in outcome.error

    # 360 was produced, then removed with the rest of the directory
    assert not staged_task.upload_path.exists()
    assert tracker.get(staged_task.asset_id).status == VideoStatus.FAILED

    assert dispatcher.flush(timeout=5)
    notes = sink.list_for_video(staged_task.asset_id)
    assert [n.kind for n in notes] == [NotificationKind.ERROR]
    assert notes[0].body == "The upload has failed."


def test_failure_on_first_resolution_stops_immediately(staged_task, tracker, store, dispatcher):
    encoder = FakeEncoder(fail_on="360")
    outcome = build(encoder, tracker, store, dispatcher)(staged_task)

    assert outcome.status == VideoStatus.FAILED
    assert encoder.calls == ["360"]


def test_configured_playlist_uses_probed_duration(staged_task, tracker, store, dispatcher):
    build(FakeEncoder(), tracker, store, dispatcher, mode="configured")(staged_task)

    content = (staged_task.upload_path / "playlist.m3u8").read_text()
    assert "RESOLUTION=640x360" in content
    assert "RESOLUTION=854x480" in content
    assert "1280x720" not in content


def test_finished_asset_is_not_rewritten(staged_task, tracker, store, dispatcher):
    """
    A second run over an already-failed asset cannot flip it to PROCESSED.
    """
    tracker.mark_failed(staged_task.asset_id)
    staged_task.upload_path.mkdir(parents=True, exist_ok=True)

    outcome = build(FakeEncoder(), tracker, store, dispatcher)(staged_task)

    assert outcome.status == VideoStatus.FAILED
    assert tracker.get(staged_task.asset_id).status == VideoStatus.FAILED
