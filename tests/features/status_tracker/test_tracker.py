import io
from datetime import timedelta
from uuid import uuid4
import pytest

from streamvault.core.common.enums import VideoStatus
from streamvault.core.common.errors import InvalidTransitionError, ResolutionNotFoundError
from streamvault.features.content_store.data.local_fs import LocalContentStore
from streamvault.features.status_tracker.data.repository import SqlVideoRepository
from streamvault.features.status_tracker.domain.models import can_transition
from streamvault.features.status_tracker.service.tracker import StatusTracker


@pytest.fixture
def tracker(session_factory):
    return StatusTracker(SqlVideoRepository(session_factory))


def test_register_starts_in_processing(tracker):
    asset = tracker.register("Lecture 1", "Intro", "a" * 64, 12.5)

    assert asset.id is not None
    assert asset.uuid is not None
    assert asset.status == VideoStatus.PROCESSING
    assert asset.duration == 12.5
    assert not asset.playable

    fetched = tracker.get_by_uuid(str(asset.uuid))
    assert fetched.id == asset.id
    assert fetched.content_hash == "a" * 64


@pytest.mark.parametrize("target", [VideoStatus.PROCESSED, VideoStatus.FAILED])
def test_terminal_states_are_final(tracker, target):
    asset = tracker.register("Clip", "", "b" * 64, 3.0)

    if target == VideoStatus.PROCESSED:
        tracker.mark_processed(asset.id)
    else:
        tracker.mark_failed(asset.id)
    assert tracker.get(asset.id).status == target

    # No second transition out of a terminal state
    with pytest.raises(InvalidTransitionError):
        tracker.mark_processed(asset.id)
    with pytest.raises(InvalidTransitionError):
        tracker.mark_failed(asset.id)
    assert tracker.get(asset.id).status == target


def test_transition_table():
    assert can_transition(VideoStatus.PROCESSING, VideoStatus.PROCESSED)
    assert can_transition(VideoStatus.PROCESSING, VideoStatus.FAILED)
    assert not can_transition(VideoStatus.PROCESSED, VideoStatus.PROCESSING)
    assert not can_transition(VideoStatus.FAILED, VideoStatus.PROCESSED)


def test_unknown_asset_transition_rejected(tracker):
    with pytest.raises(InvalidTransitionError):
        tracker.mark_processed(9999)


def test_playable_requires_processed_and_enabled(tracker):
    asset = tracker.register("Clip", "", "c" * 64, 3.0)

    with pytest.raises(ResolutionNotFoundError):
        tracker.get_playable_by_uuid(asset.uuid)

    tracker.mark_processed(asset.id)
    assert tracker.get_playable_by_uuid(asset.uuid).id == asset.id

    # Disabling keeps the status but hides it from playback
    assert tracker.disable(asset.uuid)
    disabled = tracker.get(asset.id)
    assert disabled.status == VideoStatus.PROCESSED
    assert disabled.disabled
    with pytest.raises(ResolutionNotFoundError):
        tracker.get_playable_by_uuid(asset.uuid)

    assert asset.id not in [a.id for a in tracker.list_assets()]


def test_bad_uuid_is_not_found(tracker):
    assert tracker.get_by_uuid("not-a-uuid") is None
    assert tracker.get_by_uuid(uuid4()) is None
    with pytest.raises(ResolutionNotFoundError):
        tracker.get_playable_by_uuid("not-a-uuid")


def test_update_info_and_list_by_status(tracker):
    first = tracker.register("One", "", "d" * 64, 1.0)
    second = tracker.register("Two", "", "e" * 64, 2.0)
    tracker.mark_processed(second.id)

    assert tracker.update_info(first.uuid, "One (edited)", "new description")
    edited = tracker.get(first.id)
    assert edited.name == "One (edited)"
    assert edited.description == "new description"
    # Hash is the storage key and never changes
    assert edited.content_hash == "d" * 64

    processing = tracker.list_assets(VideoStatus.PROCESSING)
    assert [a.id for a in processing] == [first.id]


def test_hard_delete_removes_directory_then_row(tracker, video_root):
    store = LocalContentStore(video_root)
    asset = tracker.register("Clip", "", "f" * 64, 3.0)
    store.write_upload(io.BytesIO(b"data"), asset.content_hash, "clip.mp4")

    assert tracker.hard_delete(asset.uuid, store)

    assert not store.asset_dir(asset.content_hash).exists()
    assert tracker.get(asset.id) is None


def test_find_stuck_reports_processing_rows(tracker):
    stuck = tracker.register("Stuck", "", "1" * 64, 3.0)
    done = tracker.register("Done", "", "2" * 64, 3.0)
    tracker.mark_processed(done.id)

    # Nothing is older than an hour yet
    assert tracker.find_stuck(timedelta(hours=1)) == []

    # A negative window puts the cutoff in the future
    found = tracker.find_stuck(timedelta(minutes=-5))
    assert [a.id for a in found] == [stuck.id]
