import logging
from typing import Dict, List, Optional

from streamvault.core.common.enums import VideoStatus
from streamvault.core.common.errors import EncodeError, PersistenceError
from streamvault.features.content_store.domain.interfaces import IContentStore
from streamvault.features.notifications.domain.models import NotificationEvent
from streamvault.features.notifications.service.dispatcher import NotificationDispatcher
from streamvault.features.status_tracker.service.tracker import StatusTracker
from streamvault.features.task_queue.domain.models import TranscodeTask
from ..data.playlist import MasterPlaylistWriter
from ..domain.interfaces import IHlsEncoder
from ..domain.models import EncodeRequest, Resolution, TranscodeOutcome, parse_resolutions, sorted_by_height

logger = logging.getLogger(__name__)


class TranscodeOrchestrator:
    """
    Runs one TranscodeTask to its terminal state.

    1. Encode every configured resolution, lowest height first, one at a time.
    2. First failure: FAILED, delete the working directory, failure notification.
    3. All succeeded: master playlist, PROCESSED, delete the raw upload only,
       success notification.

    Status writes, file deletes and notifications are not transactional with
    one another. A crash in between leaves disk and status out of step.
    """

    def __init__(
        self,
        encoder: IHlsEncoder,
        tracker: StatusTracker,
        store: IContentStore,
        dispatcher: NotificationDispatcher,
        resolutions: Dict[str, str],
        playlist_writer: Optional[MasterPlaylistWriter] = None,
        segment_seconds: int = 10,
    ):
        self.encoder = encoder
        self.tracker = tracker
        self.store = store
        self.dispatcher = dispatcher
        self.resolutions: List[Resolution] = sorted_by_height(parse_resolutions(resolutions))
        self.playlist_writer = playlist_writer or MasterPlaylistWriter("fixed")
        self.segment_seconds = segment_seconds

    def __call__(self, task: TranscodeTask) -> TranscodeOutcome:
        return self.run(task)

    def run(self, task: TranscodeTask) -> TranscodeOutcome:
        logger.info(f"[op=TranscodeOrchestrator.run] asset={task.asset_id} hash={task.content_hash[:12]} "
                    f"resolutions={[r.label for r in self.resolutions]}")

        encoded: List[str] = []
        try:
            for res in self.resolutions:
                self.encoder.encode(EncodeRequest(
                    source=task.source_path,
                    output_dir=task.upload_path,
                    resolution=res,
                    segment_seconds=self.segment_seconds,
                ))
                encoded.append(res.label)
                logger.info(f"Asset {task.asset_id}: transcoded {res.label} ({res.size})")

            self.playlist_writer.write(
                task.upload_path, task.content_hash, self.resolutions, self._duration_of(task)
            )
        except EncodeError as e:
            logger.error(f"Asset {task.asset_id}: {e}; abandoning remaining resolutions")
            return self._finalize_failure(task, encoded, str(e))
        except OSError as e:
            logger.error(f"Asset {task.asset_id}: failed to create master playlist: {e}")
            return self._finalize_failure(task, encoded, f"failed to create master playlist: {e}")

        return self._finalize_success(task, encoded)

    def _finalize_success(self, task: TranscodeTask, encoded: List[str]) -> TranscodeOutcome:
        try:
            self.tracker.mark_processed(task.asset_id)
        except PersistenceError as e:
            # Not retried: the asset stays in PROCESSING until reconciled
            logger.error(f"Asset {task.asset_id}: failed to update video status to processed: {e}")
            return self._finalize_failure(task, encoded, str(e))

        if not self.store.remove_file(task.source_path):
            logger.error(f"Asset {task.asset_id}: failed to remove raw upload {task.source_path}")

        self.dispatcher.dispatch(NotificationEvent.upload_succeeded(task.asset_id))
        return TranscodeOutcome(asset_id=task.asset_id, status=VideoStatus.PROCESSED, encoded_labels=encoded)

    def _finalize_failure(self, task: TranscodeTask, encoded: List[str], error: str) -> TranscodeOutcome:
        try:
            self.tracker.mark_failed(task.asset_id)
        except PersistenceError as e:
            logger.error(f"Asset {task.asset_id}: failed to update video status to failed: {e}")

        # Renditions from earlier passes go too: no partial results
        if not self.store.remove_asset_dir(task.content_hash):
            logger.error(f"Asset {task.asset_id}: failed to remove working directory {task.upload_path}")

        self.dispatcher.dispatch(NotificationEvent.upload_failed(task.asset_id))
        return TranscodeOutcome(
            asset_id=task.asset_id, status=VideoStatus.FAILED, encoded_labels=encoded, error=error
        )

    def _duration_of(self, task: TranscodeTask) -> float:
        if self.playlist_writer.mode != "configured":
            return 0.0
        try:
            asset = self.tracker.get(task.asset_id)
        except PersistenceError as e:
            logger.warning(f"Asset {task.asset_id}: duration lookup failed, using nominal bandwidth: {e}")
            return 0.0
        return asset.duration if asset else 0.0
