import logging
import queue
from pathlib import Path
from typing import BinaryIO, Optional, Union

from streamvault.core.common.errors import IngestionError, PersistenceError
from streamvault.features.content_store.domain.interfaces import IContentHasher, IContentStore, IStreamHasher
from streamvault.features.status_tracker.domain.models import VideoAsset
from streamvault.features.status_tracker.service.tracker import StatusTracker
from streamvault.features.task_queue.domain.models import TranscodeTask
from streamvault.features.task_queue.service.transcode_queue import TranscodeQueue
from streamvault.features.transcoder.domain.interfaces import IDurationProber
from ..domain.models import UploadMetadata, UploadRequest

logger = logging.getLogger(__name__)


class IngestionService:
    """
    Facade for accepting uploads.
    Orchestrates content addressing, the synchronous copy, the duration
    probe, the asset row and the hand-off to the transcode queue.
    """

    def __init__(
        self,
        hasher: Union[IContentHasher, IStreamHasher],
        store: IContentStore,
        prober: IDurationProber,
        tracker: StatusTracker,
        task_queue: TranscodeQueue,
        enqueue_timeout: Optional[float] = None,
    ):
        self.hasher = hasher
        self.store = store
        self.prober = prober
        self.tracker = tracker
        self.queue = task_queue
        self.enqueue_timeout = enqueue_timeout

    def ingest(self, stream: BinaryIO, original_filename: str, size_bytes: int,
               metadata: UploadMetadata) -> VideoAsset:
        return self.ingest_request(UploadRequest(stream, original_filename, size_bytes, metadata))

    def ingest_request(self, request: UploadRequest) -> VideoAsset:
        """
        Returns the created asset (status PROCESSING) once its task is queued.
        May block while the transcode queue is full.

        Raises:
            IngestionError: Nothing is queued and no partial result exists.
        """
        op = "IngestionService.ingest"
        filename = Path(request.original_filename).name
        logger.info(f"[op={op}] processing upload {filename} ({request.size_bytes} bytes)")

        # 1. Content address + synchronous copy
        try:
            if isinstance(self.hasher, IStreamHasher):
                content_hash, source_path = self.store.write_upload_digested(request.stream, filename, self.hasher)
            else:
                content_hash = self.hasher.compute(filename, request.size_bytes)
                source_path = self.store.write_upload(request.stream, content_hash, filename)
        except OSError as e:
            logger.error(f"[op={op}] failed to upload file: {e}")
            raise IngestionError(op, "failed to upload file") from e

        upload_path = self.store.asset_dir(content_hash)

        # 2. Probe; no asset row without a duration
        try:
            duration = self.prober.probe(source_path)
        except RuntimeError as e:
            logger.error(f"[op={op}] failed to get video duration: {e}")
            self.store.remove_file(source_path)
            self.store.remove_asset_dir_if_empty(content_hash)
            raise IngestionError(op, "failed to get video duration") from e

        # 3. Asset row
        try:
            asset = self.tracker.register(
                name=request.metadata.name,
                description=request.metadata.description,
                content_hash=content_hash,
                duration=duration,
            )
        except PersistenceError as e:
            logger.error(f"[op={op}] failed to create video: {e}")
            raise IngestionError(op, "failed to create video") from e

        # 4. Hand-off. A crash before this line strands the asset in PROCESSING.
        task = TranscodeTask(
            upload_path=upload_path,
            asset_id=asset.id,
            source_path=source_path,
            content_hash=content_hash,
        )
        try:
            self.queue.enqueue(task, timeout=self.enqueue_timeout)
        except (queue.Full, RuntimeError) as e:
            logger.error(f"[op={op}] failed to queue transcode for asset {asset.id}: {e}")
            raise IngestionError(op, "failed to queue transcode") from e

        return asset
