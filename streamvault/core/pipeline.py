# File: streamvault/core/pipeline.py

import logging
from typing import BinaryIO, Optional

from sqlalchemy.orm import sessionmaker

from streamvault.core.config.settings import Settings, settings as default_settings
from streamvault.core.logging import configure_logging
from streamvault.features.content_store.data.hasher import build_hasher
from streamvault.features.content_store.data.local_fs import LocalContentStore
from streamvault.features.ingestion.domain.models import UploadMetadata
from streamvault.features.ingestion.service.api import IngestionService
from streamvault.features.notifications.data.sinks import SqlNotificationSink
from streamvault.features.notifications.domain.interfaces import INotificationSink
from streamvault.features.notifications.service.dispatcher import NotificationDispatcher
from streamvault.features.playback.domain.models import ResolvedResource
from streamvault.features.playback.service.resolver import PlaybackResolver
from streamvault.features.status_tracker.data.repository import SqlVideoRepository
from streamvault.features.status_tracker.domain.interfaces import IVideoRepository
from streamvault.features.status_tracker.domain.models import VideoAsset
from streamvault.features.status_tracker.service.tracker import StatusTracker
from streamvault.features.task_queue.service.transcode_queue import TranscodeQueue
from streamvault.features.task_queue.service.worker_pool import WorkerPool
from streamvault.features.transcoder.data.ffmpeg_adapter import FFmpegHlsEncoder
from streamvault.features.transcoder.data.ffprobe_adapter import FFprobeDurationProber
from streamvault.features.transcoder.data.playlist import MasterPlaylistWriter
from streamvault.features.transcoder.domain.interfaces import IDurationProber, IHlsEncoder
from streamvault.features.transcoder.service.orchestrator import TranscodeOrchestrator

logger = logging.getLogger(__name__)


class VideoPipeline:
    """
    Process wiring for the ingest -> queue -> transcode -> serve pipeline.
    The HTTP layer talks to ingest(), resolve() and tracker.
    """

    def __init__(self, cfg: Settings, store: LocalContentStore, tracker: StatusTracker,
                 task_queue: TranscodeQueue, pool: WorkerPool, dispatcher: NotificationDispatcher,
                 ingestion: IngestionService, resolver: PlaybackResolver,
                 orchestrator: TranscodeOrchestrator):
        self.settings = cfg
        self.store = store
        self.tracker = tracker
        self.queue = task_queue
        self.pool = pool
        self.dispatcher = dispatcher
        self.ingestion = ingestion
        self.resolver = resolver
        self.orchestrator = orchestrator

    @classmethod
    def from_settings(
        cls,
        cfg: Settings = None,
        session_factory: Optional[sessionmaker] = None,
        repo: Optional[IVideoRepository] = None,
        prober: Optional[IDurationProber] = None,
        encoder: Optional[IHlsEncoder] = None,
        sink: Optional[INotificationSink] = None,
    ) -> "VideoPipeline":
        cfg = cfg or default_settings

        store = LocalContentStore(cfg.video_root)
        tracker = StatusTracker(repo or SqlVideoRepository(session_factory))
        task_queue = TranscodeQueue(cfg.TRANSCODE_QUEUE_CAPACITY)
        dispatcher = NotificationDispatcher(sink or SqlNotificationSink(session_factory))

        orchestrator = TranscodeOrchestrator(
            encoder=encoder or FFmpegHlsEncoder(cfg.FFMPEG_BINARY),
            tracker=tracker,
            store=store,
            dispatcher=dispatcher,
            resolutions=cfg.RESOLUTIONS,
            playlist_writer=MasterPlaylistWriter(cfg.MASTER_PLAYLIST_MODE),
            segment_seconds=cfg.HLS_SEGMENT_SECONDS,
        )
        pool = WorkerPool(task_queue, orchestrator, size=cfg.TRANSCODE_WORKER_COUNT)

        ingestion = IngestionService(
            hasher=build_hasher(cfg.CONTENT_HASH_MODE),
            store=store,
            prober=prober or FFprobeDurationProber(cfg.FFPROBE_BINARY),
            tracker=tracker,
            task_queue=task_queue,
        )
        resolver = PlaybackResolver(store, tracker, cfg.RESOLUTIONS)

        return cls(cfg, store, tracker, task_queue, pool, dispatcher, ingestion, resolver, orchestrator)

    def start(self) -> None:
        configure_logging(self.settings.LOG_LEVEL)
        self.settings.ensure_dirs()
        logger.info(f"Starting pipeline: root={self.settings.video_root} workers={self.pool.size} "
                    f"queue={self.queue.capacity} resolutions={list(self.settings.RESOLUTIONS.values())}")
        self.pool.start()

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """Drains queued tasks, stops workers, then waits for notifications."""
        self.pool.shutdown(wait=True, timeout=timeout)
        self.dispatcher.flush(timeout=timeout)
        self.dispatcher.shutdown()
        logger.info("Pipeline stopped")

    def ingest(self, stream: BinaryIO, original_filename: str, size_bytes: int,
               name: str, description: str = "") -> VideoAsset:
        return self.ingestion.ingest(stream, original_filename, size_bytes, UploadMetadata(name, description))

    def resolve(self, request_path: str) -> ResolvedResource:
        return self.resolver.resolve(request_path)
