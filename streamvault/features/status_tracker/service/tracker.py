import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Union
from uuid import UUID, uuid4

from streamvault.core.common.enums import VideoStatus
from streamvault.core.common.errors import InvalidTransitionError, ResolutionNotFoundError
from streamvault.features.content_store.domain.interfaces import IContentStore
from ..domain.interfaces import IVideoRepository
from ..domain.models import VideoAsset, can_transition

logger = logging.getLogger(__name__)


def _as_uuid(value: Union[str, UUID]) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


class StatusTracker:
    """
    State machine over the video repository.

        PROCESSING --> PROCESSED
                  \\-> FAILED

    Both targets are terminal for the ingestion attempt. "Disabled" is a
    separate soft-delete flag and does not touch the status.
    """

    def __init__(self, repo: IVideoRepository):
        self.repo = repo

    def register(self, name: str, description: str, content_hash: str, duration: float) -> VideoAsset:
        """Creates the asset row in PROCESSING with a fresh UUID."""
        asset = VideoAsset(
            name=name,
            description=description,
            content_hash=content_hash,
            status=VideoStatus.PROCESSING,
            duration=duration,
            uuid=uuid4(),
        )
        created = self.repo.create(asset)
        logger.info(f"Registered asset {created.id} ({created.uuid}) hash={content_hash[:12]} status=processing")
        return created

    def mark_processed(self, asset_id: int) -> None:
        self._transition(asset_id, VideoStatus.PROCESSED)

    def mark_failed(self, asset_id: int) -> None:
        self._transition(asset_id, VideoStatus.FAILED)

    def _transition(self, asset_id: int, target: VideoStatus) -> None:
        op = "StatusTracker.transition"
        if not can_transition(VideoStatus.PROCESSING, target):
            raise InvalidTransitionError(op, f"{target.value} is not reachable from processing")

        # Compare-and-set keeps a finished attempt from being rewritten
        if self.repo.update_status(asset_id, target, expected=VideoStatus.PROCESSING):
            logger.info(f"Asset {asset_id}: processing -> {target.value}")
            return

        current = self.repo.get_by_id(asset_id)
        if current is None:
            raise InvalidTransitionError(op, f"asset {asset_id} does not exist")
        raise InvalidTransitionError(op, f"asset {asset_id} is {current.status.value}, cannot move to {target.value}")

    def get(self, asset_id: int) -> Optional[VideoAsset]:
        return self.repo.get_by_id(asset_id)

    def get_by_uuid(self, asset_uuid: Union[str, UUID]) -> Optional[VideoAsset]:
        try:
            return self.repo.get_by_uuid(_as_uuid(asset_uuid))
        except ValueError:
            return None

    def get_by_hash(self, content_hash: str) -> Optional[VideoAsset]:
        return self.repo.get_by_hash(content_hash)

    def get_playable_by_uuid(self, asset_uuid: Union[str, UUID]) -> VideoAsset:
        """
        Raises:
            ResolutionNotFoundError: Unknown UUID, disabled, or not PROCESSED.
        """
        asset = self.get_by_uuid(asset_uuid)
        if asset is None or not asset.playable:
            raise ResolutionNotFoundError("StatusTracker.get_playable_by_uuid", f"no playable video for {asset_uuid}")
        return asset

    def list_assets(self, status: Optional[VideoStatus] = None) -> List[VideoAsset]:
        return self.repo.list(status)

    def update_info(self, asset_uuid: Union[str, UUID], name: str, description: str) -> bool:
        asset = self.get_by_uuid(asset_uuid)
        if asset is None:
            return False
        return self.repo.update_info(asset.id, name, description)

    def disable(self, asset_uuid: Union[str, UUID]) -> bool:
        asset = self.get_by_uuid(asset_uuid)
        if asset is None:
            return False
        logger.info(f"Disabling asset {asset.id} ({asset.uuid})")
        return self.repo.soft_delete(asset.id)

    def hard_delete(self, asset_uuid: Union[str, UUID], store: IContentStore) -> bool:
        """
        Removes the content directory, then the row. If the directory
        can't be removed the row is kept.
        """
        asset = self.get_by_uuid(asset_uuid)
        if asset is None:
            return False

        if not store.remove_asset_dir(asset.content_hash):
            logger.error(f"Keeping asset {asset.id}: content directory could not be removed")
            return False

        logger.info(f"Hard-deleting asset {asset.id} ({asset.uuid})")
        return self.repo.delete(asset.id)

    def find_stuck(self, older_than: timedelta) -> List[VideoAsset]:
        """
        Assets still PROCESSING after `older_than`. A crash between row
        creation and enqueue (or mid-transcode) leaves these behind;
        nothing reconciles them automatically.
        """
        cutoff = datetime.now(timezone.utc) - older_than
        stuck = self.repo.list_stale_processing(cutoff)
        if stuck:
            logger.warning(f"{len(stuck)} asset(s) stuck in processing since before {cutoff.isoformat()}")
        return stuck
