from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from streamvault.core.common.enums import VideoStatus
from .models import VideoAsset


class IVideoRepository(ABC):
    """
    Persistence contract for VideoAsset rows.
    The pipeline assumes nothing about the storage technology behind it.
    All methods raise PersistenceError on storage failure.
    """

    @abstractmethod
    def create(self, asset: VideoAsset) -> VideoAsset:
        """Inserts the asset; returns it with id, uuid and timestamps assigned."""
        pass

    @abstractmethod
    def update_status(self, asset_id: int, status: VideoStatus,
                      expected: Optional[VideoStatus] = None) -> bool:
        """
        Sets the status. When `expected` is given the write only applies if the
        row currently holds that status (compare-and-set).
        Returns False if no row was changed.
        """
        pass

    @abstractmethod
    def get_by_id(self, asset_id: int) -> Optional[VideoAsset]:
        pass

    @abstractmethod
    def get_by_uuid(self, asset_uuid: UUID) -> Optional[VideoAsset]:
        pass

    @abstractmethod
    def get_by_hash(self, content_hash: str) -> Optional[VideoAsset]:
        """Most recent asset stored under this hash (collisions share a hash)."""
        pass

    @abstractmethod
    def list(self, status: Optional[VideoStatus] = None) -> List[VideoAsset]:
        """Non-disabled assets, newest first."""
        pass

    @abstractmethod
    def list_stale_processing(self, older_than: datetime) -> List[VideoAsset]:
        pass

    @abstractmethod
    def update_info(self, asset_id: int, name: str, description: str) -> bool:
        pass

    @abstractmethod
    def soft_delete(self, asset_id: int) -> bool:
        pass

    @abstractmethod
    def delete(self, asset_id: int) -> bool:
        pass
