from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from streamvault.core.database.connection import SessionLocal
from streamvault.core.common.enums import VideoStatus
from streamvault.core.common.errors import PersistenceError
from .sql_models import VideoModel
from ..domain.interfaces import IVideoRepository
from ..domain.models import VideoAsset


def _to_domain(row: VideoModel) -> VideoAsset:
    return VideoAsset(
        id=row.id,
        uuid=row.uuid,
        name=row.name,
        description=row.description,
        content_hash=row.hash_name,
        status=row.status,
        duration=row.duration,
        created_at=row.created_at,
        updated_at=row.updated_at,
        deleted_at=row.deleted_at,
    )


class SqlVideoRepository(IVideoRepository):

    def __init__(self, session_factory: sessionmaker = None):
        self.session_factory = session_factory or SessionLocal

    def create(self, asset: VideoAsset) -> VideoAsset:
        with self.session_factory() as db:
            try:
                row = VideoModel(
                    name=asset.name,
                    description=asset.description,
                    hash_name=asset.content_hash,
                    status=asset.status,
                    duration=asset.duration,
                )
                if asset.uuid:
                    row.uuid = asset.uuid
                db.add(row)
                db.commit()
                db.refresh(row)
                return _to_domain(row)
            except SQLAlchemyError as e:
                db.rollback()
                raise PersistenceError("SqlVideoRepository.create", str(e)) from e

    def update_status(self, asset_id: int, status: VideoStatus,
                      expected: Optional[VideoStatus] = None) -> bool:
        with self.session_factory() as db:
            try:
                query = db.query(VideoModel).filter(VideoModel.id == asset_id)
                if expected is not None:
                    query = query.filter(VideoModel.status == expected)

                changed = query.update(
                    {VideoModel.status: status, VideoModel.updated_at: datetime.now(timezone.utc)},
                    synchronize_session=False
                )
                db.commit()
                return changed > 0
            except SQLAlchemyError as e:
                db.rollback()
                raise PersistenceError("SqlVideoRepository.update_status", str(e)) from e

    def get_by_id(self, asset_id: int) -> Optional[VideoAsset]:
        return self._first("SqlVideoRepository.get_by_id", VideoModel.id == asset_id)

    def get_by_uuid(self, asset_uuid: UUID) -> Optional[VideoAsset]:
        return self._first("SqlVideoRepository.get_by_uuid", VideoModel.uuid == asset_uuid)

    def get_by_hash(self, content_hash: str) -> Optional[VideoAsset]:
        return self._first("SqlVideoRepository.get_by_hash", VideoModel.hash_name == content_hash)

    def list(self, status: Optional[VideoStatus] = None) -> List[VideoAsset]:
        with self.session_factory() as db:
            try:
                query = db.query(VideoModel).filter(VideoModel.deleted_at.is_(None))
                if status is not None:
                    query = query.filter(VideoModel.status == status)
                rows = query.order_by(VideoModel.id.desc()).all()
                return [_to_domain(r) for r in rows]
            except SQLAlchemyError as e:
                raise PersistenceError("SqlVideoRepository.list", str(e)) from e

    def list_stale_processing(self, older_than: datetime) -> List[VideoAsset]:
        with self.session_factory() as db:
            try:
                rows = (
                    db.query(VideoModel)
                    .filter(
                        VideoModel.status == VideoStatus.PROCESSING,
                        VideoModel.created_at < older_than
                    )
                    .order_by(VideoModel.id)
                    .all()
                )
                return [_to_domain(r) for r in rows]
            except SQLAlchemyError as e:
                raise PersistenceError("SqlVideoRepository.list_stale_processing", str(e)) from e

    def update_info(self, asset_id: int, name: str, description: str) -> bool:
        return self._update("SqlVideoRepository.update_info", asset_id, {
            VideoModel.name: name,
            VideoModel.description: description,
        })

    def soft_delete(self, asset_id: int) -> bool:
        return self._update("SqlVideoRepository.soft_delete", asset_id, {
            VideoModel.deleted_at: datetime.now(timezone.utc),
        })

    def delete(self, asset_id: int) -> bool:
        with self.session_factory() as db:
            try:
                deleted = db.query(VideoModel).filter(VideoModel.id == asset_id).delete(synchronize_session=False)
                db.commit()
                return deleted > 0
            except SQLAlchemyError as e:
                db.rollback()
                raise PersistenceError("SqlVideoRepository.delete", str(e)) from e

    def _first(self, op: str, criterion) -> Optional[VideoAsset]:
        with self.session_factory() as db:
            try:
                row = db.query(VideoModel).filter(criterion).order_by(VideoModel.id.desc()).first()
                return _to_domain(row) if row else None
            except SQLAlchemyError as e:
                raise PersistenceError(op, str(e)) from e

    def _update(self, op: str, asset_id: int, values: dict) -> bool:
        values[VideoModel.updated_at] = datetime.now(timezone.utc)
        with self.session_factory() as db:
            try:
                changed = db.query(VideoModel).filter(VideoModel.id == asset_id).update(
                    values, synchronize_session=False
                )
                db.commit()
                return changed > 0
            except SQLAlchemyError as e:
                db.rollback()
                raise PersistenceError(op, str(e)) from e
