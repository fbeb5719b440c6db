import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from streamvault.core.database.connection import SessionLocal
from streamvault.core.common.enums import NotificationKind
from streamvault.core.common.errors import PersistenceError
from .sql_models import NotificationModel
from ..domain.interfaces import INotificationSink
from ..domain.models import NotificationEvent

logger = logging.getLogger(__name__)


class SqlNotificationSink(INotificationSink):
    """
    Persists every notification so clients can list them later.
    """

    def __init__(self, session_factory: sessionmaker = None):
        self.session_factory = session_factory or SessionLocal

    def notify(self, event: NotificationEvent) -> None:
        with self.session_factory() as db:
            try:
                db.add(NotificationModel(
                    video_id=event.asset_id,
                    name=event.name,
                    body=event.message,
                    kind=event.kind,
                    is_read=False,
                ))
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                raise PersistenceError("SqlNotificationSink.notify", str(e)) from e

    def list_for_video(self, asset_id: int) -> List[NotificationModel]:
        with self.session_factory() as db:
            return (
                db.query(NotificationModel)
                .filter(NotificationModel.video_id == asset_id)
                .order_by(NotificationModel.created_at)
                .all()
            )


class LoggingNotificationSink(INotificationSink):
    """
    Writes events to the log only. VideoPipeline defaults to SqlNotificationSink;
    pass this as `sink` to run without notification persistence.
    """

    def notify(self, event: NotificationEvent) -> None:
        level = logging.ERROR if event.kind == NotificationKind.ERROR else logging.INFO
        logger.log(level, f"[notification] asset={event.asset_id} kind={event.kind.value}: {event.message}")
