from abc import ABC, abstractmethod
from .models import NotificationEvent


class INotificationSink(ABC):
    """
    Downstream delivery of pipeline events (persistence, email, websocket...).
    """

    @abstractmethod
    def notify(self, event: NotificationEvent) -> None:
        """
        Raises:
            Exception: Any delivery failure. Callers log it and move on.
        """
        pass
