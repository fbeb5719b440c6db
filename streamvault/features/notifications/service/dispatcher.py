import logging
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Deque, List, Optional, Set

from ..domain.interfaces import INotificationSink
from ..domain.models import DeliveryResult, NotificationEvent

logger = logging.getLogger(__name__)

RESULT_HISTORY = 1000


class NotificationDispatcher:
    """
    Fire-and-forget delivery with tracked outcomes.

    dispatch() never blocks the caller on the sink and never raises.
    Every attempt is counted; the most recent `history` outcomes are kept
    in results(). Failures are logged, not retried, and have no effect on
    the asset they describe.
    """

    def __init__(self, sink: INotificationSink, max_workers: int = 2, history: int = RESULT_HISTORY):
        self.sink = sink
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="Notify")
        self._lock = threading.Lock()
        self._pending: Set[Future] = set()
        self._results: Deque[DeliveryResult] = deque(maxlen=history)
        self._delivered = 0
        self._failed = 0

    def dispatch(self, event: NotificationEvent) -> Optional[Future]:
        try:
            future = self._executor.submit(self._deliver, event)
        except RuntimeError as e:
            # Executor already shut down
            logger.error(f"Dropping notification for asset {event.asset_id}: {e}")
            self._record(DeliveryResult(event, delivered=False, error=str(e)))
            return None

        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def _deliver(self, event: NotificationEvent) -> DeliveryResult:
        try:
            self.sink.notify(event)
            result = DeliveryResult(event, delivered=True)
        except Exception as e:
            logger.error(f"Failed to send notification for asset {event.asset_id}: {e}")
            result = DeliveryResult(event, delivered=False, error=str(e))
        self._record(result)
        return result

    def _record(self, result: DeliveryResult) -> None:
        with self._lock:
            self._results.append(result)
            if result.delivered:
                self._delivered += 1
            else:
                self._failed += 1

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def results(self) -> List[DeliveryResult]:
        with self._lock:
            return list(self._results)

    @property
    def delivered(self) -> int:
        with self._lock:
            return self._delivered

    @property
    def failed(self) -> int:
        with self._lock:
            return self._failed

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Waits for in-flight deliveries. Returns False if some are still running."""
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait_for_pending: bool = True) -> None:
        self._executor.shutdown(wait=wait_for_pending)
