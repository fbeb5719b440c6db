import logging
import queue
import threading
import time
from typing import Optional

from ..domain.models import TranscodeTask

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50

# Placed on the queue by close(); a worker that takes it exits its loop.
SHUTDOWN = object()


class TranscodeQueue:
    """
    Bounded FIFO between ingestion (producers) and workers (consumers).

    enqueue() blocks while the queue is full; that is the only
    backpressure in the system. No priority, persistence, peek,
    cancel or de-duplication.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Queue capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._queue: "queue.Queue" = queue.Queue(maxsize=capacity)
        self._closed = False

    def enqueue(self, task: TranscodeTask, timeout: Optional[float] = None) -> None:
        """
        Raises:
            RuntimeError: If the queue was closed.
            queue.Full: Only when a timeout is given and no slot freed in time.
        """
        if self._closed:
            raise RuntimeError("TranscodeQueue is closed")

        if self._queue.full():
            logger.warning(f"Transcode queue full ({self.capacity}); blocking producer for asset {task.asset_id}")

        self._queue.put(task, block=True, timeout=timeout)
        logger.info(f"Enqueued transcode task for asset {task.asset_id} (depth={self._queue.qsize()})")

    def dequeue(self, timeout: Optional[float] = None):
        """
        Returns the next TranscodeTask, or SHUTDOWN.

        Raises:
            queue.Empty: If a timeout is given and nothing arrived.
        """
        return self._queue.get(block=True, timeout=timeout)

    def task_done(self) -> None:
        self._queue.task_done()

    def qsize(self) -> int:
        return self._queue.qsize()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self, consumers: int, timeout: Optional[float] = None) -> int:
        """
        Stops accepting tasks and queues one SHUTDOWN marker per consumer,
        behind whatever is already waiting.

        With a timeout, markers that find no free slot before it expires are
        handed to a background thread that places them as slots free up.
        Returns the number of markers placed before returning.
        """
        self._closed = True
        deadline = None if timeout is None else time.monotonic() + timeout

        placed = 0
        for _ in range(consumers):
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            try:
                self._queue.put(SHUTDOWN, block=True, timeout=remaining)
            except queue.Full:
                break
            placed += 1

        deferred = consumers - placed
        if deferred:
            logger.warning(f"Transcode queue full on close; {deferred} shutdown marker(s) deferred until slots free")
            threading.Thread(
                target=self._put_markers,
                args=(deferred,),
                daemon=True,
                name="TranscodeQueueCloser"
            ).start()
        return placed

    def _put_markers(self, count: int) -> None:
        for _ in range(count):
            self._queue.put(SHUTDOWN)
