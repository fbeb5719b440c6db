import logging
import queue
import threading
import time
from typing import Callable, List, Optional

from ..domain.models import TranscodeTask
from .transcode_queue import TranscodeQueue, SHUTDOWN

logger = logging.getLogger(__name__)

POLL_SECONDS = 0.2


class WorkerPool:
    """
    Fixed number of long-lived workers draining a TranscodeQueue.

    Each worker runs one task to completion before taking the next.
    A task that raises is logged and dropped; the worker keeps going,
    so a failure never removes capacity from the pool.
    """

    def __init__(self, task_queue: TranscodeQueue, handler: Callable[[TranscodeTask], object], size: int = 1):
        if size < 1:
            raise ValueError(f"Worker pool size must be positive, got {size}")
        self.queue = task_queue
        self.handler = handler
        self.size = size

        self._threads: List[threading.Thread] = []
        self._running = threading.Event()
        self._running.set()
        self._parked = 0
        self._parked_cond = threading.Condition()
        self._started = False

        self.completed = 0
        self.failed = 0
        self._stats_lock = threading.Lock()

    def start(self) -> None:
        if self._started:
            raise RuntimeError("WorkerPool already started")
        self._started = True

        logger.info(f"Initializing worker pool ({self.size} workers)")
        for worker_id in range(self.size):
            thread = threading.Thread(
                target=self._worker_loop,
                args=(worker_id,),
                daemon=True,
                name=f"TranscodeWorker-{worker_id}"
            )
            thread.start()
            self._threads.append(thread)

    def pause(self, timeout: Optional[float] = None) -> bool:
        """
        Stops workers from dequeuing. Returns once every worker is parked
        (a worker mid-task parks after finishing it), or False on timeout.
        """
        self._running.clear()
        with self._parked_cond:
            return self._parked_cond.wait_for(
                lambda: self._parked >= self.alive_count(), timeout=timeout
            )

    def resume(self) -> None:
        self._running.set()

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None) -> None:
        """
        Graceful stop: tasks already queued are drained first, then each
        worker takes one SHUTDOWN marker and exits.

        `timeout` bounds the whole call, placing the markers included.
        Workers still busy when it expires keep running and exit later.
        """
        logger.info("Shutting down worker pool")
        deadline = None if timeout is None else time.monotonic() + timeout

        # Paused workers must be free to make room for the markers
        self.resume()
        if not self.queue.closed:
            self.queue.close(consumers=self.alive_count(), timeout=timeout if timeout is not None else 0)

        if wait:
            for thread in self._threads:
                remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
                thread.join(timeout=remaining)

            still_running = self.alive_count()
            if still_running:
                logger.warning(f"Worker pool shutdown timed out with {still_running} worker(s) still busy")

    def alive_count(self) -> int:
        return sum(1 for t in self._threads if t.is_alive())

    def _park_if_paused(self) -> None:
        if self._running.is_set():
            return
        with self._parked_cond:
            self._parked += 1
            self._parked_cond.notify_all()
        self._running.wait()
        with self._parked_cond:
            self._parked -= 1

    def _worker_loop(self, worker_id: int) -> None:
        logger.info(f"Worker {worker_id} started")

        while True:
            self._park_if_paused()

            try:
                item = self.queue.dequeue(timeout=POLL_SECONDS)
            except queue.Empty:
                continue

            if item is SHUTDOWN:
                self.queue.task_done()
                break

            try:
                logger.info(f"Worker {worker_id} processing asset {item.asset_id}")
                self.handler(item)
                with self._stats_lock:
                    self.completed += 1
            except Exception as e:
                with self._stats_lock:
                    self.failed += 1
                logger.exception(f"Worker {worker_id} failed task for asset {item.asset_id}: {e}")
            finally:
                self.queue.task_done()

        logger.info(f"Worker {worker_id} stopped")
