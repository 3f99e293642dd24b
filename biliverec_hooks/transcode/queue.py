"""Hand-off queue between event dispatch and the transcode worker."""

import logging
import queue
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)


class QueueClosedError(RuntimeError):
    """Raised when submitting to, or waiting on, a queue that has been closed."""


class TranscodeQueue(ABC):
    """Abstract admission channel for transcode jobs."""

    @abstractmethod
    def admit(self, path: str) -> "Future[str]":
        """Admit a job without blocking.

        Returns:
            Future resolved with the path once the consumer claims the job,
            or failed with QueueClosedError if the queue closes first

        Raises:
            QueueClosedError: if the queue is already closed
        """
        pass

    def submit(self, path: str) -> None:
        """Admit a job and block until the consumer accepts it."""
        self.admit(path).result()

    @abstractmethod
    def claim(self) -> Optional[str]:
        """Block until a job is available and return its path.

        Returns:
            The next path in admission order, or None once the queue is closed
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Stop accepting jobs and wake the consumer."""
        pass


@dataclass
class _Admission:
    path: str
    claimed: "Future[str]" = field(default_factory=Future)


class HandoffQueue(TranscodeQueue):
    """Unbounded FIFO where an admission completes only once the worker claimed the job.

    Any number of producers may admit concurrently; exactly one consumer is
    expected to call ``claim``. Async callers wait on the returned future
    with ``asyncio.wrap_future`` so no thread is parked per pending job.
    """

    def __init__(self):
        self._queue: "queue.Queue[Optional[_Admission]]" = queue.Queue()
        self._closed = threading.Event()
        # Serializes admissions against close so nothing lands behind the sentinel
        self._lock = threading.Lock()

    def admit(self, path: str) -> "Future[str]":
        admission = _Admission(path)
        with self._lock:
            if self._closed.is_set():
                raise QueueClosedError(f"Transcode queue is closed, cannot admit {path}")
            self._queue.put(admission)
        logger.debug(f"Admitted {path}, waiting for hand-off ({self.pending()} pending)")
        return admission.claimed

    def claim(self) -> Optional[str]:
        admission = self._queue.get()
        try:
            if admission is None:
                return None

            # A cancelled waiter does not withdraw the job
            if admission.claimed.set_running_or_notify_cancel():
                admission.claimed.set_result(admission.path)
            return admission.path
        finally:
            self._queue.task_done()

    def close(self) -> None:
        """Refuse new jobs and wake the consumer with the sentinel.

        Jobs admitted but not yet claimed are dropped; their futures fail
        with QueueClosedError. A job the worker already claimed is unaffected.
        """
        with self._lock:
            if self._closed.is_set():
                return
            self._closed.set()
            self._drop_pending()
            self._queue.put(None)

    def pending(self) -> int:
        """Number of admitted jobs not yet claimed."""
        return self._queue.qsize()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def _drop_pending(self) -> None:
        while True:
            try:
                admission = self._queue.get_nowait()
            except queue.Empty:
                return

            logger.warning(f"Dropping unclaimed transcode job: {admission.path}")
            if admission.claimed.set_running_or_notify_cancel():
                admission.claimed.set_exception(
                    QueueClosedError(f"Transcode queue closed before {admission.path} was claimed"))
            self._queue.task_done()
