"""Single-consumer transcode worker."""

import time
import logging
import threading
from typing import Callable, Optional

from ..models.results import TranscodeResult
from .queue import TranscodeQueue

logger = logging.getLogger(__name__)


class TranscodeWorker:
    """Drains the transcode queue on one background thread, one job at a time.

    A failed job is logged and forgotten; the loop always moves on to the
    next job. A stuck ffmpeg blocks every job queued behind it.
    """

    def __init__(self,
                 job_queue: TranscodeQueue,
                 transcoder,
                 result_callback: Optional[Callable[[TranscodeResult], None]] = None,
                 name: str = "transcode"):
        """Initialize worker.

        Args:
            job_queue: Queue to claim source paths from
            transcoder: Object with ``transcode(path) -> TranscodeResult``
            result_callback: Called with every result, successful or not
            name: Thread name
        """
        self.job_queue = job_queue
        self.transcoder = transcoder
        self.result_callback = result_callback
        self.name = name

        self.worker_thread: Optional[threading.Thread] = None
        self.jobs_processed = 0
        self.jobs_failed = 0
        self.current_job: Optional[str] = None

    def start(self) -> None:
        """Create and start the worker thread."""
        if self.worker_thread is not None:
            return

        prepare = getattr(self.transcoder, "prepare", None)
        if prepare:
            prepare()

        self.worker_thread = threading.Thread(target=self._worker_loop, name=f"worker_{self.name}")
        self.worker_thread.daemon = True
        self.worker_thread.start()
        logger.info(f"Started {self.name} worker")

    def _worker_loop(self) -> None:
        logger.debug(f"Worker thread {threading.current_thread().name} starting")

        while True:
            source = self.job_queue.claim()
            if source is None:
                logger.debug(f"Worker {self.name} received sentinel, exiting.")
                break

            self.current_job = source
            try:
                self._run_job(source)
            except Exception as e:
                self.jobs_failed += 1
                logger.error(f"Unhandled exception while transcoding {source}: {e}", exc_info=True)
            finally:
                self.current_job = None
                self.jobs_processed += 1

    def _run_job(self, source: str) -> None:
        logger.info(f"Transcode started: {source}")
        result = self.transcoder.transcode(source)

        if result.success:
            logger.info(f"Transcode finished: {result.output} ({result.duration_seconds:.1f}s)")
        else:
            self.jobs_failed += 1
            logger.error(f"Error: {result.error} (source: {source})")

        if self.result_callback:
            try:
                self.result_callback(result)
            except Exception as e:
                logger.warning(f"Transcode result callback failed for {source}: {e}")

    def shutdown(self, timeout: float = 30.0) -> bool:
        """Close the queue and wait for the worker thread to exit.

        Jobs still waiting for hand-off are dropped and their producers get
        QueueClosedError; a transcode already in progress is allowed to
        finish within ``timeout``.

        Returns:
            True if the worker thread terminated in time
        """
        logger.info(f"Shutting down {self.name} worker...")
        self.job_queue.close()

        if self.worker_thread is None:
            return True

        start_time = time.time()
        self.worker_thread.join(timeout)
        if self.worker_thread.is_alive():
            logger.warning(
                f"Worker thread {self.worker_thread.name} did not terminate within {timeout}s "
                f"(current job: {self.current_job})")
            return False

        logger.info(f"{self.name} worker shutdown complete after {time.time() - start_time:.1f}s, "
                    f"{self.jobs_processed} jobs processed, {self.jobs_failed} failed.")
        return True
