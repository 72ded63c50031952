"""Background live reconstruction loop.

A :class:`LiveWorker` repeatedly pulls the newest frame from a source,
reconstructs it through a :class:`~dhmlib.reconstruction.session.ReconstructionSession`
and publishes the result. Only the most recent result is kept; a slow
consumer simply misses intermediate frames.
"""

import logging
import queue
import threading
import time
from typing import Callable, Optional

from .pipeline import Frame, ReconstructionOutput
from .session import ReconstructionSession

__all__ = ["LatestSlot", "LiveWorker"]

logger = logging.getLogger(__name__)

# Pause between iterations (s)
LOOP_INTERVAL = 0.01

# Iterations per frame-rate report
FPS_BATCH = 5


class LatestSlot:
    """Single-slot channel holding only the newest item.

    ``put`` never blocks: an unread item is discarded in favour of the
    new one.
    """

    def __init__(self):
        self._queue: "queue.Queue" = queue.Queue(maxsize=1)
        self._lock = threading.Lock()

    def put(self, item) -> None:
        with self._lock:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                pass
            self._queue.put_nowait(item)

    def get(self, timeout: Optional[float] = None):
        """Wait up to ``timeout`` seconds for an item; None if none arrived."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def get_nowait(self):
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None


class LiveWorker:
    """Threaded reconstruction loop.

    Args:
        session: Pipeline owner. Commands may be submitted to it (or via
            :meth:`submit`) from any thread while the worker runs.
        source: Callable returning the current frame, or None when no
            more frames are available.
        sink: Optional callable receiving every reconstruction output on
            the worker thread.
        interval: Pause between iterations in seconds.
        fps_batch: Iterations per frame-rate measurement.
        on_fps: Optional callable receiving each frame-rate measurement.

    Example:
        ```python
        worker = LiveWorker(session, camera.latest_frame)
        worker.start()
        session.submit(StepFocus(+1))
        output = worker.latest.get(timeout=1.0)
        worker.stop()
        ```
    """

    def __init__(
        self,
        session: ReconstructionSession,
        source: Callable[[], Optional[Frame]],
        sink: Optional[Callable[[ReconstructionOutput], None]] = None,
        interval: float = LOOP_INTERVAL,
        fps_batch: int = FPS_BATCH,
        on_fps: Optional[Callable[[float], None]] = None,
    ):
        if interval < 0:
            raise ValueError(f"interval must be non-negative, got {interval}")
        if fps_batch < 1:
            raise ValueError(f"fps_batch must be at least 1, got {fps_batch}")

        self.session = session
        self.source = source
        self.sink = sink
        self.interval = interval
        self.fps_batch = fps_batch
        self.on_fps = on_fps

        self.latest = LatestSlot()
        self.fps: Optional[float] = None
        self.error: Optional[BaseException] = None
        self.frames = 0

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def submit(self, command) -> None:
        """Forward a command to the session."""
        self.session.submit(command)

    def start(self) -> None:
        """Start the loop on a daemon thread.

        Raises:
            RuntimeError: The worker is already running.
        """
        if self.running:
            raise RuntimeError("Live worker is already running")

        self._stop.clear()
        self.error = None
        self._thread = threading.Thread(
            target=self._run, name="dhm-live", daemon=True
        )
        self._thread.start()
        logger.info("Live reconstruction started")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the loop to end and wait for the thread to finish."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Live worker did not stop within %s s", timeout)
                return
            self._thread = None
        logger.info("Live reconstruction stopped")

    def _report_fps(self, fps: float) -> None:
        self.fps = fps
        logger.debug("Live reconstruction at %.1f fps", fps)
        if self.on_fps is not None:
            self.on_fps(fps)

    def _run(self) -> None:
        count = 0
        elapsed = 0.0
        while not self._stop.is_set():
            start = time.perf_counter()
            try:
                frame = self.source()
                if frame is None:
                    logger.warning("Frame source is exhausted; stopping")
                    break
                output = self.session.process(frame)
                self.latest.put(output)
                if self.sink is not None:
                    self.sink(output)
            except Exception as exc:
                logger.exception("Live reconstruction failed")
                self.error = exc
                break

            self.frames += 1
            if self._stop.wait(self.interval):
                break

            count += 1
            elapsed += time.perf_counter() - start
            if count == self.fps_batch:
                if elapsed > 0:
                    self._report_fps(self.fps_batch / elapsed)
                count = 0
                elapsed = 0.0
