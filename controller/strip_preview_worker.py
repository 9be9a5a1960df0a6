import logging
import threading
from typing import Callable, Optional, Tuple

from PIL import Image

from controller.output_session import StripRequest, build_strip
from imaging.strip_errors import StripCreationError

logger = logging.getLogger(__name__)


class StripPreviewWorker:
    """
    Builds strips off the calling thread.

    IMPORTANT:
    - Only the newest request is ever built; older pending requests are replaced.
    - A finished build is published only if no newer request arrived meanwhile.
    - An unavailable strip (None) never replaces the last published one.
    - A build that raises is logged and dropped; the worker keeps serving.
    """

    def __init__(self, build: Callable[[StripRequest], Optional[Image.Image]] = build_strip):
        self._build = build
        self._lock = threading.Lock()
        self._wake = threading.Event()
        self._idle = threading.Event()
        self._idle.set()

        self._generation = 0
        self._pending: Optional[Tuple[int, StripRequest]] = None
        self._latest: Optional[Image.Image] = None
        self._latest_generation = 0

        self._thread: Optional[threading.Thread] = None
        self._running = False

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._running = False
        self._wake.set()

    # ---------- Public API ----------

    def request(self, request: StripRequest) -> int:
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._pending = (generation, request)
            self._idle.clear()
        self._wake.set()
        return generation

    def latest(self) -> Optional[Image.Image]:
        with self._lock:
            return self._latest

    def latest_generation(self) -> int:
        with self._lock:
            return self._latest_generation

    def wait_idle(self, timeout: float = 5.0) -> bool:
        return self._idle.wait(timeout)

    # ---------- Worker loop ----------

    def _run(self) -> None:
        while self._running:
            self._wake.wait(timeout=0.1)
            self._wake.clear()

            with self._lock:
                job = self._pending
                self._pending = None
                if job is None:
                    self._idle.set()
                    continue

            generation, request = job
            try:
                strip = self._build(request)
            except StripCreationError as e:
                logger.warning("Preview build %d rejected: %s", generation, e)
                strip = None
            except Exception:
                # One failed build must not take the loop down with it
                logger.exception("Preview build %d failed", generation)
                strip = None

            with self._lock:
                if generation != self._generation:
                    logger.debug("Discarding stale preview %d (current %d)", generation, self._generation)
                elif strip is not None:
                    self._latest = strip
                    self._latest_generation = generation
                if self._pending is None:
                    self._idle.set()
