from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Hashable, Iterator, Optional, Tuple

from PIL import Image

from imaging.strip_errors import RasterUnavailableError

logger = logging.getLogger(__name__)


class RenderContext:
    """Reusable drawing resource shared by the effect and strip renderers.

    Holds lookup tables and masks keyed by their parameters, and hands out
    raster surfaces. Carries no frame data between calls. Not safe for
    concurrent use: one caller at a time.
    """

    # ~64 MP, far beyond any strip or captured frame we expect to handle.
    DEFAULT_MAX_PIXELS = 64_000_000

    def __init__(self, max_pixels: int = DEFAULT_MAX_PIXELS):
        self.max_pixels = max_pixels
        self._cache: Dict[Hashable, Any] = {}
        self._closed = False

    def __enter__(self) -> "RenderContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def cached(self, key: Hashable, factory: Callable[[], Any]) -> Any:
        if self._closed:
            raise RasterUnavailableError("Render context is closed")
        try:
            return self._cache[key]
        except KeyError:
            value = factory()
            self._cache[key] = value
            return value

    def acquire_canvas(
            self,
            size: Tuple[int, int],
            color,
            mode: str = "RGB",
    ) -> Image.Image:
        if self._closed:
            raise RasterUnavailableError("Render context is closed")

        width, height = size
        if width <= 0 or height <= 0:
            raise RasterUnavailableError(f"Invalid canvas size {width}x{height}")
        if width * height > self.max_pixels:
            raise RasterUnavailableError(
                f"Canvas {width}x{height} exceeds the {self.max_pixels} pixel limit"
            )

        try:
            return Image.new(mode, (width, height), color)
        except MemoryError as e:
            raise RasterUnavailableError(f"Unable to allocate {width}x{height} canvas") from e

    def close(self) -> None:
        if not self._closed:
            logger.debug("Releasing render context (%d cached entries)", len(self._cache))
        self._cache.clear()
        self._closed = True


@contextmanager
def scoped_context(context: Optional[RenderContext] = None) -> Iterator[RenderContext]:
    """Yield `context` untouched, or a private one released on every exit path."""
    if context is not None:
        yield context
        return

    with RenderContext() as owned:
        yield owned
