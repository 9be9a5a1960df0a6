from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from PIL import Image

WORKING_MODE = "RGB"

# Pillow plugins report broken or truncated data with any of these.
DECODE_ERRORS = (OSError, SyntaxError, ValueError)


class Orientation(Enum):
    """Display orientation of captured pixels, valued by EXIF orientation tag."""

    UP = 1
    UP_MIRRORED = 2
    DOWN = 3
    DOWN_MIRRORED = 4
    LEFT_MIRRORED = 5
    RIGHT = 6
    RIGHT_MIRRORED = 7
    LEFT = 8

    @property
    def swaps_axes(self) -> bool:
        return self.value >= 5

    @property
    def transpose_method(self) -> Optional[Image.Transpose]:
        return _TRANSPOSE_FOR_ORIENTATION.get(self)

    @classmethod
    def from_exif(cls, value: Optional[int]) -> "Orientation":
        try:
            return cls(int(value)) if value is not None else cls.UP
        except (TypeError, ValueError):
            return cls.UP


_TRANSPOSE_FOR_ORIENTATION = {
    Orientation.UP_MIRRORED: Image.Transpose.FLIP_LEFT_RIGHT,
    Orientation.DOWN: Image.Transpose.ROTATE_180,
    Orientation.DOWN_MIRRORED: Image.Transpose.FLIP_TOP_BOTTOM,
    Orientation.LEFT_MIRRORED: Image.Transpose.TRANSPOSE,
    Orientation.RIGHT: Image.Transpose.ROTATE_270,
    Orientation.RIGHT_MIRRORED: Image.Transpose.TRANSVERSE,
    Orientation.LEFT: Image.Transpose.ROTATE_90,
}


@dataclass(frozen=True)
class Bitmap:
    """A captured or processed frame.

    The pixels are stored as captured; `orientation` and `scale` travel with
    them so that every transform can hand the same tags to its output.
    Consumers never mutate `image` in place.
    """

    image: Image.Image
    scale: float = 1.0
    orientation: Orientation = Orientation.UP

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size

    @property
    def display_size(self) -> Tuple[int, int]:
        w, h = self.image.size
        return (h, w) if self.orientation.swaps_axes else (w, h)

    def with_image(self, image: Image.Image) -> "Bitmap":
        return replace(self, image=image)

    def decode(self) -> Image.Image:
        """Return the pixels in the RGB working color space.

        Raises one of DECODE_ERRORS when the underlying data cannot be
        decoded (truncated files, unsupported modes).
        """
        return self.image.convert(WORKING_MODE)

    def upright(self) -> Image.Image:
        """Decoded pixels rotated/mirrored into display orientation."""
        pixels = self.decode()
        method = self.orientation.transpose_method
        if method is None:
            return pixels
        return pixels.transpose(method)
