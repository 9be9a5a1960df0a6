from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

RGB = Tuple[int, int, int]

WHITE: RGB = (255, 255, 255)
BLACK: RGB = (0, 0, 0)


def caption_color_for(frame_rgb: RGB) -> RGB:
    """Light text on dark frames, dark text on light frames."""
    r, g, b = frame_rgb
    luminance = (0.2126 * r + 0.7152 * g + 0.0722 * b) / 255
    return BLACK if luminance >= 0.5 else WHITE


class FrameColor(Enum):
    LIGHT = WHITE
    DARK = BLACK

    @property
    def rgb(self) -> RGB:
        return self.value

    @property
    def caption_rgb(self) -> RGB:
        return caption_color_for(self.value)

    def toggled(self) -> "FrameColor":
        return FrameColor.DARK if self is FrameColor.LIGHT else FrameColor.LIGHT

    @classmethod
    def from_name(cls, name: str) -> "FrameColor":
        aliases = {"light": cls.LIGHT, "white": cls.LIGHT, "dark": cls.DARK, "black": cls.DARK}
        try:
            return aliases[name.strip().lower()]
        except KeyError:
            raise ValueError(f"Unknown frame color: {name!r}") from None


@dataclass(frozen=True)
class StripLayout:
    canvas_width: int = 260
    photo_size: Tuple[int, int] = (220, 220)  # (width, height)
    spacing: int = 16
    top_padding: int = 20
    bottom_padding: int = 40
    date_height: int = 24

    card_corner_radius: int = 0
    photo_corner_radius: int = 3

    # Caption band: starts this far below the last photo, drawn this tall
    caption_offset: int = 10
    caption_band_height: int = 40

    # Typography (best-effort; font loading falls back to PIL default)
    font_path: Optional[Path] = None
    font_size: int = 20

    # Pixels per layout unit
    scale: int = 1

    def canvas_size(self, count: int) -> Tuple[int, int]:
        photo_h = self.photo_size[1]
        height = (
                self.top_padding
                + photo_h * count
                + self.spacing * (count - 1)
                + self.date_height
                + self.bottom_padding
        )
        return self.canvas_width * self.scale, height * self.scale

    def photo_origin(self, index: int) -> Tuple[int, int]:
        """Top-left of photo slot `index`, in layout units."""
        photo_w, photo_h = self.photo_size
        x = (self.canvas_width - photo_w) // 2
        y = self.top_padding + index * (photo_h + self.spacing)
        return x, y

    def caption_top(self, count: int) -> int:
        last_bottom = self.top_padding + count * (self.photo_size[1] + self.spacing) - self.spacing
        return last_bottom + self.caption_offset
