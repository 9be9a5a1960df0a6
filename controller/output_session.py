"""
Output session

Owns the post-capture selection (effect, frame color, date caption) for one
booth session and rebuilds the strip from the untouched captured frames
whenever it is asked to.

Goals:
- Captured frames are never modified; every effect starts from the originals
- Only the frames for the current effect are kept around
- An unavailable strip never reaches the library or a share file
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from PIL import Image

from controller.photo_library import PhotoLibrary
from controller.settings import BoothSettings
from controller.share import write_share_file
from imaging.bitmap import Bitmap
from imaging.effects import EffectKind, apply_effect_to_sequence
from imaging.render_context import RenderContext, scoped_context
from imaging.strip_errors import StripCreationError
from imaging.strip_layout import FrameColor, StripLayout
from imaging.strip_renderer import render_strip

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StripRequest:
    """Everything one strip build depends on, captured at request time."""

    frames: Tuple[Bitmap, ...]
    effect: EffectKind
    frame_color: FrameColor
    show_date: bool
    layout: StripLayout
    expected_count: int
    today: date


def build_strip(
        request: StripRequest,
        *,
        context: Optional[RenderContext] = None,
        filtered: Optional[Sequence[Bitmap]] = None,
) -> Optional[Image.Image]:
    """Run the effect over every frame, then composite them in capture order."""
    with scoped_context(context) as ctx:
        if filtered is None:
            filtered = apply_effect_to_sequence(request.frames, request.effect, context=ctx)
        return render_strip(
            filtered,
            request.frame_color,
            layout=request.layout,
            show_date=request.show_date,
            today=request.today,
            expected_count=request.expected_count,
            context=ctx,
        )


class OutputSession:
    def __init__(
            self,
            frames: Sequence[Bitmap],
            settings: BoothSettings = BoothSettings(),
            *,
            today: Callable[[], date] = date.today,
    ):
        if len(frames) != settings.total_shots:
            raise StripCreationError(
                f"Expected {settings.total_shots} frames, got {len(frames)}"
            )

        self._frames: Tuple[Bitmap, ...] = tuple(frames)
        self._settings = settings
        self._today = today

        self.effect = settings.initial_effect
        self.frame_color = settings.frame_color
        self.show_date = settings.show_date

        # (effect, frames) for the current effect only
        self._filtered: Optional[Tuple[EffectKind, List[Bitmap]]] = None

    # ---------- Selection ----------

    @property
    def frames(self) -> Tuple[Bitmap, ...]:
        return self._frames

    def next_effect(self) -> EffectKind:
        self.effect = self.effect.next()
        return self.effect

    def select_effect(self, effect: EffectKind) -> None:
        self.effect = effect

    def toggle_frame(self) -> FrameColor:
        self.frame_color = self.frame_color.toggled()
        return self.frame_color

    def set_show_date(self, show_date: bool) -> None:
        self.show_date = show_date

    def snapshot(self) -> StripRequest:
        return StripRequest(
            frames=self._frames,
            effect=self.effect,
            frame_color=self.frame_color,
            show_date=self.show_date,
            layout=self._settings.layout,
            expected_count=self._settings.total_shots,
            today=self._today(),
        )

    # ---------- Rendering ----------

    def filtered_frames(self, context: Optional[RenderContext] = None) -> List[Bitmap]:
        if self._filtered is not None and self._filtered[0] is self.effect:
            return list(self._filtered[1])

        filtered = apply_effect_to_sequence(self._frames, self.effect, context=context)
        self._filtered = (self.effect, filtered)
        return list(filtered)

    def render(self) -> Optional[Image.Image]:
        with RenderContext() as context:
            return build_strip(
                self.snapshot(),
                context=context,
                filtered=self.filtered_frames(context),
            )

    # ---------- Export ----------

    def collect(self, library: PhotoLibrary) -> Optional[Path]:
        strip = self.render()
        if strip is None:
            logger.error("Strip unavailable, nothing saved to %s", library.root)
            return None
        return library.save(strip, day=self._today())

    def share(self, directory: Optional[Path] = None) -> Optional[Path]:
        strip = self.render()
        if strip is None:
            logger.error("Strip unavailable, nothing to share")
            return None
        return write_share_file(strip, directory, quality=self._settings.jpeg_quality)
