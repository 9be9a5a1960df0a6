from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from imaging.bitmap import DECODE_ERRORS, Bitmap
from imaging.render_context import RenderContext, scoped_context
from imaging.strip_errors import RasterUnavailableError, StripCreationError
from imaging.strip_layout import RGB, FrameColor, StripLayout, caption_color_for

logger = logging.getLogger(__name__)

DateFormatter = Callable[[date], str]


def format_long_date(day: date) -> str:
    """Long-style date, e.g. 'October 19, 2026'."""
    return f"{day:%B} {day.day}, {day.year}"


def _load_font(font_path: Optional[Path], size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    if font_path:
        try:
            return ImageFont.truetype(str(font_path), size)
        except OSError:
            logger.warning("Could not load caption font %s, falling back", font_path)

    try:
        return ImageFont.truetype("DejaVuSans.ttf", size)
    except OSError:
        return ImageFont.load_default()


def _aspect_fill(img: Image.Image, target_size: Tuple[int, int]) -> Image.Image:
    """Scale `img` to cover `target_size` completely, then center-crop.

    The longer dimension is always cropped; nothing is letterboxed.
    """
    target_w, target_h = target_size
    src_w, src_h = img.size

    if src_w <= 0 or src_h <= 0:
        raise StripCreationError("Invalid image dimensions")

    scale = max(target_w / src_w, target_h / src_h)
    new_w = max(target_w, int(round(src_w * scale)))
    new_h = max(target_h, int(round(src_h * scale)))

    if (new_w, new_h) != img.size:
        img = img.resize((new_w, new_h), resample=Image.Resampling.LANCZOS)

    left = (new_w - target_w) // 2
    top = (new_h - target_h) // 2
    return img.crop((left, top, left + target_w, top + target_h))


def _rounded_mask(size: Tuple[int, int], radius: int) -> Image.Image:
    mask = Image.new("L", size, 0)
    ImageDraw.Draw(mask).rounded_rectangle((0, 0, size[0] - 1, size[1] - 1), radius=radius, fill=255)
    return mask


def _validate_frames(frames: Sequence[Bitmap], expected_count: Optional[int]) -> None:
    if not frames:
        raise StripCreationError("No frames provided for strip")
    if expected_count is not None and len(frames) != expected_count:
        raise StripCreationError(f"Strip requires exactly {expected_count} photos")

    sizes = {frame.display_size for frame in frames}
    if len(sizes) > 1:
        raise StripCreationError("Frames must share the same dimensions")


def _new_card(
        context: RenderContext,
        size: Tuple[int, int],
        frame_rgb: RGB,
        corner_radius: int,
) -> Image.Image:
    if corner_radius <= 0:
        return context.acquire_canvas(size, frame_rgb)

    card = context.acquire_canvas(size, (0, 0, 0, 0), mode="RGBA")
    ImageDraw.Draw(card).rounded_rectangle(
        (0, 0, size[0] - 1, size[1] - 1),
        radius=corner_radius,
        fill=(*frame_rgb, 255),
    )
    return card


def _draw_caption(
        strip: Image.Image,
        *,
        text: str,
        layout: StripLayout,
        top: int,
        fill: RGB,
) -> None:
    draw = ImageDraw.Draw(strip)
    font = _load_font(layout.font_path, layout.font_size * layout.scale)
    bbox = draw.textbbox((0, 0), text, font=font)
    text_w = bbox[2] - bbox[0]
    x = max(0, (strip.width - text_w) // 2) - bbox[0]
    draw.text((x, top * layout.scale), text, fill=fill, font=font)


def render_strip(
        frames: Sequence[Bitmap],
        frame_color: FrameColor | RGB,
        *,
        layout: StripLayout = StripLayout(),
        show_date: bool = True,
        today: Optional[date] = None,
        date_formatter: DateFormatter = format_long_date,
        expected_count: Optional[int] = None,
        context: Optional[RenderContext] = None,
) -> Optional[Image.Image]:
    """Stack `frames` top to bottom into one bordered strip.

    The caption band is reserved whether or not `show_date` is set, so the
    strip size depends only on the frame count and layout.

    Returns None when no drawing surface could be acquired.
    """
    _validate_frames(frames, expected_count)
    frame_rgb = frame_color.rgb if isinstance(frame_color, FrameColor) else tuple(frame_color)

    count = len(frames)
    s = layout.scale
    slot = (layout.photo_size[0] * s, layout.photo_size[1] * s)

    with scoped_context(context) as ctx:
        try:
            strip = _new_card(ctx, layout.canvas_size(count), frame_rgb, layout.card_corner_radius * s)
            mask = ctx.cached(
                ("photo_mask", slot, layout.photo_corner_radius * s),
                lambda: _rounded_mask(slot, layout.photo_corner_radius * s),
            )
        except RasterUnavailableError as e:
            logger.error("Strip unavailable: %s", e)
            return None

        for index, frame in enumerate(frames):
            try:
                pixels = frame.upright()
            except DECODE_ERRORS as e:
                logger.warning("Skipping undecodable frame %d of %d: %s", index + 1, count, e)
                continue

            tile = _aspect_fill(pixels, slot)
            x, y = layout.photo_origin(index)
            strip.paste(tile, (x * s, y * s), mask)

    if show_date:
        _draw_caption(
            strip,
            text=date_formatter(today or date.today()),
            layout=layout,
            top=layout.caption_top(count),
            fill=caption_color_for(frame_rgb),
        )

    return strip
