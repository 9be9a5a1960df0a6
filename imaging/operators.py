"""
Pure image operators used to build effect chains.

Every operator takes an RGB image and returns a new RGB image of the same
size. Lookup tables and masks are memoised on the RenderContext.
"""
from __future__ import annotations

import math
from typing import Callable, Dict, List, Sequence, Tuple

from PIL import Image, ImageChops, ImageEnhance, ImageFilter, ImageOps

from imaging.render_context import RenderContext

Operator = Callable[..., Image.Image]
CurvePoint = Tuple[float, float]
UnitColor = Tuple[float, float, float]

# Classic sepia transform, applied as an RGB -> RGB conversion matrix.
SEPIA_MATRIX = (
    0.393, 0.769, 0.189, 0,
    0.349, 0.686, 0.168, 0,
    0.272, 0.534, 0.131, 0,
)

# Red/blue gain per unit of warmth.
WARMTH_GAIN = 0.12


def _clamp_byte(value: float) -> int:
    return max(0, min(255, int(round(value))))


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


def _unit_to_rgb(color: UnitColor) -> Tuple[int, int, int]:
    r, g, b = color
    return _clamp_byte(r * 255), _clamp_byte(g * 255), _clamp_byte(b * 255)


def _curve_lut(points: Sequence[CurvePoint]) -> List[int]:
    ordered = sorted(points)
    lut = []
    for v in range(256):
        t = v / 255
        if t <= ordered[0][0]:
            y = ordered[0][1]
        elif t >= ordered[-1][0]:
            y = ordered[-1][1]
        else:
            y = ordered[-1][1]
            for (x0, y0), (x1, y1) in zip(ordered, ordered[1:]):
                if x0 <= t <= x1:
                    y = y0 if x1 == x0 else y0 + (y1 - y0) * (t - x0) / (x1 - x0)
                    break
        lut.append(_clamp_byte(_clamp_unit(y) * 255))
    return lut


def _gain_lut(gain: float) -> List[int]:
    return [_clamp_byte(v * gain) for v in range(256)]


def _offset_lut(offset: float) -> List[int]:
    return [_clamp_byte(v + offset * 255) for v in range(256)]


def monochrome(image: Image.Image, context: RenderContext) -> Image.Image:
    return ImageOps.grayscale(image).convert("RGB")


def sepia_tone(image: Image.Image, context: RenderContext, *, intensity: float) -> Image.Image:
    toned = image.convert("RGB", SEPIA_MATRIX)
    return Image.blend(image, toned, _clamp_unit(intensity))


def tone_curve(
        image: Image.Image,
        context: RenderContext,
        *,
        points: Tuple[CurvePoint, ...],
) -> Image.Image:
    lut = context.cached(("tone_curve", points), lambda: _curve_lut(points))
    return image.point(lut * 3)


def bloom(image: Image.Image, context: RenderContext, *, intensity: float, radius: float) -> Image.Image:
    blurred = image.filter(ImageFilter.GaussianBlur(radius))
    glow = ImageChops.screen(image, blurred)
    return Image.blend(image, glow, _clamp_unit(intensity))


def unsharp_mask(image: Image.Image, context: RenderContext, *, intensity: float, radius: float) -> Image.Image:
    return image.filter(
        ImageFilter.UnsharpMask(radius=radius, percent=int(round(intensity * 100)), threshold=0)
    )


def _vignette_mask(size: Tuple[int, int], intensity: float, falloff: float) -> Image.Image:
    # radial_gradient is 256x256: 0 at the center, 255 at (and beyond) radius 128.
    gradient = Image.radial_gradient("L").resize(size, resample=Image.Resampling.BILINEAR)
    strength = _clamp_unit(intensity)
    lut = [_clamp_byte(255 * strength * (v / 255) ** falloff) for v in range(256)]
    return gradient.point(lut)


def vignette(image: Image.Image, context: RenderContext, *, intensity: float, falloff: float) -> Image.Image:
    mask = context.cached(
        ("vignette", image.size, intensity, falloff),
        lambda: _vignette_mask(image.size, intensity, falloff),
    )
    black = Image.new("RGB", image.size, (0, 0, 0))
    return Image.composite(black, image, mask)


def temperature_shift(image: Image.Image, context: RenderContext, *, warmth: float) -> Image.Image:
    def build() -> List[int]:
        red = _gain_lut(1 + WARMTH_GAIN * warmth)
        blue = _gain_lut(1 - WARMTH_GAIN * warmth)
        return red + list(range(256)) + blue

    return image.point(context.cached(("temperature", warmth), build))


def exposure_adjust(image: Image.Image, context: RenderContext, *, ev: float) -> Image.Image:
    lut = context.cached(("exposure", ev), lambda: _gain_lut(2 ** ev))
    return image.point(lut * 3)


def _motion_kernel(radius: float, angle: float) -> Tuple[ImageFilter.Kernel, int]:
    # Pillow kernels are 3x3 or 5x5; wider blurs repeat the 5x5 pass.
    size = 3 if radius <= 1 else 5
    half = size // 2
    theta = math.radians(angle)
    cells = {
        (int(round(t * math.cos(theta))), int(round(t * math.sin(theta))))
        for t in range(-half, half + 1)
    }
    weights = [0] * (size * size)
    for dx, dy in cells:
        weights[(dy + half) * size + (dx + half)] = 1
    passes = max(1, int(math.ceil(radius / half)))
    return ImageFilter.Kernel((size, size), weights, scale=len(cells)), passes


def motion_blur(image: Image.Image, context: RenderContext, *, radius: float, angle: float) -> Image.Image:
    if radius <= 0:
        return image.copy()

    kernel, passes = context.cached(("motion_blur", radius, angle), lambda: _motion_kernel(radius, angle))
    out = image
    for _ in range(passes):
        out = out.filter(kernel)
    return out


def color_controls(
        image: Image.Image,
        context: RenderContext,
        *,
        brightness: float,
        saturation: float,
        contrast: float,
) -> Image.Image:
    out = ImageEnhance.Color(image).enhance(saturation)
    if brightness:
        lut = context.cached(("brightness", brightness), lambda: _offset_lut(brightness))
        out = out.point(lut * 3)
    return ImageEnhance.Contrast(out).enhance(contrast)


def color_monochrome(
        image: Image.Image,
        context: RenderContext,
        *,
        color: UnitColor,
        intensity: float,
) -> Image.Image:
    tinted = ImageOps.colorize(ImageOps.grayscale(image), black=(0, 0, 0), white=_unit_to_rgb(color))
    return Image.blend(image, tinted.convert("RGB"), _clamp_unit(intensity))


OPERATORS: Dict[str, Operator] = {
    "monochrome": monochrome,
    "sepia_tone": sepia_tone,
    "tone_curve": tone_curve,
    "bloom": bloom,
    "unsharp_mask": unsharp_mask,
    "vignette": vignette,
    "temperature_shift": temperature_shift,
    "exposure_adjust": exposure_adjust,
    "motion_blur": motion_blur,
    "color_controls": color_controls,
    "color_monochrome": color_monochrome,
}
