from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from PIL import Image

from imaging.bitmap import DECODE_ERRORS, Bitmap
from imaging.operators import OPERATORS
from imaging.render_context import RenderContext, scoped_context
from imaging.strip_errors import RasterUnavailableError

logger = logging.getLogger(__name__)


class EffectKind(Enum):
    ORIGINAL = "original"
    SEPIA = "sepia"
    FADED_MONO = "fadedMono"
    SOFT_GLOW = "softGlow"
    MOTION_BLURRED = "motionBlurred"
    VINTAGE = "vintage"
    NOIR = "noir"

    def next(self) -> "EffectKind":
        members = list(EffectKind)
        return members[(members.index(self) + 1) % len(members)]

    @classmethod
    def from_name(cls, name: str) -> "EffectKind":
        try:
            return cls(name)
        except ValueError:
            pass
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown effect: {name!r}") from None


@dataclass(frozen=True)
class EffectStep:
    operator: str
    params: Tuple[Tuple[str, Any], ...] = ()

    @property
    def kwargs(self) -> Dict[str, Any]:
        return dict(self.params)


def step(operator: str, **params: Any) -> EffectStep:
    if operator not in OPERATORS:
        raise KeyError(f"Unknown operator: {operator}")
    return EffectStep(operator=operator, params=tuple(sorted(params.items())))


EFFECT_CHAINS: Mapping[EffectKind, Tuple[EffectStep, ...]] = {
    EffectKind.ORIGINAL: (),
    EffectKind.SEPIA: (
        step("monochrome"),
        step("sepia_tone", intensity=0.6),
        step("bloom", intensity=0.3, radius=2.0),
    ),
    EffectKind.FADED_MONO: (
        step("monochrome"),
        step("tone_curve", points=((0.0, 0.1), (0.25, 0.3), (0.5, 0.5), (0.75, 0.75), (1.0, 1.0))),
        step("bloom", intensity=0.5, radius=5.0),
        step("unsharp_mask", intensity=0.3, radius=1.2),
        step("vignette", intensity=0.4, falloff=2.0),
    ),
    EffectKind.SOFT_GLOW: (
        step("color_controls", brightness=0.09, saturation=1.1, contrast=1.1),
        step("color_monochrome", color=(1.0, 0.7, 0.9), intensity=0.1),
        step("tone_curve", points=((0.0, 0.0), (0.25, 0.2), (0.5, 0.5), (0.75, 0.8), (1.0, 1.0))),
        step("bloom", intensity=0.4, radius=6.0),
        step("temperature_shift", warmth=0.15),
    ),
    EffectKind.MOTION_BLURRED: (
        step("monochrome"),
        step("color_monochrome", color=(0.3, 0.4, 0.7), intensity=0.3),
        step("motion_blur", radius=2, angle=0.0),
        step("color_controls", brightness=0.08, saturation=0.5, contrast=1.2),
        step("exposure_adjust", ev=-0.2),
        step("vignette", intensity=0.5, falloff=2.0),
    ),
    EffectKind.VINTAGE: (
        step("color_controls", brightness=0.02, saturation=0.75, contrast=1.15),
        step("sepia_tone", intensity=0.3),
        step("tone_curve", points=((0.0, 0.08), (0.25, 0.28), (0.5, 0.52), (0.75, 0.76), (1.0, 0.95))),
        step("temperature_shift", warmth=0.2),
        step("vignette", intensity=0.45, falloff=2.2),
    ),
    EffectKind.NOIR: (
        step("monochrome"),
        step("color_controls", brightness=-0.02, saturation=1.0, contrast=1.4),
        step("tone_curve", points=((0.0, 0.0), (0.25, 0.15), (0.5, 0.5), (0.75, 0.85), (1.0, 1.0))),
        step("vignette", intensity=0.6, falloff=1.8),
    ),
}


def _run_chain(
        source: Image.Image,
        chain: Sequence[EffectStep],
        context: RenderContext,
) -> Optional[Image.Image]:
    out = source
    for effect_step in chain:
        out = OPERATORS[effect_step.operator](out, context, **effect_step.kwargs)
        if out is None:
            logger.warning("Operator %s produced no output", effect_step.operator)
            return None
    return out


def apply_effect(
        bitmap: Bitmap,
        effect: EffectKind,
        *,
        context: Optional[RenderContext] = None,
) -> Bitmap:
    """Apply `effect` to `bitmap`, returning a new bitmap of the same size.

    Never raises for bad pixel data: an undecodable source or a failing
    operator yields the source bitmap unchanged.
    """
    chain = EFFECT_CHAINS[effect]
    if not chain:
        return bitmap

    try:
        source = bitmap.decode()
    except DECODE_ERRORS as e:
        logger.warning("Cannot decode frame for %s effect, leaving it untouched: %s", effect.value, e)
        return bitmap

    with scoped_context(context) as ctx:
        try:
            output = _run_chain(source, chain, ctx)
        except (OSError, ValueError, MemoryError, RasterUnavailableError) as e:
            logger.warning("Effect %s failed, leaving frame untouched: %s", effect.value, e)
            return bitmap

    if output is None:
        return bitmap

    if output.size != source.size:
        output = output.crop((0, 0, *source.size))
    return bitmap.with_image(output)


def apply_effect_to_sequence(
        frames: Sequence[Bitmap],
        effect: EffectKind,
        *,
        context: Optional[RenderContext] = None,
) -> List[Bitmap]:
    with scoped_context(context) as ctx:
        return [apply_effect(frame, effect, context=ctx) for frame in frames]
