from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from controller.share import MAX_JPEG_QUALITY
from imaging.effects import EffectKind
from imaging.strip_layout import FrameColor, StripLayout

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"Not a boolean: {value!r}")


@dataclass(frozen=True)
class BoothSettings:
    """Read-only inputs for a strip build."""

    total_shots: int = 3
    show_date: bool = True
    frame_color: FrameColor = FrameColor.LIGHT
    initial_effect: EffectKind = EffectKind.SEPIA
    library_root: Path = Path("library")
    jpeg_quality: int = 90
    layout: StripLayout = field(default_factory=StripLayout)

    def __post_init__(self):
        if self.total_shots < 1:
            raise ValueError(f"total_shots must be >= 1 (got {self.total_shots})")
        if not 1 <= self.jpeg_quality <= MAX_JPEG_QUALITY:
            raise ValueError(
                f"jpeg_quality must be between 1 and {MAX_JPEG_QUALITY} (got {self.jpeg_quality})"
            )

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "BoothSettings":
        """Build settings from a Flask-style config mapping.

        Recognised keys: TOTAL_SHOTS, SHOW_DATE, FRAME_COLOR, INITIAL_EFFECT,
        LIBRARY_ROOT, JPEG_QUALITY. Missing keys keep their defaults.
        """
        kwargs: dict = {}
        if "TOTAL_SHOTS" in config:
            kwargs["total_shots"] = int(config["TOTAL_SHOTS"])
        if "SHOW_DATE" in config:
            kwargs["show_date"] = parse_bool(config["SHOW_DATE"])
        if "FRAME_COLOR" in config:
            kwargs["frame_color"] = FrameColor.from_name(str(config["FRAME_COLOR"]))
        if "INITIAL_EFFECT" in config:
            kwargs["initial_effect"] = EffectKind.from_name(str(config["INITIAL_EFFECT"]))
        if "LIBRARY_ROOT" in config:
            kwargs["library_root"] = Path(config["LIBRARY_ROOT"])
        if "JPEG_QUALITY" in config:
            kwargs["jpeg_quality"] = int(config["JPEG_QUALITY"])
        return cls(**kwargs)
