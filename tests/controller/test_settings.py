from pathlib import Path

import pytest

from controller.settings import BoothSettings, parse_bool
from imaging.effects import EffectKind
from imaging.strip_layout import FrameColor


def test_defaults():
    settings = BoothSettings()

    assert settings.total_shots == 3
    assert settings.show_date is True
    assert settings.frame_color is FrameColor.LIGHT
    assert settings.initial_effect is EffectKind.SEPIA
    assert settings.jpeg_quality == 90


def test_from_mapping_reads_known_keys():
    settings = BoothSettings.from_mapping(
        {
            "TOTAL_SHOTS": "4",
            "SHOW_DATE": "false",
            "FRAME_COLOR": "dark",
            "INITIAL_EFFECT": "noir",
            "LIBRARY_ROOT": "/tmp/strips",
            "JPEG_QUALITY": 80,
            "UNRELATED": "ignored",
        }
    )

    assert settings.total_shots == 4
    assert settings.show_date is False
    assert settings.frame_color is FrameColor.DARK
    assert settings.initial_effect is EffectKind.NOIR
    assert settings.library_root == Path("/tmp/strips")
    assert settings.jpeg_quality == 80


def test_from_mapping_accepts_native_types():
    settings = BoothSettings.from_mapping({"TOTAL_SHOTS": 2, "SHOW_DATE": True})

    assert settings.total_shots == 2
    assert settings.show_date is True


def test_total_shots_must_be_positive():
    with pytest.raises(ValueError, match="total_shots"):
        BoothSettings(total_shots=0)


def test_jpeg_quality_range():
    with pytest.raises(ValueError, match="jpeg_quality"):
        BoothSettings(jpeg_quality=0)


def test_jpeg_quality_tops_out_at_pillow_recommended_maximum():
    assert BoothSettings(jpeg_quality=95).jpeg_quality == 95

    with pytest.raises(ValueError, match="between 1 and 95"):
        BoothSettings(jpeg_quality=100)


def test_unknown_effect_is_rejected():
    with pytest.raises(ValueError, match="Unknown effect"):
        BoothSettings.from_mapping({"INITIAL_EFFECT": "glitter"})


@pytest.mark.parametrize("value, expected", [("1", True), ("Yes", True), ("off", False), (False, False)])
def test_parse_bool(value, expected):
    assert parse_bool(value) is expected


def test_parse_bool_rejects_garbage():
    with pytest.raises(ValueError, match="Not a boolean"):
        parse_bool("maybe")
