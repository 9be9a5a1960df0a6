import pytest

from imaging.strip_layout import BLACK, WHITE, FrameColor, StripLayout, caption_color_for


def test_default_layout_matches_reference_strip():
    layout = StripLayout()

    assert layout.canvas_size(3) == (260, 776)
    assert layout.photo_origin(0) == (20, 20)
    assert layout.photo_origin(2) == (20, 492)
    assert layout.caption_top(3) == 722


def test_canvas_size_always_reserves_date_band():
    layout = StripLayout(date_height=30)

    assert layout.canvas_size(1) == (260, 20 + 220 + 30 + 40)


@pytest.mark.parametrize(
    "frame, expected",
    [
        (WHITE, BLACK),
        (BLACK, WHITE),
        ((250, 230, 240), BLACK),
        ((20, 30, 90), WHITE),
    ],
)
def test_caption_contrast_rule(frame, expected):
    assert caption_color_for(frame) == expected


def test_frame_color_toggles():
    assert FrameColor.LIGHT.toggled() is FrameColor.DARK
    assert FrameColor.DARK.toggled() is FrameColor.LIGHT
    assert FrameColor.DARK.caption_rgb == WHITE


@pytest.mark.parametrize("name", ["light", "White", " LIGHT "])
def test_frame_color_from_name(name):
    assert FrameColor.from_name(name) is FrameColor.LIGHT


def test_frame_color_from_unknown_name():
    with pytest.raises(ValueError, match="Unknown frame color"):
        FrameColor.from_name("plaid")
