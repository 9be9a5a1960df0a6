import pytest
from PIL import ImageChops

from imaging.bitmap import Orientation
from imaging.effects import (
    EFFECT_CHAINS,
    EffectKind,
    apply_effect,
    apply_effect_to_sequence,
    step,
)
from imaging.operators import OPERATORS
from imaging.render_context import RenderContext
from tests.helpers import make_bitmap, make_gradient_bitmap, make_truncated_bitmap


def same_pixels(a, b) -> bool:
    return a.size == b.size and ImageChops.difference(a.convert("RGB"), b.convert("RGB")).getbbox() is None


@pytest.mark.parametrize("effect", list(EffectKind))
def test_every_effect_preserves_size(effect):
    source = make_gradient_bitmap(size=(64, 48))

    result = apply_effect(source, effect)

    assert result.size == (64, 48)


@pytest.mark.parametrize("effect", list(EffectKind))
def test_every_effect_keeps_scale_and_orientation(effect):
    source = make_bitmap(size=(40, 30), orientation=Orientation.LEFT_MIRRORED, scale=3.0)

    result = apply_effect(source, effect)

    assert result.scale == 3.0
    assert result.orientation is Orientation.LEFT_MIRRORED


def test_original_is_identity():
    source = make_gradient_bitmap()

    result = apply_effect(source, EffectKind.ORIGINAL)

    assert same_pixels(result.image, source.image)


@pytest.mark.parametrize("effect", list(EffectKind))
def test_effects_are_deterministic(effect):
    source = make_gradient_bitmap()

    first = apply_effect(source, effect)
    second = apply_effect(source, effect)

    assert same_pixels(first.image, second.image)


def test_effect_does_not_touch_source():
    source = make_gradient_bitmap()
    before = source.image.copy()

    apply_effect(source, EffectKind.NOIR)

    assert same_pixels(source.image, before)


def test_sepia_changes_pixels():
    source = make_gradient_bitmap()

    result = apply_effect(source, EffectKind.SEPIA)

    assert not same_pixels(result.image, source.image)


def test_monochrome_effects_have_no_color_cast():
    source = make_bitmap(size=(16, 16), color=(200, 30, 30))

    result = apply_effect(source, EffectKind.NOIR)

    r, g, b = result.image.getpixel((8, 8))
    assert r == g == b


def test_undecodable_source_is_returned_unchanged():
    source = make_truncated_bitmap()

    result = apply_effect(source, EffectKind.SEPIA)

    assert result is source


def test_failing_operator_falls_back_to_source(monkeypatch):
    source = make_gradient_bitmap()

    def boom(image, context, **params):
        raise OSError("operator exploded")

    monkeypatch.setitem(OPERATORS, "bloom", boom)

    result = apply_effect(source, EffectKind.SEPIA)

    assert result is source


def test_operator_without_output_falls_back_to_source(monkeypatch):
    source = make_gradient_bitmap()
    monkeypatch.setitem(OPERATORS, "vignette", lambda image, context, **params: None)

    result = apply_effect(source, EffectKind.NOIR)

    assert result is source


def test_shared_context_stays_open_after_apply():
    with RenderContext() as context:
        apply_effect(make_gradient_bitmap(), EffectKind.FADED_MONO, context=context)
        assert context.closed is False

    assert context.closed is True


def test_apply_to_sequence_keeps_order():
    frames = [make_bitmap(size=(8, 8), color=(v, v, v)) for v in (10, 120, 250)]

    result = apply_effect_to_sequence(frames, EffectKind.ORIGINAL)

    assert [f.image.getpixel((0, 0)) for f in result] == [(10, 10, 10), (120, 120, 120), (250, 250, 250)]


def test_next_effect_cycles_in_declaration_order():
    assert EffectKind.ORIGINAL.next() is EffectKind.SEPIA
    assert EffectKind.SEPIA.next() is EffectKind.FADED_MONO
    assert EffectKind.NOIR.next() is EffectKind.ORIGINAL


@pytest.mark.parametrize("start", list(EffectKind))
def test_next_effect_returns_to_start_after_full_cycle(start):
    effect = start
    for _ in range(len(EffectKind)):
        effect = effect.next()

    assert effect is start


@pytest.mark.parametrize(
    "name, expected",
    [
        ("fadedMono", EffectKind.FADED_MONO),
        ("motionBlurred", EffectKind.MOTION_BLURRED),
        ("noir", EffectKind.NOIR),
        ("SOFT_GLOW", EffectKind.SOFT_GLOW),
        ("vintage", EffectKind.VINTAGE),
    ],
)
def test_effect_from_name(name, expected):
    assert EffectKind.from_name(name) is expected


def test_effect_from_unknown_name_raises():
    with pytest.raises(ValueError, match="Unknown effect"):
        EffectKind.from_name("glitter")


def test_every_effect_has_a_chain_of_known_operators():
    assert set(EFFECT_CHAINS) == set(EffectKind)
    assert EFFECT_CHAINS[EffectKind.ORIGINAL] == ()
    for effect, chain in EFFECT_CHAINS.items():
        for effect_step in chain:
            assert effect_step.operator in OPERATORS, effect


def test_step_rejects_unknown_operator():
    with pytest.raises(KeyError, match="Unknown operator"):
        step("sparkle", amount=1)
