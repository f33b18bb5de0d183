import pytest

from services.templates.placement import (
    AspectClass, classify_aspect, fit_slot, place_in_slot, anchor_above_baseline, center_in_rect, clamp,
)


@pytest.mark.parametrize("w,h,expected", [
    (100, 100, AspectClass.SQUARE),
    (110, 100, AspectClass.SQUARE),
    (130, 100, AspectClass.MODERATE),
    (160, 100, AspectClass.WIDE_RECTANGLE),
    (800, 200, AspectClass.WIDE_RECTANGLE),
    (60, 100, AspectClass.TALL_RECTANGLE),
    (0, 100, AspectClass.SQUARE),
])
def test_classify_aspect(w, h, expected):
    assert classify_aspect(w, h) == expected


def test_wide_logo_in_square_slot():
    """800x200 logo in a 100x100 slot keeps the width and shrinks the height."""
    assert fit_slot(classify_aspect(800, 200), 100, 100) == (100, pytest.approx(70))


def test_tall_and_moderate_slots():
    assert fit_slot(AspectClass.TALL_RECTANGLE, 100, 100) == (pytest.approx(70), 100)
    assert fit_slot(AspectClass.MODERATE, 100, 100) == (100, 100)
    assert fit_slot(AspectClass.SQUARE, 80, 80) == (80, 80)


@pytest.mark.parametrize("size", [(800, 200), (200, 800), (500, 500), (640, 480), (1, 3)])
@pytest.mark.parametrize("base", [100, 66.3, 136.5, 378])
def test_fit_slot_stable_under_reclassification(size, base):
    w, h = place_in_slot(size, base, base)
    assert fit_slot(classify_aspect(w, h), w, h) == (w, h)


def test_place_in_slot_unknown_sizes_keep_base():
    assert place_in_slot(None, 50, 40) == (50, 40)
    assert place_in_slot((0, 100), 50, 40) == (50, 40)
    assert place_in_slot((100, 0), 50, 40) == (50, 40)


def test_anchor_above_baseline():
    assert anchor_above_baseline(30, 100, 5) == 65


def test_center_in_rect():
    assert center_in_rect(10, 20, 0, 0, 100, 100) == (45, 40)


def test_clamp():
    assert clamp(5, 0, 10) == 5
    assert clamp(-1, 0, 10) == 0
    assert clamp(11, 0, 10) == 10
    assert clamp(3, 5, 1) == 5
