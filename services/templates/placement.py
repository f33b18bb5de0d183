"""
Image slot sizing.

Logos and headshots come in arbitrary aspect ratios; each variant declares a
base slot and the image is shrunk along one axis so wide or tall artwork
does not dominate the layout.
"""
from enum import Enum
from typing import Optional, Tuple


class AspectClass(str, Enum):
    SQUARE = "square"
    WIDE_RECTANGLE = "wide_rectangle"
    TALL_RECTANGLE = "tall_rectangle"
    MODERATE = "moderate"


SQUARE_TOLERANCE = 0.2
WIDE_RATIO = 1.5
TALL_RATIO = 0.7
SLOT_SHRINK = 0.7
# Keeps a fitted 0.7 slot from re-classifying on float noise
_EPS = 1e-9


def classify_aspect(width: float, height: float) -> AspectClass:
    if not width or not height or width <= 0 or height <= 0:
        return AspectClass.SQUARE
    ratio = width / height
    if abs(ratio - 1) < SQUARE_TOLERANCE:
        return AspectClass.SQUARE
    if ratio > WIDE_RATIO + _EPS:
        return AspectClass.WIDE_RECTANGLE
    if ratio < TALL_RATIO - _EPS:
        return AspectClass.TALL_RECTANGLE
    return AspectClass.MODERATE


def fit_slot(classification: AspectClass, base_width: float, base_height: float) -> Tuple[float, float]:
    if classification == AspectClass.WIDE_RECTANGLE:
        return base_width, base_height * SLOT_SHRINK
    if classification == AspectClass.TALL_RECTANGLE:
        return base_width * SLOT_SHRINK, base_height
    return base_width, base_height


def place_in_slot(size: Optional[Tuple[float, float]], base_width: float, base_height: float) -> Tuple[float, float]:
    """Classify an intrinsic (w, h) and fit it; unknown sizes keep the base slot."""
    if not size:
        return base_width, base_height
    w, h = size
    if not w or not h:
        return base_width, base_height
    return fit_slot(classify_aspect(w, h), base_width, base_height)


def anchor_above_baseline(slot_height: float, baseline_y: float, spacing: float) -> float:
    """Top y so the slot's bottom edge sits `spacing` above the baseline."""
    return baseline_y - spacing - slot_height


def center_in_rect(w: float, h: float, rect_x: float, rect_y: float, rect_w: float, rect_h: float) -> Tuple[float, float]:
    return rect_x + (rect_w - w) / 2, rect_y + (rect_h - h) / 2


def clamp(value: float, low: float, high: float) -> float:
    if high < low:
        return low
    return max(low, min(high, value))
