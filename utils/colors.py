"""
Color helpers for template composition.

Colors travel through the engine as "#rrggbb" strings and are converted to
integer RGB tuples (0-255) only where math is needed (luminance, alpha).
"""
import re
import logging
from typing import Tuple

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]
RGBA = Tuple[int, int, int, float]

BLACK = "#000000"
WHITE = "#ffffff"

# Luminance at or above this value is treated as a light background.
CONTRAST_THRESHOLD = 0.5

_HEX_RE = re.compile(r'^#?[0-9a-fA-F]{6}$')


class InvalidHex(ValueError):
    """Raised when a color string is not 6 hex digits (optional leading '#')."""
    pass


def hex_to_rgb(hex_color: str) -> RGB:
    """Convert '#RRGGBB' or 'RRGGBB' to an (r, g, b) tuple of ints."""
    if not isinstance(hex_color, str):
        raise InvalidHex(f"Color must be a string, got {type(hex_color).__name__}")
    c = hex_color.strip()
    if not _HEX_RE.match(c):
        raise InvalidHex(f"Invalid hex color: '{hex_color}'")
    c = c.lstrip('#')
    return tuple(int(c[i:i + 2], 16) for i in (0, 2, 4))


def rgb_to_hex(rgb) -> str:
    r, g, b = (max(0, min(255, int(round(v)))) for v in rgb[:3])
    return f"#{r:02x}{g:02x}{b:02x}"


def normalize_hex(hex_color: str) -> str:
    """Validate and return the lowercase '#rrggbb' form."""
    return rgb_to_hex(hex_to_rgb(hex_color))


def is_valid_hex(hex_color) -> bool:
    return isinstance(hex_color, str) and bool(_HEX_RE.match(hex_color.strip()))


def with_alpha(rgb, alpha: float) -> RGBA:
    a = max(0.0, min(1.0, float(alpha)))
    return (int(rgb[0]), int(rgb[1]), int(rgb[2]), a)


def _linearize(channel: int) -> float:
    c = channel / 255.0
    if c <= 0.03928:
        return c / 12.92
    return ((c + 0.055) / 1.055) ** 2.4


def relative_luminance(rgb) -> float:
    r, g, b = (_linearize(v) for v in rgb[:3])
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def _luminance_contrast(luminance: float) -> str:
    return BLACK if luminance >= CONTRAST_THRESHOLD else WHITE


def contrast_color(background_hex: str) -> str:
    """
    Pick black or white text for a background.

    Light backgrounds (luminance >= 0.5) get black; everything else white.
    """
    return _luminance_contrast(relative_luminance(hex_to_rgb(background_hex)))


def shadow_color(background_hex: str) -> str:
    """Inverse of contrast_color; used for the offset text shadow copy."""
    return WHITE if contrast_color(background_hex) == BLACK else BLACK


def hex_with_alpha(hex_color: str, alpha: float) -> RGBA:
    return with_alpha(hex_to_rgb(hex_color), alpha)
