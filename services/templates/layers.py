"""
Drawable layer records.

A layer list is a plain list; index order is paint order. Coordinates are
canvas pixels with the origin at the top-left corner.
"""
from dataclasses import dataclass, asdict, replace
from typing import List, Optional, Tuple

from utils.colors import RGBA

SLOT_BACKGROUND = "background"
SLOT_LOGO = "logo"
SLOT_HEADSHOT = "headshot"

FIT_COVER = "cover"
FIT_CONTAIN = "contain"

ALIGN_LEFT = "left"
ALIGN_CENTER = "center"
ALIGN_RIGHT = "right"


def _round(value):
    if isinstance(value, float):
        return round(value, 3)
    return value


@dataclass(frozen=True)
class Layer:
    name: str

    type = "layer"

    def to_dict(self) -> dict:
        data = {"type": self.type}
        for key, value in asdict(self).items():
            if isinstance(value, (list, tuple)):
                value = _serialize_seq(value)
            data[key] = _round(value)
        return data


def _serialize_seq(seq):
    out = []
    for item in seq:
        if isinstance(item, (list, tuple)):
            out.append(_serialize_seq(item))
        else:
            out.append(_round(item))
    return out


@dataclass(frozen=True)
class Rectangle(Layer):
    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0
    color: str = "#000000"
    opacity: Optional[float] = None
    corner_radius: Optional[float] = None

    type = "rectangle"


@dataclass(frozen=True)
class Circle(Layer):
    cx: float = 0.0
    cy: float = 0.0
    r: float = 0.0
    color: str = "#000000"

    type = "circle"


# Gradient axes: (x0, y0) -> (x1, y1) as fractions of the gradient box
AXIS_VERTICAL = "vertical"
AXIS_DIAGONAL = "diagonal"


@dataclass(frozen=True)
class Gradient(Layer):
    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0
    stops: Tuple[Tuple[float, RGBA], ...] = ()
    axis: str = AXIS_VERTICAL
    # Distance (px) over which the stops are spread; defaults to the box extent
    extent: Optional[float] = None

    type = "gradient"


@dataclass(frozen=True)
class ImageLayer(Layer):
    slot_role: str = SLOT_BACKGROUND
    url: str = ""
    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0
    fit: str = FIT_COVER
    clip_to_circle: bool = False

    type = "image"


@dataclass(frozen=True)
class Shadow:
    dx: float
    dy: float
    color: str


@dataclass(frozen=True)
class TextBlock(Layer):
    lines: str = ""
    x: float = 0.0
    y: float = 0.0
    max_width: float = 0.0
    align: str = ALIGN_LEFT
    font_family: str = ""
    font_size_px: float = 0.0
    color: str = "#000000"
    shadow: Optional[Shadow] = None

    type = "text"

    @property
    def line_list(self) -> List[str]:
        return self.lines.split("\n")


def layers_to_dicts(layers) -> List[dict]:
    return [layer.to_dict() for layer in layers]


def expand_shadows(layers):
    """
    Paint-order list where a TextBlock carrying an inline `shadow` is split
    into its offset duplicate followed by the block itself. Blocks built by
    build_text_block already emit the duplicate as its own layer and carry
    no inline shadow, so nothing is painted twice.
    """
    out = []
    for layer in layers:
        if isinstance(layer, TextBlock) and layer.shadow is not None:
            s = layer.shadow
            out.append(replace(layer, name=layer.name + ".shadow", x=layer.x + s.dx, y=layer.y + s.dy,
                               color=s.color, shadow=None))
            layer = replace(layer, shadow=None)
        out.append(layer)
    return out


def find_layer(layers, name: str):
    """First layer with the given name, or None."""
    for layer in layers:
        if layer.name == name:
            return layer
    return None
