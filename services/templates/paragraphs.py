"""
Text block construction shared by every variant.

A shadowed block is emitted as two layers: the offset shadow copy first,
then the main block. Multi-line text stays one block joined with '\\n'.
"""
from typing import List, Optional, Sequence, Union

from constants import SHADOW_DX, SHADOW_DY, NOT_AVAILABLE
from models import PropertyRecord
from services.templates.fonts import resolve, adjusted_size, heading_size
from services.templates.layers import TextBlock, ALIGN_CENTER
from utils.colors import shadow_color
from utils.formatting import format_count, format_area

SHADOW_SUFFIX = ".shadow"


def build_text_block(
    lines: Union[str, Sequence[str]],
    font_id: Optional[str],
    base_size_px: float,
    color: str,
    align: str,
    shadowed: bool = False,
    *,
    name: str,
    x: float,
    y: float,
    max_width: float,
    scale: float = 1.0,
    background: Optional[str] = None,
    size_px: Optional[float] = None,
) -> List[TextBlock]:
    """
    Returns [main] or [shadow, main].

    `base_size_px` is in reference pixels and goes through the family's size
    compensation; `size_px` bypasses compensation (headings size themselves).
    The shadow color is picked against `background`, the scene's dominant
    backdrop color (falls back to the text color).
    """
    text = lines if isinstance(lines, str) else "\n".join(lines)
    spec = resolve(font_id)
    size = size_px if size_px is not None else adjusted_size(base_size_px, font_id) * scale

    if not shadowed:
        return [TextBlock(
            name=name, lines=text, x=x, y=y, max_width=max_width, align=align,
            font_family=spec.family, font_size_px=size, color=color,
        )]

    dx, dy = SHADOW_DX * scale, SHADOW_DY * scale
    under = shadow_color(background or color)
    shadow = TextBlock(
        name=name + SHADOW_SUFFIX, lines=text, x=x + dx, y=y + dy, max_width=max_width,
        align=align, font_family=spec.family, font_size_px=size, color=under,
    )
    main = TextBlock(
        name=name, lines=text, x=x, y=y, max_width=max_width, align=align,
        font_family=spec.family, font_size_px=size, color=color,
    )
    return [shadow, main]


def build_heading(
    text: str,
    *,
    name: str,
    x: float,
    y: float,
    max_width: float,
    size_scale: float,
    font_id: Optional[str],
    color: str,
    background: str,
    scale: float = 1.0,
    align: str = ALIGN_CENTER,
) -> List[TextBlock]:
    """Heading / sub-heading: always shadowed, sized by heading_size()."""
    if not text:
        return []
    size = heading_size(text, size_scale, font_id) * scale
    return build_text_block(
        text, font_id, 0, color, align, True,
        name=name, x=x, y=y, max_width=max_width, scale=scale,
        background=background, size_px=size,
    )


def locality(prop: PropertyRecord) -> str:
    """'Austin, TX' or just the city when no region is known."""
    if prop.state_or_region:
        return f"{prop.city}, {prop.state_or_region}"
    return prop.city


def country_or_postal(prop: PropertyRecord) -> str:
    return prop.country or prop.postal_code


def address_lines(prop: PropertyRecord) -> List[str]:
    """Street / 'City, ST' / country (postal code when no country)."""
    lines = [prop.address_line, locality(prop)]
    tail = country_or_postal(prop)
    if tail:
        lines.append(tail)
    return lines


def metric_texts(prop: PropertyRecord, compact: bool = False) -> dict:
    """
    Metric strings keyed beds/baths/area.

    Long form: '3 beds', '2 baths', '1980 sqft'.
    Compact:   '3BR', '2BA', '1980 SQFT'.
    Absent values render as 'N/A'.
    """
    beds = format_count(prop.beds)
    baths = format_count(prop.baths)
    if compact:
        return {
            "beds": f"{beds}BR" if beds is not None else NOT_AVAILABLE,
            "baths": f"{baths}BA" if baths is not None else NOT_AVAILABLE,
            "area": format_area(prop.square_feet, prop.area_unit, upper=True),
        }
    return {
        "beds": f"{beds} beds" if beds is not None else NOT_AVAILABLE,
        "baths": f"{baths} baths" if baths is not None else NOT_AVAILABLE,
        "area": format_area(prop.square_feet, prop.area_unit),
    }
