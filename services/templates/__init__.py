"""
Template variants.

Each variant is a TemplateVariant strategy holding only its geometry
(fractions of the canvas width W) and any variant-specific colors. Shared
resolution (colors, font, heading text, image slots) lives in RenderContext
so variants never repeat it.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from constants import (
    CANVAS_ASPECT,
    REFERENCE_WIDTH,
    DEFAULT_CANVAS_WIDTH,
    DEFAULT_SIGNATURE_BRAND,
    FALLBACK_PRIMARY_COLOR,
    SIGNATURE_TEXT,
    LONG_ADDRESS_LINE,
)
from models import PropertyRecord, UserPreferences, CanvasStyle, PostType
from services.templates.layers import ImageLayer, SLOT_BACKGROUND, FIT_COVER, ALIGN_RIGHT, ALIGN_CENTER
from services.templates.paragraphs import build_text_block, build_heading
from services.templates.placement import place_in_slot
from utils.colors import contrast_color
from utils.formatting import format_price
from utils.image_processing import ImageAsset, MissingAsset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderContext:
    property: PropertyRecord
    prefs: UserPreferences
    style: CanvasStyle
    post_type: PostType
    width: float = DEFAULT_CANVAS_WIDTH
    # url -> ImageAsset; None means every referenced image is assumed decodable
    assets: Optional[Dict[str, ImageAsset]] = None
    signature_brand: str = DEFAULT_SIGNATURE_BRAND

    @property
    def height(self) -> float:
        return self.width * CANVAS_ASPECT

    @property
    def scale(self) -> float:
        return self.width / REFERENCE_WIDTH

    @property
    def font_id(self) -> str:
        return self.style.selected_font_id

    @property
    def primary(self) -> str:
        return self.style.primary_color or FALLBACK_PRIMARY_COLOR

    @property
    def secondary(self) -> str:
        return self.style.resolved_secondary

    @property
    def text_color(self) -> str:
        return self.style.text_color or self.primary

    @property
    def on_primary(self) -> str:
        return contrast_color(self.primary)

    @property
    def is_open_house(self) -> bool:
        return self.post_type == PostType.OPEN_HOUSE

    @property
    def heading_text(self) -> str:
        return self.style.custom_heading or self.post_type.label

    @property
    def subheading_text(self) -> str:
        """Custom text, else open-house times, else the price when shown."""
        if self.style.custom_subheading:
            return self.style.custom_subheading
        if self.is_open_house:
            return self.style.open_house_text or ""
        if self.style.show_price:
            raw = self.style.price_text or self.property.price
            if raw:
                return format_price(raw, self.style.currency)
        return ""

    @property
    def long_address(self) -> bool:
        return len(self.property.address_line) > LONG_ADDRESS_LINE

    def px(self, fraction: float) -> float:
        return self.width * fraction

    def image_size(self, url: str, intrinsic: Optional[Tuple[float, float]] = None) -> Optional[Tuple[float, float]]:
        """
        Intrinsic size for a referenced image.

        Raises:
            MissingAsset: if the manifest lacks the URL or flags it undecodable
        """
        if self.assets is None:
            return intrinsic
        asset = self.assets.get(url)
        if asset is None:
            raise MissingAsset(url, "not in asset manifest")
        if not asset.decoded:
            raise MissingAsset(url)
        return intrinsic or asset.size


class TemplateVariant(ABC):
    """
    Strategy interface for one layout.

    Subclasses set `id`/`label` and implement compose(); render() paints the
    background photo first and then the variant's layers.
    """

    id: str = ""
    label: str = ""

    # Signature mark (fractions of W), top-right unless overridden
    SIGNATURE_Y = 0.02
    SIGNATURE_SIZE = 10

    def render(self, ctx: RenderContext) -> List:
        layers = self.background(ctx)
        layers.extend(self.compose(ctx))
        return layers

    @abstractmethod
    def compose(self, ctx: RenderContext) -> List:
        """Layers painted over the background photo, in paint order."""
        pass

    def background(self, ctx: RenderContext) -> List:
        url = ctx.property.photo_url
        if not url:
            return []
        try:
            ctx.image_size(url)
        except MissingAsset as e:
            logger.warning(f"[{self.id}] Background photo dropped: {e}")
            return []
        return [ImageLayer(
            name="background", slot_role=SLOT_BACKGROUND, url=url,
            x=0, y=0, w=ctx.width, h=ctx.height, fit=FIT_COVER,
        )]

    def slot(self, ctx: RenderContext, url: Optional[str], intrinsic, base_width: float, base_height: float):
        """
        Fitted (w, h) for a logo/headshot slot, or None when the image is
        absent or undecodable (the caller then skips the image layer).
        """
        if not url:
            return None
        try:
            size = ctx.image_size(url, intrinsic)
        except MissingAsset as e:
            logger.warning(f"[{self.id}] Image layer dropped: {e}")
            return None
        return place_in_slot(size, base_width, base_height)

    def logo_slot(self, ctx: RenderContext, base: float):
        if not ctx.style.show_brokerage:
            return None
        return self.slot(ctx, ctx.prefs.brokerage_logo_url, ctx.prefs.brokerage_logo_size, base, base)

    def headshot_slot(self, ctx: RenderContext, base: float):
        if not ctx.style.show_realtor:
            return None
        return self.slot(ctx, ctx.prefs.realtor_picture_url, ctx.prefs.realtor_picture_size, base, base)

    def headings(self, ctx: RenderContext, *, heading_y: float, subheading_y: float,
                 heading_scale: float, subheading_scale: float, color: str, background: str,
                 heading_x: float = 0.0, subheading_x: float = 0.0, font_id: Optional[str] = None) -> List:
        font_id = font_id or ctx.font_id
        layers = build_heading(
            ctx.heading_text, name="heading", x=ctx.px(heading_x), y=ctx.px(heading_y),
            max_width=ctx.width, size_scale=heading_scale, font_id=font_id,
            color=color, background=background, scale=ctx.scale,
        )
        layers.extend(build_heading(
            ctx.subheading_text, name="subheading", x=ctx.px(subheading_x), y=ctx.px(subheading_y),
            max_width=ctx.width, size_scale=subheading_scale, font_id=font_id,
            color=color, background=background, scale=ctx.scale,
        ))
        return layers

    def signature(self, ctx: RenderContext, color: str, font_id: Optional[str] = None,
                  y: Optional[float] = None, align: str = ALIGN_RIGHT) -> List:
        if not ctx.style.show_signature:
            return []
        margin = ctx.px(0.03)
        width = ctx.width - 2 * margin if align == ALIGN_CENTER else ctx.width - margin
        x = margin if align == ALIGN_CENTER else 0
        return build_text_block(
            f"{SIGNATURE_TEXT} {ctx.signature_brand}", font_id or ctx.font_id, self.SIGNATURE_SIZE,
            color, align, name="signature",
            x=x, y=ctx.px(self.SIGNATURE_Y if y is None else y),
            max_width=width, scale=ctx.scale,
        )
