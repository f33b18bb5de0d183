from constants import ELEGANT_BASE_COLOR, ELEGANT_ALT_COLOR, ELEGANT_ACCENT_COLOR, DARK_SCENE_COLOR
from services.templates import TemplateVariant, RenderContext
from services.templates.layers import (
    Gradient, Rectangle, Circle, ImageLayer,
    SLOT_LOGO, SLOT_HEADSHOT, FIT_COVER, FIT_CONTAIN, ALIGN_LEFT, ALIGN_CENTER, AXIS_DIAGONAL,
)
from services.templates.paragraphs import build_text_block, metric_texts, locality
from services.templates.placement import center_in_rect
from utils.colors import WHITE, hex_with_alpha

# Elegant is always set in Playfair regardless of the selected font
ELEGANT_FONT = "playfair"


class ElegantTemplate(TemplateVariant):
    """Diagonal gradient square with light accent bars and a corner circle."""

    id = "elegant"
    label = "Elegant"

    # position, alpha, uses alternate fallback color
    GRADIENT_STOPS = ((0.0, 0.9, False), (0.3, 0.7, True), (0.7, 0.8, False), (1.0, 0.6, True))

    TOP_BAR = (0.1, 0.05, 0.8, 0.02)
    BOTTOM_BAR = (0.0, 0.75, 1.0, 0.02)
    ACCENT_CIRCLE = (0.85, 0.85, 0.12)

    HEADING_Y = 0.2
    HEADING_SCALE = 1.3
    SUBHEADING_Y = 0.35
    SUBHEADING_SCALE = 0.9

    ADDRESS_X = 0.05
    ADDRESS_Y = 0.8
    ADDRESS_WIDTH = 0.6
    ADDRESS_SIZE = 13

    METRICS_X = 0.05
    METRICS_Y = 1.05
    METRICS_SIZE = 14
    METRICS_SEPARATOR = " | "

    LOGO_BASE = 0.17
    HEADSHOT_BASE = 0.2
    MARGIN = 0.03

    SIGNATURE_Y = 0.95

    def compose(self, ctx: RenderContext):
        W = ctx.width
        base = ctx.style.primary_color or ELEGANT_BASE_COLOR
        alt = ctx.style.primary_color or ELEGANT_ALT_COLOR

        layers = [Gradient(
            name="backdrop", x=0, y=0, w=W, h=W, axis=AXIS_DIAGONAL,
            stops=tuple(
                (pos, hex_with_alpha(alt if use_alt else base, a))
                for pos, a, use_alt in self.GRADIENT_STOPS
            ),
        )]

        x, y, w, h = self.TOP_BAR
        layers.append(Rectangle(name="accent.top", x=ctx.px(x), y=ctx.px(y), w=ctx.px(w), h=ctx.px(h), color=ELEGANT_ACCENT_COLOR))

        layers.extend(self.headings(
            ctx, heading_y=self.HEADING_Y, subheading_y=self.SUBHEADING_Y,
            heading_scale=self.HEADING_SCALE, subheading_scale=self.SUBHEADING_SCALE,
            color=WHITE, background=DARK_SCENE_COLOR, font_id=ELEGANT_FONT,
        ))

        x, y, w, h = self.BOTTOM_BAR
        layers.append(Rectangle(name="accent.bottom", x=ctx.px(x), y=ctx.px(y), w=ctx.px(w), h=ctx.px(h), color=ELEGANT_ACCENT_COLOR))

        cx, cy, r = self.ACCENT_CIRCLE
        layers.append(Circle(name="accent.circle", cx=ctx.px(cx), cy=ctx.px(cy), r=ctx.px(r), color=ELEGANT_ACCENT_COLOR))

        prop = ctx.property
        lines = [prop.address_line, locality(prop)]
        if prop.postal_code:
            lines.append(prop.postal_code)
        # Fixed size: Playfair carries no compensation
        layers.extend(build_text_block(
            lines, ELEGANT_FONT, self.ADDRESS_SIZE, WHITE, ALIGN_LEFT,
            name="address", x=ctx.px(self.ADDRESS_X), y=ctx.px(self.ADDRESS_Y),
            max_width=ctx.px(self.ADDRESS_WIDTH), scale=ctx.scale,
        ))

        texts = metric_texts(prop, compact=True)
        layers.extend(build_text_block(
            self.METRICS_SEPARATOR.join(texts[k] for k in ("beds", "baths", "area")),
            ELEGANT_FONT, self.METRICS_SIZE, WHITE, ALIGN_LEFT, True,
            name="metrics", x=ctx.px(self.METRICS_X), y=ctx.px(self.METRICS_Y),
            max_width=ctx.px(0.6), scale=ctx.scale, background=DARK_SCENE_COLOR,
        ))

        logo = self.logo_slot(ctx, ctx.px(self.LOGO_BASE))
        if logo:
            w, h = logo
            r_px = ctx.px(r)
            lx, ly = center_in_rect(w, h, ctx.px(cx) - r_px, ctx.px(cy) - r_px, 2 * r_px, 2 * r_px)
            layers.append(ImageLayer(
                name="logo", slot_role=SLOT_LOGO, url=ctx.prefs.brokerage_logo_url,
                x=lx, y=ly, w=w, h=h, fit=FIT_CONTAIN,
            ))

        headshot = self.headshot_slot(ctx, ctx.px(self.HEADSHOT_BASE))
        if headshot:
            w, h = headshot
            margin = ctx.px(self.MARGIN)
            layers.append(ImageLayer(
                name="headshot", slot_role=SLOT_HEADSHOT, url=ctx.prefs.realtor_picture_url,
                x=W - w - margin, y=ctx.height - h - margin, w=w, h=h, fit=FIT_COVER, clip_to_circle=True,
            ))

        layers.extend(self.signature(
            ctx, WHITE, font_id=ELEGANT_FONT, align=ALIGN_CENTER))
        return layers
