from constants import BOLD_ACCENT_COLOR, DARK_SCENE_COLOR
from services.templates import TemplateVariant, RenderContext
from services.templates.layers import (
    Rectangle, Circle, ImageLayer,
    SLOT_LOGO, SLOT_HEADSHOT, FIT_COVER, FIT_CONTAIN, ALIGN_CENTER,
)
from services.templates.paragraphs import build_text_block, metric_texts, locality
from utils.colors import WHITE


class BoldTemplate(TemplateVariant):
    """Black square, accent bar and a large accent circle behind the address."""

    id = "bold"
    label = "Bold"

    ACCENT_BAR_Y = 0.15
    ACCENT_BAR_H = 0.1

    HEADING_Y = 0.35
    HEADING_SCALE = 1.5
    SUBHEADING_Y = 0.5
    SUBHEADING_SCALE = 1.0

    ACCENT_CIRCLE = (0.5, 0.8, 0.25)

    ADDRESS_Y = 0.75
    ADDRESS_SIZE = 16

    METRICS_Y = 1.03
    METRICS_SIZE = 16
    METRICS_SEPARATOR = "  ·  "

    MARGIN = 0.03
    LOGO_BASE = 0.17
    HEADSHOT_BASE = 0.2

    SIGNATURE_Y = 0.95

    def compose(self, ctx: RenderContext):
        W = ctx.width
        accent = ctx.style.primary_color or BOLD_ACCENT_COLOR

        layers = [
            Rectangle(name="backdrop", x=0, y=0, w=W, h=W, color=DARK_SCENE_COLOR),
            Rectangle(name="accent.bar", x=0, y=ctx.px(self.ACCENT_BAR_Y), w=W, h=ctx.px(self.ACCENT_BAR_H), color=accent),
        ]

        layers.extend(self.headings(
            ctx, heading_y=self.HEADING_Y, subheading_y=self.SUBHEADING_Y,
            heading_scale=self.HEADING_SCALE, subheading_scale=self.SUBHEADING_SCALE,
            color=WHITE, background=DARK_SCENE_COLOR,
        ))

        cx, cy, r = self.ACCENT_CIRCLE
        layers.append(Circle(name="accent.circle", cx=ctx.px(cx), cy=ctx.px(cy), r=ctx.px(r), color=accent))

        prop = ctx.property
        lines = [prop.address_line, locality(prop)]
        if prop.postal_code:
            lines.append(prop.postal_code)
        layers.extend(build_text_block(
            lines, ctx.font_id, self.ADDRESS_SIZE, WHITE, ALIGN_CENTER,
            name="address", x=0, y=ctx.px(self.ADDRESS_Y), max_width=W, scale=ctx.scale,
        ))

        texts = metric_texts(prop, compact=True)
        layers.extend(build_text_block(
            self.METRICS_SEPARATOR.join(texts[k] for k in ("beds", "baths", "area")),
            ctx.font_id, self.METRICS_SIZE, WHITE, ALIGN_CENTER, True,
            name="metrics", x=0, y=ctx.px(self.METRICS_Y), max_width=W, scale=ctx.scale,
            background=DARK_SCENE_COLOR,
        ))

        margin = ctx.px(self.MARGIN)
        headshot = self.headshot_slot(ctx, ctx.px(self.HEADSHOT_BASE))
        if headshot:
            w, h = headshot
            layers.append(ImageLayer(
                name="headshot", slot_role=SLOT_HEADSHOT, url=ctx.prefs.realtor_picture_url,
                x=margin, y=ctx.height - h - margin, w=w, h=h, fit=FIT_COVER, clip_to_circle=True,
            ))

        logo = self.logo_slot(ctx, ctx.px(self.LOGO_BASE))
        if logo:
            w, h = logo
            layers.append(ImageLayer(
                name="logo", slot_role=SLOT_LOGO, url=ctx.prefs.brokerage_logo_url,
                x=W - w - margin, y=ctx.height - h - margin, w=w, h=h, fit=FIT_CONTAIN,
            ))

        layers.extend(self.signature(ctx, WHITE, align=ALIGN_CENTER))
        return layers
