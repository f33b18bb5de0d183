from services.templates import TemplateVariant, RenderContext
from services.templates.layers import (
    Gradient, Rectangle, Circle, ImageLayer,
    SLOT_LOGO, SLOT_HEADSHOT, FIT_COVER, FIT_CONTAIN, ALIGN_LEFT, ALIGN_RIGHT, AXIS_VERTICAL,
)
from services.templates.paragraphs import build_text_block, address_lines, metric_texts
from services.templates.placement import clamp
from utils.colors import hex_with_alpha


class ClassicTemplate(TemplateVariant):
    """Tinted photo, info bar along the bottom, headshot bottom-left."""

    id = "classic"
    label = "Classic"

    GRADIENT_STOPS = ((0.0, 0.4), (0.9, 0.2))

    HEADING_Y = 0.15
    SUBHEADING_Y = 0.325
    SUBHEADING_SCALE = 1.25
    OPEN_HOUSE_SUBHEADING_SCALE = 2.0

    REALTOR_CIRCLE = (0.01, 1.15, 0.3)  # cx, cy, r
    BAR_Y = 1.05
    BAR_H = 0.2

    HEADSHOT_BASE = 0.35
    HEADSHOT_X = -0.05

    LOGO_BASE = 0.17
    LOGO_RIGHT_MARGIN = 0.02
    LOGO_LEFT_LIMIT = 0.05
    LOGO_GAP = 0.005
    LOGO_MIN_Y = 0.1

    METRICS_X = 0.46
    METRICS_NUDGE = 0.015
    METRICS_MAX_WIDTH = 100
    # name, text y (fraction of W), base font size
    METRIC_ROWS = (
        ("beds", 1.075, 14),
        ("baths", 1.132, 14),
        ("area", 1.1825, 15),
    )

    ADDRESS_X = -0.025
    ADDRESS_Y = 1.075
    ADDRESS_SIZE = 14

    def compose(self, ctx: RenderContext):
        W = ctx.width
        primary, secondary = ctx.primary, ctx.secondary

        layers = [Gradient(
            name="backdrop", x=0, y=0, w=W, h=ctx.height, axis=AXIS_VERTICAL, extent=W,
            stops=tuple((pos, hex_with_alpha(primary, a)) for pos, a in self.GRADIENT_STOPS),
        )]

        layers.extend(self.headings(
            ctx, heading_y=self.HEADING_Y, subheading_y=self.SUBHEADING_Y, heading_scale=1.0,
            subheading_scale=self.OPEN_HOUSE_SUBHEADING_SCALE if ctx.is_open_house else self.SUBHEADING_SCALE,
            color=ctx.on_primary, background=primary,
        ))

        headshot = self.headshot_slot(ctx, ctx.px(self.HEADSHOT_BASE))
        if headshot:
            cx, cy, r = self.REALTOR_CIRCLE
            layers.append(Circle(name="realtor.backdrop", cx=ctx.px(cx), cy=ctx.px(cy), r=ctx.px(r), color=secondary))

        layers.append(Rectangle(name="info.bar", x=0, y=ctx.px(self.BAR_Y), w=W, h=ctx.px(self.BAR_H), color=secondary))

        if headshot:
            w, h = headshot
            layers.append(ImageLayer(
                name="headshot", slot_role=SLOT_HEADSHOT, url=ctx.prefs.realtor_picture_url,
                x=ctx.px(self.HEADSHOT_X), y=ctx.height - h, w=w, h=h, fit=FIT_COVER,
            ))

        logo = self.logo_slot(ctx, ctx.px(self.LOGO_BASE))
        if logo:
            w, h = logo
            right = W - w - ctx.px(self.LOGO_RIGHT_MARGIN)
            x = clamp(right, ctx.px(self.LOGO_LEFT_LIMIT), right)
            y = max(ctx.px(self.BAR_Y) - h - ctx.px(self.LOGO_GAP), ctx.px(self.LOGO_MIN_Y))
            layers.append(ImageLayer(
                name="logo", slot_role=SLOT_LOGO, url=ctx.prefs.brokerage_logo_url,
                x=x, y=y, w=w, h=h, fit=FIT_CONTAIN,
            ))

        nudge = 0 if ctx.long_address else ctx.px(self.METRICS_NUDGE)
        texts = metric_texts(ctx.property)
        for key, y, size in self.METRIC_ROWS:
            layers.extend(build_text_block(
                texts[key], ctx.font_id, size, ctx.text_color, ALIGN_LEFT,
                name=f"metric.{key}", x=ctx.px(self.METRICS_X) + nudge, y=ctx.px(y),
                max_width=self.METRICS_MAX_WIDTH * ctx.scale, scale=ctx.scale,
            ))

        layers.extend(build_text_block(
            address_lines(ctx.property), ctx.font_id, self.ADDRESS_SIZE, ctx.text_color, ALIGN_RIGHT, True,
            name="address", x=ctx.px(self.ADDRESS_X), y=ctx.px(self.ADDRESS_Y),
            max_width=W, scale=ctx.scale, background=secondary,
        ))

        layers.extend(self.signature(ctx, ctx.on_primary))
        return layers
