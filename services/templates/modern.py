from services.templates import TemplateVariant, RenderContext
from services.templates.layers import (
    Gradient, Rectangle, ImageLayer,
    SLOT_LOGO, SLOT_HEADSHOT, FIT_COVER, FIT_CONTAIN, ALIGN_LEFT, ALIGN_CENTER, AXIS_VERTICAL,
)
from services.templates.paragraphs import build_text_block, metric_texts, locality, country_or_postal
from services.templates.placement import center_in_rect
from utils.colors import hex_with_alpha


class ModernTemplate(TemplateVariant):
    """Framed layout with a centered address and a horizontal metrics row."""

    id = "modern"
    label = "Modern"

    GRADIENT_STOPS = ((0.0, 0.5), (0.9, 0.5))

    FRAME_THICKNESS = 5
    # x, y, w, h as fractions of W; None means FRAME_THICKNESS
    FRAME_BARS = (
        ("frame.top", 0.05, 0.1, 0.9, None),
        ("frame.left", 0.05, 0.1, None, 1.0625),
        ("frame.right", 0.95, 0.1, None, 1.0625),
        ("frame.bottom", 0.05, 1.15, 0.91, None),
    )

    HEADING_Y = 0.3
    SUBHEADING_Y = 0.55
    SUBHEADING_SCALE = 1.25
    OPEN_HOUSE_SUBHEADING_SCALE = 2.0

    REALTOR_CARD = (-0.2, 1.0, 0.5, 0.5)
    REALTOR_CARD_RADIUS = 30
    HEADSHOT_BASE = 0.35
    HEADSHOT_X = -0.05

    LOGO_BASE = 0.17
    LOGO_AREA = (0.05, 1.05, 0.9, 0.3)

    METRICS_X = 0.46
    METRICS_Y = 1.06
    METRICS_SIZE = 20
    METRICS_MAX_WIDTH = 100
    METRICS_NUDGE = 0.015
    METRIC_STEPS = (("beds", 1), ("baths", 8), ("area", 15))

    ADDRESS_Y = 0.8
    ADDRESS_SIZE = 20

    def compose(self, ctx: RenderContext):
        W = ctx.width
        primary, secondary = ctx.primary, ctx.secondary
        frame_color = ctx.on_primary

        layers = [Gradient(
            name="backdrop", x=0, y=0, w=W, h=ctx.height, axis=AXIS_VERTICAL, extent=W,
            stops=tuple((pos, hex_with_alpha(primary, a)) for pos, a in self.GRADIENT_STOPS),
        )]

        thickness = self.FRAME_THICKNESS * ctx.scale
        for name, x, y, w, h in self.FRAME_BARS:
            layers.append(Rectangle(
                name=name, x=ctx.px(x), y=ctx.px(y),
                w=thickness if w is None else ctx.px(w),
                h=thickness if h is None else ctx.px(h),
                color=frame_color,
            ))

        layers.extend(self.headings(
            ctx, heading_y=self.HEADING_Y, subheading_y=self.SUBHEADING_Y, heading_scale=1.0,
            subheading_scale=self.OPEN_HOUSE_SUBHEADING_SCALE if ctx.is_open_house else self.SUBHEADING_SCALE,
            color=frame_color, background=primary,
        ))

        headshot = self.headshot_slot(ctx, ctx.px(self.HEADSHOT_BASE))
        if headshot:
            x, y, w, h = self.REALTOR_CARD
            layers.append(Rectangle(
                name="realtor.backdrop", x=ctx.px(x), y=ctx.px(y), w=ctx.px(w), h=ctx.px(h),
                color=secondary, corner_radius=self.REALTOR_CARD_RADIUS * ctx.scale,
            ))
            w, h = headshot
            layers.append(ImageLayer(
                name="headshot", slot_role=SLOT_HEADSHOT, url=ctx.prefs.realtor_picture_url,
                x=ctx.px(self.HEADSHOT_X), y=ctx.height - h, w=w, h=h, fit=FIT_COVER,
            ))

        # Row is dropped entirely without a bed count
        if ctx.property.beds is not None:
            nudge = 0 if ctx.long_address else ctx.px(self.METRICS_NUDGE)
            texts = metric_texts(ctx.property, compact=True)
            for key, step in self.METRIC_STEPS:
                layers.extend(build_text_block(
                    texts[key], ctx.font_id, self.METRICS_SIZE, ctx.text_color, ALIGN_LEFT,
                    name=f"metric.{key}", x=ctx.px(self.METRICS_X) + nudge * step, y=ctx.px(self.METRICS_Y),
                    max_width=self.METRICS_MAX_WIDTH * ctx.scale, scale=ctx.scale,
                ))

        logo = self.logo_slot(ctx, ctx.px(self.LOGO_BASE))
        if logo:
            w, h = logo
            x, y = center_in_rect(w, h, *(ctx.px(v) for v in self.LOGO_AREA))
            layers.append(ImageLayer(
                name="logo", slot_role=SLOT_LOGO, url=ctx.prefs.brokerage_logo_url,
                x=x, y=y, w=w, h=h, fit=FIT_CONTAIN,
            ))

        prop = ctx.property
        tail = ", ".join(p for p in (locality(prop), country_or_postal(prop)) if p)
        layers.extend(build_text_block(
            f"{prop.address_line},\n {tail}", ctx.font_id, self.ADDRESS_SIZE, ctx.text_color, ALIGN_CENTER,
            name="address", x=0, y=ctx.px(self.ADDRESS_Y), max_width=W, scale=ctx.scale,
        ))

        layers.extend(self.signature(ctx, frame_color))
        return layers
