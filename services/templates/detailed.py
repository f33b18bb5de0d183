from services.templates import TemplateVariant, RenderContext
from services.templates.layers import (
    Gradient, Circle, ImageLayer,
    SLOT_LOGO, SLOT_HEADSHOT, FIT_COVER, FIT_CONTAIN, ALIGN_LEFT, ALIGN_CENTER, AXIS_VERTICAL,
)
from services.templates.paragraphs import build_text_block, metric_texts, locality, country_or_postal
from services.templates.placement import anchor_above_baseline
from utils.colors import hex_with_alpha, contrast_color


class DetailedTemplate(TemplateVariant):
    """
    Overlapping circles: a large secondary arc up top holding a round
    headshot, and a primary arc at the bottom carrying heading, address and
    metrics with drop shadows.
    """

    id = "detailed"
    label = "Detailed"

    GRADIENT_STOPS = ((0.0, 0.5), (0.9, 0.5))

    TOP_ARC = (-0.6, -1.6, 2.0)
    BOTTOM_ARC_EDGE = (0.19, 2.0, 1.25)
    BOTTOM_ARC = (0.2, 2.05, 1.25)

    HEADSHOT_BASE = 0.35
    HEADSHOT_CENTER_X = 0.25
    HEADSHOT_LIFT = 0.05
    HEADSHOT_BORDER = 3

    HEADING_X = -0.18
    HEADING_Y = 0.9
    HEADING_SCALE = 0.85
    SUBHEADING_X = -0.19
    SUBHEADING_Y = 0.98
    SUBHEADING_SCALE = 0.8
    OPEN_HOUSE_SUBHEADING_SCALE = 1.0

    ADDRESS_X = -0.125
    ADDRESS_Y = 1.125
    ADDRESS_SIZE = 16

    LOGO_BASE = 0.17
    LOGO_X = 0.05
    LOGO_BASELINE = 0.99
    LOGO_SPACING = 0.05

    METRICS_X = 0.05
    METRICS_Y = 1.18
    METRICS_SIZE = 16
    METRICS_MAX_WIDTH = 100
    METRICS_NUDGE = 0.015
    METRIC_STEPS = (("beds", 1), ("baths", 8), ("area", 15))

    def compose(self, ctx: RenderContext):
        W = ctx.width
        primary, secondary = ctx.primary, ctx.secondary
        # Text shadows sit on the primary arc
        scene = ctx.style.primary_color

        layers = [Gradient(
            name="backdrop", x=0, y=0, w=W, h=ctx.height, axis=AXIS_VERTICAL, extent=W,
            stops=tuple((pos, hex_with_alpha(primary, a)) for pos, a in self.GRADIENT_STOPS),
        )]

        cx, cy, r = self.TOP_ARC
        layers.append(Circle(name="arc.top", cx=ctx.px(cx), cy=ctx.px(cy), r=ctx.px(r), color=secondary))

        headshot = self.headshot_slot(ctx, ctx.px(self.HEADSHOT_BASE))
        if headshot:
            w, h = headshot
            hx = W / 2 - ctx.px(self.HEADSHOT_CENTER_X)
            hy = h * 0.75 - ctx.px(self.HEADSHOT_LIFT)
            radius = w / 2
            layers.append(Circle(
                name="headshot.border", cx=hx, cy=hy, r=radius + self.HEADSHOT_BORDER * ctx.scale,
                color=contrast_color(secondary),
            ))
            layers.append(Circle(name="headshot.backdrop", cx=hx, cy=hy, r=radius, color=secondary))
            layers.append(ImageLayer(
                name="headshot", slot_role=SLOT_HEADSHOT, url=ctx.prefs.realtor_picture_url,
                x=hx - radius, y=hy - radius, w=w, h=w, fit=FIT_COVER, clip_to_circle=True,
            ))

        cx, cy, r = self.BOTTOM_ARC_EDGE
        layers.append(Circle(name="arc.edge", cx=ctx.px(cx), cy=ctx.px(cy), r=ctx.px(r), color=contrast_color(secondary)))
        cx, cy, r = self.BOTTOM_ARC
        layers.append(Circle(name="arc.bottom", cx=ctx.px(cx), cy=ctx.px(cy), r=ctx.px(r), color=primary))

        layers.extend(self.headings(
            ctx, heading_y=self.HEADING_Y, subheading_y=self.SUBHEADING_Y, heading_scale=self.HEADING_SCALE,
            subheading_scale=self.OPEN_HOUSE_SUBHEADING_SCALE if ctx.is_open_house else self.SUBHEADING_SCALE,
            color=ctx.on_primary, background=primary,
            heading_x=self.HEADING_X, subheading_x=self.SUBHEADING_X,
        ))

        prop = ctx.property
        address = ", ".join(p for p in (prop.address_line, locality(prop), country_or_postal(prop)) if p)
        layers.extend(build_text_block(
            address, ctx.font_id, self.ADDRESS_SIZE, ctx.text_color, ALIGN_CENTER, True,
            name="address", x=ctx.px(self.ADDRESS_X), y=ctx.px(self.ADDRESS_Y),
            max_width=W, scale=ctx.scale, background=scene,
        ))

        logo = self.logo_slot(ctx, ctx.px(self.LOGO_BASE))
        if logo:
            w, h = logo
            layers.append(ImageLayer(
                name="logo", slot_role=SLOT_LOGO, url=ctx.prefs.brokerage_logo_url,
                x=ctx.px(self.LOGO_X),
                y=anchor_above_baseline(h, ctx.px(self.LOGO_BASELINE), ctx.px(self.LOGO_SPACING)),
                w=w, h=h, fit=FIT_CONTAIN,
            ))

        nudge = 0 if ctx.long_address else ctx.px(self.METRICS_NUDGE)
        texts = metric_texts(prop, compact=True)
        for key, step in self.METRIC_STEPS:
            layers.extend(build_text_block(
                texts[key], ctx.font_id, self.METRICS_SIZE, ctx.text_color, ALIGN_LEFT, True,
                name=f"metric.{key}", x=ctx.px(self.METRICS_X) + nudge * step, y=ctx.px(self.METRICS_Y),
                max_width=self.METRICS_MAX_WIDTH * ctx.scale, scale=ctx.scale, background=scene,
            ))

        layers.extend(self.signature(ctx, ctx.on_primary))
        return layers
