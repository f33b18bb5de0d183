"""
PNG surface: paints a layer list with Pillow.

Layers are painted strictly in list order onto an RGBA canvas. Each layer is
drawn on its own transparent overlay and alpha-composited so shape opacity
and gradient alpha blend the same way the PDF surface does.
"""
import io
import logging

from PIL import Image, ImageDraw, ImageFont, ImageOps

from services.templates.layers import (
    Rectangle, Circle, Gradient, ImageLayer, TextBlock, expand_shadows,
    FIT_CONTAIN, ALIGN_CENTER, ALIGN_RIGHT, AXIS_DIAGONAL,
)
from utils.colors import hex_to_rgb
from utils.image_processing import MissingAsset

logger = logging.getLogger(__name__)

LINE_HEIGHT = 1.2
# Gradients are computed at this resolution and resized to the box
GRADIENT_SAMPLES = 256


def _rgba(hex_color, alpha=1.0):
    r, g, b = hex_to_rgb(hex_color)
    return (r, g, b, int(round(255 * max(0.0, min(1.0, alpha)))))


def _interpolate(stops, t):
    if t <= stops[0][0]:
        return stops[0][1]
    for (p0, c0), (p1, c1) in zip(stops, stops[1:]):
        if t <= p1:
            f = 0.0 if p1 == p0 else (t - p0) / (p1 - p0)
            return tuple(c0[i] + (c1[i] - c0[i]) * f for i in range(4))
    return stops[-1][1]


def gradient_image(layer: Gradient) -> Image.Image:
    """RGBA image of the gradient box (size w x h)."""
    w, h = max(1, int(round(layer.w))), max(1, int(round(layer.h)))
    stops = [(pos, (c[0], c[1], c[2], c[3] * 255)) for pos, c in layer.stops]
    if not stops:
        return Image.new("RGBA", (w, h), (0, 0, 0, 0))

    if layer.axis == AXIS_DIAGONAL:
        n = GRADIENT_SAMPLES
        img = Image.new("RGBA", (n, n))
        px = img.load()
        for y in range(n):
            for x in range(n):
                # projection onto the (0,0)->(w,h) diagonal
                t = (x * w * w + y * h * h) / float((n - 1) * (w * w + h * h))
                px[x, y] = tuple(int(round(v)) for v in _interpolate(stops, t))
        return img.resize((w, h), Image.BILINEAR)

    extent = layer.extent or layer.h
    column = Image.new("RGBA", (1, h))
    px = column.load()
    for y in range(h):
        t = min(1.0, y / float(extent)) if extent else 0.0
        px[0, y] = tuple(int(round(v)) for v in _interpolate(stops, t))
    return column.resize((w, h), Image.NEAREST)


def fit_image(img: Image.Image, w: float, h: float, fit: str) -> Image.Image:
    """cover crops to fill; contain letterboxes onto a transparent box."""
    size = (max(1, int(round(w))), max(1, int(round(h))))
    if fit == FIT_CONTAIN:
        inner = ImageOps.contain(img, size)
        box = Image.new("RGBA", size, (0, 0, 0, 0))
        box.paste(inner, ((size[0] - inner.width) // 2, (size[1] - inner.height) // 2))
        return box
    return ImageOps.fit(img, size)


def circle_mask(size) -> Image.Image:
    mask = Image.new("L", size, 0)
    ImageDraw.Draw(mask).ellipse((0, 0, size[0] - 1, size[1] - 1), fill=255)
    return mask


def wrap_lines(text: str, max_width: float, measure) -> list:
    """Greedy word wrap of each explicit line; `measure(s)` returns its width."""
    out = []
    for line in text.split("\n"):
        words = line.split(" ")
        current = ""
        for word in words:
            trial = f"{current} {word}" if current else word
            if current and max_width and measure(trial) > max_width:
                out.append(current)
                current = word
            else:
                current = trial
        out.append(current)
    return out


class RasterSurface:
    def __init__(self, width, height, loader=None, fonts=None, background="#ffffff"):
        self.width = int(round(width))
        self.height = int(round(height))
        self.loader = loader
        self.fonts = fonts
        self.image = Image.new("RGBA", (self.width, self.height), _rgba(background))
        self._font_cache = {}

    def _overlay(self):
        return Image.new("RGBA", self.image.size, (0, 0, 0, 0))

    def _composite(self, overlay):
        self.image = Image.alpha_composite(self.image, overlay)

    def paint(self, layers):
        for layer in expand_shadows(layers):
            if isinstance(layer, Rectangle):
                self.rectangle(layer)
            elif isinstance(layer, Circle):
                self.circle(layer)
            elif isinstance(layer, Gradient):
                self.gradient(layer)
            elif isinstance(layer, ImageLayer):
                self.picture(layer)
            elif isinstance(layer, TextBlock):
                self.text(layer)
            else:
                raise TypeError(f"Unsupported layer type: {type(layer).__name__}")

    def rectangle(self, layer: Rectangle):
        overlay = self._overlay()
        draw = ImageDraw.Draw(overlay)
        fill = _rgba(layer.color, 1.0 if layer.opacity is None else layer.opacity)
        box = (layer.x, layer.y, layer.x + layer.w, layer.y + layer.h)
        if layer.corner_radius:
            draw.rounded_rectangle(box, radius=layer.corner_radius, fill=fill)
        else:
            draw.rectangle(box, fill=fill)
        self._composite(overlay)

    def circle(self, layer: Circle):
        overlay = self._overlay()
        ImageDraw.Draw(overlay).ellipse(
            (layer.cx - layer.r, layer.cy - layer.r, layer.cx + layer.r, layer.cy + layer.r),
            fill=_rgba(layer.color),
        )
        self._composite(overlay)

    def gradient(self, layer: Gradient):
        overlay = self._overlay()
        overlay.paste(gradient_image(layer), (int(round(layer.x)), int(round(layer.y))))
        self._composite(overlay)

    def picture(self, layer: ImageLayer):
        if self.loader is None:
            return
        try:
            src = self.loader.open(layer.url)
        except MissingAsset as e:
            logger.warning(f"Skipping image layer {layer.name}: {e}")
            return
        img = fit_image(src, layer.w, layer.h, layer.fit)
        mask = img.getchannel("A")
        if layer.clip_to_circle:
            mask = Image.composite(mask, Image.new("L", img.size, 0), circle_mask(img.size))
        overlay = self._overlay()
        overlay.paste(img, (int(round(layer.x)), int(round(layer.y))), mask)
        self._composite(overlay)

    def _font(self, family, size):
        key = (family, size)
        if key not in self._font_cache:
            path = self.fonts.path_for(family) if self.fonts is not None else None
            if path:
                self._font_cache[key] = ImageFont.truetype(path, size)
            else:
                self._font_cache[key] = ImageFont.load_default(size=size)
        return self._font_cache[key]

    def text(self, layer: TextBlock):
        size = max(1, int(round(layer.font_size_px)))
        font = self._font(layer.font_family, size)
        lines = wrap_lines(layer.lines, layer.max_width, font.getlength)
        overlay = self._overlay()
        draw = ImageDraw.Draw(overlay)
        if layer.align == ALIGN_CENTER:
            x, anchor = layer.x + layer.max_width / 2, "ma"
        elif layer.align == ALIGN_RIGHT:
            x, anchor = layer.x + layer.max_width, "ra"
        else:
            x, anchor = layer.x, "la"
        y = layer.y
        for line in lines:
            draw.text((x, y), line, font=font, fill=_rgba(layer.color), anchor=anchor)
            y += size * LINE_HEIGHT
        self._composite(overlay)

    def to_png(self) -> bytes:
        out = io.BytesIO()
        self.image.save(out, format="PNG")
        return out.getvalue()


def render_png(layers, width, height, loader=None, fonts=None) -> bytes:
    surface = RasterSurface(width, height, loader=loader, fonts=fonts)
    surface.paint(layers)
    return surface.to_png()
