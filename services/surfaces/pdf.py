"""
PDF surface: paints a layer list with ReportLab.

Page size equals the canvas size (1px = 1pt). Layer coordinates are
top-left based, so every y is flipped against the page height.
"""
import io
import logging

from reportlab.pdfgen import canvas
from reportlab.pdfbase import pdfmetrics
from reportlab.lib.utils import ImageReader

from services.templates.layers import (
    Rectangle, Circle, Gradient, ImageLayer, TextBlock, expand_shadows,
    ALIGN_CENTER, ALIGN_RIGHT,
)
from services.surfaces.raster import gradient_image, fit_image, wrap_lines, LINE_HEIGHT
from services.templates.fonts import FALLBACK_PDF_FONT
from utils.colors import hex_to_rgb
from utils.image_processing import MissingAsset

logger = logging.getLogger(__name__)


def _fill(c, hex_color, alpha=1.0):
    r, g, b = hex_to_rgb(hex_color)
    c.setFillColorRGB(r / 255.0, g / 255.0, b / 255.0, alpha=alpha)


class PdfSurface:
    def __init__(self, width, height, loader=None, fonts=None):
        self.width = float(width)
        self.height = float(height)
        self.loader = loader
        self.fonts = fonts
        self.buffer = io.BytesIO()
        self.c = canvas.Canvas(self.buffer, pagesize=(self.width, self.height))
        self.c.setTitle("Listing Post")

    def _y(self, top, h=0.0):
        return self.height - top - h

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
        c = self.c
        _fill(c, layer.color, 1.0 if layer.opacity is None else layer.opacity)
        y = self._y(layer.y, layer.h)
        if layer.corner_radius:
            c.roundRect(layer.x, y, layer.w, layer.h, layer.corner_radius, stroke=0, fill=1)
        else:
            c.rect(layer.x, y, layer.w, layer.h, stroke=0, fill=1)

    def circle(self, layer: Circle):
        _fill(self.c, layer.color)
        self.c.circle(layer.cx, self._y(layer.cy), layer.r, stroke=0, fill=1)

    def gradient(self, layer: Gradient):
        # ReportLab shadings ignore alpha, so gradients go in as RGBA images
        img = gradient_image(layer)
        self.c.drawImage(ImageReader(img), layer.x, self._y(layer.y, layer.h),
                         width=layer.w, height=layer.h, mask='auto')

    def picture(self, layer: ImageLayer):
        if self.loader is None:
            return
        try:
            src = self.loader.open(layer.url)
        except MissingAsset as e:
            logger.warning(f"Skipping image layer {layer.name}: {e}")
            return
        img = fit_image(src, layer.w, layer.h, layer.fit)
        c = self.c
        y = self._y(layer.y, layer.h)
        c.saveState()
        if layer.clip_to_circle:
            p = c.beginPath()
            p.circle(layer.x + layer.w / 2, y + layer.h / 2, min(layer.w, layer.h) / 2)
            c.clipPath(p, stroke=0, fill=0)
        c.drawImage(ImageReader(img), layer.x, y, width=layer.w, height=layer.h, mask='auto')
        c.restoreState()

    def text(self, layer: TextBlock):
        c = self.c
        font = self.fonts.pdf_font_name(layer.font_family) if self.fonts is not None else FALLBACK_PDF_FONT
        size = layer.font_size_px
        lines = wrap_lines(layer.lines, layer.max_width, lambda s: pdfmetrics.stringWidth(s, font, size))

        c.setFont(font, size)
        _fill(c, layer.color)
        ascent = pdfmetrics.getAscent(font, size)
        top = layer.y
        for line in lines:
            baseline = self._y(top) - ascent
            if layer.align == ALIGN_CENTER:
                c.drawCentredString(layer.x + layer.max_width / 2, baseline, line)
            elif layer.align == ALIGN_RIGHT:
                c.drawRightString(layer.x + layer.max_width, baseline, line)
            else:
                c.drawString(layer.x, baseline, line)
            top += size * LINE_HEIGHT

    def to_pdf(self) -> bytes:
        self.c.showPage()
        self.c.save()
        return self.buffer.getvalue()


def render_pdf(layers, width, height, loader=None, fonts=None) -> bytes:
    surface = PdfSurface(width, height, loader=loader, fonts=fonts)
    surface.paint(layers)
    return surface.to_pdf()
