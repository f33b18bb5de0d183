"""
Render orchestration.

Sits between the HTTP layer and the pure template registry:
1. Font readiness gate (FontsNotReady when fonts are required but missing).
2. Asset manifest (probe logo/headshot/photo so undecodable images are dropped).
3. Registry composition, then optional PNG/PDF export.
"""
import logging
from typing import Callable, Optional

from constants import CANVAS_ASPECT, DEFAULT_CANVAS_WIDTH, DEFAULT_SIGNATURE_BRAND
from models import PropertyRecord, UserPreferences, CanvasStyle, PostType
from services.templates import registry
from services.templates.fonts import FontProvider
from services.surfaces.raster import render_png
from services.surfaces.pdf import render_pdf
from utils.image_processing import AssetLoader

logger = logging.getLogger(__name__)


class FontsNotReady(RuntimeError):
    pass


_font_provider: Optional[FontProvider] = None


def get_font_provider() -> FontProvider:
    """Process-wide provider; registration happens once."""
    global _font_provider
    if _font_provider is None:
        from config import FONTS_DIR, IS_PRODUCTION
        provider = FontProvider(FONTS_DIR, required=IS_PRODUCTION)
        provider.register_fonts()
        _font_provider = provider
    return _font_provider


def get_asset_loader() -> AssetLoader:
    """Fresh loader per render; its byte cache lives only as long as the request."""
    from config import ASSET_FETCH_TIMEOUT, MAX_ASSET_BYTES, ASSET_ROOT
    return AssetLoader(timeout=ASSET_FETCH_TIMEOUT, max_bytes=MAX_ASSET_BYTES, asset_root=ASSET_ROOT)


def referenced_urls(prop: PropertyRecord, prefs: UserPreferences, style: CanvasStyle):
    urls = [prop.photo_url]
    if style.show_brokerage:
        urls.append(prefs.brokerage_logo_url)
    if style.show_realtor:
        urls.append(prefs.realtor_picture_url)
    return [u for u in urls if u]


class RenderService:
    def __init__(self, fonts: Optional[FontProvider] = None,
                 loader_factory: Optional[Callable[[], AssetLoader]] = None,
                 require_fonts: bool = False, width: int = DEFAULT_CANVAS_WIDTH,
                 signature_brand: str = DEFAULT_SIGNATURE_BRAND):
        self.fonts = fonts
        self.loader_factory = loader_factory
        self.require_fonts = require_fonts
        self.width = width
        self.signature_brand = signature_brand

    def check_fonts(self) -> None:
        if not self.require_fonts:
            return
        if self.fonts is None or not self.fonts.ready():
            logger.error("Render refused: fonts not ready")
            raise FontsNotReady("Fonts are not loaded yet")

    def _new_loader(self) -> Optional[AssetLoader]:
        return self.loader_factory() if self.loader_factory is not None else None

    def compose(self, prop: PropertyRecord, prefs: UserPreferences, style: CanvasStyle, post_type,
                template_id: Optional[str] = None, width: Optional[int] = None, loader=None) -> list:
        """
        Layer list for one post.

        Raises:
            FontsNotReady: fonts required but not registered
            UnknownTemplate: template not offered for the post type
        """
        self.check_fonts()
        post_type = PostType.parse(post_type)
        if loader is None:
            loader = self._new_loader()
        assets = None
        if loader is not None:
            assets = loader.manifest(referenced_urls(prop, prefs, style))
        return registry.render(
            template_id or style.template_id, prop, prefs, style, post_type,
            width=width or self.width, assets=assets, signature_brand=self.signature_brand,
        )

    def _size(self, width: Optional[int]):
        w = width or self.width
        return w, w * CANVAS_ASPECT

    def export_png(self, prop, prefs, style, post_type, template_id=None, width=None) -> bytes:
        loader = self._new_loader()
        layers = self.compose(prop, prefs, style, post_type, template_id, width, loader=loader)
        w, h = self._size(width)
        png = render_png(layers, w, h, loader=loader, fonts=self.fonts)
        logger.info(f"Exported PNG {int(w)}x{int(h)} ({len(layers)} layers, {len(png)} bytes)")
        return png

    def export_pdf(self, prop, prefs, style, post_type, template_id=None, width=None) -> bytes:
        loader = self._new_loader()
        layers = self.compose(prop, prefs, style, post_type, template_id, width, loader=loader)
        w, h = self._size(width)
        pdf = render_pdf(layers, w, h, loader=loader, fonts=self.fonts)
        logger.info(f"Exported PDF {int(w)}x{int(h)} ({len(layers)} layers, {len(pdf)} bytes)")
        return pdf


def get_render_service() -> RenderService:
    from config import REQUIRE_FONTS, CANVAS_WIDTH, SIGNATURE_BRAND
    return RenderService(
        fonts=get_font_provider(),
        loader_factory=get_asset_loader,
        require_fonts=REQUIRE_FONTS,
        width=CANVAS_WIDTH,
        signature_brand=SIGNATURE_BRAND,
    )
