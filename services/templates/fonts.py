"""
Font resolution table and font file registration.

Handles:
1. Font id -> family/label/compensation lookup (pure, never fails).
2. Heading sizing per family.
3. Locating and registering the TTF files (FontProvider) for the PDF and PNG surfaces.
"""
import os
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FontSpec:
    id: str
    family: str
    label: str
    size_compensation: float
    heading_compensation: float
    filename: str


FONT_TABLE: Dict[str, FontSpec] = {
    "playfair": FontSpec("playfair", "PlayfairDisplay", "Playfair Display", 1.0, 1.0, "PlayfairDisplay-Regular.ttf"),
    "inter": FontSpec("inter", "Inter", "Inter", 0.9, 1.25, "Inter.ttf"),
    "poppins": FontSpec("poppins", "PoppinsSemiBold", "Poppins", 0.85, 1.125, "Poppins-SemiBold.ttf"),
    "cormorant": FontSpec("cormorant", "CormorantGaramond", "Cormorant Garamond", 1.2, 1.3, "CormorantGaramond.ttf"),
    "montserrat": FontSpec("montserrat", "MontserratExtraBold", "Montserrat", 0.85, 1.0, "Montserrat-ExtraBold.ttf"),
    "spacemono": FontSpec("spacemono", "SpaceMono", "Space Mono", 0.85, 1.0, "SpaceMono-Regular.ttf"),
}

DEFAULT_FONT = "inter"
HEADING_FAMILY_EXEMPT = "PlayfairDisplay"

HEADING_BASE_PX = 55
HEADING_MAX_CHARS = 11
HEADING_SHRINK_PER_CHAR = 0.1
HEADING_MIN_FACTOR = 0.3
HEADING_FAMILY_REDUCTION_PX = 5


def resolve(font_id: Optional[str]) -> FontSpec:
    """Unknown or empty ids resolve to the default family."""
    key = (font_id or "").strip().lower()
    spec = FONT_TABLE.get(key)
    if spec is None:
        if key:
            logger.debug(f"Unknown font id '{font_id}', using {DEFAULT_FONT}")
        return FONT_TABLE[DEFAULT_FONT]
    return spec


def adjusted_size(base_size_px: float, font_id: Optional[str]) -> float:
    return base_size_px * resolve(font_id).size_compensation


def heading_size(text: str, scale: float, font_id: Optional[str]) -> float:
    """
    Size in reference px for a heading line.

    Long texts shrink 10% per character past 11 (never below 30%), then the
    family's heading compensation applies; families other than Playfair
    drop 5px but never below half their size.
    """
    spec = resolve(font_id)
    size = HEADING_BASE_PX * scale
    length = len(text or "")
    if length > HEADING_MAX_CHARS:
        factor = max(HEADING_MIN_FACTOR, 1 - (length - HEADING_MAX_CHARS) * HEADING_SHRINK_PER_CHAR)
        size *= factor
    size *= spec.heading_compensation
    if spec.family != HEADING_FAMILY_EXEMPT:
        size = max(size - HEADING_FAMILY_REDUCTION_PX, size * 0.5)
    return size


def list_fonts():
    return [{"id": s.id, "label": s.label} for s in FONT_TABLE.values()]


# PDF fallback when a family file is not installed
FALLBACK_PDF_FONT = "Helvetica"


class FontProvider:
    """
    Locates the family TTF files under a fonts directory and registers them
    with ReportLab. Raster surfaces use path_for() with Pillow's truetype loader.
    """

    def __init__(self, fonts_dir: str, required: bool = False):
        self.fonts_dir = fonts_dir
        self.required = required
        self._paths: Dict[str, str] = {}
        self._registered = False

    def _scan(self) -> Dict[str, str]:
        wanted = {spec.filename: spec.family for spec in FONT_TABLE.values()}
        found = {}
        if not os.path.isdir(self.fonts_dir):
            return found
        for root, _dirs, files in os.walk(self.fonts_dir):
            for f in files:
                if f in wanted and wanted[f] not in found:
                    found[wanted[f]] = os.path.join(root, f)
        return found

    def register_fonts(self) -> None:
        """
        Idempotent. Raises RuntimeError when `required` and any family is missing.
        """
        if self._registered:
            return

        found = self._scan()
        missing = sorted(spec.family for spec in FONT_TABLE.values() if spec.family not in found)

        if missing and self.required:
            raise RuntimeError(f"CRITICAL: Required fonts missing from {self.fonts_dir}: {', '.join(missing)}")

        for family, path in found.items():
            try:
                pdfmetrics.registerFont(TTFont(family, path))
                self._paths[family] = path
            except Exception as e:
                # A corrupt file only disables that family
                logger.warning(f"Font registration failed for {family} ({path}): {e}")

        if missing:
            logger.warning(f"Fonts not installed, falling back to {FALLBACK_PDF_FONT}: {', '.join(missing)}")

        self._registered = True

    def ready(self) -> bool:
        """True once every family in the table is registered."""
        return self._registered and all(spec.family in self._paths for spec in FONT_TABLE.values())

    def path_for(self, family: str) -> Optional[str]:
        return self._paths.get(family)

    def pdf_font_name(self, family: str) -> str:
        return family if family in self._paths else FALLBACK_PDF_FONT
