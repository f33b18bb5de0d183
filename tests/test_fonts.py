import os
import shutil

import pytest
import reportlab

from services.templates.fonts import (
    resolve, adjusted_size, heading_size, list_fonts, FontProvider, FONT_TABLE, FALLBACK_PDF_FONT,
)

VERA_TTF = os.path.join(os.path.dirname(reportlab.__file__), "fonts", "Vera.ttf")


def test_resolve_known_ids():
    assert resolve("playfair").family == "PlayfairDisplay"
    assert resolve("poppins").family == "PoppinsSemiBold"
    assert resolve("montserrat").family == "MontserratExtraBold"
    assert resolve("SpaceMono").family == "SpaceMono"


def test_resolve_unknown_falls_back_to_inter():
    assert resolve("comic-sans").id == "inter"
    assert resolve(None).id == "inter"
    assert resolve("").id == "inter"


def test_size_compensation_table():
    expected = {
        "playfair": 1.0, "inter": 0.9, "montserrat": 0.85,
        "cormorant": 1.2, "poppins": 0.85, "spacemono": 0.85,
    }
    assert {k: v.size_compensation for k, v in FONT_TABLE.items()} == expected


def test_adjusted_size():
    assert adjusted_size(20, "cormorant") == pytest.approx(24.0)
    assert adjusted_size(20, "unknown") == pytest.approx(18.0)


def test_heading_size_short_text_playfair():
    assert heading_size("Just Listed", 1.0, "playfair") == pytest.approx(55.0)


def test_heading_size_shrinks_long_text():
    # 14 chars -> 3 over -> factor 0.7
    assert heading_size("Back on Market", 1.0, "playfair") == pytest.approx(38.5)
    # very long text bottoms out at 30%
    assert heading_size("x" * 40, 1.0, "playfair") == pytest.approx(16.5)


def test_heading_size_family_reduction():
    # 55 * 1.25 - 5
    assert heading_size("Just Sold", 1.0, "inter") == pytest.approx(63.75)
    # tiny headings keep at least half their size
    assert heading_size("Just Sold", 0.1, "inter") == pytest.approx(6.875 * 0.5)


def test_list_fonts_labels():
    labels = [f["label"] for f in list_fonts()]
    assert "Playfair Display" in labels
    assert len(labels) == 6


def test_provider_without_fonts_not_ready(tmp_path):
    provider = FontProvider(str(tmp_path))
    provider.register_fonts()
    assert provider.ready() is False
    assert provider.path_for("Inter") is None
    assert provider.pdf_font_name("Inter") == FALLBACK_PDF_FONT


def test_provider_required_raises_when_missing(tmp_path):
    provider = FontProvider(str(tmp_path), required=True)
    with pytest.raises(RuntimeError):
        provider.register_fonts()


def test_provider_registers_found_files(tmp_path):
    nested = tmp_path / "inter"
    nested.mkdir()
    shutil.copy(VERA_TTF, nested / "Inter.ttf")

    provider = FontProvider(str(tmp_path))
    provider.register_fonts()
    provider.register_fonts()

    assert provider.path_for("Inter").endswith("Inter.ttf")
    assert provider.pdf_font_name("Inter") == "Inter"
    # only one family present
    assert provider.ready() is False


def test_provider_ready_with_all_families(tmp_path):
    for spec in FONT_TABLE.values():
        shutil.copy(VERA_TTF, tmp_path / spec.filename)
    provider = FontProvider(str(tmp_path), required=True)
    provider.register_fonts()
    assert provider.ready() is True
