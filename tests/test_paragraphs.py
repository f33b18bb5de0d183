import pytest

from models import PropertyRecord
from services.templates.layers import TextBlock, ALIGN_LEFT, ALIGN_CENTER
from services.templates.paragraphs import (
    build_text_block, build_heading, address_lines, locality, metric_texts,
)


def test_plain_block_is_single_layer():
    layers = build_text_block(["a", "b"], "playfair", 14, "#112233", ALIGN_LEFT,
                              name="info", x=10, y=20, max_width=100)
    assert len(layers) == 1
    block = layers[0]
    assert isinstance(block, TextBlock)
    assert block.lines == "a\nb"
    assert block.line_list == ["a", "b"]
    assert block.font_family == "PlayfairDisplay"
    assert block.font_size_px == 14
    assert block.shadow is None


def test_size_compensation_and_scale():
    layers = build_text_block("x", "cormorant", 10, "#000000", ALIGN_LEFT,
                              name="t", x=0, y=0, max_width=50, scale=2.0)
    assert layers[0].font_size_px == pytest.approx(24.0)


def test_shadowed_block_paints_shadow_first():
    shadow, main = build_text_block("Hello", "inter", 14, "#ffffff", ALIGN_CENTER, True,
                                    name="address", x=10, y=20, max_width=100, scale=2.0,
                                    background="#000000")
    assert shadow.name == "address.shadow"
    assert main.name == "address"
    assert (shadow.x, shadow.y) == (12, 24)
    # dark backdrop -> dark shadow
    assert shadow.color == "#000000"
    # the duplicate is its own layer; the main block carries no inline shadow
    assert main.shadow is None and shadow.shadow is None
    assert shadow.lines == main.lines


def test_shadow_color_falls_back_to_text_color():
    shadow, _ = build_text_block("Hi", "inter", 14, "#ffffff", ALIGN_LEFT, True,
                                 name="t", x=0, y=0, max_width=10)
    assert shadow.color == "#ffffff"


def test_heading_uses_heading_size():
    shadow, main = build_heading("Just Listed", name="heading", x=0, y=0, max_width=390,
                                 size_scale=1.0, font_id="playfair", color="#ffffff",
                                 background="#000000")
    assert main.font_size_px == pytest.approx(55.0)
    assert shadow.font_size_px == main.font_size_px
    assert main.align == ALIGN_CENTER


def test_empty_heading_has_no_layers():
    assert build_heading("", name="subheading", x=0, y=0, max_width=390, size_scale=1.0,
                         font_id="playfair", color="#ffffff", background="#000000") == []


def test_address_lines(sample_property):
    assert address_lines(sample_property) == ["123 Main St", "Austin, TX", "78701"]
    assert locality(PropertyRecord(address_line="1 A St", city="Paris")) == "Paris"

    abroad = PropertyRecord(address_line="1 A St", city="Toronto", state_or_region="ON",
                            postal_code="M5V", country="Canada")
    assert address_lines(abroad)[-1] == "Canada"


def test_metric_texts_long_and_compact(sample_property):
    assert metric_texts(sample_property) == {"beds": "3 beds", "baths": "2 baths", "area": "1980 sqft"}
    assert metric_texts(sample_property, compact=True) == {"beds": "3BR", "baths": "2BA", "area": "1980 SQFT"}


def test_metric_texts_missing_values():
    prop = PropertyRecord(address_line="1 A St", city="Austin", baths=1.5)
    assert metric_texts(prop) == {"beds": "N/A", "baths": "1.5 baths", "area": "N/A"}
