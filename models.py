"""
Plain data records consumed by the composition engine.

All records are frozen; a changed canvas style is a new CanvasStyle built
with with_field(), never an in-place edit.
"""
import logging
from dataclasses import dataclass, field, fields, replace, asdict
from enum import Enum
from typing import Optional, Tuple

from constants import (
    POST_TYPE_LABELS,
    DEFAULT_PRIMARY_COLOR,
    DEFAULT_SECONDARY_COLOR,
    DEFAULT_FONT_ID,
    DEFAULT_CURRENCY,
    DEFAULT_TEMPLATE_ID,
    AREA_UNITS,
)
from utils.colors import is_valid_hex, normalize_hex
from utils.env import coerce_bool

logger = logging.getLogger(__name__)


class PostType(str, Enum):
    JUST_LISTED = "JUST_LISTED"
    JUST_SOLD = "JUST_SOLD"
    JUST_RENTED = "JUST_RENTED"
    OPEN_HOUSE = "OPEN_HOUSE"
    UNDER_CONTRACT = "UNDER_CONTRACT"
    BACK_ON_MARKET = "BACK_ON_MARKET"

    @property
    def label(self) -> str:
        return POST_TYPE_LABELS[self.value]

    @classmethod
    def parse(cls, raw) -> "PostType":
        """Accept 'OPEN_HOUSE', 'open_house', 'open-house' or 'Open House'."""
        if isinstance(raw, cls):
            return raw
        key = str(raw or "").strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown post type: '{raw}'")


def _pick(data: dict, *keys):
    for k in keys:
        if k in data and data[k] is not None:
            return data[k]
    return None


def _as_number(value):
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        n = float(str(value).replace(",", "").strip())
    except ValueError:
        return None
    return int(n) if n.is_integer() else n


def _as_size(value) -> Optional[Tuple[float, float]]:
    if not value:
        return None
    if isinstance(value, dict):
        w, h = value.get("width"), value.get("height")
    else:
        try:
            w, h = value
        except (TypeError, ValueError):
            return None
    if w is None or h is None:
        return None
    return (float(w), float(h))


@dataclass(frozen=True)
class PropertyRecord:
    address_line: str
    city: str
    state_or_region: str = ""
    postal_code: str = ""
    country: str = ""
    beds: Optional[float] = None
    baths: Optional[float] = None
    square_feet: Optional[float] = None
    area_unit: str = "sqft"
    price: Optional[str] = None
    photo_url: Optional[str] = None

    def __post_init__(self):
        if not (self.address_line or "").strip():
            raise ValueError("address_line is required")
        if not (self.city or "").strip():
            raise ValueError("city is required")
        if self.area_unit not in AREA_UNITS:
            raise ValueError(f"area_unit must be one of {sorted(AREA_UNITS)}")

    @classmethod
    def from_dict(cls, data: dict) -> "PropertyRecord":
        data = data or {}
        unit = _pick(data, "area_unit", "areaUnit", "unit") or "sqft"
        unit = str(unit).strip().lower()
        if unit in ("m²", "sqm", "m^2"):
            unit = "m2"
        price = _pick(data, "price", "priceText")
        return cls(
            address_line=str(_pick(data, "address_line", "addressLine", "address") or "").strip(),
            city=str(_pick(data, "city") or "").strip(),
            state_or_region=str(_pick(data, "state_or_region", "stateOrRegion", "state") or "").strip(),
            postal_code=str(_pick(data, "postal_code", "postalCode", "zip") or "").strip(),
            country=str(_pick(data, "country") or "").strip(),
            beds=_as_number(_pick(data, "beds", "bedrooms")),
            baths=_as_number(_pick(data, "baths", "bathrooms")),
            square_feet=_as_number(_pick(data, "square_feet", "squareFeet", "sqft", "area")),
            area_unit=unit,
            price=str(price) if price is not None else None,
            photo_url=_pick(data, "photo_url", "photoUrl", "photo"),
        )


@dataclass(frozen=True)
class UserPreferences:
    brokerage_logo_url: Optional[str] = None
    realtor_picture_url: Optional[str] = None
    brokerage_logo_size: Optional[Tuple[float, float]] = None
    realtor_picture_size: Optional[Tuple[float, float]] = None
    global_primary_color: Optional[str] = None
    global_secondary_color: Optional[str] = None
    global_text_color: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict, strict: bool = False) -> "UserPreferences":
        """Invalid brand colors are dropped, or raise InvalidHex when `strict`."""
        data = data or {}

        def color(*keys):
            value = _pick(data, *keys)
            if value is None:
                return None
            if strict:
                return normalize_hex(value)
            if not is_valid_hex(value):
                logger.warning(f"Ignoring invalid brand color '{value}'")
                return None
            return normalize_hex(value)

        return cls(
            brokerage_logo_url=_pick(data, "brokerage_logo_url", "brokerageLogo", "brokerageLogoUrl"),
            realtor_picture_url=_pick(data, "realtor_picture_url", "realtorPicture", "realtorPictureUrl"),
            brokerage_logo_size=_as_size(_pick(data, "brokerage_logo_size", "brokerageLogoSize")),
            realtor_picture_size=_as_size(_pick(data, "realtor_picture_size", "realtorPictureSize")),
            global_primary_color=color("global_primary_color", "globalPrimaryColor"),
            global_secondary_color=color("global_secondary_color", "globalSecondaryColor"),
            global_text_color=color("global_text_color", "globalTextColor"),
        )


# Persisted document keys (camelCase) for each CanvasStyle field
STYLE_KEYS = {
    "template_id": "templateId",
    "primary_color": "primaryColor",
    "secondary_color": "secondaryColor",
    "text_color": "textColor",
    "show_brokerage": "showBrokerage",
    "show_realtor": "showRealtor",
    "show_signature": "showSignature",
    "show_price": "showPrice",
    "price_text": "priceText",
    "currency": "currency",
    "custom_heading": "customHeading",
    "custom_subheading": "customSubheading",
    "custom_description": "customDescription",
    "selected_font_id": "selectedFontId",
    "open_house_text": "openHouseText",
}

LEGACY_STYLE_KEYS = {
    "template": "template_id",
    "font": "selected_font_id",
}

COLOR_FIELDS = ("primary_color", "secondary_color", "text_color")
BOOL_FIELDS = ("show_brokerage", "show_realtor", "show_signature", "show_price")
OPTIONAL_TEXT_FIELDS = ("custom_heading", "custom_subheading", "custom_description", "open_house_text")


@dataclass(frozen=True)
class CanvasStyle:
    template_id: str = DEFAULT_TEMPLATE_ID
    primary_color: str = DEFAULT_PRIMARY_COLOR
    secondary_color: Optional[str] = None
    text_color: Optional[str] = None
    show_brokerage: bool = True
    show_realtor: bool = True
    show_signature: bool = True
    show_price: bool = False
    price_text: str = ""
    currency: str = DEFAULT_CURRENCY
    custom_heading: Optional[str] = None
    custom_subheading: Optional[str] = None
    custom_description: Optional[str] = None
    selected_font_id: str = DEFAULT_FONT_ID
    open_house_text: Optional[str] = None

    @property
    def resolved_secondary(self) -> str:
        return self.secondary_color or DEFAULT_SECONDARY_COLOR

    @property
    def resolved_text(self) -> str:
        return self.text_color or self.primary_color

    def with_field(self, name: str, value) -> "CanvasStyle":
        return replace(self, **{name: value})

    def to_dict(self) -> dict:
        """Persisted (camelCase) form."""
        return {STYLE_KEYS[k]: v for k, v in asdict(self).items()}

    @classmethod
    def field_names(cls):
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_dict(cls, doc: Optional[dict], base: Optional["CanvasStyle"] = None,
                  strict: bool = False) -> "CanvasStyle":
        """
        Build a style from a persisted document.

        Unknown keys are ignored and absent keys keep the value from `base`
        (or the defaults). Invalid colors are dropped with a warning so a
        bad document never blocks rendering. Request bodies pass `strict=True`
        so an invalid color raises InvalidHex instead.
        """
        style = base or cls()
        if not doc:
            return style

        by_camel = {camel: snake for snake, camel in STYLE_KEYS.items()}
        values = {}
        # Legacy aliases first so a canonical key in the same document wins
        for key, name in LEGACY_STYLE_KEYS.items():
            if key in doc:
                values[name] = doc[key]
        for key, raw in doc.items():
            name = by_camel.get(key) or (key if key in STYLE_KEYS else None)
            if name is not None:
                values[name] = raw

        cleaned = {}
        for name, raw in values.items():
            if name in COLOR_FIELDS:
                if raw is None and name != "primary_color":
                    cleaned[name] = None
                elif strict or is_valid_hex(raw):
                    cleaned[name] = normalize_hex(raw)
                else:
                    logger.warning(f"Ignoring invalid persisted {name}: '{raw}'")
            elif name in BOOL_FIELDS:
                cleaned[name] = coerce_bool(raw)
            elif name in OPTIONAL_TEXT_FIELDS:
                cleaned[name] = str(raw) if raw not in (None, "") else None
            elif raw is not None:
                cleaned[name] = str(raw)

        return replace(style, **cleaned)
