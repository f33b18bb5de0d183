# Post Types
POST_TYPE_LABELS = {
    "JUST_LISTED": "Just Listed",
    "JUST_SOLD": "Just Sold",
    "JUST_RENTED": "Just Rented",
    "OPEN_HOUSE": "Open House",
    "UNDER_CONTRACT": "Under Contract",
    "BACK_ON_MARKET": "Back on Market",
}

# Canvas geometry (4:5 export)
CANVAS_ASPECT = 1.25
DEFAULT_CANVAS_WIDTH = 1080

# Design values were tuned on a 390pt wide phone canvas; absolute sizes
# (font px, shadow offsets, paragraph widths) scale by width / REFERENCE_WIDTH.
REFERENCE_WIDTH = 390.0

# Canvas Style Defaults
DEFAULT_PRIMARY_COLOR = "#000000"
DEFAULT_SECONDARY_COLOR = "#ffffff"
DEFAULT_FONT_ID = "playfair"
DEFAULT_CURRENCY = "USD"

# Fallbacks used when a variant resolves a color for an unset primary
FALLBACK_PRIMARY_COLOR = "#fafafa"
BOLD_ACCENT_COLOR = "#ff6b35"
ELEGANT_BASE_COLOR = "#2c3e50"
ELEGANT_ALT_COLOR = "#34495e"
ELEGANT_ACCENT_COLOR = "#ecf0f1"
DARK_SCENE_COLOR = "#000000"

# Text
NOT_AVAILABLE = "N/A"
SIGNATURE_TEXT = "Powered By"
LONG_ADDRESS_LINE = 20

# Shadow duplicate offset (reference px)
SHADOW_DX = 1
SHADOW_DY = 2

# Area units
AREA_UNITS = {
    "sqft": {"lower": "sqft", "upper": "SQFT"},
    "m2": {"lower": "m²", "upper": "m²"},
}

CURRENCY_SYMBOLS = {
    "USD": "$",
    "CAD": "CA$",
    "AUD": "A$",
    "EUR": "€",
    "GBP": "£",
    "MXN": "MX$",
}

# Layout Version - bump when any variant's geometry changes so cached exports are invalidated
LAYOUT_VERSION = 1

# Template picker preference when a post has no persisted template
DEFAULT_TEMPLATE_ID = "classic"

# Brand shown in the signature mark when not configured
DEFAULT_SIGNATURE_BRAND = "tidit"
