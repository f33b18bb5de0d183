import os
import logging

from constants import DEFAULT_CANVAS_WIDTH, DEFAULT_SIGNATURE_BRAND
from utils.env import get_env_str, get_env_bool, get_env_int, get_env_float

logger = logging.getLogger(__name__)

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

# -----------------------------------------------------------------------------
# Dotenv loading (LOCAL ONLY)
# -----------------------------------------------------------------------------
# Tests must be deterministic and must NOT ingest a developer's repo-root .env.
_FLASK_ENV_EARLY = (os.getenv("FLASK_ENV") or "").strip().lower()
_APP_STAGE_EARLY = (os.getenv("APP_STAGE") or "").strip().lower()

if _FLASK_ENV_EARLY not in {"test", "testing"} and _APP_STAGE_EARLY not in {"test", "testing"}:
    try:
        from dotenv import load_dotenv
        load_dotenv(dotenv_path=os.path.join(BASE_DIR, ".env"), override=False)
    except ImportError:
        # Dotenv is a local-dev convenience only.
        pass

# -----------------------------------------------------------------------------
# Environment / Stage
# -----------------------------------------------------------------------------
def _normalize_stage(raw: str) -> str:
    raw = (raw or "").strip().lower()
    if raw in {"prod", "production"}:
        return "production"
    if raw in {"stage", "staging"}:
        return "staging"
    if raw in {"test", "testing"}:
        return "test"
    return "dev"


FLASK_ENV = (os.getenv("FLASK_ENV", "development") or "development").strip().lower()
APP_STAGE = _normalize_stage(os.getenv("APP_STAGE", "dev"))

IS_TEST = APP_STAGE == "test" or FLASK_ENV in {"test", "testing"}
IS_STAGING = APP_STAGE == "staging"
IS_PRODUCTION = APP_STAGE == "production"

DEBUG = FLASK_ENV != "production" and not IS_PRODUCTION

# -----------------------------------------------------------------------------
# Instance / Asset Paths
# -----------------------------------------------------------------------------
INSTANCE_DIR = get_env_str("INSTANCE_DIR", default=os.path.join(BASE_DIR, "instance"))

try:
    os.makedirs(INSTANCE_DIR, exist_ok=True)
except OSError as e:
    logger.warning(
        f"[Config] WARNING: Could not create INSTANCE_DIR at {INSTANCE_DIR} ({e}). Falling back to /tmp/instance."
    )
    INSTANCE_DIR = os.path.join("/tmp", "instance")
    os.makedirs(INSTANCE_DIR, exist_ok=True)

CANVAS_STYLE_DIR = os.path.join(INSTANCE_DIR, "canvas")

FONTS_DIR = get_env_str("FONTS_DIR", default=os.path.join(BASE_DIR, "static", "fonts"))

# -----------------------------------------------------------------------------
# Rendering
# -----------------------------------------------------------------------------
CANVAS_WIDTH = get_env_int("CANVAS_WIDTH", default=DEFAULT_CANVAS_WIDTH, minimum=100)

# Fonts must be present before any export in staging/production.
REQUIRE_FONTS = get_env_bool("REQUIRE_FONTS", default=IS_STAGING or IS_PRODUCTION)

SIGNATURE_BRAND = get_env_str("SIGNATURE_BRAND", default=DEFAULT_SIGNATURE_BRAND)

ASSET_FETCH_TIMEOUT = get_env_float("ASSET_FETCH_TIMEOUT", default=10.0)
MAX_ASSET_BYTES = 16 * 1024 * 1024

# Directory that plain paths and file:// image URLs may be read from.
# Unset means remote http(s) images only.
ASSET_ROOT = get_env_str("ASSET_ROOT")

# -----------------------------------------------------------------------------
# Canvas Style Persistence
# -----------------------------------------------------------------------------
STYLE_STORE_BACKEND = get_env_str("STYLE_STORE_BACKEND", default="local").strip().lower()

if STYLE_STORE_BACKEND not in {"local", "memory"}:
    logger.warning(f"[Config] WARNING: Unknown STYLE_STORE_BACKEND '{STYLE_STORE_BACKEND}'. Using 'local'.")
    STYLE_STORE_BACKEND = "local"

if IS_PRODUCTION and STYLE_STORE_BACKEND == "memory":
    raise RuntimeError("CRITICAL: STYLE_STORE_BACKEND must not be 'memory' in production.")

# -----------------------------------------------------------------------------
# Secrets / Limits
# -----------------------------------------------------------------------------
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    if IS_STAGING or IS_PRODUCTION:
        raise ValueError(f"SECRET_KEY must be set in {APP_STAGE} environment.")
    SECRET_KEY = "dev-secret-key-change-this"
    logger.warning("[Config] WARNING: Using default SECRET_KEY for development. DO NOT use in real environments!")

MAX_CONTENT_LENGTH = 2 * 1024 * 1024

EXPORT_RATE_LIMIT = get_env_str("EXPORT_RATE_LIMIT", default="30 per minute")
