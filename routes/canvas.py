from flask import Blueprint, request, jsonify, current_app

from models import PostType, UserPreferences, STYLE_KEYS
from services.style_store import PersistenceFailure
from services.templates.registry import UnknownTemplate, list_variants
from utils.colors import InvalidHex

canvas_bp = Blueprint('canvas', __name__)

_FIELD_BY_KEY = {camel: snake for snake, camel in STYLE_KEYS.items()}


def _style_payload(style, post_type):
    return {
        "ok": True,
        "post_type": post_type.value,
        "style": style.to_dict(),
        "templates": [d.to_dict() for d in list_variants(post_type)],
    }


@canvas_bp.route('/api/posts/<post_id>/canvas', methods=['GET'])
def get_canvas(post_id):
    """Confirmed canvas style for a post (defaults when never saved)."""
    try:
        post_type = PostType.parse(request.args.get('post_type', PostType.JUST_LISTED.value))
    except ValueError as e:
        return jsonify({"ok": False, "error": str(e)}), 400

    try:
        style = current_app.extensions['canvas_styles'].get_style(post_id, post_type)
    except PersistenceFailure as e:
        current_app.logger.error(f"Canvas load failed for post {post_id}: {e}")
        return jsonify({"ok": False, "error": "persistence_failure"}), 502

    return jsonify(_style_payload(style, post_type))


@canvas_bp.route('/api/posts/<post_id>/canvas', methods=['PATCH'])
def update_canvas(post_id):
    """
    Change one canvas field: {"field": "primaryColor", "value": "#112233"}.
    Field names are the persisted camelCase keys (snake_case also accepted).
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or 'field' not in data or 'value' not in data:
        return jsonify({"ok": False, "error": "Missing field/value"}), 400

    try:
        post_type = PostType.parse(data.get('post_type') or request.args.get('post_type') or PostType.JUST_LISTED.value)
    except ValueError as e:
        return jsonify({"ok": False, "error": str(e)}), 400

    key = data['field']
    field = _FIELD_BY_KEY.get(key) or (key if key in STYLE_KEYS else None)
    if field is None:
        return jsonify({"ok": False, "error": f"Unknown canvas field '{key}'"}), 400

    service = current_app.extensions['canvas_styles']
    try:
        prefs = UserPreferences.from_dict(data.get('preferences') or {}, strict=True)
        style = service.update(post_id, post_type, field, data['value'], prefs=prefs)
    except UnknownTemplate as e:
        return jsonify({"ok": False, "error": str(e), "code": "unknown_template"}), 400
    except InvalidHex as e:
        return jsonify({"ok": False, "error": str(e), "code": "invalid_hex"}), 400
    except ValueError as e:
        return jsonify({"ok": False, "error": str(e)}), 400
    except PersistenceFailure as e:
        current_app.logger.error(f"Canvas save failed for post {post_id}: {e}")
        return jsonify({"ok": False, "error": "persistence_failure"}), 502

    return jsonify(_style_payload(style, post_type))
