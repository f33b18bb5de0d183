import io

from flask import Blueprint, request, jsonify, current_app, send_file

from constants import LAYOUT_VERSION, CANVAS_ASPECT
from extensions import limiter
from models import PropertyRecord, UserPreferences, CanvasStyle, PostType
from services.render_service import FontsNotReady
from services.style_store import PersistenceFailure
from services.templates.fonts import list_fonts
from services.templates.layers import layers_to_dicts
from services.templates.registry import list_variants, default_template_id, UnknownTemplate
from utils.colors import InvalidHex
from utils.formatting import format_open_house, parse_datetime

templates_bp = Blueprint('templates', __name__)

MIN_WIDTH = 100
MAX_WIDTH = 4096


def _export_limit():
    return current_app.config.get("EXPORT_RATE_LIMIT", "30 per minute")


@templates_bp.route('/api/templates', methods=['GET'])
def get_templates():
    """Variant picker entries for a post type."""
    try:
        post_type = PostType.parse(request.args.get('post_type', PostType.JUST_LISTED.value))
    except ValueError as e:
        return jsonify({"ok": False, "error": str(e)}), 400

    return jsonify({
        "ok": True,
        "post_type": post_type.value,
        "label": post_type.label,
        "templates": [d.to_dict() for d in list_variants(post_type)],
        "fonts": list_fonts(),
        "layout_version": LAYOUT_VERSION,
    })


def _parse_render_request():
    """
    Build render inputs from the JSON body.

    Raises:
        ValueError (incl. InvalidHex): malformed input
        PersistenceFailure: post_id given and its stored style unreadable
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("JSON body required")

    post_type = PostType.parse(data.get('post_type'))
    prop = PropertyRecord.from_dict(data.get('property') or {})
    prefs = UserPreferences.from_dict(data.get('preferences') or {}, strict=True)

    post_id = data.get('post_id')
    if post_id is not None:
        style = current_app.extensions['canvas_styles'].get_style(post_id, post_type, prefs)
    else:
        base = CanvasStyle(template_id=default_template_id(post_type))
        style = CanvasStyle.from_dict(data.get('style'), base=base, strict=True)

    open_house = data.get('open_house')
    if open_house:
        text = format_open_house(parse_datetime(open_house.get('start')), parse_datetime(open_house.get('end')))
        style = style.with_field('open_house_text', text)

    width = data.get('width')
    if width is not None:
        if isinstance(width, bool) or not isinstance(width, int) or not (MIN_WIDTH <= width <= MAX_WIDTH):
            raise ValueError(f"width must be an integer between {MIN_WIDTH} and {MAX_WIDTH}")

    return {
        "prop": prop,
        "prefs": prefs,
        "style": style,
        "post_type": post_type,
        "template_id": data.get('template_id'),
        "width": width,
    }


def _error_response(e):
    if isinstance(e, UnknownTemplate):
        return jsonify({"ok": False, "error": str(e), "code": "unknown_template"}), 400
    if isinstance(e, InvalidHex):
        return jsonify({"ok": False, "error": str(e), "code": "invalid_hex"}), 400
    if isinstance(e, ValueError):
        return jsonify({"ok": False, "error": str(e)}), 400
    if isinstance(e, FontsNotReady):
        return jsonify({"ok": False, "error": "fonts_not_ready"}), 503
    if isinstance(e, PersistenceFailure):
        return jsonify({"ok": False, "error": "persistence_failure"}), 502
    current_app.logger.error(f"Render failed: {e}", exc_info=True)
    return jsonify({"ok": False, "error": "Internal server error"}), 500


@templates_bp.route('/api/render', methods=['POST'])
def render_layers():
    """Layer list as JSON (paint order)."""
    service = current_app.extensions['render_service']
    try:
        args = _parse_render_request()
        layers = service.compose(**args)
    except Exception as e:
        return _error_response(e)

    width = args['width'] or service.width
    return jsonify({
        "ok": True,
        "template_id": args['template_id'] or args['style'].template_id,
        "width": width,
        "height": width * CANVAS_ASPECT,
        "layers": layers_to_dicts(layers),
    })


@templates_bp.route('/api/render.png', methods=['POST'])
@limiter.limit(_export_limit)
def render_png_export():
    service = current_app.extensions['render_service']
    try:
        args = _parse_render_request()
        data = service.export_png(**args)
    except Exception as e:
        return _error_response(e)
    return send_file(io.BytesIO(data), mimetype='image/png', download_name='post.png')


@templates_bp.route('/api/render.pdf', methods=['POST'])
@limiter.limit(_export_limit)
def render_pdf_export():
    service = current_app.extensions['render_service']
    try:
        args = _parse_render_request()
        data = service.export_pdf(**args)
    except Exception as e:
        return _error_response(e)
    return send_file(io.BytesIO(data), mimetype='application/pdf', download_name='post.pdf')
