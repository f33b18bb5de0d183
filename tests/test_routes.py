"""
HTTP tests for the template and canvas blueprints.
"""
import io
from unittest.mock import MagicMock

import pytest
from PIL import Image

from services.render_service import RenderService
from utils.image_processing import AssetLoader

PROPERTY = {
    "addressLine": "123 Main St",
    "city": "Austin",
    "stateOrRegion": "TX",
    "postalCode": "78701",
    "beds": 3,
    "baths": 2,
    "squareFeet": 1980,
    "price": "525000",
}

PREFERENCES = {
    "brokerageLogo": "https://cdn.example.com/logo.png",
    "brokerageLogoSize": {"width": 800, "height": 200},
}


def _render_body(**extra):
    body = {"post_type": "JUST_LISTED", "property": PROPERTY, "preferences": PREFERENCES}
    body.update(extra)
    return body


def _texts(payload):
    return [l["lines"] for l in payload["layers"] if l["type"] == "text"]


def test_ping(client):
    resp = client.get("/ping")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


def test_healthz_reports_missing_fonts_outside_production(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.get_json()["fonts"] == "missing"


def test_request_id_is_echoed(client):
    resp = client.get("/ping", headers={"X-Request-Id": "abc-123"})
    assert resp.headers["X-Request-Id"] == "abc-123"
    assert client.get("/ping").headers.get("X-Request-Id")


def test_list_templates(client):
    resp = client.get("/api/templates?post_type=open-house")
    data = resp.get_json()
    assert resp.status_code == 200
    assert data["post_type"] == "OPEN_HOUSE"
    assert data["label"] == "Open House"
    assert [t["id"] for t in data["templates"]] == ["classic", "modern", "bold", "elegant", "detailed"]
    assert {f["id"] for f in data["fonts"]} >= {"playfair", "inter"}
    assert data["layout_version"] == 1


def test_list_templates_bad_post_type(client):
    resp = client.get("/api/templates?post_type=yard_sale")
    assert resp.status_code == 400
    assert resp.get_json()["ok"] is False


def test_render_layers(client):
    resp = client.post("/api/render", json=_render_body())
    data = resp.get_json()
    assert resp.status_code == 200
    assert data["template_id"] == "classic"
    assert data["width"] == 390
    assert data["height"] == 487.5
    texts = _texts(data)
    assert "3 beds" in texts
    assert "1980 sqft" in texts
    assert "Just Listed" in texts


def test_render_with_inline_style_and_width(client):
    body = _render_body(style={"templateId": "modern", "customHeading": "New Price"}, width=1080)
    data = client.post("/api/render", json=body).get_json()
    assert data["template_id"] == "modern"
    assert data["width"] == 1080
    assert "New Price" in _texts(data)


def test_render_open_house_times(client):
    body = _render_body(post_type="OPEN_HOUSE",
                        open_house={"start": "2026-10-19T14:00:00", "end": "2026-10-19T16:00:00"})
    data = client.post("/api/render", json=body).get_json()
    assert "October 19, 2026\n2:00 PM - 4:00 PM" in _texts(data)


def test_render_unknown_template(client):
    resp = client.post("/api/render", json=_render_body(template_id="retro"))
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "unknown_template"


@pytest.mark.parametrize("body", [
    {"post_type": "JUST_LISTED", "property": {"city": "Austin"}},
    {"post_type": "NOPE", "property": PROPERTY},
    {"post_type": "JUST_LISTED", "property": PROPERTY, "width": 50},
    {"post_type": "JUST_LISTED", "property": PROPERTY, "width": "big"},
    {"post_type": "JUST_LISTED", "property": PROPERTY, "open_house": {"start": "soon", "end": "later"}},
])
def test_render_bad_input(client, body):
    resp = client.post("/api/render", json=body)
    assert resp.status_code == 400


@pytest.mark.parametrize("body", [
    {"style": {"primaryColor": "purple"}},
    {"preferences": {"globalPrimaryColor": "nope"}},
])
def test_render_rejects_invalid_colors(client, body):
    resp = client.post("/api/render", json=_render_body(**body))
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "invalid_hex"


def test_render_requires_json(client):
    resp = client.post("/api/render", data="nope", content_type="text/plain")
    assert resp.status_code == 400


def test_render_uses_saved_canvas_style(client):
    resp = client.patch("/api/posts/77/canvas",
                        json={"post_type": "JUST_LISTED", "field": "templateId", "value": "detailed"})
    assert resp.status_code == 200

    data = client.post("/api/render", json=_render_body(post_id="77")).get_json()
    assert data["template_id"] == "detailed"
    assert any(l["name"] == "arc.top" for l in data["layers"])


def test_render_png(client):
    resp = client.post("/api/render.png", json=_render_body(width=400))
    assert resp.status_code == 200
    assert resp.mimetype == "image/png"
    assert Image.open(io.BytesIO(resp.data)).size == (400, 500)


def test_render_pdf(client):
    resp = client.post("/api/render.pdf", json=_render_body(style={"templateId": "bold"}))
    assert resp.status_code == 200
    assert resp.mimetype == "application/pdf"
    assert resp.data.startswith(b"%PDF")


def test_render_refused_without_fonts(memory_store):
    from app import create_app
    app = create_app({
        'TESTING': True,
        'RATELIMIT_ENABLED': False,
        'STYLE_STORE': memory_store,
        'RENDER_SERVICE': RenderService(fonts=None, require_fonts=True, width=390),
    })
    resp = app.test_client().post("/api/render.png", json=_render_body())
    assert resp.status_code == 503
    assert resp.get_json()["error"] == "fonts_not_ready"


def test_get_canvas_defaults(client):
    resp = client.get("/api/posts/1/canvas?post_type=JUST_SOLD")
    data = resp.get_json()
    assert resp.status_code == 200
    assert data["post_type"] == "JUST_SOLD"
    assert data["style"]["templateId"] == "classic"
    assert data["style"]["primaryColor"] == "#000000"
    assert len(data["templates"]) == 5


def test_patch_canvas(client, memory_store):
    resp = client.patch("/api/posts/1/canvas", json={"field": "primaryColor", "value": "#AA00CC"})
    assert resp.status_code == 200
    assert resp.get_json()["style"]["primaryColor"] == "#aa00cc"
    assert memory_store.load("1")["primaryColor"] == "#aa00cc"

    # snake_case field names are accepted too
    resp = client.patch("/api/posts/1/canvas", json={"field": "show_price", "value": True})
    assert resp.get_json()["style"]["showPrice"] is True

    assert client.get("/api/posts/1/canvas").get_json()["style"]["primaryColor"] == "#aa00cc"


def test_patch_canvas_brand_defaults(client):
    body = {"field": "showPrice", "value": True, "preferences": {"globalPrimaryColor": "#123456"}}
    data = client.patch("/api/posts/9/canvas", json=body).get_json()
    assert data["style"]["primaryColor"] == "#123456"


@pytest.mark.parametrize("body,code", [
    ({"field": "primaryColor", "value": "purple"}, "invalid_hex"),
    ({"field": "templateId", "value": "retro"}, "unknown_template"),
])
def test_patch_canvas_rejected_values(client, body, code):
    resp = client.patch("/api/posts/1/canvas", json=body)
    assert resp.status_code == 400
    assert resp.get_json()["code"] == code
    assert client.get("/api/posts/1/canvas").get_json()["style"]["templateId"] == "classic"


@pytest.mark.parametrize("body", [
    {"field": "wallpaper", "value": 1},
    {"field": "showPrice", "value": "yes"},
    {"value": "#000000"},
])
def test_patch_canvas_bad_requests(client, body):
    assert client.patch("/api/posts/1/canvas", json=body).status_code == 400


def test_patch_canvas_rejects_invalid_brand_colors(client, memory_store):
    resp = client.patch("/api/posts/3/canvas", json={
        "field": "showPrice", "value": False, "preferences": {"globalTextColor": "#12"},
    })
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "invalid_hex"
    assert memory_store.load("3") is None


def test_patch_canvas_persistence_failure(failing_store, render_service):
    from app import create_app
    app = create_app({
        'TESTING': True,
        'RATELIMIT_ENABLED': False,
        'STYLE_STORE': failing_store,
        'RENDER_SERVICE': render_service,
    })
    client = app.test_client()
    resp = client.patch("/api/posts/5/canvas", json={"field": "primaryColor", "value": "#ff0000"})
    assert resp.status_code == 502
    assert resp.get_json()["error"] == "persistence_failure"
    assert client.get("/api/posts/5/canvas").get_json()["style"]["primaryColor"] == "#000000"


def _app_with_loader(memory_store, loader_factory):
    from app import create_app
    return create_app({
        'TESTING': True,
        'RATELIMIT_ENABLED': False,
        'STYLE_STORE': memory_store,
        'RENDER_SERVICE': RenderService(fonts=None, loader_factory=loader_factory, width=390),
    })


def test_render_never_reads_server_files(tmp_path, memory_store):
    secret = tmp_path / "private.png"
    Image.new("RGBA", (40, 40), (255, 0, 0, 255)).save(secret, format="PNG")
    client = _app_with_loader(memory_store, AssetLoader).test_client()

    for url in (str(secret), f"file://{secret}"):
        body = _render_body(property={**PROPERTY, "photoUrl": url}, preferences={})
        resp = client.post("/api/render", json=body)
        assert resp.status_code == 200
        assert "background" not in [l["name"] for l in resp.get_json()["layers"]]

        resp = client.post("/api/render.png", json=body)
        assert resp.status_code == 200
        img = Image.open(io.BytesIO(resp.data)).convert("RGB")
        assert (255, 0, 0) not in {px for px in img.getdata()}


def test_render_never_fetches_internal_hosts(memory_store):
    session = MagicMock()
    client = _app_with_loader(memory_store, lambda: AssetLoader(session=session)).test_client()

    for url in ("http://127.0.0.1:5000/admin.png", "http://169.254.169.254/latest/meta-data"):
        body = _render_body(property={**PROPERTY, "photoUrl": url}, preferences={})
        resp = client.post("/api/render.png", json=body)
        assert resp.status_code == 200

    session.get.assert_not_called()
