from flask import Flask

from config import SECRET_KEY, MAX_CONTENT_LENGTH, EXPORT_RATE_LIMIT, IS_PRODUCTION
from extensions import limiter

# Blueprints
from routes.templates import templates_bp
from routes.canvas import canvas_bp


def create_app(test_config=None):
    app = Flask(__name__)

    app.config['SECRET_KEY'] = SECRET_KEY
    app.config['MAX_CONTENT_LENGTH'] = MAX_CONTENT_LENGTH
    app.config['EXPORT_RATE_LIMIT'] = EXPORT_RATE_LIMIT

    # Test overrides; STYLE_STORE / RENDER_SERVICE may inject collaborators
    if test_config:
        app.config.update(test_config)

    # Setup Structured Logging
    from utils.logger import setup_logger
    setup_logger(app)

    # Extensions
    limiter.init_app(app)

    # Engine services
    from services.canvas_style import CanvasStyleService
    from services.render_service import get_render_service
    from services.style_store import get_style_store

    render_service = app.config.get('RENDER_SERVICE')
    if render_service is None:
        # Raises in production when fonts are missing; refuse to boot rather than export Helvetica
        render_service = get_render_service()
    app.extensions['render_service'] = render_service

    store = app.config.get('STYLE_STORE') or get_style_store()
    app.extensions['canvas_styles'] = CanvasStyleService(store=store)

    # Simple ping endpoint for Docker health checks
    @app.route("/ping")
    def ping():
        return {"status": "ok"}, 200

    @app.route("/healthz")
    def healthz():
        fonts = getattr(app.extensions['render_service'], 'fonts', None)
        ready = bool(fonts and fonts.ready())
        status = 200 if ready or not IS_PRODUCTION else 503
        return {"status": "ok" if status == 200 else "error", "fonts": "ready" if ready else "missing"}, status

    # Blueprints
    app.register_blueprint(templates_bp)
    app.register_blueprint(canvas_bp)

    app.logger.info("App initialized")
    return app


# WSGI Entry Point
app = create_app()

if __name__ == "__main__":
    app.run(host='0.0.0.0', debug=True)
