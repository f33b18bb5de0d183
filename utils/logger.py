import logging
import json
import uuid
import sys
from datetime import datetime, timezone

from flask import request, has_request_context, g


class JSONFormatter(logging.Formatter):
    """
    One JSON object per log line.
    Request method/path, post id and request_id are added inside a Flask request.
    """
    def format(self, record):
        log_record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "lineno": record.lineno,
        }

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        if has_request_context():
            log_record["method"] = request.method
            log_record["path"] = request.path
            if request.view_args and "post_id" in request.view_args:
                log_record["post_id"] = request.view_args["post_id"]
            if hasattr(g, "request_id"):
                log_record["request_id"] = g.request_id

        return json.dumps(log_record)


def setup_logger(app):
    """
    Route app, werkzeug and engine logs to stdout as JSON.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

    app.logger.handlers.clear()
    app.logger.addHandler(handler)
    app.logger.setLevel(logging.INFO)

    logging.getLogger('werkzeug').handlers = [handler]

    # Engine modules log through their own module loggers
    for name in ("services", "utils"):
        engine_logger = logging.getLogger(name)
        engine_logger.handlers = [handler]
        engine_logger.setLevel(logging.INFO)
        engine_logger.propagate = False

    gunicorn_logger = logging.getLogger('gunicorn.error')
    if gunicorn_logger.handlers:
        app.logger.handlers = gunicorn_logger.handlers
        app.logger.setLevel(gunicorn_logger.level)

    @app.before_request
    def add_request_id():
        g.request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())

    @app.after_request
    def echo_request_id(response):
        if hasattr(g, "request_id"):
            response.headers["X-Request-Id"] = g.request_id
        return response

    app.logger.info("Logger setup complete. JSON formatted logs enabled.")
