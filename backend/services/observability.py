"""
Observability — Structured Logging, Request Log, Error Tracking

One JSON line per log record, one structured line per request, and a
catch-all handler that turns unexpected exceptions into the API's 500 body.
"""

import time
import logging
import json
import traceback
from flask import request, g, jsonify
from werkzeug.exceptions import HTTPException


class JsonFormatter(logging.Formatter):
    """Structured JSON log formatter."""

    def format(self, record):
        entry = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        entry.update(getattr(record, 'extra_data', {}))
        if record.exc_info and record.exc_info[0]:
            entry['exception'] = traceback.format_exception(*record.exc_info)
        return json.dumps(entry, default=str)


def request_fields(response, latency_ms):
    return {
        'type': 'request',
        'method': request.method,
        'path': request.path,
        'endpoint': request.endpoint,
        'status': response.status_code,
        'latency_ms': round(latency_ms, 2),
        'ip': request.remote_addr,
    }


def setup_observability(app):
    """
    Route every log record (app, routes, services) through one JSON handler
    on the root logger and log each request. Call this in create_app().
    """
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # app.logger propagates to root; its own handler would print twice
    app.logger.handlers = []
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    @app.before_request
    def start_timer():
        g.start_time = time.time()

    @app.after_request
    def log_request(response):
        latency_ms = (time.time() - g.get('start_time', time.time())) * 1000
        app.logger.info(
            f"{request.method} {request.path} -> {response.status_code} ({latency_ms:.0f}ms)",
            extra={'extra_data': request_fields(response, latency_ms)},
        )
        return response

    @app.errorhandler(Exception)
    def handle_exception(e):
        # 404/405 from routing keep their own status
        if isinstance(e, HTTPException):
            return e
        app.logger.error(
            f"Unhandled exception: {e}",
            exc_info=True,
            extra={'extra_data': {
                'type': 'error',
                'error_class': e.__class__.__name__,
                'path': request.path,
                'method': request.method,
            }},
        )
        return jsonify({'ok': False, 'error': 'Server error'}), 500

    return app
