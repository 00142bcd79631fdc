# src/panelhub/api/middleware.py - JSON error pages and request logging
import time
from datetime import datetime

from flask import g, jsonify, request


ERROR_MESSAGES = {
    404: "Endpoint not found",
    405: "Method not allowed",
    500: "Internal server error",
}


def setup_error_handlers(app):
    """Answer framework-level errors with the same JSON envelope as the routes"""

    def make_handler(status_code, message):
        def handler(error):
            body = {"success": False, "error": message, "timestamp": datetime.now().isoformat()}
            return jsonify(body), status_code

        return handler

    for status_code, message in ERROR_MESSAGES.items():
        app.register_error_handler(status_code, make_handler(status_code, message))


def setup_logging_middleware(app, logger):
    """Debug-level line per request with status and elapsed time"""

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_response(response):
        started = g.pop("request_started", None)
        elapsed = f" in {(time.perf_counter() - started) * 1000:.1f}ms" if started else ""
        logger.debug(f"{request.method} {request.path} -> {response.status_code}{elapsed}")
        return response
