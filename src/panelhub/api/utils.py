# src/panelhub/api/utils.py - Utility functions and response helpers
from flask import jsonify
from flask_login import current_user
from functools import wraps
import traceback


class APIResponse:
    """Standardized API response helpers"""

    @staticmethod
    def success(data=None, message=None, status_code=200, **extra):
        response = {"success": True}
        if data is not None:
            response["data"] = data
        if message:
            response["message"] = message
        response.update(extra)
        return jsonify(response), status_code

    @staticmethod
    def error(message, status_code=500, error_code=None, **extra):
        response = {"success": False, "error": message}
        if error_code:
            response["error_code"] = error_code
        response.update(extra)
        return jsonify(response), status_code

    @staticmethod
    def bad_request(message, **extra):
        return APIResponse.error(message, 400, **extra)

    @staticmethod
    def unauthorized(message="Unauthorized"):
        return APIResponse.error(message, 401)

    @staticmethod
    def forbidden(message="Forbidden - Admin access required"):
        return APIResponse.error(message, 403)

    @staticmethod
    def not_found(message):
        return APIResponse.error(message, 404)

    @staticmethod
    def server_error(message):
        return APIResponse.error(message, 500)

    @staticmethod
    def unavailable(message):
        return APIResponse.error(message, 503)


def handle_api_errors(logger):
    """Decorator for consistent error handling"""

    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except Exception as e:
                logger.error(f"API error in {f.__name__}: {e}")
                logger.debug(traceback.format_exc())
                return APIResponse.server_error("Internal server error")

        return wrapper

    return decorator


def admin_required(f):
    """Reject sessions that are not admin; use below login_required"""

    @wraps(f)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            return APIResponse.unauthorized()
        if not getattr(current_user, "is_admin", False):
            return APIResponse.forbidden()
        return f(*args, **kwargs)

    return wrapper


def client_ip(request):
    """
    Peer address of the request. Forwarded headers are only honoured through
    ProxyFix, which PanelAPI installs when trusted_proxy_hops is set.
    """
    return request.remote_addr or "unknown"
