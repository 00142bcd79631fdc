# src/panelhub/api/routes/auth.py - Login, logout and credential test routes
from flask import request
from flask_login import current_user, login_required, login_user, logout_user
from ..utils import APIResponse, handle_api_errors, client_ip
from ..validators import LoginValidator
from ..services import AuthService


def register_auth_routes(app, deps):
    """Register authentication routes"""

    auth_service = AuthService(deps)

    def throttle(ip_address):
        """429 once the address is over budget; otherwise count the attempt"""
        if auth_service.is_rate_limited(ip_address):
            deps["logger"].warning(f"Login rate limit hit for {ip_address}")
            return APIResponse.error("Too many login attempts. Please try again later.", 429)
        auth_service.record_attempt(ip_address)
        return None

    @app.route("/api/auth/login", methods=["POST"])
    @handle_api_errors(deps["logger"])
    def login():
        data = request.get_json(silent=True) or request.form.to_dict()

        is_valid, error_msg = LoginValidator.validate(data)
        if not is_valid:
            return APIResponse.bad_request(error_msg)

        ip_address = client_ip(request)
        limited = throttle(ip_address)
        if limited:
            return limited

        user = auth_service.authenticate(data["username"], data["password"])
        if user is None:
            return APIResponse.unauthorized("Invalid username or password")

        login_user(user)
        auth_service.clear_attempts(ip_address)
        deps["logger"].log_activity(user.id, "login", "success")
        return APIResponse.success(user.to_dict(), "Authentication successful", redirect="/dashboard")

    @app.route("/api/auth/logout", methods=["POST"])
    @login_required
    @handle_api_errors(deps["logger"])
    def logout():
        username = current_user.id
        logout_user()
        deps["logger"].log_activity(username, "logout", "success")
        return APIResponse.success(message="Logged out")

    @app.route("/api/auth/session", methods=["GET"])
    @login_required
    @handle_api_errors(deps["logger"])
    def current_session():
        return APIResponse.success(current_user.to_dict())

    @app.route("/api/test/auth", methods=["POST"])
    @handle_api_errors(deps["logger"])
    def test_auth():
        """Check a credential pair without starting a session"""
        data = request.get_json(silent=True) or request.form.to_dict()
        username = (data or {}).get("username")
        password = (data or {}).get("password")

        ip_address = client_ip(request)
        limited = throttle(ip_address)
        if limited:
            return limited

        if auth_service.validate_credentials(username, password):
            auth_service.clear_attempts(ip_address)
            return APIResponse.success(
                {"username": username}, "Authentication successful"
            )
        return APIResponse.unauthorized("Authentication failed")
