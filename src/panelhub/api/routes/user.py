# src/panelhub/api/routes/user.py - Current-user dashboard
from flask_login import current_user, login_required
from ..utils import APIResponse, handle_api_errors
from ..services import WebsiteService


def register_user_routes(app, deps):
    """Register end-user routes"""

    website_service = WebsiteService(deps)

    @app.route("/api/user/dashboard", methods=["GET"])
    @login_required
    @handle_api_errors(deps["logger"])
    def get_user_dashboard():
        local = deps["database"].get_user_by_email(current_user.email)
        if not local:
            return APIResponse.not_found("User not found")

        return APIResponse.success(website_service.user_dashboard(local["id"]))
