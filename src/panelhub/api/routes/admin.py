# src/panelhub/api/routes/admin.py - Admin website management and statistics
from flask import request
from flask_login import current_user, login_required
from ..utils import APIResponse, handle_api_errors, admin_required
from ..validators import WebsiteValidator
from ..services import WebsiteService, WebsiteError


def register_admin_routes(app, deps):
    """Register admin-only routes"""

    website_service = WebsiteService(deps)
    logger = deps["logger"]

    @app.route("/api/admin/websites", methods=["GET"])
    @login_required
    @admin_required
    @handle_api_errors(logger)
    def list_websites():
        return APIResponse.success(website_service.list_websites())

    @app.route("/api/admin/websites", methods=["POST"])
    @login_required
    @admin_required
    @handle_api_errors(logger)
    def create_website():
        data = request.get_json(silent=True) or {}

        is_valid, error_msg = WebsiteValidator.validate_admin_create(data)
        if not is_valid:
            return APIResponse.bad_request(error_msg)

        try:
            website = website_service.create_website(data, actor_email=current_user.email)
        except WebsiteError as e:
            return APIResponse.error(e.message, e.status_code)

        return APIResponse.success(website, "Website created successfully")

    @app.route("/api/admin/websites/<int:website_id>", methods=["PUT"])
    @login_required
    @admin_required
    @handle_api_errors(logger)
    def update_website(website_id):
        data = request.get_json(silent=True) or {}

        is_valid, error_msg = WebsiteValidator.validate_update(data)
        if not is_valid:
            return APIResponse.bad_request(error_msg)

        try:
            website = website_service.update_website(website_id, data, actor_email=current_user.email)
        except WebsiteError as e:
            return APIResponse.error(e.message, e.status_code)

        return APIResponse.success(website, "Website updated successfully")

    @app.route("/api/admin/websites/<int:website_id>", methods=["DELETE"])
    @login_required
    @admin_required
    @handle_api_errors(logger)
    def delete_website(website_id):
        try:
            result = website_service.delete_website(website_id, actor_email=current_user.email)
        except WebsiteError as e:
            return APIResponse.error(e.message, e.status_code)

        return APIResponse.success(result, "Website deleted successfully")

    @app.route("/api/admin/stats", methods=["GET"])
    @login_required
    @admin_required
    @handle_api_errors(logger)
    def get_admin_stats():
        return APIResponse.success(website_service.admin_stats())
