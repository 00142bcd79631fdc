# src/panelhub/api/routes/panel.py - Live CyberPanel data and provisioning routes
from flask import request
from flask_login import current_user, login_required
from ..utils import APIResponse, handle_api_errors
from ..validators import WebsiteValidator, DatabaseValidator
from ..services import PanelDataService, PanelUnavailableError, WebsiteService, WebsiteError
from ..services.panel_data_service import mock_dashboard_data


def register_panel_routes(app, deps):
    """Register CyberPanel proxy routes"""

    panel_data = PanelDataService(deps)
    website_service = WebsiteService(deps)
    logger = deps["logger"]

    @app.route("/api/cyberpanel/data", methods=["GET"])
    @login_required
    @handle_api_errors(logger)
    def get_panel_data():
        try:
            data = panel_data.get_dashboard_data()
        except PanelUnavailableError as e:
            logger.warning(f"CyberPanel data unavailable: {e}")
            if deps["config"].get("mock_data_fallback"):
                return APIResponse.success(mock_dashboard_data(), mock=True)
            return APIResponse.unavailable("CyberPanel unavailable")

        return APIResponse.success(data)

    @app.route("/api/cyberpanel/user-data", methods=["GET"])
    @login_required
    @handle_api_errors(logger)
    def get_user_panel_data():
        try:
            data = panel_data.get_user_data(current_user.id)
        except PanelUnavailableError as e:
            logger.error(f"Error fetching user-specific CyberPanel data: {e}")
            return APIResponse.server_error("Failed to fetch CyberPanel data")

        return APIResponse.success(data)

    @app.route("/api/cyberpanel/websites/create", methods=["POST"])
    @login_required
    @handle_api_errors(logger)
    def create_panel_website():
        data = request.get_json(silent=True) or {}

        is_valid, error_msg = WebsiteValidator.validate_panel_create(data)
        if not is_valid:
            return APIResponse.bad_request(error_msg)

        if data.get("createDatabase"):
            is_valid, error_msg = DatabaseValidator.validate(
                data.get("databaseName"), data.get("databaseUser"), data.get("databasePassword")
            )
            if not is_valid:
                return APIResponse.bad_request(error_msg)

        try:
            results = website_service.provision(data)
        except WebsiteError as e:
            return APIResponse.error(e.message, e.status_code, details=e.details)

        logger.log_activity(current_user.id, "website_create", "success", data["domain"])
        return APIResponse.success(results, "Website created successfully")

    @app.route("/api/cyberpanel/websites/delete", methods=["DELETE"])
    @login_required
    @handle_api_errors(logger)
    def delete_panel_website():
        domain = request.args.get("domain")
        if not domain:
            return APIResponse.bad_request("Domain parameter is required")

        try:
            result = website_service.deprovision(domain)
        except WebsiteError as e:
            return APIResponse.error(e.message, e.status_code, details=e.details)

        logger.log_activity(current_user.id, "website_delete", "success", domain)
        return APIResponse.success(result.to_dict(), f"Website {domain} deleted successfully")

    @app.route("/api/test/cyberpanel", methods=["GET"])
    @handle_api_errors(logger)
    def test_panel_connection():
        result = deps["operations"].verify_login()
        if result.succeeded:
            return APIResponse.success(result.to_dict(), "CyberPanel authentication successful")
        return APIResponse.error(
            "CyberPanel authentication failed",
            401,
            error_code=result.error_code.value if result.error_code else None,
            details=result.error_message,
        )
