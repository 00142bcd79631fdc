# src/panelhub/api/routes/system.py - System maintenance routes
from flask import request
from flask_login import login_required
from ..utils import APIResponse, handle_api_errors, admin_required
from ..services import WebsiteService


def register_system_routes(app, deps):
    """Register system routes"""

    website_service = WebsiteService(deps)

    @app.route("/api/system/update-stats", methods=["POST"])
    @login_required
    @admin_required
    @handle_api_errors(deps["logger"])
    def update_stats():
        updated = website_service.simulate_usage_update()
        return APIResponse.success(
            message="Website statistics updated", updatedWebsites=updated
        )

    @app.route("/api/system/logs", methods=["GET"])
    @login_required
    @admin_required
    @handle_api_errors(deps["logger"])
    def get_recent_logs():
        lines = request.args.get("lines", 100, type=int)
        logs = deps["logger"].get_recent_logs(max(1, min(lines, 1000)))
        return APIResponse.success({"logs": logs, "count": len(logs)})
