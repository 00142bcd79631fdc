# src/panelhub/api/app.py
"""
panelhub API - Flask application exposing the hosting dashboard endpoints
"""

from flask import Flask
from flask_cors import CORS
from flask_login import LoginManager
from werkzeug.middleware.proxy_fix import ProxyFix
from datetime import datetime
import psutil

from .. import __version__
from .middleware import setup_error_handlers, setup_logging_middleware
from .routes import register_all_routes
from .services import AuthService
from .utils import APIResponse


class PanelAPI:
    """Dashboard API wiring Flask, CORS and Flask-Login around the shared dependencies"""

    def __init__(
        self,
        config,
        logger,
        database,
        operations,
        user_cache,
        testing=False,
    ):
        self.app = Flask(__name__)
        self.app.config.update(
            SECRET_KEY=config.secret_key(),
            SESSION_COOKIE_HTTPONLY=True,
            SESSION_COOKIE_SAMESITE="Lax",
            PERMANENT_SESSION_LIFETIME=3600,
            JSON_SORT_KEYS=False,
            TESTING=testing,
        )
        CORS(
            self.app,
            origins=config.get("allowed_origins", ["*"]),
            supports_credentials=True,
        )

        # X-Forwarded-For is believed only for the configured number of proxies
        proxy_hops = config.get("trusted_proxy_hops", 0)
        if proxy_hops:
            self.app.wsgi_app = ProxyFix(self.app.wsgi_app, x_for=proxy_hops, x_proto=proxy_hops)

        # Store dependencies
        self.deps = {
            "config": config,
            "logger": logger,
            "database": database,
            "operations": operations,
            "user_cache": user_cache,
        }

        self._setup_login_manager()
        setup_error_handlers(self.app)
        setup_logging_middleware(self.app, logger)

        self._register_core_routes()
        self.route_results = register_all_routes(self.app, self.deps)

    def _setup_login_manager(self):
        """Session handling; unauthenticated API calls get a JSON 401"""
        auth_service = AuthService(self.deps)
        login_manager = LoginManager()
        login_manager.init_app(self.app)

        @login_manager.user_loader
        def load_user(user_id):
            return auth_service.load_user(user_id)

        @login_manager.unauthorized_handler
        def unauthorized():
            return APIResponse.unauthorized()

        self.login_manager = login_manager

    def _register_core_routes(self):
        """Register core API routes"""
        deps = self.deps

        @self.app.route("/", methods=["GET"])
        def root():
            return APIResponse.success(
                {
                    "name": "panelhub API",
                    "description": "CyberPanel hosting dashboard",
                    "version": __version__,
                    "timestamp": datetime.now().isoformat(),
                }
            )

        @self.app.route("/api/health", methods=["GET"])
        def health_check():
            """Simple health check endpoint"""
            return APIResponse.success(
                {"status": "healthy", "timestamp": datetime.now().isoformat()}
            )

        @self.app.route("/api/status", methods=["GET"])
        def api_status():
            """CyberPanel connectivity, credential presence and host resources"""
            try:
                panel_result = deps["operations"].verify_login()
                credentials = deps["operations"].client.credentials()

                return APIResponse.success(
                    {
                        "status": "ok",
                        "timestamp": datetime.now().isoformat(),
                        "version": __version__,
                        "services": {
                            "api": "running",
                            "cyberPanel": {
                                "status": "connected" if panel_result.succeeded else "failed",
                                "error": panel_result.error_message,
                                "error_code": (
                                    panel_result.error_code.value
                                    if panel_result.error_code
                                    else None
                                ),
                            },
                        },
                        "environment": credentials.describe(),
                        "system": self._system_resources(),
                    }
                )

            except Exception as e:
                deps["logger"].error(f"Status endpoint error: {e}")
                return APIResponse.server_error("Failed to get system status")

    @staticmethod
    def _system_resources():
        memory = psutil.virtual_memory()
        disk = psutil.disk_usage("/")
        return {
            "cpu_percent": psutil.cpu_percent(interval=None),
            "cpu_count": psutil.cpu_count(),
            "memory_percent": memory.percent,
            "disk_percent": disk.percent,
        }

    def run(self, host="0.0.0.0", port=5000, debug=False):
        """Run the Flask application"""
        try:
            self.deps["logger"].info(f"Starting panelhub API {__version__} on {host}:{port}")
            self.app.run(host=host, port=port, debug=debug)

        except Exception as e:
            self.deps["logger"].error(f"Failed to start API server: {e}")
            raise
