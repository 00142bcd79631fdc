# src/panelhub/api/services/__init__.py - Service classes
from .auth_service import AuthService, SessionUser
from .panel_data_service import PanelDataService, PanelUnavailableError
from .website_service import WebsiteService, WebsiteError

__all__ = [
    "AuthService",
    "SessionUser",
    "PanelDataService",
    "PanelUnavailableError",
    "WebsiteService",
    "WebsiteError",
]
