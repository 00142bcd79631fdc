# src/panelhub/api/services/auth_service.py - Dashboard login and session users
import hmac

from flask_login import UserMixin
from werkzeug.security import check_password_hash


class SessionUser(UserMixin):
    """The user attached to a Flask-Login session; id is the username"""

    def __init__(self, username, email, role="user", name=None, websites=None, local_id=None):
        self.id = username
        self.username = username
        self.email = email
        self.role = role
        self.name = name or username
        self.websites = list(websites or [])
        self.local_id = local_id

    @property
    def is_admin(self):
        return self.role == "admin"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "websites": self.websites,
        }


class AuthService:
    """Credential checks against the configured panel admin and the local users table"""

    def __init__(self, deps):
        self.config = deps["config"]
        self.database = deps["database"]
        self.user_cache = deps["user_cache"]
        self.logger = deps["logger"]

    def is_rate_limited(self, ip_address):
        attempts = self.database.get_recent_login_attempts(
            ip_address, minutes=self.config.get("login_window_minutes", 15)
        )
        return attempts >= self.config.get("max_login_attempts", 5)

    def record_attempt(self, ip_address):
        self.database.record_login_attempt(ip_address)

    def clear_attempts(self, ip_address):
        self.database.clear_login_attempts(ip_address)

    def validate_credentials(self, username, password):
        """True when the pair matches the panel admin or a local password hash"""
        if not username or not password:
            return False

        admin_username = self.config.env_value("panel_username")
        admin_password = self.config.env_value("panel_password")
        if admin_username and admin_password and username == admin_username:
            if hmac.compare_digest(password.encode(), admin_password.encode()):
                self.logger.info(f"Admin credentials validated for: {username}")
                return True

        local = self.database.get_user_by_username(username)
        if local and local.get("password_hash"):
            if check_password_hash(local["password_hash"], password):
                self.logger.info(f"Local credentials validated for: {username}")
                return True

        self.logger.warning(f"Invalid credentials for user: {username}")
        return False

    def authenticate(self, username, password):
        """Return a SessionUser on success, None otherwise"""
        if not self.validate_credentials(username, password):
            return None
        return self.load_user(username)

    def load_user(self, username):
        """Resolve a session user from the local store, the panel admin, or the user mirror"""
        local = self.database.get_user_by_username(username)

        if local:
            role = "admin" if local["role"] == "ADMIN" else "user"
            if username == self.config.env_value("panel_username"):
                role = "admin"
            websites = [w["domain"] for w in self.database.list_websites(user_id=local["id"])]
            return SessionUser(
                username,
                local["email"],
                role=role,
                name=local.get("name"),
                websites=websites,
                local_id=local["id"],
            )

        if username == self.config.env_value("panel_username"):
            cached = self.user_cache.get_user(username)
            return SessionUser(
                username,
                cached.email if cached else self.config.get("admin_email"),
                role="admin",
                name=cached.display_name if cached else "Administrator",
                websites=cached.websites if cached else [],
            )

        cached = self.user_cache.get_user(username)
        if cached is None:
            return None
        return SessionUser(
            username,
            cached.email,
            role=cached.role,
            name=cached.display_name,
            websites=cached.websites,
        )
