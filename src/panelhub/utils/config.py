# src/panelhub/utils/config.py
"""
panelhub settings
Built-in defaults, then an optional JSON file, then environment variables.
"""

import os
import json
import secrets


class Config:
    """Layered settings; environment variables always win"""

    # Environment variable -> config key. Several keys accept more than one
    # variable; later entries win.
    ENV_MAPPING = {
        "PANELHUB_DB_PATH": "database_path",
        "PANELHUB_LOG_DIR": "log_dir",
        "PANELHUB_API_HOST": "api_host",
        "PANELHUB_API_PORT": "api_port",
        "PANELHUB_DEBUG": "debug_mode",
        "NEXTAUTH_SECRET": "secret_key",
        "PANELHUB_SECRET_KEY": "secret_key",
        "CYBERPANEL_URL": "panel_url",
        "CYBERPANEL_USERNAME": "panel_username",
        "CYBERPANEL_TOKEN": "panel_token",
        "CYBERPANEL_PASSWORD": "panel_password",
        "CYBERPANEL_VERIFY_SSL": "panel_verify_ssl",
        "PANELHUB_PANEL_TIMEOUT": "panel_timeout",
        "PANELHUB_USER_CACHE_TTL": "user_cache_ttl",
        "PANELHUB_MAX_LOGIN_ATTEMPTS": "max_login_attempts",
        "PANELHUB_TRUSTED_PROXY_HOPS": "trusted_proxy_hops",
        "PANELHUB_MOCK_FALLBACK": "mock_data_fallback",
        "ADMIN_EMAIL": "admin_email",
    }

    INT_KEYS = ("api_port", "panel_timeout", "user_cache_ttl", "max_login_attempts", "trusted_proxy_hops")
    BOOL_KEYS = ("debug_mode", "panel_verify_ssl", "mock_data_fallback")
    # credentials stay in the environment; --write-config never persists them
    SECRET_KEYS = ("panel_password", "panel_token", "secret_key")

    def __init__(self, config_file=None):
        self.config_data = {}
        self._load_defaults()

        if config_file and os.path.exists(config_file):
            self._load_from_file(config_file)

        self._load_from_env()

    def _load_defaults(self):
        self.config_data = {
            # Storage
            "database_path": "/tmp/panelhub/panelhub.db",
            "log_dir": "/tmp/panelhub/logs",
            # HTTP server
            "api_host": "0.0.0.0",
            "api_port": 5000,
            "secret_key": None,
            "allowed_origins": ["*"],
            # CyberPanel
            "panel_url": None,
            "panel_username": None,
            "panel_token": None,
            "panel_password": None,
            "panel_timeout": 30,
            "panel_verify_ssl": True,
            # User mirror
            "user_cache_ttl": 300,
            "admin_email": "admin@cyberpanel.local",
            # Security
            "max_login_attempts": 5,
            "login_window_minutes": 15,
            "trusted_proxy_hops": 0,
            # Presentation
            "mock_data_fallback": False,
            # Runtime
            "debug_mode": False,
        }

    def _load_from_file(self, config_file):
        """Unreadable files are reported and skipped"""
        try:
            with open(config_file, "r") as f:
                file_config = json.load(f)
                self.config_data.update(file_config)
        except (OSError, ValueError) as e:
            print(f"Warning: Could not load config file {config_file}: {e}")

    def _load_from_env(self):
        for env_var, config_key in self.ENV_MAPPING.items():
            env_value = os.getenv(env_var)
            if env_value is None or env_value == "":
                continue
            converted = self._convert(config_key, env_value)
            if converted is not None:
                self.config_data[config_key] = converted

    @classmethod
    def _convert(cls, config_key, env_value):
        """Type conversion for environment values; None means ignore"""
        if config_key in cls.INT_KEYS:
            try:
                return int(env_value)
            except ValueError:
                return None
        if config_key in cls.BOOL_KEYS:
            return env_value.lower() in ("true", "1", "yes", "on")
        return env_value

    def env_value(self, key):
        """Re-read a single key from the environment, falling back to stored config"""
        for env_var, config_key in reversed(list(self.ENV_MAPPING.items())):
            if config_key != key:
                continue
            env_value = os.getenv(env_var)
            if env_value:
                converted = self._convert(key, env_value)
                if converted is not None:
                    return converted
        return self.config_data.get(key)

    def get(self, key, default=None):
        value = self.config_data.get(key)
        return default if value is None else value

    def set(self, key, value):
        self.config_data[key] = value

    def update(self, config_dict):
        self.config_data.update(config_dict)

    def secret_key(self):
        """Session signing secret; generated per process when unset"""
        if not self.config_data.get("secret_key"):
            self.config_data["secret_key"] = secrets.token_hex(32)
        return self.config_data["secret_key"]

    def save_to_file(self, config_file):
        """Write the current settings, minus SECRET_KEYS, as JSON; True on success"""
        try:
            config_dir = os.path.dirname(config_file)
            if config_dir:
                os.makedirs(config_dir, exist_ok=True)
            with open(config_file, "w") as f:
                settings = {k: v for k, v in self.to_dict().items() if k not in self.SECRET_KEYS}
                json.dump(settings, f, indent=2)
            return True
        except OSError as e:
            print(f"Failed to save config to {config_file}: {e}")
            return False

    def to_dict(self):
        return self.config_data.copy()

    def validate(self):
        """Human-readable problems with the current settings; empty when usable"""
        errors = []

        for key in ("database_path", "log_dir"):
            path = self.get(key)
            if path:
                try:
                    os.makedirs(
                        path if key == "log_dir" else os.path.dirname(path),
                        exist_ok=True,
                    )
                except OSError as e:
                    errors.append(f"Cannot create directory for {key}: {path} - {e}")

        port = self.get("api_port")
        if port and not (1 <= port <= 65535):
            errors.append(f"Invalid port for api_port: {port}")

        timeout = self.get("panel_timeout")
        if timeout is not None and timeout <= 0:
            errors.append(f"panel_timeout must be positive: {timeout}")

        if not self.env_value("panel_url") or not self.env_value("panel_username"):
            errors.append("CyberPanel not configured: set CYBERPANEL_URL and CYBERPANEL_USERNAME")

        if not self.env_value("panel_token") and not self.env_value("panel_password"):
            errors.append("No CyberPanel credentials: set CYBERPANEL_TOKEN or CYBERPANEL_PASSWORD")

        return errors
