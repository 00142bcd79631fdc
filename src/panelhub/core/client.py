# src/panelhub/core/client.py
"""
CyberPanel cloudAPI client

Every operation is a POST of a JSON body to <base_url>/cloudAPI/. Credentials
are re-read from the environment on each call so they can be rotated (or
injected by tests) without rebuilding the client.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import requests

from .auth import build_strategies, negotiate
from .responses import ErrorCode, PanelResult, normalize_response


NOT_CONFIGURED_MESSAGE = "CyberPanel not configured"


@dataclass(frozen=True)
class PanelCredentials:
    base_url: Optional[str]
    username: Optional[str]
    token: Optional[str] = None
    password: Optional[str] = None
    verify_ssl: bool = True

    @classmethod
    def from_env(cls, config=None):
        """Environment first, then whatever the Config object holds"""

        def lookup(env_var, key):
            value = os.getenv(env_var)
            if value:
                return value
            return config.get(key) if config is not None else None

        verify = lookup("CYBERPANEL_VERIFY_SSL", "panel_verify_ssl")
        if isinstance(verify, str):
            verify = verify.lower() not in ("false", "0", "no", "off")

        return cls(
            base_url=lookup("CYBERPANEL_URL", "panel_url"),
            username=lookup("CYBERPANEL_USERNAME", "panel_username"),
            token=lookup("CYBERPANEL_TOKEN", "panel_token"),
            password=lookup("CYBERPANEL_PASSWORD", "panel_password"),
            verify_ssl=True if verify is None else bool(verify),
        )

    @property
    def is_configured(self):
        return bool(self.base_url and self.username)

    @property
    def endpoint(self):
        return f"{self.base_url.rstrip('/')}/cloudAPI/"

    def describe(self):
        """Presence flags only; never the secrets themselves"""
        return {
            "url": self.base_url,
            "username": self.username,
            "token_set": bool(self.token),
            "token_length": len(self.token) if self.token else 0,
            "password_set": bool(self.password),
        }


class PanelClient:
    """Composes strategy negotiation and response normalisation"""

    def __init__(self, config=None, logger=None, session=None, credentials_provider=None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.session = session or requests.Session()
        self.credentials_provider = credentials_provider or (
            lambda: PanelCredentials.from_env(self.config)
        )

    @property
    def timeout(self):
        if self.config is None:
            return 30
        return self.config.get("panel_timeout", 30)

    def credentials(self):
        return self.credentials_provider()

    def call(self, operation, parameters=None):
        """Call a cloudAPI controller and return a PanelResult"""
        credentials = self.credentials()

        if not credentials.is_configured:
            self.logger.warning(
                "CyberPanel credentials not configured. Required: CYBERPANEL_URL, CYBERPANEL_USERNAME"
            )
            return PanelResult.fail(NOT_CONFIGURED_MESSAGE, ErrorCode.NOT_CONFIGURED)

        parameters = dict(parameters or {})

        def send(strategy):
            return self._send(credentials, strategy, operation, parameters)

        return negotiate(build_strategies(credentials), send, self.logger)

    def _send(self, credentials, strategy, operation, parameters):
        """Perform one HTTP attempt with a single strategy"""
        self.logger.debug(
            f"CyberPanel API Request ({strategy.name}): {credentials.endpoint} "
            f"controller={operation} params={sorted(parameters)}"
        )

        try:
            response = self.session.post(
                credentials.endpoint,
                json=strategy.build_body(operation, credentials.username, parameters),
                headers=strategy.headers,
                timeout=self.timeout,
                verify=credentials.verify_ssl,
            )
        except requests.Timeout as e:
            result = PanelResult.fail(
                f"Request timed out after {self.timeout}s: {e}", ErrorCode.TIMEOUT
            )
        except requests.RequestException as e:
            result = PanelResult.fail(f"Request failed: {e}", ErrorCode.TRANSPORT)
        else:
            result = normalize_response(response.status_code, response.text)

        self._log_attempt(operation, strategy.name, result)
        return result

    def _log_attempt(self, operation, strategy_name, result):
        status = "success" if result.succeeded else "failed"
        error = result.error_message
        if hasattr(self.logger, "log_panel_call"):
            self.logger.log_panel_call(operation, strategy_name, status, error)
        elif result.succeeded:
            self.logger.info(f"CyberPanel {operation} via {strategy_name}: success")
        else:
            self.logger.warning(f"CyberPanel {operation} via {strategy_name} failed: {error}")
