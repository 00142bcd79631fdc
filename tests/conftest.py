from __future__ import annotations

import json

import pytest
import requests

from panelhub.api.app import PanelAPI
from panelhub.core.client import PanelClient
from panelhub.core.database import Database
from panelhub.core.operations import PanelOperations
from panelhub.core.user_cache import UserCache
from panelhub.utils.config import Config
from panelhub.utils.logger import Logger


PANEL_URL = "https://panel.test:8090"
PANEL_USER = "admin"
PANEL_TOKEN = "Basic dG9rZW4="
PANEL_PASSWORD = "panel-pass-123"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(payload)


class FakeSession:
    """Replays queued responses (or raises queued exceptions) and records each POST"""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def post(self, url, json=None, headers=None, timeout=None, verify=True):
        self.calls.append(
            {"url": url, "json": json, "headers": dict(headers or {}), "timeout": timeout, "verify": verify}
        )
        if not self.responses:
            raise AssertionError(f"Unexpected panel call: {json}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class StubPanel:
    """Minimal in-memory CyberPanel cloudAPI"""

    def __init__(self, token=PANEL_TOKEN, password=PANEL_PASSWORD, websites=None, packages=None):
        self.token = token
        self.password = password
        self.websites = list(websites or [])
        self.packages = list(packages or [{"packageName": "Default", "diskSpace": 1000}])
        self.calls = []
        self.fail_controllers = {}

    def post(self, url, json=None, headers=None, timeout=None, verify=True):
        body = dict(json or {})
        headers = dict(headers or {})
        self.calls.append({"url": url, "json": body, "headers": headers})

        authorised = (self.token and headers.get("Authorization") == self.token) or (
            self.password and body.get("password") == self.password
        )
        if not authorised:
            return FakeResponse(payload={"status": 0, "error_message": "Invalid login"})

        controller = body.get("controller")
        if controller in self.fail_controllers:
            return FakeResponse(payload={"status": 0, "error_message": self.fail_controllers[controller]})

        handler = getattr(self, f"_handle_{controller}", None)
        if handler is None:
            return FakeResponse(payload={"status": 0, "error_message": f"Unknown controller {controller}"})
        return FakeResponse(payload=handler(body))

    def _handle_verifyLogin(self, body):
        return {"status": 1, "message": "Login verified"}

    def _handle_fetchWebsites(self, body):
        return {"status": 1, "data": json.dumps(self.websites)}

    def _handle_fetchPackages(self, body):
        return {"status": 1, "data": json.dumps(self.packages)}

    def _handle_submitWebsiteCreation(self, body):
        domain = body["domainName"]
        if any(site["domain"] == domain for site in self.websites):
            return {"status": 0, "error_message": "Domain already exists"}
        self.websites.append(
            {
                "domain": domain,
                "adminEmail": body["ownerEmail"],
                "admin": body.get("websiteOwner", "admin"),
                "package": body["packageName"],
                "state": "Active",
                "diskUsed": "0MB",
                "ipAddress": "10.0.0.1",
            }
        )
        return {"status": 1, "message": "Website created"}

    def _handle_submitWebsiteDeletion(self, body):
        before = len(self.websites)
        self.websites = [s for s in self.websites if s["domain"] != body["websiteName"]]
        if len(self.websites) == before:
            return {"status": 0, "error_message": "Website not found"}
        return {"status": 1}

    def _handle_issueSSL(self, body):
        return {"status": 1, "message": "SSL issued"}

    def _handle_submitDBCreation(self, body):
        return {"status": 1, "data": {"dbName": body["dbName"]}}

    def _handle_submitEmailCreation(self, body):
        return {"status": 1, "data": {"email": f"{body['userName']}@{body['domain']}"}}

    def controllers(self):
        return [call["json"].get("controller") for call in self.calls]


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


PANEL_ENV_VARS = list(Config.ENV_MAPPING)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in PANEL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def panel_env(monkeypatch):
    monkeypatch.setenv("CYBERPANEL_URL", PANEL_URL)
    monkeypatch.setenv("CYBERPANEL_USERNAME", PANEL_USER)
    monkeypatch.setenv("CYBERPANEL_TOKEN", PANEL_TOKEN)
    monkeypatch.setenv("CYBERPANEL_PASSWORD", PANEL_PASSWORD)


@pytest.fixture
def config(tmp_path, monkeypatch):
    monkeypatch.setenv("PANELHUB_DB_PATH", str(tmp_path / "panelhub.db"))
    monkeypatch.setenv("PANELHUB_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("PANELHUB_SECRET_KEY", "test-secret")
    return Config()


@pytest.fixture
def logger(config):
    return Logger(log_dir=config.get("log_dir"))


@pytest.fixture
def database(config):
    return Database(config.get("database_path"))


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def stub_panel():
    return StubPanel(
        websites=[
            {"domain": "alpha.test", "admin": "admin", "package": "Default", "state": "Active", "diskUsed": "120MB"},
            {"domain": "beta.test", "admin": "jane", "adminEmail": "jane@example.com", "package": "Starter",
             "state": "Suspended", "diskUsed": "30MB"},
        ]
    )


@pytest.fixture
def clock():
    return FakeClock()


def build_api(config, logger, database, session, clock=None):
    client = PanelClient(config, logger, session=session)
    operations = PanelOperations(client)
    user_cache = UserCache(operations, ttl=300, clock=clock, logger=logger)
    return PanelAPI(config, logger, database, operations, user_cache, testing=True)


@pytest.fixture
def api(config, logger, database, stub_panel, clock, panel_env):
    return build_api(config, logger, database, stub_panel, clock)


@pytest.fixture
def http(api):
    return api.app.test_client()


def login(http, username=PANEL_USER, password=PANEL_PASSWORD):
    response = http.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.get_json()
    return response


@pytest.fixture
def admin_http(http):
    login(http)
    return http


@pytest.fixture
def timeout_error():
    return requests.Timeout("read timed out")
