from panelhub.core.auth import (
    AUTH_EXHAUSTED_MESSAGE,
    NO_AUTH_METHOD_MESSAGE,
    AuthStrategy,
    Decision,
    build_strategies,
    decide,
    negotiate,
)
from panelhub.core.client import PanelCredentials
from panelhub.core.responses import ErrorCode, PanelResult


def credentials(token=None, password=None):
    return PanelCredentials("https://panel.test", "admin", token=token, password=password)


class Recorder:
    """send() stand-in returning canned results in order"""

    def __init__(self, *results):
        self.results = list(results)
        self.strategies = []

    def __call__(self, strategy):
        self.strategies.append(strategy.name)
        return self.results.pop(0)


def test_decide_success_returns_now():
    assert decide(PanelResult.ok([])) is Decision.RETURN_NOW


def test_decide_domain_error_returns_now():
    assert decide(PanelResult.fail("Domain already exists")) is Decision.RETURN_NOW
    assert decide(PanelResult.fail("Package not found")) is Decision.RETURN_NOW


def test_decide_moves_on_for_auth_and_transport_failures():
    for result in (
        PanelResult.fail("Invalid login"),
        PanelResult.fail("HTTP 502", ErrorCode.TRANSPORT),
        PanelResult.fail("timed out", ErrorCode.TIMEOUT),
        PanelResult.fail("Failed to parse response", ErrorCode.PARSE),
    ):
        assert decide(result) is Decision.TRY_NEXT


def test_build_strategies_order_and_shape():
    strategies = build_strategies(credentials(token="Basic abc", password="secret"))

    assert [s.name for s in strategies] == ["Token", "Password"]
    assert strategies[0].headers == {"Content-Type": "application/json", "Authorization": "Basic abc"}
    assert strategies[0].body_fields == {}
    assert strategies[1].body_fields == {"password": "secret"}
    assert "Authorization" not in strategies[1].headers


def test_build_strategies_skips_missing_credentials():
    assert [s.name for s in build_strategies(credentials(password="secret"))] == ["Password"]
    assert build_strategies(credentials()) == []


def test_build_body_merges_fields_and_parameters():
    strategy = AuthStrategy("Password", body_fields={"password": "secret"})

    body = strategy.build_body("fetchWebsites", "admin", {"page": 1})

    assert body == {"controller": "fetchWebsites", "serverUserName": "admin", "password": "secret", "page": 1}


def test_no_strategies_makes_no_calls():
    send = Recorder()

    result = negotiate([], send)

    assert not result.succeeded
    assert result.error_code is ErrorCode.NO_AUTH_METHOD
    assert result.error_message == NO_AUTH_METHOD_MESSAGE
    assert send.strategies == []


def test_domain_error_from_token_is_returned_without_password_attempt():
    send = Recorder(PanelResult.fail("Domain already exists"))

    result = negotiate(build_strategies(credentials(token="t", password="p")), send)

    assert result.error_code is ErrorCode.DOMAIN_CONFLICT
    assert send.strategies == ["Token"]


def test_rejected_token_falls_back_to_password():
    send = Recorder(PanelResult.fail("Invalid login"), PanelResult.ok({"ok": True}))

    result = negotiate(build_strategies(credentials(token="t", password="p")), send)

    assert result.succeeded
    assert send.strategies == ["Token", "Password"]


def test_transport_failure_falls_back_to_password():
    send = Recorder(PanelResult.fail("HTTP 503", ErrorCode.TRANSPORT), PanelResult.ok())

    assert negotiate(build_strategies(credentials(token="t", password="p")), send).succeeded
    assert send.strategies == ["Token", "Password"]


def test_all_strategies_failing_is_exhaustion():
    send = Recorder(PanelResult.fail("Invalid login"), PanelResult.fail("Unauthorized"))

    result = negotiate(build_strategies(credentials(token="t", password="p")), send)

    assert not result.succeeded
    assert result.error_code is ErrorCode.AUTH_EXHAUSTED
    assert result.error_message == AUTH_EXHAUSTED_MESSAGE
