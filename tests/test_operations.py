import pytest

from panelhub.core.client import PanelClient
from panelhub.core.operations import PanelOperations
from panelhub.core.responses import ErrorCode, decode_payload

from conftest import FakeResponse


@pytest.fixture
def operations(config, logger, session, panel_env):
    return PanelOperations(PanelClient(config, logger, session=session))


def sent_body(session):
    body = dict(session.calls[-1]["json"])
    body.pop("serverUserName")
    return body


@pytest.mark.parametrize(
    "invoke, expected",
    [
        (lambda ops: ops.verify_login(), {"controller": "verifyLogin"}),
        (
            lambda ops: ops.create_website("x.test", "o@test.com", "Default"),
            {
                "controller": "submitWebsiteCreation",
                "domainName": "x.test",
                "ownerEmail": "o@test.com",
                "packageName": "Default",
                "websiteOwner": "admin",
            },
        ),
        (
            lambda ops: ops.delete_website("x.test"),
            {"controller": "submitWebsiteDeletion", "websiteName": "x.test"},
        ),
        (
            lambda ops: ops.fetch_websites(),
            {"controller": "fetchWebsites", "page": 1, "recordsToShow": 50},
        ),
        (lambda ops: ops.fetch_packages(), {"controller": "fetchPackages"}),
        (lambda ops: ops.fetch_users(), {"controller": "fetchUsers"}),
        (lambda ops: ops.fetch_child_users(), {"controller": "fetchChildUsers"}),
        (
            lambda ops: ops.create_database("shop_db", "shop_user", "pw", "x.test"),
            {
                "controller": "submitDBCreation",
                "databaseWebsite": "x.test",
                "dbName": "shop_db",
                "dbUsername": "shop_user",
                "dbPassword": "pw",
            },
        ),
        (
            lambda ops: ops.create_email("info@x.test", "pw"),
            {"controller": "submitEmailCreation", "domain": "x.test", "userName": "info", "password": "pw"},
        ),
        (
            lambda ops: ops.install_ssl("x.test", "o@test.com"),
            {"controller": "issueSSL", "domainName": "x.test", "email": "o@test.com"},
        ),
        (
            lambda ops: ops.get_website_details("x.test"),
            {"controller": "getWebsiteDetails", "domainName": "x.test"},
        ),
        (
            lambda ops: ops.create_backup("x.test"),
            {"controller": "submitBackupCreation", "websiteName": "x.test"},
        ),
    ],
)
def test_operation_parameter_shapes(operations, session, invoke, expected):
    session.queue(FakeResponse(payload={"status": 1}))

    assert invoke(operations).succeeded
    assert sent_body(session) == expected


@pytest.mark.parametrize("address", ["not-an-email", "@x.test", "info@", "", None])
def test_invalid_email_is_rejected_before_any_call(operations, session, address):
    result = operations.create_email(address, "pw")

    assert not result.succeeded
    assert result.error_code is ErrorCode.INVALID_REQUEST
    assert session.calls == []


def test_domain_error_passes_through_unchanged(operations, session):
    session.queue(FakeResponse(payload={"status": 0, "error_message": "Domain already exists"}))

    result = operations.create_website("x.test", "o@test.com")

    assert result.error_message == "Domain already exists"
    assert result.error_code is ErrorCode.DOMAIN_CONFLICT
    assert len(session.calls) == 1


def test_create_then_fetch_round_trip(config, logger, stub_panel, panel_env):
    operations = PanelOperations(PanelClient(config, logger, session=stub_panel))

    created = operations.create_website("x.test", "o@test.com", "Default")
    listing = operations.fetch_websites()

    assert created.succeeded
    assert "x.test" in [site["domain"] for site in decode_payload(listing.payload)]


def test_create_duplicate_against_stub_panel(config, logger, stub_panel, panel_env):
    operations = PanelOperations(PanelClient(config, logger, session=stub_panel))

    result = operations.create_website("alpha.test", "o@test.com")

    assert result.error_code is ErrorCode.DOMAIN_CONFLICT
    assert stub_panel.controllers() == ["submitWebsiteCreation"]
