import json

from panelhub.core.responses import ErrorCode, PanelResult
from panelhub.core.user_cache import UserCache, display_name_for, group_websites_by_admin


WEBSITES = [
    {"domain": "a.test", "admin": "admin"},
    {"domain": "b.test", "admin": "jane", "adminEmail": "jane@example.com"},
    {"domain": "c.test", "admin": "admin"},
    {"domain": "d.test", "admin": "bob"},
]


class FakeOperations:
    """fetch_websites stand-in returning queued PanelResults"""

    def __init__(self, *results):
        self.results = list(results)
        self.fetches = 0

    def fetch_websites(self, page=1, page_size=50):
        self.fetches += 1
        return self.results.pop(0)


def listing(websites=WEBSITES):
    return PanelResult.ok(json.dumps(websites))


def test_grouping_by_admin_in_encounter_order():
    users = group_websites_by_admin(WEBSITES, "2026-01-01T00:00:00")

    assert [u.id for u in users] == ["admin", "jane", "bob"]
    admin, jane, bob = users
    assert admin.websites == ["a.test", "c.test"]
    assert admin.role == "admin"
    assert admin.display_name == "Administrator"
    assert admin.email == "admin@cyberpanel.local"
    assert jane.email == "jane@example.com"
    assert jane.role == "user"
    assert bob.email == "bob@cyberpanel.local"
    assert bob.display_name == "Bob"


def test_display_name():
    assert display_name_for("admin") == "Administrator"
    assert display_name_for("jane") == "Jane"


def test_fresh_cache_makes_no_fetch(clock):
    operations = FakeOperations(listing())
    cache = UserCache(operations, ttl=300, clock=clock)

    first = cache.list_users()
    clock.advance(299)
    second = cache.list_users()

    assert operations.fetches == 1
    assert second is first


def test_expired_cache_refetches(clock):
    operations = FakeOperations(listing(), listing(WEBSITES[:1]))
    cache = UserCache(operations, ttl=300, clock=clock)

    cache.list_users()
    clock.advance(300)
    users = cache.list_users()

    assert operations.fetches == 2
    assert [u.id for u in users] == ["admin"]


def test_stale_entries_served_when_refresh_fails(clock):
    operations = FakeOperations(listing(), PanelResult.fail("HTTP 502", ErrorCode.TRANSPORT))
    cache = UserCache(operations, ttl=300, clock=clock)

    cache.list_users()
    clock.advance(600)
    users = cache.list_users()

    assert [u.id for u in users] == ["admin", "jane", "bob"]
    assert not cache.is_fresh()


def test_empty_cache_and_failure_gives_single_admin(clock):
    operations = FakeOperations(PanelResult.fail("Invalid login"))
    cache = UserCache(operations, clock=clock, fallback_email="ops@example.com")

    users = cache.list_users()

    assert len(users) == 1
    assert users[0].id == "admin"
    assert users[0].role == "admin"
    assert users[0].email == "ops@example.com"
    assert users[0].websites == []


def test_undecodable_payload_is_a_failure(clock):
    operations = FakeOperations(PanelResult.ok("not json"))
    cache = UserCache(operations, clock=clock)

    assert [u.id for u in cache.list_users()] == ["admin"]
    assert cache.entries == []


def test_lookups(clock):
    cache = UserCache(FakeOperations(listing()), clock=clock)

    assert cache.get_user("jane").email == "jane@example.com"
    assert cache.get_user("nobody") is None
    assert cache.get_user_websites("admin") == ["a.test", "c.test"]
    assert cache.get_user_websites("nobody") == []
    assert cache.is_user_admin("admin")
    assert not cache.is_user_admin("jane")
    assert not cache.is_user_admin("nobody")


def test_clear_forces_refetch(clock):
    operations = FakeOperations(listing(), listing())
    cache = UserCache(operations, clock=clock)

    cache.list_users()
    cache.clear()
    cache.list_users()

    assert operations.fetches == 2


def test_to_dict_includes_username(clock):
    cache = UserCache(FakeOperations(listing()), clock=clock)

    data = cache.get_user("jane").to_dict()

    assert data["username"] == "jane"
    assert data["websites"] == ["b.test"]
