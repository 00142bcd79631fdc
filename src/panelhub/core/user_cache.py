# src/panelhub/core/user_cache.py
"""
User mirror derived from CyberPanel website listings

CyberPanel has no dependable user listing endpoint, so users are reconstructed
by grouping websites on their "admin" field. The result is cached for a fixed
time-to-live; when a refresh fails the last known list is served instead.
"""

import logging
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import List

from .responses import PanelPayloadError, decode_payload


FALLBACK_DOMAIN = "cyberpanel.local"


@dataclass
class CachedUser:
    id: str
    display_name: str
    email: str
    role: str
    websites: List[str] = field(default_factory=list)
    created_at: str = ""
    last_login_at: str = ""
    status: str = "active"

    @property
    def username(self):
        return self.id

    @property
    def is_admin(self):
        return self.role == "admin"

    def to_dict(self):
        data = asdict(self)
        data["username"] = self.id
        return data


def display_name_for(username):
    if username == "admin":
        return "Administrator"
    return username[:1].upper() + username[1:]


def group_websites_by_admin(websites, now_iso):
    """One CachedUser per distinct admin value, domains in encounter order"""
    users = {}

    for site in websites:
        admin = site.get("admin") or "admin"
        if admin not in users:
            users[admin] = CachedUser(
                id=admin,
                display_name=display_name_for(admin),
                email=site.get("adminEmail") or f"{admin}@{FALLBACK_DOMAIN}",
                role="admin" if admin == "admin" else "user",
                created_at=now_iso,
                last_login_at=now_iso,
            )
        domain = site.get("domain")
        if domain:
            users[admin].websites.append(domain)

    return list(users.values())


class UserCache:
    """Fresh entries are served without a network call; stale ones trigger a refresh"""

    PAGE_SIZE = 100

    def __init__(self, operations, ttl=300, clock=None, fallback_email=None, logger=None):
        self.operations = operations
        self.ttl = ttl
        self.clock = clock or time.monotonic
        self.fallback_email = fallback_email or f"admin@{FALLBACK_DOMAIN}"
        self.logger = logger or logging.getLogger(__name__)
        self.entries = []
        self.last_refreshed_at = None

    def is_fresh(self):
        if not self.entries or self.last_refreshed_at is None:
            return False
        return (self.clock() - self.last_refreshed_at) < self.ttl

    def list_users(self):
        if self.is_fresh():
            self.logger.debug("Returning cached user data")
            return self.entries

        self.logger.debug("Fetching fresh user data from CyberPanel")
        websites = self._fetch_websites()

        if websites is None:
            if self.entries:
                self.logger.info("Returning stale cached user data after refresh failure")
                return self.entries
            return [self._fallback_admin()]

        users = group_websites_by_admin(websites, datetime.now().isoformat())
        self.entries = users
        self.last_refreshed_at = self.clock()
        self.logger.info(f"Fetched {len(users)} users from CyberPanel: {[u.id for u in users]}")
        return users

    def _fetch_websites(self):
        """Website records from the panel, or None when unavailable"""
        result = self.operations.fetch_websites(page=1, page_size=self.PAGE_SIZE)
        if not result.succeeded or result.payload is None:
            self.logger.warning(f"Failed to fetch website data from CyberPanel: {result.error_message}")
            return None

        try:
            websites = decode_payload(result.payload)
        except PanelPayloadError as e:
            self.logger.warning(str(e))
            return None

        if not isinstance(websites, list):
            self.logger.warning("Unexpected website listing shape from CyberPanel")
            return None
        return [site for site in websites if isinstance(site, dict)]

    def _fallback_admin(self):
        now_iso = datetime.now().isoformat()
        return CachedUser(
            id="admin",
            display_name="Administrator",
            email=self.fallback_email,
            role="admin",
            created_at=now_iso,
            last_login_at=now_iso,
        )

    def get_user(self, username):
        for user in self.list_users():
            if user.id == username:
                return user
        return None

    def get_user_websites(self, username):
        user = self.get_user(username)
        return list(user.websites) if user else []

    def is_user_admin(self, username):
        user = self.get_user(username)
        return bool(user and user.role == "admin")

    def clear(self):
        self.entries = []
        self.last_refreshed_at = None
        self.logger.info("User cache cleared")
