# src/panelhub/api/services/panel_data_service.py - Shape CyberPanel listings for the dashboard
import re
from datetime import datetime

from ...core.responses import PanelPayloadError, decode_payload
from ...core.user_cache import display_name_for, group_websites_by_admin


LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

DEFAULT_DISK_LIMIT = 1000
DEFAULT_BANDWIDTH_LIMIT = 1000


class PanelUnavailableError(Exception):
    """CyberPanel could not be reached or returned no usable data"""


def parse_leading_int(value, default=0):
    """Integer prefix of a value such as "150MB"; default when there is none"""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return int(value)
    match = LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else default


def digits_only(value):
    digits = re.sub(r"[^\d]", "", str(value or ""))
    return int(digits) if digits else 0


def format_website(site):
    name = site.get("domain") or site.get("websiteName") or site.get("name")
    return {
        "id": name,
        "domain": name,
        "status": "suspended" if site.get("state") == "Suspended" else "active",
        "owner": site.get("admin") or "admin",
        "created": site.get("created") or datetime.now().isoformat(),
        "plan": site.get("package") or "Default",
        "diskUsed": parse_leading_int(str(site.get("diskUsed") or "").replace("MB", "")),
        "diskLimit": DEFAULT_DISK_LIMIT,
        "bandwidthUsed": parse_leading_int(site.get("monthlyBandwidthUsage")),
        "bandwidthLimit": DEFAULT_BANDWIDTH_LIMIT,
        "phpVersion": site.get("phpVersion") or "8.1",
        "ssl": site.get("ssl") == "Yes" or bool(site.get("sslIssued")),
    }


def format_package(pkg):
    name = pkg.get("packageName") or pkg.get("name")
    return {
        "id": name,
        "name": name,
        "description": pkg.get("description") or f"Package: {name}",
        "price": 0,
        "features": [
            f"{pkg.get('diskSpace') or '1000'} MB Disk Space",
            f"{pkg.get('bandwidth') or '1000'} MB Bandwidth",
            f"{pkg.get('emailAccounts') or 'Unlimited'} Email Accounts",
            f"{pkg.get('dataBases') or 'Unlimited'} Databases",
            f"{pkg.get('ftpAccounts') or 'Unlimited'} FTP Accounts",
        ],
        "limits": {
            "websites": parse_leading_int(pkg.get("allowedDomains")) or 1,
            "emailAccounts": parse_leading_int(pkg.get("emailAccounts")) or -1,
            "databases": parse_leading_int(pkg.get("dataBases")) or -1,
            "bandwidth": parse_leading_int(pkg.get("bandwidth")) or 1000,
            "storage": parse_leading_int(pkg.get("diskSpace")) or 1000,
        },
    }


def format_user_summary(user):
    return {
        "id": user.id,
        "name": display_name_for(user.id),
        "email": user.email,
        "role": user.role,
        "websites": len(user.websites),
        "created": user.created_at,
        "lastLogin": user.last_login_at,
        "status": user.status,
    }


def build_stats(websites, users, packages):
    return {
        "totalUsers": len(users) or 1,
        "totalWebsites": len(websites),
        "activeWebsites": len([w for w in websites if w["status"] == "active"]),
        "suspendedWebsites": len([w for w in websites if w["status"] == "suspended"]),
        "totalBandwidth": sum(w["bandwidthUsed"] for w in websites),
        "totalStorage": sum(w["diskUsed"] for w in websites),
        "totalPackages": len(packages),
    }


def mock_dashboard_data():
    """Example data served only when the mock fallback is switched on"""
    now = datetime.now().isoformat()
    return {
        "websites": [
            {
                "id": "example.com",
                "domain": "example.com",
                "status": "active",
                "owner": "admin",
                "created": now,
                "plan": "Default",
                "diskUsed": 150,
                "diskLimit": 1000,
                "bandwidthUsed": 250,
                "bandwidthLimit": 1000,
                "phpVersion": "8.1",
                "ssl": True,
            }
        ],
        "users": [
            {
                "id": "admin",
                "name": "Administrator",
                "email": "admin@cyberpanel.local",
                "role": "admin",
                "websites": 1,
                "created": now,
                "lastLogin": now,
                "status": "active",
            }
        ],
        "packages": [
            {
                "id": "default",
                "name": "Default",
                "description": "Default hosting package",
                "price": 0,
                "features": [
                    "1000 MB Disk Space",
                    "1000 MB Bandwidth",
                    "Unlimited Email Accounts",
                    "Unlimited Databases",
                ],
                "limits": {
                    "websites": 1,
                    "emailAccounts": -1,
                    "databases": -1,
                    "bandwidth": 1000,
                    "storage": 1000,
                },
            }
        ],
        "stats": {
            "totalUsers": 1,
            "totalWebsites": 1,
            "activeWebsites": 1,
            "suspendedWebsites": 0,
            "totalBandwidth": 250,
            "totalStorage": 150,
            "totalPackages": 1,
        },
    }


class PanelDataService:
    """Aggregated and user-scoped views over live CyberPanel data"""

    def __init__(self, deps):
        self.operations = deps["operations"]
        self.user_cache = deps["user_cache"]
        self.logger = deps["logger"]

    def _listing(self, result, label):
        if not result.succeeded or result.payload is None:
            raise PanelUnavailableError(
                f"Failed to fetch {label} from CyberPanel: {result.error_message}"
            )
        try:
            data = decode_payload(result.payload)
        except PanelPayloadError as e:
            raise PanelUnavailableError(str(e)) from e
        if not isinstance(data, list):
            raise PanelUnavailableError(f"Unexpected {label} listing from CyberPanel")
        return [item for item in data if isinstance(item, dict)]

    def _listing_or_empty(self, fetch, label):
        """A listing that fails after a good login degrades to empty"""
        try:
            return fetch()
        except PanelUnavailableError as e:
            self.logger.warning(f"Showing no {label}: {e}")
            return []

    def fetch_raw_websites(self, page_size=100):
        return self._listing(self.operations.fetch_websites(page=1, page_size=page_size), "websites")

    def fetch_raw_packages(self):
        return self._listing(self.operations.fetch_packages(), "packages")

    def get_dashboard_data(self):
        """
        Websites, users, packages and stats for the admin dashboard.
        Raises PanelUnavailableError when the panel cannot be reached.
        """
        connection = self.operations.verify_login()
        if not connection.succeeded:
            raise PanelUnavailableError(f"CyberPanel unavailable: {connection.error_message}")

        raw_websites = self._listing_or_empty(self.fetch_raw_websites, "websites")
        raw_packages = self._listing_or_empty(self.fetch_raw_packages, "packages")

        websites = [format_website(site) for site in raw_websites]
        packages = [format_package(pkg) for pkg in raw_packages]
        users = [
            format_user_summary(user)
            for user in group_websites_by_admin(raw_websites, datetime.now().isoformat())
        ]

        return {
            "websites": websites,
            "users": users,
            "packages": packages,
            "stats": build_stats(websites, users, packages),
        }

    def get_user_data(self, username):
        """Panel data limited to what the given user owns; admins see everything"""
        is_admin = self.user_cache.is_user_admin(username)
        raw_websites = self.fetch_raw_websites()

        if is_admin:
            visible = raw_websites
            self.logger.debug(f"Admin user {username} can see all {len(visible)} websites")
        else:
            owned = set(self.user_cache.get_user_websites(username))
            visible = [
                site for site in raw_websites
                if site.get("domain") in owned or site.get("admin") == username
            ]
            self.logger.debug(f"Filtered to {len(visible)} websites for user {username}")

        packages = self.fetch_raw_packages()
        total_disk = sum(digits_only(site.get("diskUsed") or "0") for site in visible)

        return {
            "user": {
                "username": username,
                "role": "admin" if is_admin else "user",
                "websiteCount": len(visible),
            },
            "websites": [
                {
                    "domain": site.get("domain"),
                    "package": site.get("package"),
                    "state": site.get("state"),
                    "diskUsed": site.get("diskUsed") or "0MB",
                    "ipAddress": site.get("ipAddress"),
                }
                for site in visible
            ],
            "packages": packages,
            "stats": {
                "totalWebsites": len(visible),
                "activeWebsites": len([s for s in visible if s.get("state") == "Active"]),
                "totalDiskUsage": f"{total_disk}MB",
                "availablePackages": len(packages),
            },
        }
