# src/panelhub/api/validators.py - Request validation
import re


DOMAIN_RE = re.compile(
    r"^(?=.{1,253}$)(?!-)[A-Za-z0-9-]{1,63}(?<!-)(\.(?!-)[A-Za-z0-9-]{1,63}(?<!-))+$"
)
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
DB_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_]{1,64}$")


class WebsiteValidator:
    """Validate website-related requests"""

    @staticmethod
    def validate_domain(domain):
        if not domain or not isinstance(domain, str):
            return False, "Domain is required"
        if not DOMAIN_RE.match(domain):
            return False, f"Invalid domain name: {domain}"
        return True, None

    @staticmethod
    def validate_admin_create(data):
        if not data:
            return False, "Request data is required"
        if not data.get("domain") or not data.get("owner"):
            return False, "Domain and owner are required"
        return WebsiteValidator.validate_domain(data["domain"])

    @staticmethod
    def validate_panel_create(data):
        if not data:
            return False, "Request data is required"
        if not data.get("domain") or not data.get("ownerEmail"):
            return False, "Domain and owner email are required"
        if not EMAIL_RE.match(str(data["ownerEmail"])):
            return False, "Owner email is not a valid address"
        return WebsiteValidator.validate_domain(data["domain"])

    @staticmethod
    def validate_update(data):
        if not data:
            return False, "Request data is required"
        status = data.get("status")
        if status is not None and not isinstance(status, str):
            return False, f"Invalid status: {status}"
        if status and status.upper() not in ("PENDING", "ACTIVE", "SUSPENDED", "DELETED"):
            return False, f"Invalid status: {status}"
        return True, None


class DatabaseValidator:
    """Validate database creation parameters"""

    @staticmethod
    def validate(name, user, password):
        if not (name and user and password):
            return False, "Database name, user and password are required"
        for label, value in (("Database name", name), ("Database user", user)):
            if not DB_IDENTIFIER_RE.match(str(value)):
                return False, f"{label} may only contain letters, digits and underscores"
        return True, None


class LoginValidator:
    """Validate login payloads"""

    @staticmethod
    def validate(data):
        if not data:
            return False, "Username and password are required"
        if not data.get("username") or not data.get("password"):
            return False, "Username and password are required"
        return True, None
