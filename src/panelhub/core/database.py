# src/panelhub/core/database.py
"""
Local SQLite store: dashboard users, mirrored website records and the
append-only activity log. Not consulted by the CyberPanel client.
"""

import json
import os
import sqlite3
from contextlib import contextmanager


ACTIVITY_TYPES = ("USER_ACTION", "SYSTEM_ACTION", "WEBSITE_ACTION", "ADMIN_ACTION")
WEBSITE_STATUSES = ("PENDING", "ACTIVE", "SUSPENDED", "DELETED")

WEBSITE_UPDATABLE_FIELDS = (
    "status",
    "package",
    "php_version",
    "ssl_enabled",
    "ip_address",
    "storage_used",
    "storage_limit",
    "bandwidth_used",
    "bandwidth_limit",
    "visitors_count",
)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT UNIQUE NOT NULL,
        email TEXT UNIQUE NOT NULL,
        name TEXT,
        role TEXT NOT NULL DEFAULT 'USER',
        password_hash TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );

    CREATE TABLE IF NOT EXISTS websites (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        domain TEXT UNIQUE NOT NULL,
        user_id INTEGER NOT NULL,
        status TEXT NOT NULL DEFAULT 'PENDING',
        package TEXT NOT NULL DEFAULT 'Basic',
        php_version TEXT NOT NULL DEFAULT '8.1',
        ssl_enabled INTEGER DEFAULT 0,
        cyberpanel_id TEXT,
        ip_address TEXT,
        storage_used INTEGER DEFAULT 0,
        storage_limit INTEGER DEFAULT 0,
        bandwidth_used INTEGER DEFAULT 0,
        bandwidth_limit INTEGER DEFAULT 0,
        visitors_count INTEGER DEFAULT 0,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
    );

    CREATE TABLE IF NOT EXISTS activities (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER,
        action TEXT NOT NULL,
        description TEXT NOT NULL,
        metadata TEXT,
        type TEXT NOT NULL DEFAULT 'USER_ACTION',
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE SET NULL
    );

    CREATE TABLE IF NOT EXISTS login_attempts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        ip_address TEXT NOT NULL,
        attempted_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );

    CREATE INDEX IF NOT EXISTS idx_websites_user ON websites(user_id);
    CREATE INDEX IF NOT EXISTS idx_websites_status ON websites(status);
    CREATE INDEX IF NOT EXISTS idx_activities_user ON activities(user_id);
    CREATE INDEX IF NOT EXISTS idx_login_attempts_ip ON login_attempts(ip_address);
"""


class Database:
    """Database handler for panelhub"""

    def __init__(self, db_path):
        self.db_path = db_path
        self._init_db()

    @contextmanager
    def get_connection(self):
        """Get database connection with context manager"""
        conn = sqlite3.connect(self.db_path, timeout=30.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self):
        """Initialize database tables"""
        db_dir = os.path.dirname(self.db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        with self.get_connection() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(SCHEMA)

    # Users

    def create_user(self, username, email, password_hash=None, name=None, role="USER"):
        with self.get_connection() as conn:
            cursor = conn.execute(
                "INSERT INTO users (username, email, name, role, password_hash) VALUES (?, ?, ?, ?, ?)",
                (username, email, name, role.upper(), password_hash),
            )
            return cursor.lastrowid

    def get_user(self, user_id):
        return self._fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))

    def get_user_by_username(self, username):
        return self._fetch_one("SELECT * FROM users WHERE username = ?", (username,))

    def get_user_by_email(self, email):
        return self._fetch_one("SELECT * FROM users WHERE email = ?", (email,))

    def get_first_admin(self):
        return self._fetch_one("SELECT * FROM users WHERE role = 'ADMIN' ORDER BY id LIMIT 1")

    def count_users(self):
        return self._count("SELECT COUNT(*) FROM users")

    # Websites

    def create_website(self, domain, user_id, package="Basic", status="PENDING", php_version="8.1",
                       ssl_enabled=False, cyberpanel_id=None, ip_address=None,
                       storage_limit=0, bandwidth_limit=0):
        with self.get_connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO websites (domain, user_id, package, status, php_version, ssl_enabled,
                                      cyberpanel_id, ip_address, storage_limit, bandwidth_limit)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (domain, user_id, package, status, php_version, int(bool(ssl_enabled)),
                 cyberpanel_id, ip_address, storage_limit, bandwidth_limit),
            )
            return cursor.lastrowid

    def get_website(self, website_id):
        return self._fetch_one(
            """
            SELECT w.*, u.email AS owner_email, u.name AS owner_name
            FROM websites w JOIN users u ON u.id = w.user_id
            WHERE w.id = ?
            """,
            (website_id,),
        )

    def get_website_by_domain(self, domain):
        return self._fetch_one("SELECT * FROM websites WHERE domain = ?", (domain,))

    def list_websites(self, user_id=None):
        query = """
            SELECT w.*, u.email AS owner_email, u.name AS owner_name
            FROM websites w JOIN users u ON u.id = w.user_id
        """
        params = ()
        if user_id is not None:
            query += " WHERE w.user_id = ?"
            params = (user_id,)
        query += " ORDER BY w.created_at DESC, w.id DESC"
        return self._fetch_all(query, params)

    def update_website(self, website_id, **kwargs):
        fields = {k: v for k, v in kwargs.items() if k in WEBSITE_UPDATABLE_FIELDS}
        if not fields:
            return False

        if "ssl_enabled" in fields:
            fields["ssl_enabled"] = int(bool(fields["ssl_enabled"]))

        assignments = ", ".join(f"{name} = ?" for name in fields)
        with self.get_connection() as conn:
            cursor = conn.execute(
                f"UPDATE websites SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (*fields.values(), website_id),
            )
            return cursor.rowcount > 0

    def delete_website(self, website_id):
        with self.get_connection() as conn:
            cursor = conn.execute("DELETE FROM websites WHERE id = ?", (website_id,))
            return cursor.rowcount > 0

    def count_websites(self, status=None):
        if status:
            return self._count("SELECT COUNT(*) FROM websites WHERE status = ?", (status,))
        return self._count("SELECT COUNT(*) FROM websites")

    def usage_totals(self, user_id=None):
        query = """
            SELECT COALESCE(SUM(storage_used), 0) AS storage_used,
                   COALESCE(SUM(storage_limit), 0) AS storage_limit,
                   COALESCE(SUM(bandwidth_used), 0) AS bandwidth_used,
                   COALESCE(SUM(visitors_count), 0) AS visitors_count
            FROM websites
        """
        params = ()
        if user_id is not None:
            query += " WHERE user_id = ?"
            params = (user_id,)
        return self._fetch_one(query, params)

    # Activity log

    def log_activity(self, user_id, action, description, activity_type="USER_ACTION", metadata=None):
        if activity_type not in ACTIVITY_TYPES:
            raise ValueError(f"Unknown activity type: {activity_type}")

        with self.get_connection() as conn:
            cursor = conn.execute(
                "INSERT INTO activities (user_id, action, description, metadata, type) VALUES (?, ?, ?, ?, ?)",
                (
                    user_id,
                    action,
                    description,
                    json.dumps(metadata, default=str) if metadata is not None else None,
                    activity_type,
                ),
            )
            return cursor.lastrowid

    def recent_activities(self, limit=10, user_id=None):
        query = """
            SELECT a.*, u.email AS user_email, u.name AS user_name
            FROM activities a LEFT JOIN users u ON u.id = a.user_id
        """
        params = []
        if user_id is not None:
            query += " WHERE a.user_id = ?"
            params.append(user_id)
        query += " ORDER BY a.created_at DESC, a.id DESC LIMIT ?"
        params.append(limit)

        activities = self._fetch_all(query, tuple(params))
        for activity in activities:
            if activity.get("metadata"):
                activity["metadata"] = json.loads(activity["metadata"])
        return activities

    # Login rate limiting

    def record_login_attempt(self, ip_address):
        with self.get_connection() as conn:
            conn.execute("INSERT INTO login_attempts (ip_address) VALUES (?)", (ip_address,))

    def get_recent_login_attempts(self, ip_address, minutes=15):
        return self._count(
            """
            SELECT COUNT(*) FROM login_attempts
            WHERE ip_address = ? AND attempted_at > datetime('now', ?)
            """,
            (ip_address, f"-{int(minutes)} minutes"),
        )

    def clear_login_attempts(self, ip_address):
        with self.get_connection() as conn:
            conn.execute("DELETE FROM login_attempts WHERE ip_address = ?", (ip_address,))

    def clear_old_login_attempts(self, hours=24):
        with self.get_connection() as conn:
            conn.execute(
                "DELETE FROM login_attempts WHERE attempted_at < datetime('now', ?)",
                (f"-{int(hours)} hours",),
            )

    # Helpers

    def _fetch_one(self, query, params=()):
        with self.get_connection() as conn:
            row = conn.execute(query, params).fetchone()
        return dict(row) if row else None

    def _fetch_all(self, query, params=()):
        with self.get_connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [dict(row) for row in rows]

    def _count(self, query, params=()):
        with self.get_connection() as conn:
            return conn.execute(query, params).fetchone()[0]
