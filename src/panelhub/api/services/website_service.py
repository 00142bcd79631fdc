# src/panelhub/api/services/website_service.py - Website lifecycle across CyberPanel and the local mirror
import random


GIB = 1024  # limits are stored in MB

STORAGE_LIMITS = {
    "starter": 10 * GIB,
    "professional": 100 * GIB,
    "enterprise": 1000 * GIB,
    "basic": 50 * GIB,
}

BANDWIDTH_LIMITS = {
    "starter": 100 * GIB,
    "professional": 1000 * GIB,
    "enterprise": 10000 * GIB,
    "basic": 500 * GIB,
}


def get_storage_limit(plan):
    return STORAGE_LIMITS.get((plan or "").lower(), STORAGE_LIMITS["basic"])


def get_bandwidth_limit(plan):
    return BANDWIDTH_LIMITS.get((plan or "").lower(), BANDWIDTH_LIMITS["basic"])


def mb_to_gb(value, digits=2):
    return f"{round(value / 1024, digits) if digits else round(value / 1024)} GB"


class WebsiteError(Exception):
    """A website operation failed with a message fit for the caller"""

    def __init__(self, message, status_code=400, details=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class WebsiteService:
    """Website operations that touch CyberPanel, the local store and the activity log"""

    def __init__(self, deps):
        self.operations = deps["operations"]
        self.database = deps["database"]
        self.logger = deps["logger"]

    def _log(self, user_id, action, description, activity_type, metadata=None, actor=None):
        self.database.log_activity(user_id, action, description, activity_type, metadata)
        if hasattr(self.logger, "log_activity"):
            self.logger.log_activity(actor or user_id, action, "recorded", description)

    # Admin: local mirror backed by CyberPanel

    def list_websites(self):
        return [
            {
                "id": website["id"],
                "domain": website["domain"],
                "status": website["status"].lower(),
                "owner": website["owner_email"],
                "plan": website["package"],
                "created": str(website["created_at"])[:10],
                "storageUsed": mb_to_gb(website["storage_used"]),
                "bandwidthUsed": mb_to_gb(website["bandwidth_used"]),
                "visitorsCount": website["visitors_count"],
                "sslEnabled": bool(website["ssl_enabled"]),
                "phpVersion": website["php_version"],
            }
            for website in self.database.list_websites()
        ]

    def create_website(self, data, actor_email=None):
        """
        Create in CyberPanel, mirror locally, then issue SSL if asked.
        SSL failure never fails the request.
        """
        domain = data["domain"]
        owner = data["owner"]
        plan = data.get("plan")
        php_version = data.get("phpVersion") or "8.1"
        ssl_enabled = bool(data.get("sslEnabled"))

        owner_user = self.database.get_user_by_email(owner)
        if not owner_user:
            raise WebsiteError("Owner user not found")

        if self.database.get_website_by_domain(domain):
            raise WebsiteError(f"Website {domain} already exists", status_code=409)

        result = self.operations.create_website(
            domain, owner, package_name=plan or "Default", website_owner="admin"
        )
        if not result.succeeded:
            raise WebsiteError(result.error_message)

        details = result.payload if isinstance(result.payload, dict) else {}
        ip_address = details.get("ipAddress")

        website_id = self.database.create_website(
            domain,
            owner_user["id"],
            package=plan or "Basic",
            status="ACTIVE",
            php_version=php_version,
            ssl_enabled=ssl_enabled,
            cyberpanel_id=domain,
            ip_address=ip_address,
            storage_limit=get_storage_limit(plan),
            bandwidth_limit=get_bandwidth_limit(plan),
        )

        ssl_result = None
        if ssl_enabled:
            ssl_result = self.operations.install_ssl(domain, owner)
            if not ssl_result.succeeded:
                self.logger.warning(f"SSL installation failed for {domain}: {ssl_result.error_message}")

        self._log(
            owner_user["id"],
            "Website Created",
            f"Website {domain} created successfully",
            "ADMIN_ACTION",
            {"domain": domain, "plan": plan, "phpVersion": php_version, "sslEnabled": ssl_enabled},
            actor=actor_email,
        )

        return {
            "id": website_id,
            "domain": domain,
            "owner": owner,
            "plan": plan,
            "phpVersion": php_version,
            "sslEnabled": ssl_enabled,
            "sslInstalled": bool(ssl_result and ssl_result.succeeded),
            "websiteId": domain,
            "ipAddress": ip_address,
        }

    def update_website(self, website_id, data, actor_email=None):
        website = self.database.get_website(website_id)
        if not website:
            raise WebsiteError("Website not found", status_code=404)

        changes = {}
        if data.get("status"):
            changes["status"] = data["status"].upper()
        if data.get("package"):
            changes["package"] = data["package"]

        if changes:
            self.database.update_website(website_id, **changes)

        self._log(
            website["user_id"],
            "Website Updated",
            f"Website {website['domain']} was updated by admin",
            "ADMIN_ACTION",
            {"domain": website["domain"], "updatedBy": actor_email, "changes": data},
            actor=actor_email,
        )
        return self.database.get_website(website_id)

    def delete_website(self, website_id, actor_email=None):
        """Panel deletion is best-effort; the local record is always removed"""
        website = self.database.get_website(website_id)
        if not website:
            raise WebsiteError("Website not found", status_code=404)

        result = self.operations.delete_website(website["domain"])
        if not result.succeeded:
            self.logger.warning(f"CyberPanel deletion failed for {website['domain']}: {result.error_message}")

        self.database.delete_website(website_id)

        self._log(
            website["user_id"],
            "Website Deleted",
            f"Website {website['domain']} was deleted by admin",
            "ADMIN_ACTION",
            {"domain": website["domain"], "deletedBy": actor_email},
            actor=actor_email,
        )
        return {"domain": website["domain"], "panelDeleted": result.succeeded}

    # Direct CyberPanel provisioning

    def provision(self, data):
        """
        Website in CyberPanel plus optional database and mailbox.
        The website result decides success; extras are reported alongside.
        """
        domain = data["domain"]
        website_result = self.operations.create_website(
            domain, data["ownerEmail"], package_name=data.get("packageName") or "Default"
        )
        if not website_result.succeeded:
            raise WebsiteError(
                "Failed to create website in CyberPanel", details=website_result.error_message
            )

        results = {"website": website_result.to_dict(), "database": None, "email": None}

        if data.get("createDatabase") and data.get("databaseName") and data.get("databaseUser") \
                and data.get("databasePassword"):
            db_result = self.operations.create_database(
                data["databaseName"], data["databaseUser"], data["databasePassword"], domain
            )
            if not db_result.succeeded:
                self.logger.warning(f"Database creation failed for {domain}: {db_result.error_message}")
            results["database"] = db_result.to_dict()

        if data.get("createEmail") and data.get("emailAddress") and data.get("emailPassword"):
            email_result = self.operations.create_email(data["emailAddress"], data["emailPassword"])
            if not email_result.succeeded:
                self.logger.warning(f"Email creation failed for {domain}: {email_result.error_message}")
            results["email"] = email_result.to_dict()

        return results

    def deprovision(self, domain):
        result = self.operations.delete_website(domain)
        if not result.succeeded:
            raise WebsiteError("Failed to delete website from CyberPanel", details=result.error_message)
        return result

    # Statistics

    def admin_stats(self):
        totals = self.database.usage_totals()
        return {
            "totalUsers": self.database.count_users(),
            "totalWebsites": self.database.count_websites(),
            "activeWebsites": self.database.count_websites(status="ACTIVE"),
            "totalStorage": mb_to_gb(totals["storage_limit"], digits=0),
            "usedStorage": mb_to_gb(totals["storage_used"], digits=0),
            "bandwidth": mb_to_gb(totals["bandwidth_used"], digits=0),
            "recentActivities": [
                {
                    "action": activity["action"],
                    "description": activity["description"],
                    "user": activity["user_email"],
                    "time": activity["created_at"],
                }
                for activity in self.database.recent_activities(limit=10)
            ],
        }

    def user_dashboard(self, local_user_id):
        websites = self.database.list_websites(user_id=local_user_id)
        totals = self.database.usage_totals(user_id=local_user_id)

        stats = {
            "totalWebsites": len(websites),
            "activeWebsites": len([w for w in websites if w["status"] == "ACTIVE"]),
            "totalStorage": mb_to_gb(totals["storage_limit"], digits=0),
            "usedStorage": mb_to_gb(totals["storage_used"], digits=0),
            "bandwidth": mb_to_gb(totals["bandwidth_used"], digits=0),
            "thisMonthVisitors": totals["visitors_count"],
        }

        return {
            "stats": stats,
            "websites": [
                {
                    "id": w["id"],
                    "domain": w["domain"],
                    "status": w["status"].lower(),
                    "plan": w["package"],
                    "storage": mb_to_gb(w["storage_used"]),
                    "bandwidth": mb_to_gb(w["bandwidth_used"]),
                    "visitors": w["visitors_count"],
                    "created": str(w["created_at"])[:10],
                    "sslEnabled": bool(w["ssl_enabled"]),
                    "phpVersion": w["php_version"],
                }
                for w in websites
            ],
            "activities": [
                {"action": a["action"], "description": a["description"], "time": a["created_at"]}
                for a in self.database.recent_activities(limit=10, user_id=local_user_id)
            ],
        }

    def simulate_usage_update(self, rng=None):
        """Bump usage counters on active sites; stand-in until real usage data is wired in"""
        rng = rng or random.Random()
        active = [w for w in self.database.list_websites() if w["status"] == "ACTIVE"]

        for website in active:
            self.database.update_website(
                website["id"],
                visitors_count=website["visitors_count"] + rng.randint(0, 99),
                storage_used=min(website["storage_used"] + rng.randint(0, 9), website["storage_limit"]),
                bandwidth_used=website["bandwidth_used"] + rng.randint(0, 49),
            )

        admin = self.database.get_first_admin()
        self._log(
            admin["id"] if admin else None,
            "Statistics Updated",
            "Website statistics updated automatically",
            "SYSTEM_ACTION",
            actor="system",
        )
        return len(active)
