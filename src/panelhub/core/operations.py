# src/panelhub/core/operations.py
"""Named CyberPanel operations. Pure pass-through: every method returns the PanelResult."""

from .responses import ErrorCode, PanelResult


class PanelOperations:
    """Thin wrappers fixing the cloudAPI controller name and parameter shape"""

    def __init__(self, client):
        self.client = client

    def verify_login(self):
        return self.client.call("verifyLogin")

    def create_website(self, domain, owner_email, package_name="Default", website_owner="admin"):
        return self.client.call(
            "submitWebsiteCreation",
            {
                "domainName": domain,
                "ownerEmail": owner_email,
                "packageName": package_name,
                "websiteOwner": website_owner,
            },
        )

    def delete_website(self, domain):
        return self.client.call("submitWebsiteDeletion", {"websiteName": domain})

    def fetch_websites(self, page=1, page_size=50):
        return self.client.call("fetchWebsites", {"page": page, "recordsToShow": page_size})

    def fetch_packages(self):
        return self.client.call("fetchPackages")

    def fetch_users(self):
        return self.client.call("fetchUsers")

    def fetch_child_users(self):
        return self.client.call("fetchChildUsers")

    def create_database(self, db_name, db_user, db_password, website_domain):
        return self.client.call(
            "submitDBCreation",
            {
                "databaseWebsite": website_domain,
                "dbName": db_name,
                "dbUsername": db_user,
                "dbPassword": db_password,
            },
        )

    def create_email(self, email_address, password):
        local_part, sep, domain = (email_address or "").partition("@")
        if not sep or not local_part or not domain:
            return PanelResult.fail(
                f"Invalid email address: {email_address!r}", ErrorCode.INVALID_REQUEST
            )

        return self.client.call(
            "submitEmailCreation",
            {"domain": domain, "userName": local_part, "password": password},
        )

    def install_ssl(self, domain, email):
        return self.client.call("issueSSL", {"domainName": domain, "email": email})

    def get_website_details(self, domain):
        return self.client.call("getWebsiteDetails", {"domainName": domain})

    def create_backup(self, domain):
        return self.client.call("submitBackupCreation", {"websiteName": domain})
