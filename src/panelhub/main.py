#!/usr/bin/env python3
"""
panelhub
Application entry point: wires configuration, logging, the local store and the
CyberPanel client, then serves the dashboard API or runs a maintenance command.
"""

import argparse
import logging
import sys
import traceback

from werkzeug.security import generate_password_hash

from . import __version__
from .api.app import PanelAPI
from .core.client import PanelClient
from .core.database import Database
from .core.operations import PanelOperations
from .core.user_cache import UserCache
from .utils.config import Config
from .utils.logger import Logger


class PanelApplication:
    """Main application orchestrator"""

    def __init__(self, config_file=None, session=None):
        self.config = Config(config_file)
        self.logger = Logger(
            log_level=logging.DEBUG if self.config.get("debug_mode") else logging.INFO,
            log_dir=self.config.get("log_dir"),
        )
        self.database = Database(self.config.get("database_path"))
        self.database.clear_old_login_attempts()
        self.client = PanelClient(self.config, self.logger, session=session)
        self.operations = PanelOperations(self.client)
        self.user_cache = UserCache(
            self.operations,
            ttl=self.config.get("user_cache_ttl", 300),
            fallback_email=self.config.get("admin_email"),
            logger=self.logger,
        )

        for problem in self.config.validate():
            self.logger.warning(f"Configuration: {problem}")

    def create_api(self):
        return PanelAPI(
            config=self.config,
            logger=self.logger,
            database=self.database,
            operations=self.operations,
            user_cache=self.user_cache,
        )

    def start_api_server(self, host=None, port=None):
        """Start the dashboard API server"""
        try:
            api = self.create_api()
            api.run(
                host=host or self.config.get("api_host"),
                port=port or self.config.get("api_port"),
                debug=self.config.get("debug_mode", False),
            )
        except Exception as e:
            self.logger.critical(f"API server failed: {e}")
            self.logger.error(f"Traceback: {traceback.format_exc()}")
            sys.exit(1)

    def show_status(self):
        """Show CyberPanel connectivity and local store summary"""
        print(f"\npanelhub {__version__} status")
        print("=" * 60)

        credentials = self.client.credentials()
        described = credentials.describe()
        print(f"CyberPanel URL: {described['url'] or 'not set'}")
        print(f"CyberPanel user: {described['username'] or 'not set'}")
        print(f"Token configured: {described['token_set']}")
        print(f"Password configured: {described['password_set']}")
        print(f"Database: {self.config.get('database_path')}")

        result = self.operations.verify_login()
        if result.succeeded:
            print("CyberPanel: Connected")
        else:
            print(f"CyberPanel: Failed - {result.error_message}")

        print(f"Local users: {self.database.count_users()}")
        print(f"Local websites: {self.database.count_websites()}")
        print(f"Active websites: {self.database.count_websites(status='ACTIVE')}")
        return result.succeeded

    def create_user(self, username, email, password, admin=False, name=None):
        """Create a local dashboard login"""
        user_id = self.database.create_user(
            username,
            email,
            password_hash=generate_password_hash(password),
            name=name,
            role="ADMIN" if admin else "USER",
        )
        self.database.log_activity(
            user_id,
            "User Created",
            f"User {username} created from the command line",
            "SYSTEM_ACTION",
            {"username": username, "role": "ADMIN" if admin else "USER"},
        )
        self.logger.info(f"Created {'admin' if admin else 'user'} {username} ({email})")
        return user_id


def main(argv=None):
    parser = argparse.ArgumentParser(description=f"panelhub {__version__} - CyberPanel dashboard API")
    parser.add_argument("--config", help="Path to a JSON config file")
    parser.add_argument("--api", action="store_true", help="Start the dashboard API server")
    parser.add_argument("--status", action="store_true", help="Show CyberPanel connectivity")
    parser.add_argument("--init-db", action="store_true", help="Create the local database and exit")
    parser.add_argument(
        "--create-user",
        nargs=3,
        metavar=("USERNAME", "EMAIL", "PASSWORD"),
        help="Create a local dashboard user",
    )
    parser.add_argument("--admin", action="store_true", help="With --create-user: grant admin role")
    parser.add_argument("--write-config", metavar="PATH", help="Write the effective settings to a JSON file")
    parser.add_argument("--api-port", type=int, help="API server port")
    parser.add_argument("--api-host", help="API server host")

    args = parser.parse_args(argv)

    try:
        app = PanelApplication(args.config)
    except Exception as e:
        print(f"FATAL: Failed to initialize application: {e}")
        traceback.print_exc()
        return 1

    try:
        if args.api:
            print(f"Starting panelhub API on {args.api_host or app.config.get('api_host')}:"
                  f"{args.api_port or app.config.get('api_port')}")
            app.start_api_server(host=args.api_host, port=args.api_port)
            return 0

        if args.status:
            return 0 if app.show_status() else 1

        if args.init_db:
            print(f"Database ready at {app.config.get('database_path')}")
            return 0

        if args.write_config:
            return 0 if app.config.save_to_file(args.write_config) else 1

        if args.create_user:
            username, email, password = args.create_user
            app.create_user(username, email, password, admin=args.admin)
            print(f"Created user {username}")
            return 0

        parser.print_help()
        return 0

    except KeyboardInterrupt:
        print("\nShutdown requested")
        return 0


if __name__ == "__main__":
    sys.exit(main())
