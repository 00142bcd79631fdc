"""
panelhub logging

One named stdlib logger shared by the whole process: console output at INFO,
a rotating debug log and a rotating error-only log. CyberPanel attempts and
dashboard activity are written as single-line JSON records so they can be
grepped out of the main log.
"""

import json
import logging
import logging.handlers
import os
import sys
from collections import deque
from datetime import datetime


LOG_FILE = "panelhub.log"
ERROR_LOG_FILE = "panelhub_error.log"

MB = 1024 * 1024

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s"
CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


class Logger:
    """Thin facade over the panelhub logger with structured helpers"""

    def __init__(self, log_level=logging.INFO, log_dir="/tmp/panelhub/logs", name="panelhub"):
        self.log_dir = log_dir
        self.log_level = log_level
        self.name = name

        os.makedirs(log_dir, exist_ok=True)
        self.logger = self._build_logger()

    def _build_logger(self):
        logger = logging.getLogger(self.name)
        logger.setLevel(self.log_level)
        # rebuilding (tests, reloads) must not stack duplicate handlers
        for old in list(logger.handlers):
            logger.removeHandler(old)
            old.close()

        console = logging.StreamHandler(sys.stdout)
        console.setLevel(logging.INFO)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console)

        detailed = logging.Formatter(DETAILED_FORMAT)
        for filename, level, max_bytes, backups in (
            (LOG_FILE, logging.DEBUG, 10 * MB, 5),
            (ERROR_LOG_FILE, logging.ERROR, 5 * MB, 3),
        ):
            try:
                handler = logging.handlers.RotatingFileHandler(
                    os.path.join(self.log_dir, filename), maxBytes=max_bytes, backupCount=backups
                )
            except OSError as e:
                logger.warning(f"File logging to {filename} disabled: {e}")
                continue
            handler.setLevel(level)
            handler.setFormatter(detailed)
            logger.addHandler(handler)

        return logger

    def debug(self, message):
        self.logger.debug(message)

    def info(self, message):
        self.logger.info(message)

    def warning(self, message):
        self.logger.warning(message)

    def error(self, message):
        self.logger.error(message)

    def critical(self, message):
        self.logger.critical(message)

    def _structured(self, tag, level, **fields):
        record = {"timestamp": datetime.now().isoformat(), **fields}
        self.logger.log(level, f"{tag}: {json.dumps(record, default=str)}")

    def log_panel_call(self, operation, strategy, status, error=None):
        """One CyberPanel attempt; credentials are never part of the record"""
        level = logging.INFO if status == "success" else logging.WARNING
        self._structured(
            "PANEL", level, operation=operation, strategy=strategy, status=status, error=error
        )

    def log_activity(self, actor, action, status, details=""):
        """A dashboard action taken by a user or by the system"""
        self._structured(
            "ACTIVITY", logging.INFO, actor=actor, action=action, status=status, details=details
        )

    def get_recent_logs(self, lines=100):
        """Last `lines` lines of the main log file; empty when it does not exist yet"""
        path = os.path.join(self.log_dir, LOG_FILE)
        if not os.path.exists(path):
            return []
        try:
            with open(path, "r") as f:
                return list(deque(f, maxlen=lines))
        except OSError as e:
            self.error(f"Could not read {path}: {e}")
            return []
