"""
Structured JSON logging.
"""
import json
import logging
import os
import sys
from datetime import datetime, timezone


class JSONFormatter(logging.Formatter):
    def format(self, record):
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.name,
        }
        entry.update(getattr(record, "context", {}))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class StructuredLogger:
    """Logger adding keyword arguments as fields of the JSON record."""

    def __init__(self, name):
        self.logger = logging.getLogger(name)

    def _log(self, level, message, **kwargs):
        self.logger.log(level, message, extra={"context": kwargs})

    def info(self, message, **kwargs):
        self._log(logging.INFO, message, **kwargs)

    def error(self, message, **kwargs):
        self._log(logging.ERROR, message, **kwargs)

    def warning(self, message, **kwargs):
        self._log(logging.WARNING, message, **kwargs)

    def debug(self, message, **kwargs):
        self._log(logging.DEBUG, message, **kwargs)


def setup_logging():
    """Configure root logger to use structured JSON."""
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    root.handlers = [handler]
    # Override for our modules
    logging.getLogger("mfagate").setLevel(logging.DEBUG if os.getenv("DEBUG") else logging.INFO)
