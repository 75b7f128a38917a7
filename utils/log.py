"""Logging setup shared by the CLI and library callers.

Library modules only create module loggers; configure_logging() is called
once by the entry point. APP_LOG_FORMAT=json switches the root handler to
newline-delimited JSON.
"""

import json
import logging
from typing import Optional

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Fields ApiClient attaches via logger.info("...", extra={...})
_EXTRA_FIELDS = ("method", "endpoint", "status", "duration_ms", "cached")


class JsonFormatter(logging.Formatter):
    """Emit log records as newline-delimited JSON."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            if hasattr(record, key):
                data[key] = getattr(record, key)
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


def configure_logging(log_format: str = "text", level: str = "INFO",
                      stream: Optional[object] = None) -> logging.Handler:
    """Install a single root handler in the requested format.

    Args:
        log_format: "json" for JSON lines, anything else for plain text
        level: Root level name ("DEBUG", "INFO", ...)
        stream: Where to write (default: stderr)

    Returns:
        The installed handler.
    """
    handler = logging.StreamHandler(stream)
    if log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    logging.basicConfig(
        handlers=[handler],
        level=getattr(logging, str(level).upper(), logging.INFO),
        force=True,
    )
    return handler
