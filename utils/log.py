"""
Logging setup for the MCP server.

All output goes to stderr because stdout carries the MCP stdio protocol.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = getattr(record, "context", None)
        if context:
            entry["context"] = context

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["error"] = {
                "name": exc_type.__name__ if exc_type else None,
                "message": str(exc_value),
                "stack": self.formatException(record.exc_info),
            }

        return json.dumps(entry, default=str)


class ContextTextFormatter(logging.Formatter):
    """Plain text format with the ``context`` extra appended as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        output = super().format(record)
        context = getattr(record, "context", None)
        if context:
            output = f"{output} {json.dumps(context, default=str)}"
        return output


def configure_logging(level: str = "INFO", fmt: str = "text", stream: Optional[object] = None) -> None:
    """
    Configure root logging once for the server process.

    Args:
        level: Log level name (ERROR, WARNING, INFO, DEBUG)
        fmt: "json" for structured output, anything else for text
        stream: Output stream (defaults to stderr)
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(ContextTextFormatter(TEXT_FORMAT))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )
