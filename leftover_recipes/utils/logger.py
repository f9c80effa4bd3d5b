"""Logging setup for the Leftover Recipe Service.

Every module logs through the shared `logger`. Output goes to stdout, either as
colored text for local runs or as one JSON object per line for log collectors.

Environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_TYPE: text, json (default: text)

The request handler tags records with `request_id` (and `error_kind` on failures)
through `extra`; both formatters render them when present.
"""

import json
import logging
import os
import sys
from typing import Any

# Record attributes set via `extra` that are worth surfacing
CONTEXT_FIELDS = ("request_id", "error_kind")

# level -> (ANSI color, icon)
LEVEL_STYLES = {
    "DEBUG": ("\033[36m", "🔍"),
    "INFO": ("\033[32m", "ℹ️"),
    "WARNING": ("\033[33m", "⚠️"),
    "ERROR": ("\033[31m", "❌"),
    "CRITICAL": ("\033[35m", "🔥"),
}
RESET = "\033[0m"


def _context(record: logging.LogRecord) -> dict[str, Any]:
    return {field: getattr(record, field) for field in CONTEXT_FIELDS if hasattr(record, field)}


class JSONFormatter(logging.Formatter):
    """One JSON object per record; Japanese text is written unescaped."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class RichTextFormatter(logging.Formatter):
    """Colored single-line records with a level icon and `[request_id]` tag."""

    def format(self, record: logging.LogRecord) -> str:
        color, icon = LEVEL_STYLES.get(record.levelname, (RESET, ""))
        request_id = getattr(record, "request_id", None)
        tag = f"[{request_id}] " if request_id else ""

        line = (
            f"{color}{icon} {self.formatTime(record, '%Y-%m-%d %H:%M:%S')} "
            f"{record.levelname:<8} {record.name:<20} {tag}{record.getMessage()}{RESET}"
        )
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _make_handler(log_type: str, level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if log_type == "json" else RichTextFormatter())
    return handler


def get_logger(name: str) -> logging.Logger:
    """Return the named logger, attaching a stdout handler on first use.

    Args:
        name: Logger name, typically the package or module name.

    Returns:
        Configured logger instance. Later calls with the same name reuse the
        existing handler instead of stacking another one.
    """
    named_logger = logging.getLogger(name)
    if named_logger.handlers:
        return named_logger

    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    named_logger.setLevel(level)
    named_logger.addHandler(_make_handler(os.getenv("LOG_TYPE", "text").lower(), level))
    return named_logger


logger = get_logger("leftover_recipes")

# google-genai and its HTTP transport log every request at INFO
logging.getLogger("google.genai").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
