"""Logging for the cook-along service.

Two output formats, chosen with LOG_TYPE (text, json; default text) at the
level given by LOG_LEVEL (default INFO). Records may carry recipe_id,
user_id and operation through `extra=`; `log_context()` builds that dict.
"""

import json
import logging
import os
import sys
from typing import Any, Optional

CONTEXT_FIELDS = ("recipe_id", "user_id", "operation")


def log_context(
    recipe_id: Optional[str] = None,
    user_id: Optional[str] = None,
    operation: Optional[str] = None,
) -> dict[str, str]:
    """Build an `extra=` dict, leaving out fields that are not set."""
    fields = {"recipe_id": recipe_id, "user_id": user_id, "operation": operation}
    return {key: value for key, value in fields.items() if value is not None}


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    return {field: getattr(record, field) for field in CONTEXT_FIELDS if hasattr(record, field)}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, context fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **record_context(record),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Human-readable lines for the terminal.

    The icon names what the kitchen is doing (the record's `operation`) and
    falls back to a per-level icon. Context is shown as a short tag, e.g.
    `[recipe 2 · user u-1]`.

    Args:
        use_color: Wrap lines in ANSI colors. Off when output is not a terminal.
    """

    LEVEL_STYLES = {
        "DEBUG": ("\033[2m", "🔍"),
        "INFO": ("\033[32m", "🍳"),
        "WARNING": ("\033[33m", "⚠️"),
        "ERROR": ("\033[1;31m", "❌"),
        "CRITICAL": ("\033[1;31m", "🔥"),
    }
    OPERATION_ICONS = {
        "add": "⭐",
        "remove": "☆",
        "refresh": "⭐",
        "merge": "🔀",
        "load": "📥",
        "ingredients": "🥕",
        "cooktop": "🔥",
        "translation": "🌐",
        "substitute": "🔁",
        "tip": "💡",
        "image": "📷",
        "timer": "⏲️",
        "generate": "🤖",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True) -> None:
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        color, icon = self.LEVEL_STYLES.get(record.levelname, ("", "•"))
        context = record_context(record)
        icon = self.OPERATION_ICONS.get(context.get("operation"), icon)

        tags = []
        if "recipe_id" in context:
            tags.append(f"recipe {context['recipe_id']}")
        if "user_id" in context:
            tags.append(f"user {context['user_id']}")
        tag = f" [{' · '.join(tags)}]" if tags else ""

        timestamp = self.formatTime(record, "%H:%M:%S")
        line = f"{icon} {timestamp} {record.levelname:<7}{tag} {record.getMessage()}"
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return f"{color}{line}{self.RESET}" if self.use_color else line


def build_handler(log_type: str, level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if log_type == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(ConsoleFormatter(use_color=sys.stdout.isatty()))
    return handler


def get_logger(name: str, level: Optional[str] = None, log_type: Optional[str] = None) -> logging.Logger:
    """Return logger `name` with a stdout handler attached once.

    Args:
        name: Logger name.
        level: Overrides LOG_LEVEL.
        log_type: Overrides LOG_TYPE.
    """
    logger_instance = logging.getLogger(name)
    if logger_instance.handlers:
        return logger_instance

    log_level = getattr(logging, (level or os.getenv("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logger_instance.setLevel(log_level)
    logger_instance.addHandler(build_handler((log_type or os.getenv("LOG_TYPE", "text")).lower(), log_level))
    return logger_instance


def set_level(level: str, logger_instance: Optional[logging.Logger] = None) -> None:
    """Change the level of a configured logger and its handlers (e.g. for --verbose)."""
    target = logger_instance or logger
    log_level = getattr(logging, level.upper(), logging.INFO)
    target.setLevel(log_level)
    for handler in target.handlers:
        handler.setLevel(log_level)


logger = get_logger("cookalong")

# SDK clients log every HTTP request at INFO
for _noisy in ("google.genai", "httpx", "supabase", "postgrest"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
