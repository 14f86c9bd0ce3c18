"""Log formatters for JSON and console output."""

import json
import logging
import re
import sys
from datetime import UTC, date, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from core.logging.context import get_log_context


def _json_default(obj: Any) -> Any:
    """Serialize values json.dumps doesn't know, keeping numbers numeric."""
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Path):
        return str(obj)
    return str(obj)


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter with context injection.

    Produces one JSON object per line for easy parsing with jq/grep.
    Redacts shared access keys and SAS signatures before writing.
    """

    # Fields to extract from LogRecord extras
    EXTRA_FIELDS = [
        # Resources
        "resource_id",
        "namespace",
        "primary_namespace",
        "secondary_namespace",
        "location",
        "sku",
        "alias",
        "partner_namespace",
        "event_hub",
        "consumer_group",
        "authorization_rule",
        "provisioning_state",
        "role",
        # Operation tracking
        "operation",
        "duration_ms",
        "strategy",
        "wait_seconds",
        "timeout_seconds",
        # Polling
        "attempt",
        "delay_seconds",
        "delay_source",
        # Errors
        "error_category",
        "error_message",
        "error_type",
        "error_code",
        "status_code",
        # Auth
        "auth_mode",
        "subscription_id",
    ]

    # Type mapping for numeric fields so they are not serialized as strings
    NUMERIC_FIELDS = {
        "duration_ms": float,
        "delay_seconds": float,
        "wait_seconds": float,
        "timeout_seconds": float,
        "attempt": int,
        "status_code": int,
    }

    # Secrets that can appear in connection strings or URLs
    SENSITIVE_PATTERN = re.compile(
        r"((?:SharedAccessKey|sig|token|secret|password)=)[^;&\s\"]*",
        re.IGNORECASE,
    )

    def _sanitize(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.SENSITIVE_PATTERN.sub(r"\1[REDACTED]", value)
        return value

    def _ensure_type(self, field: str, value: Any) -> Any:
        """Coerce numeric fields to their expected type, or None if that fails."""
        if field not in self.NUMERIC_FIELDS or value is None:
            return value

        expected_type = self.NUMERIC_FIELDS[field]
        try:
            return expected_type(value)
        except (ValueError, TypeError):
            return None

    def _base_log_entry(self, record: logging.LogRecord) -> dict[str, Any]:
        return {
            "ts": datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": self._sanitize(record.getMessage()),
        }

    @staticmethod
    def _inject_context(log_entry: dict[str, Any], log_context: dict[str, Any]) -> None:
        for field in ("run_id", "step", "resource_group"):
            if log_context.get(field):
                log_entry[field] = log_context[field]

    @staticmethod
    def _should_include_source_location(record: logging.LogRecord) -> bool:
        return record.levelno in (logging.DEBUG, logging.ERROR, logging.CRITICAL)

    def _inject_extra_fields(self, log_entry: dict[str, Any], record: logging.LogRecord) -> None:
        for field in self.EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = self._sanitize(self._ensure_type(field, value))

    def _inject_exception(self, log_entry: dict[str, Any], record: logging.LogRecord) -> None:
        if not record.exc_info:
            return

        exc_type, exc_value, _ = record.exc_info
        log_entry["exception"] = {
            "type": exc_type.__name__ if exc_type else None,
            "message": self._sanitize(str(exc_value)) if exc_value else None,
            "stacktrace": self._sanitize(self.formatException(record.exc_info)),
        }

    def format(self, record: logging.LogRecord) -> str:
        log_entry = self._base_log_entry(record)
        self._inject_context(log_entry, get_log_context())

        if self._should_include_source_location(record):
            log_entry["file"] = f"{record.filename}:{record.lineno}"

        self._inject_extra_fields(log_entry, record)
        self._inject_exception(log_entry, record)

        return json.dumps(log_entry, default=_json_default, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable console formatter with color-coded log levels.

    Colors are auto-disabled when output is not a TTY (pipes, files).
    """

    # ANSI color codes
    COLORS = {
        logging.DEBUG: "\033[36m",  # Cyan
        logging.INFO: "\033[32m",  # Green
        logging.WARNING: "\033[33m",  # Yellow
        logging.ERROR: "\033[31m",  # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._use_colors = sys.stdout.isatty()

    def _format_level_name(self, record: logging.LogRecord) -> str:
        level_name = record.levelname
        if not self._use_colors:
            return level_name

        color = self.COLORS.get(record.levelno, "")
        if not color:
            return level_name

        return f"{color}{level_name}{self.RESET}"

    @staticmethod
    def _build_prefix(level_name: str, log_context: dict[str, Any]) -> str:
        parts = [
            datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            level_name,
        ]

        if log_context.get("step"):
            parts.append(f"[{log_context['step']}]")

        return " - ".join(parts)

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for console output with optional color coding."""
        log_context = get_log_context()

        prefix = self._build_prefix(self._format_level_name(record), log_context)
        message = f"{prefix} - {record.getMessage()}"

        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message
