"""Log formatters for different output formats."""

import json
import logging
import traceback
from datetime import UTC, datetime
from typing import Any, ClassVar

from skinflow.logging.context import get_correlation_id, get_extra_context

_STANDARD_LOG_ATTRS: frozenset[str] = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }
)

_MAX_LOGGER_NAME_LENGTH = 30

_SECRET_KEYS: frozenset[str] = frozenset({"access_token", "authorization", "token"})
_REDACTED = "***"


def _scrub(key: str, value: Any) -> Any:
    """Hide credentials and raw capture bytes."""
    if key.lower() in _SECRET_KEYS:
        return _REDACTED
    if isinstance(value, bytes | bytearray):
        return f"<{len(value)} bytes>"
    return value


def _collect_context(record: logging.LogRecord) -> dict[str, Any]:
    """Merge correlation id, invocation context and record extras."""
    fields: dict[str, Any] = {}

    corr_id = get_correlation_id()
    if corr_id:
        fields["correlation_id"] = corr_id

    fields.update(get_extra_context())
    fields.update(
        {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_LOG_ATTRS and not key.startswith("_")
        }
    )
    return {key: _scrub(key, value) for key, value in fields.items()}


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def __init__(
        self,
        *,
        service_name: str = "skinflow",
        include_timestamp: bool = True,
        include_location: bool = True,
    ) -> None:
        """Initialize the JSON formatter.

        Args:
            service_name: Service identifier for log aggregation.
            include_timestamp: Whether to include timestamp field.
            include_location: Whether to include module/function/line fields.
        """
        super().__init__()
        self._service_name = service_name
        self._include_timestamp = include_timestamp
        self._include_location = include_location

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as a JSON string."""
        log_entry: dict[str, Any] = {}

        if self._include_timestamp:
            log_entry["timestamp"] = datetime.now(UTC).isoformat(timespec="milliseconds")

        log_entry["level"] = record.levelname
        log_entry["logger"] = record.name
        log_entry["message"] = record.getMessage()
        log_entry["service"] = self._service_name

        if self._include_location:
            log_entry["module"] = record.module
            log_entry["function"] = record.funcName
            log_entry["line"] = record.lineno

        log_entry.update(_collect_context(record))

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_entry["exception"] = {
                "type": exc_type.__name__ if exc_type else "Unknown",
                "message": str(exc_value) if exc_value else "",
                "traceback": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_entry, default=str)


class HumanFormatter(logging.Formatter):
    """Format log records for reading in a terminal."""

    COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET: ClassVar[str] = "\033[0m"

    def __init__(self, *, use_colors: bool = True) -> None:
        """Initialize the human formatter.

        Args:
            use_colors: Whether to use ANSI colors in output.
        """
        super().__init__()
        self._use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record for human readability."""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        level = record.levelname
        level_string = f"{level:<8}"
        if self._use_colors:
            level_string = f"{self.COLORS.get(level, '')}{level_string}{self.RESET}"

        logger_name = record.name
        if len(logger_name) > _MAX_LOGGER_NAME_LENGTH:
            logger_name = "..." + logger_name[-(_MAX_LOGGER_NAME_LENGTH - 3) :]

        parts = [timestamp, "|", level_string, "|", f"{logger_name:<30}", "|"]

        context = _collect_context(record)
        stage = context.pop("flow_stage", None)
        if stage:
            parts.append(f"[{stage}]")
        parts.append(record.getMessage())

        context_string = " ".join(f"{key}={value}" for key, value in context.items())
        if context_string:
            parts.extend(["|", context_string])

        result = " ".join(parts)

        if record.exc_info:
            result += "\n" + "".join(traceback.format_exception(*record.exc_info))

        return result
