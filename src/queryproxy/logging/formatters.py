"""Log formatters for the QueryProxy logging system.

structlog renders its own events; these stdlib formatters give records
from third-party loggers (uvicorn, database drivers) the same shape.

Classes:
    JSONFormatter: JSON format for structured logging
    TextFormatter: Human-readable text format

Example:
    >>> handler = logging.StreamHandler()
    >>> handler.setFormatter(get_formatter("json"))
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_STANDARD_RECORD_FIELDS = frozenset({
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "lineno", "funcName", "created",
    "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "message", "exc_info", "exc_text",
    "stack_info", "taskName",
})


def _already_rendered(message: str) -> bool:
    if not message.startswith("{"):
        return False
    try:
        return isinstance(json.loads(message), dict)
    except ValueError:
        return False


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured log output.

    Records whose message is already a JSON object (structlog output) are
    passed through untouched.

    Example:
        {
            "timestamp": "2024-03-07T10:30:45.123456+00:00",
            "level": "INFO",
            "logger": "uvicorn.access",
            "message": "POST /api/execute-query 200"
        }
    """

    def __init__(self, *, exclude_fields: Optional[list] = None) -> None:
        super().__init__()
        self.exclude_fields = set(exclude_fields or [])

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        message = record.getMessage()
        if _already_rendered(message):
            return message

        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in record.__dict__.items():
            if key in _STANDARD_RECORD_FIELDS or key.startswith("_"):
                continue
            log_data[key] = value

        for key in self.exclude_fields:
            log_data.pop(key, None)

        return json.dumps(log_data, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter.

    Example:
        2024-03-07 10:30:45 [INFO] uvicorn.error: Application startup complete.
    """

    def __init__(
        self,
        fmt: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt: str = "%Y-%m-%d %H:%M:%S",
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        if _already_rendered(record.getMessage()):
            return record.getMessage()
        return super().format(record)


def get_formatter(format_type: str) -> logging.Formatter:
    """Get a formatter by name.

    Args:
        format_type: ``json`` or ``text``

    Returns:
        Formatter instance

    Raises:
        ValueError: If the format type is unknown
    """
    formatters = {
        "json": JSONFormatter,
        "text": TextFormatter,
    }
    try:
        return formatters[format_type.lower()]()
    except KeyError:
        raise ValueError(f"Unknown formatter type: {format_type}") from None
