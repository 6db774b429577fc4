"""Logging setup and the structured loggers used by the repository and HTTP layers."""

import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

from app.core.config import LogFormatEnum, Settings

SIMPLE_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Attributes present on every LogRecord; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object, ``extra`` fields included."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _build_formatter(log_format: LogFormatEnum) -> logging.Formatter:
    if log_format == LogFormatEnum.json:
        return JsonFormatter()
    return logging.Formatter(SIMPLE_FORMAT)


def setup_logging(config: Settings) -> None:
    """Configure the root logger from application settings.

    Handlers installed by an earlier call are replaced, so calling this again
    (for instance once per ``create_app``) does not duplicate output.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_chat_api_handler", False):
            root.removeHandler(handler)
            handler.close()

    formatter = _build_formatter(config.log_format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if config.log_to_file:
        log_dir = Path(config.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / "app.log", encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler._chat_api_handler = True
        root.addHandler(handler)

    root.setLevel(config.log_level.value)


class DatabaseLogger:
    """Reports one record per repository operation.

    Emits ``database_operation`` at INFO, or ``database_error`` at ERROR when
    the operation failed. Failures inside logging handlers are dealt with by
    ``logging.Handler.handleError`` and never reach the caller.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("app.database")

    def log(
        self,
        operation: str,
        table: str,
        details: str,
        duration_ms: float,
        error: BaseException | None = None,
    ) -> None:
        fields = {
            "operation": operation,
            "table": table,
            "details": details,
            "duration_ms": round(duration_ms, 3),
        }
        if error is not None:
            fields["error"] = str(error) or type(error).__name__
            self.logger.error("database_error", extra=fields)
        else:
            self.logger.info("database_operation", extra=fields)


class RequestLogger:
    """Reports one record per HTTP request, levelled by response status."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("app.http")

    def log(
        self,
        method: str,
        path: str,
        remote_addr: str,
        status_code: int,
        duration_ms: float,
    ) -> None:
        if status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        self.logger.log(
            level,
            "http_request",
            extra={
                "method": method,
                "path": path,
                "remote_addr": remote_addr,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 3),
            },
        )


__all__ = [
    "JsonFormatter",
    "setup_logging",
    "DatabaseLogger",
    "RequestLogger",
]
