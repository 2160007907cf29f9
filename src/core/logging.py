import logging
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from src.core.config import config

NOISY_HTTP_LOGGERS = (
    "httpx",
    "httpcore",
    "httpcore.http11",
    "httpcore.connection",
)

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Request id bound to the current task; each request runs in its own context
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def resolve_log_level(raw_level: str) -> str:
    """Parse a LOG_LEVEL value, extracting just the first word to handle comments."""
    parts = raw_level.split()
    level = parts[0].upper() if parts else ""
    return level if level in VALID_LOG_LEVELS else "INFO"


def set_noisy_http_logger_levels(current_log_level: str) -> None:
    """Ensure HTTP client noise only surfaces at DEBUG level."""

    noisy_level = logging.DEBUG if current_log_level == "DEBUG" else logging.WARNING
    for logger_name in NOISY_HTTP_LOGGERS:
        logging.getLogger(logger_name).setLevel(noisy_level)


class ConversationLogger:
    """Logger with correlation ID support"""

    @staticmethod
    def get_logger() -> logging.Logger:
        """Get logger with correlation ID support"""
        return logging.getLogger("conversation")

    @staticmethod
    @contextmanager
    def correlation_context(request_id: str) -> Generator[None, None, None]:
        """Bind a correlation ID to every record logged in the current context."""
        token = _correlation_id.set(request_id)
        try:
            yield
        finally:
            _correlation_id.reset(token)


def _install_record_factory() -> None:
    old_factory = logging.getLogRecordFactory()
    if getattr(old_factory, "_correlation_aware", False):
        return

    def record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
        record = old_factory(*args, **kwargs)
        correlation_id = _correlation_id.get()
        if correlation_id is not None:
            record.correlation_id = correlation_id
        return record

    record_factory._correlation_aware = True  # type: ignore[attr-defined]
    logging.setLogRecordFactory(record_factory)


class CorrelationFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        # Add correlation ID if available
        if hasattr(record, "correlation_id"):
            record.msg = f"[{record.correlation_id[:8]}] {record.msg}"
        return super().format(record)


class HttpRequestLogDowngradeFilter(logging.Filter):
    """Downgrade noisy third-party HTTP logs to DEBUG."""

    def __init__(self, *prefixes: str) -> None:
        super().__init__()
        self.prefixes = prefixes

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno == logging.INFO:
            for prefix in self.prefixes:
                if record.name.startswith(prefix):
                    record.levelno = logging.DEBUG
                    record.levelname = logging.getLevelName(logging.DEBUG)
                    break
        return True


def configure_root_logging(raw_level: str) -> str:
    """Install the relay's handler on the root logger and return the effective level."""
    log_level = resolve_log_level(raw_level)

    _install_record_factory()

    formatter = CorrelationFormatter(
        "%(asctime)s - %(levelname)s - %(name)s - %(message)s", datefmt="%H:%M:%S"
    )
    handler = logging.StreamHandler()
    handler.addFilter(HttpRequestLogDowngradeFilter(*NOISY_HTTP_LOGGERS))
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level))

    # Configure uvicorn to be quieter
    for uvicorn_logger in ["uvicorn", "uvicorn.access", "uvicorn.error"]:
        logging.getLogger(uvicorn_logger).setLevel(logging.WARNING)

    set_noisy_http_logger_levels(log_level)
    return log_level


log_level = configure_root_logging(config.log_level)

# Global instances
logger = logging.getLogger(__name__)
conversation_logger = ConversationLogger.get_logger()
