"""
Structured Logging with Job Correlation

Every line logged while a job is being handled carries:
- job_type: Job type being worked (e.g. "search-employee")
- job_key: Key of the activated job
- worker: Worker name registered with the engine
- process_instance_key: Process instance the job belongs to

Usage:
    from core.observability.logging import get_logger, with_correlation

    logger = get_logger(__name__)

    with with_correlation(job_type="search-employee", job_key="2251799813685249"):
        logger.info("Handling job")  # includes job_type and job_key
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Dict, Optional


# =============================================================================
# Correlation Context
# =============================================================================

@dataclass(frozen=True)
class CorrelationContext:
    """Identifiers attached to every log line of the current job."""
    job_type: Optional[str] = None
    job_key: Optional[str] = None
    worker: Optional[str] = None
    process_instance_key: Optional[str] = None
    element_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict, excluding None values."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    def merge(self, **kwargs) -> "CorrelationContext":
        """Create a new context with merged values."""
        data = self.to_dict()
        data.update({k: v for k, v in kwargs.items() if v is not None})
        return CorrelationContext(**data)


# ContextVar copies follow asyncio tasks and asyncio.to_thread calls
_correlation_context: ContextVar[CorrelationContext] = ContextVar(
    "correlation_context",
    default=CorrelationContext()
)


def get_correlation_context() -> CorrelationContext:
    """Get the current correlation context."""
    return _correlation_context.get()


@contextmanager
def with_correlation(**kwargs):
    """
    Context manager that adds correlation fields for the enclosed block.

    Usage:
        with with_correlation(job_type="query-for-company", job_key="42"):
            logger.info("Processing")
    """
    new_ctx = get_correlation_context().merge(**kwargs)
    token = _correlation_context.set(new_ctx)
    try:
        yield new_ctx
    finally:
        _correlation_context.reset(token)


# =============================================================================
# Formatters
# =============================================================================

class StructuredFormatter(logging.Formatter):
    """
    JSON formatter that includes correlation context.

    Output format:
    {
        "timestamp": "2025-01-09T12:00:00.000Z",
        "level": "INFO",
        "logger": "workers.dispatch",
        "message": "Job completed",
        "job_type": "search-employee",
        "job_key": "2251799813685249",
        "duration_ms": 12
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        log_data.update(get_correlation_context().to_dict())

        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Human-readable formatter with the job type and key.

    Output format:
    2025-01-09 12:00:00 [INFO ] workers.dispatch [search-employee/2251799813685249]: Job completed
    """

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_correlation_context()

        correlation_parts = [part for part in (ctx.job_type, ctx.job_key) if part]
        correlation = "/".join(correlation_parts) if correlation_parts else "-"

        timestamp = datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S")
        msg = f"{timestamp} [{record.levelname:5}] {record.name} [{correlation}]: {record.getMessage()}"

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            msg += " " + " ".join(f"{k}={v}" for k, v in extra_fields.items())

        if record.exc_info:
            msg += "\n" + self.formatException(record.exc_info)

        return msg


# =============================================================================
# Logger with Correlation Support
# =============================================================================

class CorrelatedLogger:
    """
    Logger wrapper that supports extra fields on individual log calls.

    Correlation fields are added by the formatters, so plain
    logging.getLogger loggers also pick them up.
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def _log(self, level: int, msg: str, *args, **kwargs):
        extra_fields = kwargs.pop("extra_fields", {})
        exc_info = kwargs.pop("exc_info", None)
        if exc_info is True:
            exc_info = sys.exc_info()

        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "(unknown file)",
            0,
            msg,
            args,
            exc_info,
        )
        record.extra_fields = extra_fields

        self._logger.handle(record)

    def debug(self, msg: str, *args, **kwargs):
        if self._logger.isEnabledFor(logging.DEBUG):
            self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        if self._logger.isEnabledFor(logging.INFO):
            self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        if self._logger.isEnabledFor(logging.WARNING):
            self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        if self._logger.isEnabledFor(logging.ERROR):
            self._log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        kwargs["exc_info"] = True
        self.error(msg, *args, **kwargs)

    def setLevel(self, level):
        self._logger.setLevel(level)

    def isEnabledFor(self, level):
        return self._logger.isEnabledFor(level)


# =============================================================================
# Logger Factory
# =============================================================================

_loggers: Dict[str, CorrelatedLogger] = {}
_configured = False


def configure_logging(
    level: int = logging.INFO,
    json_format: bool = False,
):
    """
    Configure logging for the application.

    Args:
        level: Logging level
        json_format: If True, use JSON format; otherwise human-readable
    """
    global _configured

    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(StructuredFormatter() if json_format else HumanReadableFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)

    for logger_name in ["workers", "records", "connectors", "api", "core"]:
        logging.getLogger(logger_name).setLevel(level)

    # Reduce noise from third-party libraries
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str) -> CorrelatedLogger:
    """
    Get a correlated logger for the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        CorrelatedLogger instance
    """
    if name not in _loggers:
        _loggers[name] = CorrelatedLogger(logging.getLogger(name))
    return _loggers[name]
