"""
Observability Module for the Job Worker

Provides:
- Structured logging with job correlation fields
- In-memory metrics for polling, job outcomes and handler durations
"""

from core.observability.metrics import (
    MetricsCollector,
    get_metrics,
    record_poll,
    record_job_completed,
    record_job_failed,
)

from core.observability.logging import (
    get_logger,
    configure_logging,
    CorrelationContext,
    with_correlation,
)

__all__ = [
    # Metrics
    "MetricsCollector",
    "get_metrics",
    "record_poll",
    "record_job_completed",
    "record_job_failed",
    # Logging
    "get_logger",
    "configure_logging",
    "CorrelationContext",
    "with_correlation",
]
