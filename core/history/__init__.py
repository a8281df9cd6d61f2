"""Job history: append-only execution ledger and its display view."""

from core.history.models import ExecutionRecord, JobStatus
from core.history.ledger import JobHistoryLedger, init_history_db
from core.history.views import JobHistoryView, format_duration, worker_display_name

__all__ = [
    "ExecutionRecord",
    "JobStatus",
    "JobHistoryLedger",
    "init_history_db",
    "JobHistoryView",
    "format_duration",
    "worker_display_name",
]
