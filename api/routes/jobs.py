"""Job status, history and metrics endpoints."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel, Field

from core.history import JobHistoryLedger, JobHistoryView
from core.observability.metrics import get_metrics


router = APIRouter()


class ConnectionStatusResponse(BaseModel):
    """Engine connection status."""
    configured: bool
    connected: bool
    last_error: Optional[str] = None
    last_checked: Optional[str] = None
    rest_address: Optional[str] = None
    worker_name: Optional[str] = None


class WorkerStatusResponse(BaseModel):
    """Polling service status with ledger totals."""
    running: bool
    worker_name: Optional[str] = None
    job_types: List[Dict[str, Any]] = Field(default_factory=list)
    last_error: Optional[str] = None
    total_jobs: int
    jobs_today: int


class JobMetricsResponse(BaseModel):
    """Ledger counts and in-process runtime metrics."""
    total_jobs: int
    jobs_today: int
    jobs_by_type: Dict[str, int]
    runtime: Dict[str, Any]


def _ledger(request: Request) -> JobHistoryLedger:
    return request.app.state.ledger


@router.get("/connection-status", response_model=ConnectionStatusResponse)
async def connection_status(request: Request) -> ConnectionStatusResponse:
    """Whether the Zeebe gateway is reachable."""
    connection = request.app.state.connection
    if connection is None:
        return ConnectionStatusResponse(configured=False, connected=False)

    status = connection.status()
    return ConnectionStatusResponse(configured=True, **status)


@router.get("/worker-status", response_model=WorkerStatusResponse)
async def worker_status(request: Request) -> WorkerStatusResponse:
    """Polling state of the job worker."""
    ledger = _ledger(request)
    service = request.app.state.polling_service

    status: Dict[str, Any] = {"running": False}
    if service is not None:
        status = service.status()

    return WorkerStatusResponse(
        running=status["running"],
        worker_name=status.get("worker_name"),
        job_types=status.get("job_types", []),
        last_error=status.get("last_error"),
        total_jobs=ledger.total_count(),
        jobs_today=ledger.count_today(),
    )


@router.get("/job-history", response_model=List[JobHistoryView])
async def job_history(
    request: Request,
    limit: int = Query(50, ge=1, le=500, description="Number of entries to return"),
) -> List[JobHistoryView]:
    """Most recent job executions, newest first."""
    return [JobHistoryView.from_record(record) for record in _ledger(request).recent(limit)]


@router.get("/job-metrics", response_model=JobMetricsResponse)
async def job_metrics(request: Request) -> JobMetricsResponse:
    """Job counts from the ledger plus runtime metrics of this process."""
    ledger = _ledger(request)
    return JobMetricsResponse(
        total_jobs=ledger.total_count(),
        jobs_today=ledger.count_today(),
        jobs_by_type=ledger.count_by_type(),
        runtime=get_metrics().get_summary(),
    )
