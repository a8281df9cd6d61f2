"""Job dispatch loop.

One JobTypePoller per job type repeatedly:
1. Skips the tick if the engine is unreachable
2. Activates a bounded batch of jobs
3. Runs the bound handler for each job in a worker thread
4. Completes the job with the handler's result, or fails it with one
   retry less
5. Appends an ExecutionRecord to the ledger

Ticks of one job type never overlap; different job types poll concurrently.
"""

import asyncio
import threading
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from connectors.work_distribution import ConnectionMonitor, WorkDistributionClient
from connectors.zeebe.zeebe_models import ActivatedJob
from core.history import JobHistoryLedger
from core.observability.logging import get_logger, with_correlation
from core.observability.metrics import MetricsCollector, get_metrics
from zeebe_client import PollingConfig


logger = get_logger(__name__)

JobHandler = Callable[[ActivatedJob], Optional[Dict[str, Any]]]


class PollingState:
    """Running flag and last error, shared by every poller of a service."""

    def __init__(self):
        self._lock = threading.Lock()
        self._running = False
        self._last_error: Optional[str] = None
        self._last_error_at: Optional[datetime] = None

    def start(self) -> None:
        with self._lock:
            self._running = True

    def stop(self) -> None:
        with self._lock:
            self._running = False

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    def set_error(self, error: str) -> None:
        with self._lock:
            self._last_error = error
            self._last_error_at = datetime.utcnow()

    @property
    def last_error(self) -> Optional[str]:
        with self._lock:
            return self._last_error

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "running": self._running,
                "last_error": self._last_error,
                "last_error_at": self._last_error_at.isoformat() if self._last_error_at else None,
            }


class JobTypePoller:
    """Polls and processes the jobs of one type."""

    def __init__(
        self,
        job_type: str,
        handler: JobHandler,
        client: WorkDistributionClient,
        connection: ConnectionMonitor,
        ledger: JobHistoryLedger,
        state: PollingState,
        config: PollingConfig,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.job_type = job_type
        self.handler = handler
        self.client = client
        self.connection = connection
        self.ledger = ledger
        self.state = state
        self.config = config
        self.metrics = metrics or get_metrics()
        self.last_polled_at: Optional[datetime] = None

    # =========================================================================
    # Tick
    # =========================================================================

    async def tick(self) -> int:
        """Run one poll cycle.

        Returns:
            Number of jobs processed
        """
        if not self.state.running:
            return 0

        if not await self.connection.is_connected():
            logger.debug(f"Zeebe not connected, skipping poll for job type: {self.job_type}")
            self.metrics.record_poll_skipped(self.job_type)
            return 0

        request_timeout_ms = int(self.config.request_timeout_seconds * 1000) or None
        try:
            jobs = await self.client.activate_jobs(
                self.job_type,
                max_jobs=self.config.max_jobs_to_activate,
                timeout_ms=int(self.config.job_timeout_seconds * 1000),
                request_timeout_ms=request_timeout_ms,
            )
        except Exception as e:
            error = f"Polling error for job type {self.job_type}: {e}"
            logger.error(error)
            self.state.set_error(error)
            self.connection.record_failure(str(e))
            self.metrics.record_poll_error(self.job_type)
            return 0

        self.connection.record_success()
        self.metrics.record_poll(self.job_type, activated=len(jobs))
        self.last_polled_at = datetime.utcnow()

        for job in jobs:
            await self._process(job)

        return len(jobs)

    async def _process(self, job: ActivatedJob) -> None:
        """Handle and acknowledge one job; never raises."""
        start_time = time.monotonic()

        with with_correlation(
            job_type=self.job_type,
            job_key=job.key,
            worker=job.worker,
            process_instance_key=job.process_instance_key,
            element_id=job.element_id,
        ):
            logger.debug(f"Processing job {job.key} of type {self.job_type}")

            try:
                result = await asyncio.to_thread(self.handler, job)
            except Exception as e:
                await self._fail(job, str(e) or type(e).__name__, start_time)
                return

            await self._complete(job, result or {}, start_time)

    def _elapsed_ms(self, start_time: float) -> int:
        return int((time.monotonic() - start_time) * 1000)

    async def _complete(self, job: ActivatedJob, result: Dict[str, Any], start_time: float) -> None:
        try:
            await self.client.complete_job(job.key, result)
        except Exception as e:
            logger.error(f"Could not complete job {job.key} of type {self.job_type}: {e}")
            self.metrics.record_ack_error(self.job_type)
            await self._fail(job, f"Completion acknowledgement failed: {e}", start_time)
            return

        elapsed_ms = self._elapsed_ms(start_time)
        self.metrics.record_job_completed(self.job_type, elapsed_ms)
        await self._record(self.ledger.record_success, job, result, elapsed_ms)
        logger.info(f"Completed job {job.key} of type {self.job_type} in {elapsed_ms}ms")

    async def _fail(self, job: ActivatedJob, error_message: str, start_time: float) -> None:
        retries = max(job.retries - 1, 0)
        try:
            await self.client.fail_job(job.key, retries, error_message)
        except Exception as e:
            logger.error(f"Could not report failure of job {job.key}: {e}")
            self.metrics.record_ack_error(self.job_type)
            error_message = f"{error_message} (failure acknowledgement failed: {e})"

        elapsed_ms = self._elapsed_ms(start_time)
        self.metrics.record_job_failed(self.job_type, elapsed_ms)
        await self._record(self.ledger.record_failure, job, error_message, elapsed_ms)
        logger.error(
            f"Failed job {job.key} of type {self.job_type} after {elapsed_ms}ms "
            f"(retries left: {retries}): {error_message}"
        )

    async def _record(self, append: Callable, job: ActivatedJob, outcome: Any, elapsed_ms: int) -> None:
        try:
            await asyncio.to_thread(append, self.job_type, job.key, job.variables, outcome, elapsed_ms)
        except Exception as e:
            logger.exception(f"Could not record history for job {job.key}: {e}")

    # =========================================================================
    # Loop
    # =========================================================================

    async def run(self, stop_event: asyncio.Event) -> None:
        """Tick until stopped, waiting poll_interval between ticks."""
        logger.info(f"Polling job type {self.job_type} every {self.config.poll_interval_seconds}s")
        while self.state.running and not stop_event.is_set():
            await self.tick()
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.config.poll_interval_seconds)
            except asyncio.TimeoutError:
                pass
        logger.info(f"Stopped polling job type {self.job_type}")

    def status(self) -> Dict[str, Any]:
        return {
            "job_type": self.job_type,
            "last_polled_at": self.last_polled_at.isoformat() if self.last_polled_at else None,
        }


class JobPollingService:
    """Owns the pollers for every registered job type.

    Usage:
        service = JobPollingService(client, connection, ledger)
        service.register("search-employee", SearchEmployeeHandler(db_path))
        await service.run()        # until stop() is called
    """

    def __init__(
        self,
        client: WorkDistributionClient,
        connection: ConnectionMonitor,
        ledger: JobHistoryLedger,
        config: Optional[PollingConfig] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.client = client
        self.connection = connection
        self.ledger = ledger
        self.config = config or PollingConfig()
        self.metrics = metrics or get_metrics()
        self.state = PollingState()
        self.pollers: Dict[str, JobTypePoller] = {}
        self._stop_event: Optional[asyncio.Event] = None

    def register(self, job_type: str, handler: JobHandler) -> JobTypePoller:
        """Bind a handler to a job type."""
        if job_type in self.pollers:
            raise ValueError(f"A handler is already registered for job type '{job_type}'")
        poller = JobTypePoller(
            job_type,
            handler,
            self.client,
            self.connection,
            self.ledger,
            self.state,
            self.config,
            self.metrics,
        )
        self.pollers[job_type] = poller
        return poller

    @property
    def job_types(self) -> List[str]:
        return list(self.pollers)

    def start(self) -> None:
        self.state.start()
        logger.info(f"Starting Zeebe job polling service for: {', '.join(self.job_types)}")

    def stop(self) -> None:
        """Stop after the current ticks finish."""
        self.state.stop()
        if self._stop_event is not None:
            self._stop_event.set()
        logger.info("Stopping Zeebe job polling service")

    @property
    def is_running(self) -> bool:
        return self.state.running

    async def tick(self) -> Dict[str, int]:
        """Run one poll cycle for every job type.

        Returns:
            Jobs processed per job type
        """
        counts = await asyncio.gather(*(poller.tick() for poller in self.pollers.values()))
        return dict(zip(self.pollers, counts))

    async def run(self) -> None:
        """Poll every job type concurrently until stop() is called."""
        if not self.pollers:
            raise ValueError("No job handlers registered")

        self._stop_event = asyncio.Event()
        self.start()
        try:
            await asyncio.gather(*(
                poller.run(self._stop_event) for poller in self.pollers.values()
            ))
        finally:
            self.state.stop()
            self._stop_event = None

    def status(self) -> Dict[str, Any]:
        """Worker status for the API."""
        data = self.state.snapshot()
        data["worker_name"] = getattr(self.client, "worker_name", None)
        data["job_types"] = [poller.status() for poller in self.pollers.values()]
        data["max_jobs_to_activate"] = self.config.max_jobs_to_activate
        data["poll_interval_seconds"] = self.config.poll_interval_seconds
        return data
