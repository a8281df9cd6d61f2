"""Work Distribution Interface.

The dispatch loop depends only on these protocols. The Zeebe REST client
and connection service implement them; tests substitute in-memory fakes.
"""

from typing import Any, Dict, List, Optional, Protocol

from connectors.zeebe.zeebe_models import ActivatedJob


class WorkDistributionClient(Protocol):
    """Hands out typed jobs and accepts completion or failure."""

    worker_name: str

    async def activate_jobs(
        self,
        job_type: str,
        max_jobs: int = 5,
        timeout_ms: int = 60000,
        request_timeout_ms: Optional[int] = None,
    ) -> List[ActivatedJob]:
        """Activate up to max_jobs jobs of the given type."""
        ...

    async def complete_job(self, job_key: str, variables: Optional[Dict[str, Any]] = None) -> None:
        """Acknowledge successful completion with result variables."""
        ...

    async def fail_job(self, job_key: str, retries: int, error_message: str) -> None:
        """Acknowledge failure with the remaining retry budget."""
        ...


class ConnectionMonitor(Protocol):
    """Reports whether the work-distribution system is reachable."""

    async def is_connected(self) -> bool:
        ...

    def record_success(self) -> None:
        ...

    def record_failure(self, error: str) -> None:
        ...

    @property
    def last_error(self) -> Optional[str]:
        ...
