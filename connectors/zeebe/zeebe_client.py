"""Zeebe REST Client.

Low-level HTTP client for the Camunda 8 REST API (``/v2``). Handles bearer
authentication and status-code mapping. Requests are sent once; the only
repeat is a single token refresh after a 401/403. Redelivery of failed jobs
is left to the engine's retry count.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import aiohttp

from connectors.zeebe.zeebe_auth import ZeebeAuthProvider
from connectors.zeebe.zeebe_models import (
    ActivatedJob,
    JobActivationRequest,
    JobActivationResponse,
)


logger = logging.getLogger(__name__)


class ZeebeApiError(Exception):
    """Base exception for Zeebe API errors."""
    def __init__(self, message: str, status_code: int = 0, response_body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class ZeebeAuthenticationError(ZeebeApiError):
    """Authentication failed (401/403)."""
    pass


class ZeebeNotFoundError(ZeebeApiError):
    """Job or resource not found (404)."""
    pass


class ZeebeValidationError(ZeebeApiError):
    """Request rejected by the gateway (400)."""
    pass


@dataclass
class ZeebeConfig:
    """Configuration for the Zeebe REST client.

    Attributes:
        rest_address: Base URL of the REST gateway (without /v2)
        worker_name: Name reported when activating jobs
        timeout_seconds: Per-request HTTP timeout
    """
    rest_address: str
    worker_name: str = "records-job-worker"
    timeout_seconds: int = 30

    @classmethod
    def for_saas(cls, cluster_id: str, region: str, **kwargs) -> "ZeebeConfig":
        """Build the config for a Camunda SaaS cluster."""
        return cls(rest_address=f"https://{region}.zeebe.camunda.io/{cluster_id}", **kwargs)

    def get_url(self, endpoint: str) -> str:
        return f"{self.rest_address.rstrip('/')}/v2/{endpoint.lstrip('/')}"


class ZeebeClient:
    """HTTP client for the Zeebe REST API.

    Implements the work-distribution operations used by the dispatch loop:
    activate, complete and fail jobs, plus a topology call for connection
    checks.

    Usage:
        client = ZeebeClient(config, auth_provider)
        await client.connect()
        jobs = await client.activate_jobs("search-employee", max_jobs=5, timeout_ms=60000)
        await client.complete_job(jobs[0].key, {"searchStatus": "SUCCESS"})
        await client.disconnect()
    """

    def __init__(
        self,
        config: ZeebeConfig,
        auth_provider: Optional[ZeebeAuthProvider] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """Initialize API client.

        Args:
            config: Client configuration
            auth_provider: Token provider; None for gateways without auth
            session: Existing HTTP session to use instead of creating one
        """
        self.config = config
        self.auth_provider = auth_provider
        self._session = session
        self._owns_session = session is None

    @property
    def worker_name(self) -> str:
        return self.config.worker_name

    async def connect(self) -> None:
        """Create the HTTP session if none was supplied."""
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True

    async def disconnect(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def _get_headers(self, force_refresh: bool = False) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.auth_provider is not None:
            if not await self.auth_provider.ensure_valid_token(self._session, force=force_refresh):
                raise ZeebeAuthenticationError(
                    f"Failed to authenticate: {self.auth_provider.last_error}"
                )
            headers["Authorization"] = self.auth_provider.get_authorization_header()
        return headers

    async def _request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict[str, Any]] = None,
        timeout_seconds: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Make an authenticated API request.

        The request is sent once. A 401/403 triggers a single token refresh
        and resend; every other failure is raised to the caller.

        Args:
            method: HTTP method
            endpoint: Path below /v2
            data: JSON request body
            timeout_seconds: Override of the configured HTTP timeout

        Returns:
            Response JSON ({} for empty responses)

        Raises:
            ZeebeAuthenticationError: Authentication failed
            ZeebeNotFoundError: Job or resource not found
            ZeebeValidationError: Request rejected
            ZeebeApiError: Other API or transport errors
        """
        if self._session is None:
            raise ZeebeApiError("Not connected. Call connect() first.")

        url = self.config.get_url(endpoint)
        timeout = aiohttp.ClientTimeout(total=timeout_seconds or self.config.timeout_seconds)
        refreshed = False

        while True:
            headers = await self._get_headers(force_refresh=refreshed)
            try:
                async with self._session.request(
                    method,
                    url,
                    headers=headers,
                    json=data,
                    timeout=timeout,
                ) as response:
                    status = response.status
                    response_text = await response.text()
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise ZeebeApiError(f"Request failed: {type(e).__name__}: {e}") from e

            if status < 400:
                return json.loads(response_text) if response_text else {}

            if status in (401, 403):
                # Refresh the token once
                if self.auth_provider is not None and not refreshed:
                    logger.warning(f"Got {status}, attempting token refresh...")
                    refreshed = True
                    continue
                raise ZeebeAuthenticationError(
                    f"Authentication failed: {response_text}",
                    status,
                    response_text,
                )

            if status == 404:
                raise ZeebeNotFoundError(f"Resource not found: {url}", status, response_text)

            if status == 400:
                raise ZeebeValidationError(f"Validation error: {response_text}", status, response_text)

            raise ZeebeApiError(f"API error {status}: {response_text}", status, response_text)

    # =========================================================================
    # Job operations
    # =========================================================================

    async def activate_jobs(
        self,
        job_type: str,
        max_jobs: int = 5,
        timeout_ms: int = 60000,
        request_timeout_ms: Optional[int] = None,
    ) -> List[ActivatedJob]:
        """Activate up to max_jobs jobs of a type.

        Args:
            job_type: Job type tag
            max_jobs: Maximum number of jobs to activate
            timeout_ms: How long the jobs stay locked to this worker
            request_timeout_ms: Long-polling time on the gateway (None for its default)

        Returns:
            Activated jobs (possibly empty)
        """
        request = JobActivationRequest(
            type=job_type,
            worker=self.config.worker_name,
            timeout=timeout_ms,
            max_jobs_to_activate=max_jobs,
            request_timeout=request_timeout_ms,
        )

        http_timeout = None
        if request_timeout_ms:
            # Leave room for the gateway's long poll
            http_timeout = request_timeout_ms / 1000.0 + self.config.timeout_seconds

        response = await self._request("POST", "jobs/activation", request.to_payload(), http_timeout)
        jobs = JobActivationResponse.model_validate(response).jobs

        if jobs:
            logger.debug(f"Activated {len(jobs)} job(s) of type {job_type}")
        return jobs

    async def complete_job(self, job_key: str, variables: Optional[Dict[str, Any]] = None) -> None:
        """Complete a job, merging variables into the process instance."""
        await self._request(
            "POST",
            f"jobs/{job_key}/completion",
            {"variables": json.loads(json.dumps(variables or {}, default=str))},
        )

    async def fail_job(self, job_key: str, retries: int, error_message: str) -> None:
        """Report a job failure with the remaining retry budget."""
        await self._request(
            "POST",
            f"jobs/{job_key}/failure",
            {"retries": max(retries, 0), "errorMessage": error_message},
        )

    async def topology(self) -> Dict[str, Any]:
        """Get the cluster topology (used as a connection check)."""
        return await self._request("GET", "topology")
