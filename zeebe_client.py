"""Zeebe client factory.

Creates the Camunda 8 REST client and the polling settings from environment
variables. A .env file at the repository root is loaded if present.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Load .env file if it exists
from dotenv import load_dotenv
env_path = Path(__file__).resolve().parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

from connectors.zeebe import (
    ZeebeAuthConfig,
    ZeebeAuthProvider,
    ZeebeClient,
    ZeebeConfig,
)


DEFAULT_OAUTH_URL = "https://login.cloud.camunda.io/oauth/token"
DEFAULT_TOKEN_AUDIENCE = "zeebe.camunda.io"
DEFAULT_WORKER_NAME = "records-job-worker"


@dataclass
class PollingConfig:
    """Job polling settings shared by every job type.

    Attributes:
        max_jobs_to_activate: Batch size per activation call
        job_timeout_seconds: How long activated jobs stay locked to this worker
        poll_interval_seconds: Fixed delay between ticks of one job type
        request_timeout_seconds: Gateway long-poll time (0 for none)
    """
    max_jobs_to_activate: int = 5
    job_timeout_seconds: float = 60.0
    poll_interval_seconds: float = 1.0
    request_timeout_seconds: float = 0.0


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{raw}'")


def get_polling_config() -> PollingConfig:
    """Read polling settings.

    Reads:
    - JOB_MAX_ACTIVATE (default 5)
    - JOB_TIMEOUT_SECONDS (default 60)
    - JOB_POLL_INTERVAL_SECONDS (default 1)
    - JOB_REQUEST_TIMEOUT_SECONDS (default 0, gateway default)

    Raises:
        ValueError: If a value is not a positive number
    """
    config = PollingConfig(
        max_jobs_to_activate=_int_env("JOB_MAX_ACTIVATE", 5),
        job_timeout_seconds=_float_env("JOB_TIMEOUT_SECONDS", 60.0),
        poll_interval_seconds=_float_env("JOB_POLL_INTERVAL_SECONDS", 1.0),
        request_timeout_seconds=_float_env("JOB_REQUEST_TIMEOUT_SECONDS", 0.0),
    )
    if config.max_jobs_to_activate <= 0:
        raise ValueError("JOB_MAX_ACTIVATE must be greater than 0")
    if config.job_timeout_seconds <= 0:
        raise ValueError("JOB_TIMEOUT_SECONDS must be greater than 0")
    if config.poll_interval_seconds < 0:
        raise ValueError("JOB_POLL_INTERVAL_SECONDS must not be negative")
    return config


def get_records_db_path() -> Optional[Path]:
    """RECORDS_DB_PATH as a Path, or None to use the default location."""
    raw = os.getenv("RECORDS_DB_PATH")
    return Path(raw) if raw else None


def get_zeebe_config() -> ZeebeConfig:
    """Build the REST client configuration.

    Reads:
    - ZEEBE_REST_ADDRESS: Gateway base URL (self-managed), or
    - CAMUNDA_CLUSTER_ID + CAMUNDA_CLUSTER_REGION: Camunda SaaS cluster
    - ZEEBE_WORKER_NAME: Worker name reported on activation

    Raises:
        ValueError: If no gateway address can be determined
    """
    worker_name = os.getenv("ZEEBE_WORKER_NAME", DEFAULT_WORKER_NAME)
    rest_address = os.getenv("ZEEBE_REST_ADDRESS")
    if rest_address:
        return ZeebeConfig(rest_address=rest_address, worker_name=worker_name)

    cluster_id = os.getenv("CAMUNDA_CLUSTER_ID")
    region = os.getenv("CAMUNDA_CLUSTER_REGION")
    if cluster_id and region:
        return ZeebeConfig.for_saas(cluster_id, region, worker_name=worker_name)

    raise ValueError(
        "Zeebe gateway address not configured. "
        "Set ZEEBE_REST_ADDRESS (e.g., 'http://localhost:8080') or "
        "CAMUNDA_CLUSTER_ID and CAMUNDA_CLUSTER_REGION for Camunda SaaS"
    )


def get_auth_provider() -> Optional[ZeebeAuthProvider]:
    """Build the OAuth token provider.

    Reads CAMUNDA_CLIENT_ID, CAMUNDA_CLIENT_SECRET, CAMUNDA_OAUTH_URL and
    ZEEBE_TOKEN_AUDIENCE. Returns None when no client id is set
    (self-managed gateway without authentication).

    Raises:
        ValueError: If a client id is set without a secret
    """
    client_id = os.getenv("CAMUNDA_CLIENT_ID")
    client_secret = os.getenv("CAMUNDA_CLIENT_SECRET")

    if not client_id:
        return None

    if not client_secret:
        raise ValueError(
            "CAMUNDA_CLIENT_SECRET environment variable not set. "
            "Set it to the secret of the API client CAMUNDA_CLIENT_ID belongs to"
        )

    return ZeebeAuthProvider(ZeebeAuthConfig(
        client_id=client_id,
        client_secret=client_secret,
        oauth_url=os.getenv("CAMUNDA_OAUTH_URL", DEFAULT_OAUTH_URL),
        audience=os.getenv("ZEEBE_TOKEN_AUDIENCE", DEFAULT_TOKEN_AUDIENCE),
    ))


async def get_zeebe_client() -> ZeebeClient:
    """Create and connect a Zeebe REST client.

    Returns:
        Connected client; call disconnect() when done

    Raises:
        ValueError: If required environment variables are missing
    """
    config = get_zeebe_config()
    auth_provider = get_auth_provider()

    if auth_provider is None and not os.getenv("ZEEBE_REST_ADDRESS"):
        raise ValueError(
            "CAMUNDA_CLIENT_ID environment variable not set. "
            "Camunda SaaS clusters require API client credentials"
        )

    client = ZeebeClient(config, auth_provider=auth_provider)
    await client.connect()
    return client
