"""Zeebe Connector Package.

Work-distribution client for Camunda 8 over the Zeebe REST API.
"""

from connectors.zeebe.zeebe_auth import ZeebeAuthConfig, ZeebeAuthProvider, ZeebeToken
from connectors.zeebe.zeebe_client import (
    ZeebeApiError,
    ZeebeAuthenticationError,
    ZeebeClient,
    ZeebeConfig,
    ZeebeNotFoundError,
    ZeebeValidationError,
)
from connectors.zeebe.zeebe_models import ActivatedJob
from connectors.zeebe.connection import ConnectionState, ZeebeConnectionService

__all__ = [
    # Client
    "ZeebeClient",
    "ZeebeConfig",
    # Auth
    "ZeebeAuthConfig",
    "ZeebeAuthProvider",
    "ZeebeToken",
    # Errors
    "ZeebeApiError",
    "ZeebeAuthenticationError",
    "ZeebeNotFoundError",
    "ZeebeValidationError",
    # Models
    "ActivatedJob",
    # Connection
    "ConnectionState",
    "ZeebeConnectionService",
]
