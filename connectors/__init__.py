"""Connectors - Integration with the external work-distribution system.

This package contains the protocol the dispatch loop depends on and the
Camunda 8 / Zeebe REST implementation of it:
- OAuth2 client-credentials authentication
- Job activation, completion and failure
- Connection state tracking

To add another engine:
1. Create a new folder (e.g., conductor/)
2. Implement WorkDistributionClient and ConnectionMonitor
"""

from connectors.work_distribution import ConnectionMonitor, WorkDistributionClient

__all__ = [
    "ConnectionMonitor",
    "WorkDistributionClient",
]
