"""Engine connection tracking.

ConnectionState is the single shared record of whether the engine is
reachable; ZeebeConnectionService refreshes it with a lightweight
topology call when the cached value is stale.
"""

import logging
import threading
import time
from datetime import datetime
from typing import Any, Dict, Optional

from connectors.zeebe.zeebe_client import ZeebeApiError, ZeebeClient


logger = logging.getLogger(__name__)


class ConnectionState:
    """Lock-guarded connection flag, last error and last check time."""

    def __init__(self):
        self._lock = threading.Lock()
        self._connected = False
        self._last_error: Optional[str] = None
        self._last_checked: Optional[datetime] = None
        self._checked_monotonic: Optional[float] = None

    def mark_connected(self) -> None:
        with self._lock:
            self._connected = True
            self._last_error = None
            self._last_checked = datetime.utcnow()
            self._checked_monotonic = time.monotonic()

    def mark_disconnected(self, error: str) -> None:
        with self._lock:
            self._connected = False
            self._last_error = error
            self._last_checked = datetime.utcnow()
            self._checked_monotonic = time.monotonic()

    @property
    def connected(self) -> bool:
        with self._lock:
            return self._connected

    @property
    def last_error(self) -> Optional[str]:
        with self._lock:
            return self._last_error

    def age_seconds(self) -> Optional[float]:
        """Seconds since the last check, None if never checked."""
        with self._lock:
            if self._checked_monotonic is None:
                return None
            return time.monotonic() - self._checked_monotonic

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "connected": self._connected,
                "last_error": self._last_error,
                "last_checked": self._last_checked.isoformat() if self._last_checked else None,
            }


class ZeebeConnectionService:
    """Answers "is the engine reachable?" for the dispatch loop.

    A topology request is made when the cached state is older than
    ``check_interval`` seconds; otherwise the cached flag is returned.
    Activation outcomes reported by the dispatch loop also refresh it.
    """

    def __init__(self, client: ZeebeClient, check_interval: float = 10.0):
        self.client = client
        self.check_interval = check_interval
        self.state = ConnectionState()

    async def check(self) -> bool:
        """Run a live connection check."""
        try:
            await self.client.topology()
        except ZeebeApiError as e:
            self.state.mark_disconnected(str(e))
            logger.warning(f"Zeebe connection check: FAILED - {e}")
            return False

        self.state.mark_connected()
        logger.debug("Zeebe connection check: SUCCESS")
        return True

    async def is_connected(self) -> bool:
        """Cached connection state, refreshed when stale."""
        age = self.state.age_seconds()
        if age is None or age >= self.check_interval:
            return await self.check()
        return self.state.connected

    def record_success(self) -> None:
        self.state.mark_connected()

    def record_failure(self, error: str) -> None:
        self.state.mark_disconnected(error)

    @property
    def last_error(self) -> Optional[str]:
        return self.state.last_error

    def status(self) -> Dict[str, Any]:
        """Connection status for the API."""
        data = self.state.snapshot()
        data["rest_address"] = self.client.config.rest_address
        data["worker_name"] = self.client.worker_name
        return data
