"""Connection health tracking with throttled logging.

``ConnectionHealth`` logs the first failure as a warning,
stays quiet while the outage continues (apart from a debug reminder once per
quiet window) and logs recovery once at INFO. It never delays or skips runs.
"""

import threading
import time
from typing import Callable, Optional

from gamewatch.logging import get_logger

logger = get_logger(__name__, component="health")

DEFAULT_QUIET_WINDOW_SECONDS = 300


class ConnectionHealth:
    """Connected flag and consecutive-failure count for one collaborator."""

    def __init__(
        self,
        name: str,
        quiet_window_seconds: float = DEFAULT_QUIET_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.quiet_window_seconds = quiet_window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self.connected = True
        self.consecutive_failures = 0
        self._offline_since: Optional[float] = None
        self._last_logged_at: Optional[float] = None

    def record_success(self) -> bool:
        """Mark the collaborator reachable. Returns True if this ended an outage."""
        with self._lock:
            restored = not self.connected
            failures = self.consecutive_failures
            offline_for = (
                self._clock() - self._offline_since if self._offline_since is not None else 0.0
            )
            self.connected = True
            self.consecutive_failures = 0
            self._offline_since = None
            self._last_logged_at = None

        if restored:
            logger.info(
                f"{self.name} connection restored",
                extra={
                    "event": "health.connection.restored",
                    "collaborator": self.name,
                    "failed_attempts": failures,
                    "offline_seconds": round(offline_for, 1),
                },
            )
        return restored

    def record_failure(self, error: BaseException) -> bool:
        """Count a failed attempt. Returns True if a log line was emitted for it."""
        now = self._clock()
        with self._lock:
            self.consecutive_failures += 1
            failures = self.consecutive_failures

            if self.connected:
                self.connected = False
                self._offline_since = now
                self._last_logged_at = now
                first = True
            elif now - self._last_logged_at >= self.quiet_window_seconds:
                self._last_logged_at = now
                first = False
            else:
                return False

            offline_for = now - self._offline_since

        if first:
            logger.warning(
                f"{self.name} unreachable: {error}",
                extra={
                    "event": "health.connection.lost",
                    "collaborator": self.name,
                    "error_type": type(error).__name__,
                },
            )
        else:
            logger.debug(
                f"{self.name} still unreachable after {failures} attempts",
                extra={
                    "event": "health.connection.still_down",
                    "collaborator": self.name,
                    "failed_attempts": failures,
                    "offline_seconds": round(offline_for, 1),
                },
            )
        return True
