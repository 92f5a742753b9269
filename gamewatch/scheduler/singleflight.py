"""Keyed single-flight calls: concurrent callers with the same key share one execution."""

import threading
from concurrent.futures import Future
from typing import Any, Callable, Dict, Hashable


class SingleFlightGroup:
    """Collapses concurrent calls per key into one.

    The first caller for a key runs ``fn`` itself; callers arriving
    while it runs block on the same outcome (result or exception). Once the
    call finishes the key is free again.

    Example:
        >>> group = SingleFlightGroup()
        >>> group.do(42, lambda: check_updates_for(42))
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._inflight: Dict[Hashable, Future] = {}

    def do(self, key: Hashable, fn: Callable[[], Any]) -> Any:
        with self._lock:
            future = self._inflight.get(key)
            leader = future is None
            if leader:
                future = Future()
                future.set_running_or_notify_cancel()
                self._inflight[key] = future

        if not leader:
            return future.result()

        try:
            result = fn()
        except Exception as e:
            self._release(key)
            future.set_exception(e)
            raise
        self._release(key)
        future.set_result(result)
        return result

    def _release(self, key: Hashable) -> None:
        with self._lock:
            self._inflight.pop(key, None)

    def in_flight(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._inflight
