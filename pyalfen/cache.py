import logging
import threading
import time
from concurrent.futures import Future
from typing import Callable, Optional

from pyalfen.properties import PropertySnapshot

log = logging.getLogger(__name__)


class PropertyCache:
    """
    Single-flight TTL cache around a snapshot refresh function

    A snapshot younger than interval seconds is served from memory. Otherwise
    one caller runs refresh() while every concurrent caller waits on the same
    future and gets the same snapshot or exception. Failures are not cached.
    """

    def __init__(self, refresh: Callable[[], PropertySnapshot], interval: float = 5,
                 clock: Callable[[], float] = time.perf_counter):
        self.refresh = refresh
        self.interval = interval
        self.clock = clock
        self._lock = threading.Lock()
        self._snapshot: Optional[PropertySnapshot] = None
        self._fetched_at: Optional[float] = None
        self._inflight: Optional[Future] = None

    def _fresh(self) -> bool:
        return self._snapshot is not None and self.clock() - self._fetched_at < self.interval

    def snapshot_age(self) -> Optional[float]:
        with self._lock:
            if self._fetched_at is None:
                return None
            return self.clock() - self._fetched_at

    def get_snapshot(self) -> PropertySnapshot:
        with self._lock:
            if self._fresh():
                log.debug(' -- cache: Returning cached properties')
                return self._snapshot
            future = self._inflight
            leader = future is None
            if leader:
                future = self._inflight = Future()

        if not leader:
            log.debug(' -- cache: Waiting for refresh in progress')
            return future.result()

        log.debug(' -- cache: Refreshing properties')
        try:
            snapshot = self.refresh()
        except BaseException as exc:
            with self._lock:
                self._inflight = None
            future.set_exception(exc)
            raise
        with self._lock:
            self._snapshot = snapshot
            self._fetched_at = self.clock()
            self._inflight = None
        future.set_result(snapshot)
        return snapshot
