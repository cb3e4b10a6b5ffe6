# managers/performance.py
"""
PerformanceMonitor: checks memory usage and shrinks the icon caches when
the process grows past the configured threshold.
"""
import gc
import logging
import threading
import time
from typing import Optional

import psutil

from .. import config
from ..cache import TieredCache

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """Monitors memory usage and performs cleanup actions."""
    def __init__(
        self,
        cache: TieredCache,
        threshold_bytes: int = config.MEMORY_THRESHOLD_BYTES,
        cleanup_interval: float = config.MEMORY_CLEANUP_INTERVAL_SECS,
        check_interval: float = config.MEMORY_CHECK_INTERVAL_SECS,
    ):
        self.cache = cache
        self.threshold_bytes = threshold_bytes
        self.cleanup_interval = cleanup_interval
        self.check_interval = check_interval
        self.last_cleanup: Optional[float] = None
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    def start(self) -> None:
        """Begin periodic checks on a daemon timer thread."""
        with self._lock:
            if self._timer is None:
                self._schedule()

    def stop(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _schedule(self) -> None:
        self._timer = threading.Timer(self.check_interval, self._tick)
        self._timer.daemon = True
        self._timer.start()

    def _tick(self) -> None:
        self.check_memory()
        with self._lock:
            if self._timer is not None:
                self._schedule()

    def check_memory(self) -> bool:
        """Run a cleanup if memory is high; return whether one ran."""
        try:
            mem = psutil.Process().memory_info().rss
        except psutil.Error as e:
            logger.warning("Memory check failed: %s", e)
            return False
        if mem <= self.threshold_bytes:
            return False
        now = time.monotonic()
        if self.last_cleanup is not None and now - self.last_cleanup < self.cleanup_interval:
            return False
        self._optimize()
        self.last_cleanup = now
        return True

    def _optimize(self) -> None:
        self.cache.cleanup_all()
        gc.collect()
        logger.info("PerformanceMonitor: memory optimization executed")
