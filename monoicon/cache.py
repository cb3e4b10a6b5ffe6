"""Bounded, thread-safe caches for icon rasters and identities.

Each named cache is a :class:`BoundedCache` with its own lock, so lookups on
different caches never contend. Readers always get a private copy of a
cached image; the cache keeps the canonical instance. Concurrent misses on
the same key may both compute and both insert; the last write wins.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable, Dict, Optional

from PIL import Image

from . import config

logger = logging.getLogger(__name__)

def _copy_value(value: Any) -> Any:
    """Images are copied on read; identities and other immutables are shared."""
    if isinstance(value, Image.Image):
        return value.copy()
    return value

class BoundedCache:
    """A thread-safe key/value table that never grows past ``max_size``."""

    def __init__(
        self,
        name: str,
        max_size: int,
        evict_fraction: int = config.CACHE_EVICTION_FRACTION,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.name = name
        self.max_size = max_size
        self.evict_fraction = evict_fraction
        self._cache: "OrderedDict[str, Any]" = OrderedDict()
        self._lock = RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._cache

    @property
    def size(self) -> int:
        return len(self)

    @property
    def capacity(self) -> int:
        return self.max_size

    def get(self, key: str) -> Optional[Any]:
        """Return a private copy of the value under *key*, or ``None``.

        Accessing an item moves it to the end to mark it as most recently used.
        """
        with self._lock:
            try:
                value = self._cache.pop(key)
            except KeyError:
                return None
            self._cache[key] = value
        return _copy_value(value)

    def put(self, key: str, value: Any) -> None:
        """Insert *key*, evicting a batch of old entries first when full."""
        with self._lock:
            if key in self._cache:
                self._cache.pop(key)
            elif len(self._cache) >= self.max_size:
                self._evict()
            self._cache[key] = value

    def get_or_compute(self, key: str, factory: Callable[[], Any]) -> Any:
        """Return the cached value for *key*, computing and storing it on a miss.

        ``factory`` runs outside the lock, so two threads missing the same
        key may both compute it. The result returned is always a copy.
        """
        cached = self.get(key)
        if cached is not None:
            return cached
        value = factory()
        self.put(key, value)
        return _copy_value(value)

    def remove(self, key: str) -> None:
        """Drop *key* if present."""
        with self._lock:
            self._cache.pop(key, None)

    def _evict(self) -> None:
        """Remove the least recently used quarter of the table."""
        count = max(1, self.max_size // self.evict_fraction)
        for _ in range(min(count, len(self._cache))):
            self._cache.popitem(last=False)
        logger.debug("Cache %s evicted %d entries", self.name, count)

    def _cleanup(self) -> None:
        """Remove the oldest entries until the cache is at half capacity."""
        target = max(self.max_size // 2, 1)
        while len(self._cache) > target:
            self._cache.popitem(last=False)

    def clear(self) -> None:
        """Remove all cached entries."""
        with self._lock:
            self._cache.clear()

    # Public wrapper to avoid using a private method from callers
    def cleanup(self) -> None:
        """Evict least-recently-used entries down to half capacity."""
        with self._lock:
            self._cleanup()

    def __repr__(self) -> str:  # pragma: no cover - trivial representation
        return f"BoundedCache({self.name!r}, {len(self)}/{self.max_size})"

@dataclass(frozen=True)
class CacheStats:
    """Point-in-time occupancy of one named cache."""

    size: int
    capacity: int

class TieredCache:
    """The five named caches used by the icon service."""

    RAW_RESOURCE = "raw_resource"
    MONOCHROME = "monochrome"
    FITTED = "fitted"
    DESCRIPTOR = "descriptor"
    PACKAGE_ICON = "package_icon"

    def __init__(
        self,
        raw_resource_size: int = config.MAX_RAW_ICON_CACHE,
        monochrome_size: int = config.MAX_MONOCHROME_CACHE,
        fitted_size: int = config.MAX_FIT_CACHE,
        descriptor_size: int = config.MAX_DESCRIPTOR_CACHE,
        package_icon_size: int = config.MAX_PACKAGE_ICON_CACHE,
    ) -> None:
        self.raw_resource = BoundedCache(self.RAW_RESOURCE, raw_resource_size)
        self.monochrome = BoundedCache(self.MONOCHROME, monochrome_size)
        self.fitted = BoundedCache(self.FITTED, fitted_size)
        self.descriptor = BoundedCache(self.DESCRIPTOR, descriptor_size)
        self.package_icon = BoundedCache(self.PACKAGE_ICON, package_icon_size)

    def caches(self) -> Dict[str, BoundedCache]:
        return {
            cache.name: cache
            for cache in (
                self.raw_resource,
                self.monochrome,
                self.fitted,
                self.descriptor,
                self.package_icon,
            )
        }

    def stats(self) -> Dict[str, CacheStats]:
        """Current size and capacity of every named cache."""
        return {name: CacheStats(len(cache), cache.capacity) for name, cache in self.caches().items()}

    def clear_all(self) -> None:
        for cache in self.caches().values():
            cache.clear()

    def cleanup_all(self) -> None:
        """Shrink every cache to half capacity."""
        for cache in self.caches().values():
            cache.cleanup()


__all__ = [
    "BoundedCache",
    "CacheStats",
    "TieredCache",
]
