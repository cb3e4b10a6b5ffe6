"""IconService: the public entry point of the engine.

The service owns a :class:`~monoicon.cache.TieredCache` and is passed to
every call site that needs icons, instead of each caller reaching for
process-wide tables. Platform work (resolving resources, loading pixels)
is delegated to an injected :class:`IconResolver`.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Optional, Protocol

from PIL import Image

from pixelops.image_operations import to_rgba
from pixelops.sampling import detect_color_saturation
from pixelops.silhouette import is_bad_silhouette

from .cache import CacheStats, TieredCache
from .engine import IconSource, ensure_monochrome
from .fitting import FitEngine
from .identity import (
    IconIdentity,
    OpaqueIdentity,
    ResourceRef,
    raw_resource_key,
    safe_identity_key,
)

logger = logging.getLogger(__name__)


class ResourceUnavailableError(RuntimeError):
    """Raised by resolvers when an icon's pixels cannot be supplied."""


class IconResolver(Protocol):
    """Supplies rasters for an icon identity. Either method may raise."""

    def load_themed(self, identity: IconIdentity) -> Optional[Image.Image]:
        ...

    def load_raw(self, identity: ResourceRef) -> Optional[Image.Image]:
        ...


@dataclass(frozen=True)
class ClassificationResult:
    is_colored: bool


def _package_of(identity: IconIdentity) -> str:
    if isinstance(identity, ResourceRef):
        return identity.owner_namespace
    return identity.package_key


def fallback_key(package: str) -> str:
    """Key for icons that arrive with no identity at all."""
    return f"fallback_{package}"


class IconService:
    """Classifies icons and serves cached monochrome renditions."""

    def __init__(self, cache: Optional[TieredCache] = None, resolver: Optional[IconResolver] = None):
        self.cache = cache if cache is not None else TieredCache()
        self.resolver = resolver
        self._fitter = FitEngine(self.cache.fitted)
        self._count_lock = threading.Lock()
        self.compute_count = 0

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------
    def classify(self, identity: IconIdentity, image: Image.Image) -> ClassificationResult:
        """Decide whether ``image`` is a full-colour icon."""
        colored = detect_color_saturation(image)
        logger.debug("Classified %s as %s", identity, "colored" if colored else "monochrome")
        return ClassificationResult(colored)

    def synthesize_monochrome(
        self,
        identity: IconIdentity,
        themed: IconSource,
        raw: Optional[IconSource] = None,
    ) -> Image.Image:
        """Return the monochrome rendition of an icon.

        The unthemed raster is preferred when given; if its silhouette fails
        the quality gate, or producing it fails, the cached raw entry is
        dropped and the themed raster is used instead.
        """
        package = _package_of(identity)
        if raw is not None:
            raw_key = safe_identity_key(identity, package, raw=True)
            try:
                result = self.cached_monochrome(raw_key, raw)
            except Exception as exc:  # degrade to the themed path
                logger.warning("Raw monochrome failed for %s: %s", raw_key, exc)
            else:
                if not is_bad_silhouette(result):
                    return result
                logger.debug("Raw silhouette for %s rejected", raw_key)
            self.cache.monochrome.remove(raw_key)
        return self.cached_monochrome(safe_identity_key(identity, package), themed)

    def fit(
        self,
        image: Image.Image,
        target_w: int,
        target_h: int,
        cache_key: Optional[str] = None,
    ) -> Image.Image:
        return self._fitter.fit(image, target_w, target_h, cache_key)

    def cached_monochrome(self, key: str, source: IconSource) -> Image.Image:
        """Return the monochrome result under ``key``, computing it on a miss."""
        return self.cache.monochrome.get_or_compute(key, lambda: self._compute(source))

    def _compute(self, source: IconSource) -> Image.Image:
        with self._count_lock:
            self.compute_count += 1
        return ensure_monochrome(source)

    # ------------------------------------------------------------------
    # Resolver-backed lookups
    # ------------------------------------------------------------------
    def remember_icon(self, package: str, identity: IconIdentity, *, replace: bool = False) -> None:
        """Record the small icon last posted by ``package``.

        The first icon seen for a package is kept unless ``replace`` is set.
        """
        if not replace and package in self.cache.package_icon:
            return
        self.cache.package_icon.put(package, identity)

    def last_icon(self, package: str) -> Optional[IconIdentity]:
        return self.cache.package_icon.get(package)

    def load_raw(self, identity: IconIdentity) -> Optional[Image.Image]:
        """Fetch the unthemed raster of a resource icon, or ``None``."""
        if not isinstance(identity, ResourceRef) or self.resolver is None:
            return None
        key = raw_resource_key(identity)
        cached = self.cache.raw_resource.get(key)
        if cached is not None:
            return cached
        try:
            image = self.resolver.load_raw(identity)
        except ResourceUnavailableError as exc:
            logger.debug("Raw resource %s unavailable: %s", key, exc)
            return None
        except Exception as exc:  # resolver is third-party glue
            logger.warning("Loading raw resource %s failed: %s", key, exc)
            return None
        if image is None:
            return None
        image = to_rgba(image)
        self.cache.raw_resource.put(key, image)
        return image.copy()

    def load_themed(self, identity: IconIdentity) -> Optional[Image.Image]:
        if self.resolver is None:
            return None
        try:
            return self.resolver.load_themed(identity)
        except ResourceUnavailableError as exc:
            logger.debug("Themed icon for %s unavailable: %s", identity, exc)
        except Exception as exc:  # resolver is third-party glue
            logger.warning("Loading themed icon for %s failed: %s", identity, exc)
        return None

    def resolve_status_icon(
        self,
        package: str,
        identity: Optional[IconIdentity],
        themed: Image.Image,
    ) -> Image.Image:
        """Icon for a low-colour status surface.

        Resource icons stay as they are unless the theme rendered them in
        colour; bitmap icons are always converted.
        """
        base_key = safe_identity_key(identity, package)
        key = f"sb_{base_key}"
        cached = self.cache.descriptor.get(key)
        if cached is not None:
            return cached

        result = themed
        if isinstance(identity, ResourceRef):
            if detect_color_saturation(themed):
                raw = self.load_raw(identity)
                if raw is None or detect_color_saturation(raw):
                    result = self.cached_monochrome(base_key, raw if raw is not None else themed)
                else:
                    result = raw
        else:
            result = self.cached_monochrome(base_key, themed)

        self.cache.descriptor.put(key, result)
        return result.copy()

    def resolve_shade_icon(self, package: str, app_icon: Image.Image) -> Image.Image:
        """The coloured application icon shown in the expanded shade."""
        return self.cache.descriptor.get_or_compute(f"shade_{package}", lambda: to_rgba(app_icon).copy())

    def resolve_aod_icon(
        self,
        package: str,
        original: Optional[Image.Image],
        target_w: int,
        target_h: int,
    ) -> Optional[Image.Image]:
        """Monochrome icon for an always-on display, fitted to the slot size.

        Tries the unthemed raster of the package's last known icon, then its
        themed raster, then a silhouette of ``original`` itself.
        """
        identity = self.last_icon(package)
        if identity is not None:
            raw = self.load_raw(identity)
            if raw is not None:
                raw_key = safe_identity_key(identity, package, raw=True)
                raw_mono = self.cached_monochrome(raw_key, raw)
                if not is_bad_silhouette(raw_mono):
                    return self.fit(raw_mono, target_w, target_h, raw_key)
                self.cache.monochrome.remove(raw_key)

            themed = self.load_themed(identity)
            if themed is not None:
                base_key = safe_identity_key(identity, package)
                mono = self.cached_monochrome(base_key, themed)
                return self.fit(mono, target_w, target_h, base_key)

        if original is not None:
            return self.cached_monochrome(fallback_key(package), original)
        return None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def stats(self) -> Dict[str, CacheStats]:
        return self.cache.stats()

    def clear_all(self) -> None:
        self.cache.clear_all()
        logger.info("All icon caches cleared")


__all__ = [
    "ClassificationResult",
    "IconResolver",
    "IconService",
    "OpaqueIdentity",
    "ResourceRef",
    "ResourceUnavailableError",
    "fallback_key",
]
