"""Fit cached monochrome icons to the size a renderer asks for."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from PIL import Image

from pixelops.image_operations import resize_image

from .cache import BoundedCache

logger = logging.getLogger(__name__)


def fit_key(cache_key: str, target_w: int, target_h: int) -> str:
    return f"fit_{cache_key}_{target_w}_{target_h}"


class FitEngine:
    """Resamples images to a target size, memoising keyed results."""

    def __init__(self, cache: BoundedCache):
        self._cache = cache
        self._count_lock = threading.Lock()
        self.resize_count = 0

    def fit(
        self,
        image: Image.Image,
        target_w: int,
        target_h: int,
        cache_key: Optional[str] = None,
    ) -> Image.Image:
        """Return ``image`` scaled to ``target_w`` x ``target_h``.

        Non-positive targets and images already at the target size come back
        untouched. With ``cache_key`` the scaled copy is stored in the fitted
        cache and later calls are served from there.
        """
        if target_w <= 0 or target_h <= 0:
            return image
        key = fit_key(cache_key, target_w, target_h) if cache_key else None
        if key is not None:
            cached = self._cache.get(key)
            if cached is not None:
                return cached
        if image.size == (target_w, target_h):
            return image

        result = resize_image(image, (target_w, target_h))
        with self._count_lock:
            self.resize_count += 1
        logger.debug("Resized %dx%d icon to %dx%d", image.width, image.height, target_w, target_h)
        if key is not None:
            self._cache.put(key, result)
            return result.copy()
        return result


__all__ = ["FitEngine", "fit_key"]
