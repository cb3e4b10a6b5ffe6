"""Monochrome silhouette synthesis.

Every synthesis function returns a new ``RGBA`` image whose RGB channels are
pure white. Only the alpha channel carries the silhouette, so the result can
be tinted freely by whatever renders it.
"""

from __future__ import annotations

import logging
import math

from PIL import Image

from monoicon import config

from .image_operations import is_empty, iter_rgba, luminance, to_rgba, white_mask, white_mask_from_alpha
from .sampling import estimate_background_color

logger = logging.getLogger(__name__)


def alpha_mask_from_transparency(image: Image.Image) -> Image.Image:
    """Keep the alpha channel of ``image`` and paint every pixel white."""
    return white_mask_from_alpha(to_rgba(image).getchannel("A"))


def background_subtraction_silhouette(image: Image.Image) -> Image.Image:
    """Separate a foreground from a roughly uniform opaque background.

    Alpha is the pixel's RGB distance to the estimated background colour,
    normalised by the largest distance in the image and lifted with a
    sub-linear gamma so faint edges stay visible. Images too flat to hold a
    separable foreground are handed to :func:`luminance_to_alpha_fallback`.
    """
    if is_empty(image):
        return white_mask(image.size, [])

    bg_r, bg_g, bg_b = estimate_background_color(image)
    distances = [
        math.sqrt((r - bg_r) ** 2 + (g - bg_g) ** 2 + (b - bg_b) ** 2)
        for r, g, b, _ in iter_rgba(image)
    ]
    max_dist = max(distances)
    if max_dist < config.MIN_BACKGROUND_DISTANCE:
        logger.debug("Background distance %.1f too small, using luminance", max_dist)
        return luminance_to_alpha_fallback(image)

    alphas = [
        _clamp(int(min(distance / max_dist, 1.0) ** config.SILHOUETTE_GAMMA * 255))
        for distance in distances
    ]
    return white_mask(image.size, alphas)


def luminance_to_alpha_fallback(image: Image.Image) -> Image.Image:
    """Derive alpha from brightness, inverting light-background icons."""
    lumas = [luminance(r, g, b) for r, g, b, _ in iter_rgba(image)]
    average = sum(lumas) // len(lumas) if lumas else config.LUMINANCE_MIDPOINT
    if average > config.LUMINANCE_MIDPOINT:
        lumas = [255 - luma for luma in lumas]
    alphas = [_clamp(luma * config.LUMINANCE_ALPHA_GAIN) for luma in lumas]
    return white_mask(image.size, alphas)


def is_bad_silhouette(image: Image.Image) -> bool:
    """Quality gate: reject silhouettes that are a solid block or nearly empty."""
    rgba = to_rgba(image)
    width, height = rgba.size
    step = max(1, min(width, height) // config.QUALITY_GRID_DIVISOR)
    pixels = rgba.load()

    opaque = 0
    transparent = 0
    total = 0
    for y in range(0, height, step):
        for x in range(0, width, step):
            alpha = pixels[x, y][3]
            total += 1
            if alpha > config.QUALITY_OPAQUE_ALPHA:
                opaque += 1
            if alpha < config.QUALITY_TRANSPARENT_ALPHA:
                transparent += 1

    if total == 0:
        return True
    return (
        opaque / total > config.QUALITY_MAX_OPAQUE_FRACTION
        or transparent / total > config.QUALITY_MAX_TRANSPARENT_FRACTION
    )


def _clamp(value: int) -> int:
    return max(0, min(255, value))


__all__ = [
    "alpha_mask_from_transparency",
    "background_subtraction_silhouette",
    "luminance_to_alpha_fallback",
    "is_bad_silhouette",
]
