# engine.py
"""
Decision tree that turns any icon raster into a validated monochrome result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from PIL import Image

from pixelops.image_operations import flatten_layers, force_opaque
from pixelops.sampling import detect_transparency
from pixelops.silhouette import (
    alpha_mask_from_transparency,
    background_subtraction_silhouette,
    is_bad_silhouette,
    luminance_to_alpha_fallback,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayeredIcon:
    """An adaptive icon made of separately rendered layers.

    Attributes:
        foreground: The glyph layer, usually drawn over ``background``.
        background: The fill layer.
        monochrome: A dedicated single-colour layer when the icon ships one.
    """
    foreground: Optional[Image.Image] = None
    background: Optional[Image.Image] = None
    monochrome: Optional[Image.Image] = None

    def flatten(self) -> Image.Image:
        return flatten_layers(self.background, self.foreground)


IconSource = Union[Image.Image, LayeredIcon]


def ensure_monochrome(source: IconSource) -> Image.Image:
    """Return a white-on-transparent silhouette of ``source``.

    The result always has white RGB; only alpha varies. No branch raises for
    degenerate input: an icon that defeats every strategy still yields the
    last candidate tried.
    """
    if isinstance(source, LayeredIcon):
        if source.monochrome is not None:
            logger.debug("Using dedicated monochrome layer")
            return alpha_mask_from_transparency(source.monochrome)
        if source.foreground is not None:
            return _monochrome_from_foreground(source.foreground)
        source = source.flatten()

    if detect_transparency(source):
        return _monochrome_from_transparent(source)

    silhouette = background_subtraction_silhouette(source)
    if is_bad_silhouette(silhouette):
        logger.debug("Opaque icon silhouette rejected, using luminance")
        return luminance_to_alpha_fallback(source)
    return silhouette


def _monochrome_from_foreground(foreground: Image.Image) -> Image.Image:
    if detect_transparency(foreground):
        return alpha_mask_from_transparency(foreground)
    silhouette = background_subtraction_silhouette(foreground)
    if not is_bad_silhouette(silhouette):
        return silhouette
    logger.debug("Foreground silhouette rejected, using luminance")
    return luminance_to_alpha_fallback(foreground)


def _monochrome_from_transparent(image: Image.Image) -> Image.Image:
    mask = alpha_mask_from_transparency(image)
    if not is_bad_silhouette(mask):
        return mask

    # Mask is a solid block or empty: drop alpha and separate by contrast.
    logger.debug("Alpha mask rejected, retrying on opaque copy")
    opaque = force_opaque(image)
    silhouette = background_subtraction_silhouette(opaque)
    if not is_bad_silhouette(silhouette):
        return silhouette
    luminance = luminance_to_alpha_fallback(opaque)
    if not is_bad_silhouette(luminance):
        return luminance
    logger.debug("Every strategy rejected, keeping alpha mask")
    return mask


__all__ = ["IconSource", "LayeredIcon", "ensure_monochrome"]
