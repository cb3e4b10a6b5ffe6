"""Pixel-level helpers for monoicon."""

from . import image_operations, sampling, silhouette

__all__ = ["image_operations", "sampling", "silhouette"]
