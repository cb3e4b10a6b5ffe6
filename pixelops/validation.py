"""Input validation helpers for icon rasters and file handling."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Tuple, Union
from urllib.parse import urlparse

from PIL import Image


class InvalidImageError(ValueError):
    """Raised when a raster cannot be processed (no pixels or oversized)."""


def _check_dimensions(size: Tuple[int, int], max_dimension: int) -> None:
    width, height = size
    if width <= 0 or height <= 0:
        raise InvalidImageError(f"Image has no pixels: {width}x{height}")
    if width > max_dimension or height > max_dimension:
        raise InvalidImageError(
            f"Image {width}x{height} exceeds the {max_dimension}px icon limit"
        )


def validate_raster(image: Image.Image, max_dimension: int) -> Image.Image:
    """Check that *image* has pixels and fits within *max_dimension*.

    Returns the image unchanged so the call can be chained.
    """
    _check_dimensions(image.size, max_dimension)
    return image


def _has_url_scheme(path_str: str) -> bool:
    """Return True if *path_str* looks like a URL with a scheme.

    Single-letter schemes such as ``"C"`` are treated as drive letters on
    Windows and therefore ignored.
    """
    parsed = urlparse(path_str)
    return bool(parsed.scheme and len(parsed.scheme) > 1)


def _icon_path(path: Union[str, Path], allowed_exts: Iterable[str], *, strict: bool) -> Path:
    """Reject URLs and foreign extensions, then resolve *path*."""
    path_str = str(path)
    if _has_url_scheme(path_str):
        raise ValueError("URLs are not allowed")

    try:
        resolved = Path(path_str).expanduser().resolve(strict=strict)
    except FileNotFoundError as exc:
        raise ValueError(f"File does not exist: {path_str}") from exc

    allowed = {ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in allowed_exts}
    if resolved.suffix.lower() not in allowed:
        raise ValueError(f"Unsupported file extension: {resolved.suffix}")
    return resolved


def validate_image_path(
    path: Union[str, Path],
    allowed_exts: Iterable[str],
    max_dimension: Optional[int] = None,
) -> Path:
    """Validate a user-supplied icon *path* and return it resolved.

    The file must exist, carry an allowed extension and not be a URL. With
    *max_dimension* the image header is read as well, so empty or oversized
    icons are rejected before any pixel is decoded.
    """
    p = _icon_path(path, allowed_exts, strict=True)
    if not p.is_file():
        raise ValueError(f"Not a file: {path}")

    if max_dimension is not None:
        with Image.open(p) as img:
            _check_dimensions(img.size, max_dimension)
    return p


def validate_output_path(path: Union[str, Path], allowed_exts: Iterable[str]) -> Path:
    """Validate where a converted icon will be written.

    The parent directory must already exist.
    """
    p = _icon_path(path, allowed_exts, strict=False)
    if not p.parent.exists():
        raise ValueError(f"Directory does not exist: {p.parent}")
    return p
