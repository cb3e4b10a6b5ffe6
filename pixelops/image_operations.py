"""Small raster helpers shared by the sampler and the synthesizer.

Functions here are pure: they never modify the image they are given and
always hand back a new :class:`PIL.Image.Image` when they produce pixels.
"""

from __future__ import annotations

from typing import Iterator, Sequence

from PIL import Image

from monoicon import config

Pixel = tuple[int, int, int, int]

WHITE = 255


def is_empty(image: Image.Image) -> bool:
    """Return ``True`` when ``image`` has no pixels at all."""
    width, height = image.size
    return width == 0 or height == 0


def to_rgba(image: Image.Image) -> Image.Image:
    """Return ``image`` in straight-alpha ``RGBA`` mode."""
    if image.mode == "RGBA":
        return image
    return image.convert("RGBA")


def iter_rgba(image: Image.Image) -> Iterator[Pixel]:
    """Yield every pixel of ``image`` as ``(r, g, b, a)`` in row-major order."""
    data = to_rgba(image).tobytes()
    for offset in range(0, len(data), 4):
        yield data[offset], data[offset + 1], data[offset + 2], data[offset + 3]


def luminance(r: int, g: int, b: int) -> int:
    """Rec. 601 luma, truncated to an integer."""
    return int(0.299 * r + 0.587 * g + 0.114 * b)


def white_mask(size: tuple[int, int], alphas: Sequence[int]) -> Image.Image:
    """Build a white ``RGBA`` image whose alpha channel is ``alphas``."""
    if size[0] == 0 or size[1] == 0:
        return Image.new("RGBA", size, (WHITE, WHITE, WHITE, 0))
    alpha = Image.frombytes("L", size, bytes(alphas))
    return white_mask_from_alpha(alpha)


def white_mask_from_alpha(alpha: Image.Image) -> Image.Image:
    """Combine a single ``L`` channel with pure white RGB."""
    white = Image.new("L", alpha.size, WHITE)
    return Image.merge("RGBA", (white, white, white, alpha))


def force_opaque(image: Image.Image) -> Image.Image:
    """Return a copy of ``image`` with every alpha set to 255, RGB untouched."""
    opaque = to_rgba(image).copy()
    opaque.putalpha(255)
    return opaque


def flatten_layers(background: Image.Image | None, foreground: Image.Image | None) -> Image.Image:
    """Composite ``foreground`` over ``background`` into one flat raster.

    Layers of different sizes are composited at the size of the larger one,
    with the smaller layer centred.
    """
    layers = [to_rgba(layer) for layer in (background, foreground) if layer is not None]
    if not layers:
        return Image.new("RGBA", (0, 0))
    width = max(layer.width for layer in layers)
    height = max(layer.height for layer in layers)
    canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    for layer in layers:
        offset = ((width - layer.width) // 2, (height - layer.height) // 2)
        canvas.alpha_composite(layer, offset)
    return canvas


def is_white_mask(image: Image.Image) -> bool:
    """Return ``True`` when every pixel of ``image`` has pure white RGB."""
    if image.mode != "RGBA" or is_empty(image):
        return False
    return all(image.getchannel(band).getextrema() == (WHITE, WHITE) for band in "RGB")


def resize_image(image: Image.Image, size: tuple[int, int]) -> Image.Image:
    """Resample ``image`` to exactly ``size`` with a smoothing filter.

    White masks are resized through their alpha channel only, so the result
    is still a white mask. Pillow's RGBA resampling would otherwise blacken
    fully transparent pixels.
    """
    rgba = to_rgba(image)
    if is_white_mask(rgba):
        return white_mask_from_alpha(rgba.getchannel("A").resize(size, config.FIT_RESAMPLE))
    return rgba.resize(size, config.FIT_RESAMPLE)


__all__ = [
    "is_empty",
    "to_rgba",
    "iter_rgba",
    "luminance",
    "white_mask",
    "white_mask_from_alpha",
    "force_opaque",
    "flatten_layers",
    "is_white_mask",
    "resize_image",
]
