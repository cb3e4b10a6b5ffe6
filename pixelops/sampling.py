"""Cheap sampling heuristics over icon rasters.

None of these functions decode every pixel. They walk a coarse grid or the
image border, which is enough to tell a full-colour app icon from a tinted
glyph and to decide whether an icon already carries usable transparency.
Zero-sized images are answered with a neutral sentinel instead of raising.
"""

from __future__ import annotations

from PIL import Image

from monoicon import config

from .image_operations import is_empty, to_rgba

RGB = tuple[int, int, int]


def detect_color_saturation(image: Image.Image) -> bool:
    """Return ``True`` when a significant share of visible pixels is saturated.

    A pixel counts as visible when its alpha exceeds
    :data:`config.SATURATION_MIN_ALPHA` and as coloured when its HSV-style
    saturation ``(max - min) / max`` exceeds :data:`config.SATURATION_THRESHOLD`.
    """
    if is_empty(image):
        return False

    rgba = to_rgba(image)
    pixels = rgba.load()
    width, height = rgba.size
    step = max(1, min(width, height) // config.SATURATION_GRID_DIVISOR)

    colored = 0
    checked = 0
    for y in range(0, height, step):
        for x in range(0, width, step):
            r, g, b, a = pixels[x, y]
            if a <= config.SATURATION_MIN_ALPHA:
                continue
            high = max(r, g, b)
            low = min(r, g, b)
            saturation = (high - low) / high if high > 0 else 0.0
            checked += 1
            if saturation > config.SATURATION_THRESHOLD:
                colored += 1

    return checked > 0 and colored / checked > config.COLORED_FRACTION_THRESHOLD


def detect_transparency(image: Image.Image) -> bool:
    """Return ``True`` when the icon border is meaningfully non-opaque.

    The four corners are checked first since they catch the common case of a
    glyph on a transparent canvas. Otherwise all four edges are sampled.
    """
    if is_empty(image):
        return False

    rgba = to_rgba(image)
    pixels = rgba.load()
    width, height = rgba.size
    last_x, last_y = width - 1, height - 1
    threshold = config.TRANSPARENT_ALPHA_BELOW

    for cx, cy in ((0, 0), (last_x, 0), (0, last_y), (last_x, last_y)):
        if pixels[cx, cy][3] < threshold:
            return True

    step = max(1, min(width, height) // config.TRANSPARENCY_GRID_DIVISOR)
    transparent = 0
    checked = 0
    for x in range(0, width, step):
        for y in (0, last_y):
            checked += 1
            if pixels[x, y][3] < threshold:
                transparent += 1
    for y in range(0, height, step):
        for x in (0, last_x):
            checked += 1
            if pixels[x, y][3] < threshold:
                transparent += 1

    return checked > 0 and transparent / checked > config.TRANSPARENT_EDGE_FRACTION


def estimate_background_color(image: Image.Image) -> RGB:
    """Estimate the fill colour behind the icon from its border.

    Uses the component-wise median of border samples so that foreground
    touching the edge does not drag the estimate.
    """
    if is_empty(image):
        return (0, 0, 0)

    rgba = to_rgba(image)
    pixels = rgba.load()
    width, height = rgba.size
    step_x = max(1, width // config.BACKGROUND_SAMPLES_PER_EDGE)
    step_y = max(1, height // config.BACKGROUND_SAMPLES_PER_EDGE)

    samples = []
    for x in range(0, width, step_x):
        samples.append(pixels[x, 0])
        samples.append(pixels[x, height - 1])
    for y in range(0, height, step_y):
        samples.append(pixels[0, y])
        samples.append(pixels[width - 1, y])

    return tuple(_median([sample[channel] for sample in samples]) for channel in range(3))


def _median(values: list[int]) -> int:
    ordered = sorted(values)
    return ordered[len(ordered) // 2]


__all__ = [
    "detect_color_saturation",
    "detect_transparency",
    "estimate_background_color",
]
