from PIL import Image, ImageDraw

from icon_factory import BLUE, CLEAR, RED, WHITE, disk_icon, red_and_white, transparent_glyph
from pixelops.sampling import (
    detect_color_saturation,
    detect_transparency,
    estimate_background_color,
)


def test_red_and_white_icon_is_colored():
    assert detect_color_saturation(red_and_white()) is True


def test_grey_icon_is_not_colored():
    img = Image.new("RGBA", (32, 32), (90, 90, 90, 255))
    ImageDraw.Draw(img).rectangle((8, 8, 23, 23), fill=(240, 240, 240, 255))
    assert detect_color_saturation(img) is False


def test_white_glyph_is_not_colored():
    assert detect_color_saturation(transparent_glyph()) is False


def test_invisible_pixels_are_ignored_for_saturation():
    # Saturated but nearly transparent everywhere: nothing is checked.
    img = Image.new("RGBA", (24, 24), (255, 0, 0, 40))
    assert detect_color_saturation(img) is False


def test_small_colored_fraction_is_not_colored():
    img = Image.new("RGBA", (48, 48), WHITE)
    ImageDraw.Draw(img).rectangle((0, 0, 9, 47), fill=RED)
    assert detect_color_saturation(img) is False


def test_opaque_icon_has_no_transparency():
    assert detect_transparency(disk_icon()) is False


def test_transparent_corner_short_circuits():
    img = Image.new("RGBA", (32, 32), BLUE)
    img.putpixel((31, 31), CLEAR)
    assert detect_transparency(img) is True


def test_transparent_edge_without_corners():
    img = Image.new("RGBA", (32, 32), BLUE)
    ImageDraw.Draw(img).line((4, 0, 27, 0), fill=CLEAR)
    assert detect_transparency(img) is True


def test_single_transparent_edge_pixel_is_ignored():
    img = Image.new("RGBA", (32, 32), BLUE)
    img.putpixel((16, 0), CLEAR)
    assert detect_transparency(img) is False


def test_background_estimate_uses_median():
    img = Image.new("RGBA", (40, 40), BLUE)
    # Foreground bleeding into one edge must not move the estimate.
    ImageDraw.Draw(img).rectangle((10, 0, 20, 12), fill=RED)
    assert estimate_background_color(img) == (0, 0, 255)


def test_background_estimate_accepts_rgb_input():
    img = Image.new("RGB", (10, 10), (12, 34, 56))
    assert estimate_background_color(img) == (12, 34, 56)


def test_empty_image_returns_sentinels():
    empty = Image.new("RGBA", (0, 0))
    assert detect_color_saturation(empty) is False
    assert detect_transparency(empty) is False
    assert estimate_background_color(empty) == (0, 0, 0)
