"""
Page tiling for raster-to-PDF conversion.

A rendered receipt is one tall image. To print it on fixed-height pages the
same image is placed on every page, shifted up by one page height each
time, so page N shows the slice [N * page_height, (N + 1) * page_height).
"""
import math

# A4 in millimetres
A4_WIDTH_MM = 210.0
A4_HEIGHT_MM = 297.0


def scaled_height(pixel_width: int, pixel_height: int, page_width: float = A4_WIDTH_MM) -> float:
    """Height of an image once its width is scaled to page_width."""
    if pixel_width <= 0:
        raise ValueError("pixel_width must be positive")
    return pixel_height * page_width / pixel_width


def page_offsets(image_height: float, page_height: float) -> list[float]:
    """Vertical placement of the image on each page.

    Returns one offset per page: 0 for the first page, then -page_height,
    -2 * page_height, ... until the whole image height is covered. An empty
    image still yields a single page.

    >>> page_offsets(500, 297)
    [0.0, -297.0]
    """
    if page_height <= 0:
        raise ValueError("page_height must be positive")
    if image_height < 0:
        raise ValueError("image_height must not be negative")

    pages = max(1, math.ceil(image_height / page_height))
    return [-(i * page_height) + 0.0 for i in range(pages)]
