import math
from enum import Enum


class AspectClass(str, Enum):
    """Shape buckets used to pick a default footprint for an artwork."""

    VERY_WIDE = "very_wide"
    LANDSCAPE = "landscape"
    SQUARE = "square"
    PORTRAIT = "portrait"
    TALL = "tall"


# Ordered widest to tallest; presets are indexed in this order.
ASPECT_CLASSES = (
    AspectClass.VERY_WIDE,
    AspectClass.LANDSCAPE,
    AspectClass.SQUARE,
    AspectClass.PORTRAIT,
    AspectClass.TALL,
)


def classify_ratio(ratio: float) -> AspectClass:
    """
    Bucket a width/height ratio:
      > 2.0          very_wide
      (1.3, 2.0]     landscape
      [0.7, 1.3]     square
      [0.4, 0.7)     portrait
      < 0.4          tall
    """
    if not math.isfinite(ratio) or ratio <= 0:
        raise ValueError(f"aspect ratio must be finite and positive, got {ratio!r}")
    if ratio > 2.0:
        return AspectClass.VERY_WIDE
    if ratio > 1.3:
        return AspectClass.LANDSCAPE
    if ratio >= 0.7:
        return AspectClass.SQUARE
    if ratio >= 0.4:
        return AspectClass.PORTRAIT
    return AspectClass.TALL


def classify_dimensions(width: int, height: int) -> AspectClass:
    if width <= 0 or height <= 0:
        raise ValueError(f"image dimensions must be positive, got {width}x{height}")
    return classify_ratio(width / height)
