import math
from typing import Dict, Optional, Sequence, Tuple

from PIL import Image

from .placement import ComputedBox

# Compositing: mockup photo as the full-canvas background, then one copy of the
# artwork per slot box.

BACKGROUND_FILL = (255, 255, 255)
MIN_ZOOM = 50
MAX_ZOOM = 200
ZOOM_STEP = 10


def prepare_surface(canvas_size: Tuple[int, int], background: Optional[Image.Image],
                    fill=BACKGROUND_FILL) -> Image.Image:
    surface = Image.new("RGB", canvas_size, fill)
    if background is not None:
        if background.size != canvas_size:
            background = background.resize(canvas_size, Image.LANCZOS)
        surface.paste(background.convert("RGB"), (0, 0))
    return surface


def draw_artwork(surface: Image.Image, artwork: Image.Image, boxes: Sequence[ComputedBox]) -> Image.Image:
    """Paste the artwork into every box. Boxes may hang off the canvas; paste clips them."""
    artwork = artwork if artwork.mode == "RGBA" else artwork.convert("RGBA")
    resized: Dict[Tuple[int, int], Image.Image] = {}

    for box in boxes:
        size = (int(round(box.width)), int(round(box.height)))
        if size[0] < 1 or size[1] < 1:
            continue
        if size not in resized:
            resized[size] = artwork.resize(size, Image.LANCZOS)
        d_resized = resized[size]
        top_left = (int(round(box.left)), int(round(box.top)))
        surface.paste(d_resized, top_left, d_resized)
    return surface


def render_composite(canvas_size: Tuple[int, int], background: Optional[Image.Image],
                     artwork: Optional[Image.Image], boxes: Sequence[ComputedBox],
                     fill=BACKGROUND_FILL) -> Image.Image:
    """Fresh full-resolution frame: neutral fill, mockup photo, artwork in each box."""
    surface = prepare_surface(canvas_size, background, fill)
    if artwork is not None:
        draw_artwork(surface, artwork, boxes)
    return surface


def clamp_zoom(percent: float) -> int:
    percent = float(percent)
    if not math.isfinite(percent):
        raise ValueError("zoom must be finite")
    return int(max(MIN_ZOOM, min(MAX_ZOOM, round(percent))))


def apply_zoom(frame: Image.Image, percent: float, fill=BACKGROUND_FILL) -> Image.Image:
    """
    Display-only scale around the canvas centre. The result keeps the frame's
    size: zooming in crops the middle, zooming out pads with the fill colour.
    """
    factor = clamp_zoom(percent) / 100
    if factor == 1:
        return frame.copy()

    width, height = frame.size
    scaled = frame.resize((max(1, int(round(width * factor))), max(1, int(round(height * factor)))), Image.LANCZOS)
    view = Image.new(frame.mode, frame.size, fill)
    view.paste(scaled, ((width - scaled.width) // 2, (height - scaled.height) // 2))
    return view


def fit_for_display(frame: Image.Image, max_width: Optional[int]) -> Image.Image:
    if not max_width or frame.width <= max_width:
        return frame
    ratio = max_width / frame.width
    return frame.resize((max_width, max(1, int(round(frame.height * ratio)))), Image.LANCZOS)
