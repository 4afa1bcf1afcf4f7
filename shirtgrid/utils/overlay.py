from typing import Optional, Sequence

from PIL import Image, ImageDraw, ImageFont

from .catalog import Mockup
from .placement import ComputedBox, PlacementConfig

GUIDE_COLOR = (255, 0, 0)
SELECTED_COLOR = (255, 140, 0)
ANCHOR_COLOR = (0, 160, 255)
LABEL_COLOR = (20, 20, 20)
LABEL_BG = (255, 255, 255)

GUIDE_WIDTH = 3
SELECTED_WIDTH = 8
ANCHOR_RADIUS = 12
CROSSHAIR = 30
LABEL_SIZE = 40


def _font(size: int):
    try:
        return ImageFont.load_default(size=size)
    except TypeError:
        # Pillow < 10.1 has no sized default font.
        return ImageFont.load_default()


def slot_label(label: str, config: PlacementConfig, index: int) -> str:
    dx, dy = config.slot_offset(index)
    gx, gy = config.global_offset
    return f"{label} ({dx + gx:+.0f}, {dy + gy:+.0f})"


def draw_overlay(frame: Image.Image, mockup: Mockup, boxes: Sequence[ComputedBox],
                 config: PlacementConfig, selected_slot: Optional[int] = None) -> Image.Image:
    """
    Placement guides on a copy of the frame: anchor dot, box outline, crosshair
    at the box centre and a "<label> (dx, dy)" tag per slot. Boxes may be empty
    when no artwork is loaded; anchors and labels are still drawn.
    """
    guided = frame.copy()
    draw = ImageDraw.Draw(guided)
    font = _font(LABEL_SIZE)

    for index, slot in enumerate(mockup.slots):
        selected = index == selected_slot
        color = SELECTED_COLOR if selected else GUIDE_COLOR
        width = SELECTED_WIDTH if selected else GUIDE_WIDTH

        ax, ay = slot.anchor
        draw.ellipse(
            [ax - ANCHOR_RADIUS, ay - ANCHOR_RADIUS, ax + ANCHOR_RADIUS, ay + ANCHOR_RADIUS],
            fill=ANCHOR_COLOR,
        )

        label_y = ay - ANCHOR_RADIUS - LABEL_SIZE - 8
        if index < len(boxes):
            box = boxes[index]
            draw.rectangle([box.left, box.top, box.right, box.bottom], outline=color, width=width)
            cx, cy = box.center
            draw.line([cx - CROSSHAIR, cy, cx + CROSSHAIR, cy], fill=color, width=width)
            draw.line([cx, cy - CROSSHAIR, cx, cy + CROSSHAIR], fill=color, width=width)
            label_y = min(label_y, box.top - LABEL_SIZE - 8)

        text = slot_label(slot.label, config, index)
        left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
        origin = (ax - (right - left) / 2, label_y)
        draw.rectangle([origin[0] + left - 4, label_y + top - 4, origin[0] + right + 4, label_y + bottom + 4],
                       fill=LABEL_BG)
        draw.text(origin, text, fill=color if selected else LABEL_COLOR, font=font)

    return guided
