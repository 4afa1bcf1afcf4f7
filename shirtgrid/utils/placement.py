"""
Placement geometry: where each slot's copy of the artwork is drawn.

Everything here is pure. A PlacementConfig is an immutable value; every
mutation returns a new one so a render always sees a consistent snapshot.
"""
import math
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .aspect import AspectClass, classify_ratio
from .catalog import Mockup, Slot
from .presets import PresetLibrary

Offset = Tuple[float, float]

MIN_DESIGN_SIZE = 20
MAX_DESIGN_SIZE = 200
DEFAULT_DESIGN_SIZE = 100
ZERO: Offset = (0.0, 0.0)


@dataclass(frozen=True)
class ComputedBox:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.left + self.width / 2, self.top + self.height / 2)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def to_dict(self) -> Dict[str, float]:
        return {"left": self.left, "top": self.top, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class PlacementConfig:
    design_size_percent: float = DEFAULT_DESIGN_SIZE
    global_offset: Offset = ZERO
    slot_offsets: Tuple[Offset, ...] = ()
    footprint_width: Optional[float] = None
    footprint_height: Optional[float] = None
    selected_preset_index: Optional[int] = None
    sync_all_slots: bool = False
    selected_slot: Optional[int] = None

    @classmethod
    def for_slot_count(cls, count: int) -> "PlacementConfig":
        return cls(slot_offsets=(ZERO,) * count)

    def slot_offset(self, index: int) -> Offset:
        if 0 <= index < len(self.slot_offsets):
            return self.slot_offsets[index] or ZERO
        return ZERO

    def to_dict(self) -> Dict[str, Any]:
        return {
            "design_size_percent": self.design_size_percent,
            "global_offset": {"x": self.global_offset[0], "y": self.global_offset[1]},
            "slot_offsets": [{"x": dx, "y": dy} for dx, dy in self.slot_offsets],
            "footprint_width": self.footprint_width,
            "footprint_height": self.footprint_height,
            "selected_preset_index": self.selected_preset_index,
            "sync_all_slots": self.sync_all_slots,
            "selected_slot": self.selected_slot,
        }


def clamp_design_size(percent: float) -> float:
    return max(MIN_DESIGN_SIZE, min(MAX_DESIGN_SIZE, float(percent)))


# ----------------------------------------------------------------------
# Geometry
# ----------------------------------------------------------------------
def resolve_footprint(config: PlacementConfig, aspect_class: AspectClass,
                      presets: PresetLibrary) -> Tuple[float, float]:
    """Explicit override, then the selected preset, then the preset for the artwork's class."""
    if config.footprint_width and config.footprint_height:
        return float(config.footprint_width), float(config.footprint_height)
    preset = presets.get(config.selected_preset_index) or presets.for_class(aspect_class)
    return float(preset.width), float(preset.height)


def fit_to_footprint(ratio: float, footprint_w: float, footprint_h: float) -> Tuple[float, float]:
    """Largest box with the artwork's ratio inside the footprint."""
    if ratio > footprint_w / footprint_h:
        width = footprint_w
        return width, width / ratio
    height = footprint_h
    return height * ratio, height


def compute_box(slot: Slot, slot_index: int, artwork_size: Tuple[int, int],
                config: PlacementConfig, presets: PresetLibrary) -> ComputedBox:
    art_w, art_h = artwork_size
    ratio = art_w / art_h
    footprint_w, footprint_h = resolve_footprint(config, classify_ratio(ratio), presets)

    scale = config.design_size_percent / 100
    width, height = fit_to_footprint(ratio, footprint_w * scale, footprint_h * scale)

    slot_dx, slot_dy = config.slot_offset(slot_index)
    global_dx, global_dy = config.global_offset or ZERO
    anchor_x = slot.x + (slot_dx or 0) + (global_dx or 0)
    anchor_y = slot.y + (slot_dy or 0) + (global_dy or 0)

    # Horizontally centred, but hanging down from the anchor line.
    return ComputedBox(left=anchor_x - width / 2, top=anchor_y, width=width, height=height)


def compute_boxes(artwork_size: Tuple[int, int], mockup: Mockup, config: PlacementConfig,
                  presets: PresetLibrary) -> List[ComputedBox]:
    return [compute_box(slot, i, artwork_size, config, presets) for i, slot in enumerate(mockup.slots)]


# ----------------------------------------------------------------------
# Mutations (each returns a new config)
# ----------------------------------------------------------------------
def resize_slot_offsets(config: PlacementConfig, count: int) -> PlacementConfig:
    offsets = tuple(config.slot_offsets[:count]) + (ZERO,) * max(0, count - len(config.slot_offsets))
    selected = config.selected_slot if config.selected_slot is not None and config.selected_slot < count else None
    return replace(config, slot_offsets=offsets, selected_slot=selected)


def with_slot_offset(config: PlacementConfig, index: int, dx: float, dy: float) -> PlacementConfig:
    """In sync mode the offset is broadcast to every slot; each slot still stores its own copy."""
    if not 0 <= index < len(config.slot_offsets):
        raise ValueError(f"slot index {index} out of range (0..{len(config.slot_offsets) - 1})")
    offset = (_finite(dx, "x"), _finite(dy, "y"))
    if config.sync_all_slots:
        offsets = (offset,) * len(config.slot_offsets)
    else:
        offsets = tuple(offset if i == index else o for i, o in enumerate(config.slot_offsets))
    return replace(config, slot_offsets=offsets)


def with_sync_all(config: PlacementConfig, enabled: bool) -> PlacementConfig:
    return replace(config, sync_all_slots=bool(enabled))


def auto_position(config: PlacementConfig, ratio: float, presets: PresetLibrary) -> PlacementConfig:
    """Preset by class, class default Y offset, per-slot offsets cleared, sync enabled."""
    aspect_class = classify_ratio(ratio)
    preset = presets.for_class(aspect_class)
    return replace(
        config,
        selected_preset_index=presets.index_of(aspect_class),
        footprint_width=preset.width,
        footprint_height=preset.height,
        global_offset=(0.0, float(preset.y_offset)),
        slot_offsets=(ZERO,) * len(config.slot_offsets),
        sync_all_slots=True,
    )


# ----------------------------------------------------------------------
# Partial updates from the UI layer
# ----------------------------------------------------------------------
def _finite(value: Any, name: str) -> float:
    try:
        num = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number")
    if not math.isfinite(num):
        raise ValueError(f"{name} must be finite")
    return num


def parse_offset(value: Any, name: str = "offset") -> Offset:
    """Accepts {"x": .., "y": ..} or [x, y]; missing components count as zero."""
    if value is None:
        return ZERO
    if isinstance(value, Mapping):
        return (_finite(value.get("x") or 0, f"{name}.x"), _finite(value.get("y") or 0, f"{name}.y"))
    if isinstance(value, Sequence) and not isinstance(value, str) and len(value) == 2:
        return (_finite(value[0] or 0, f"{name}[0]"), _finite(value[1] or 0, f"{name}[1]"))
    raise ValueError(f"{name} must be {{x, y}} or [x, y]")


def _optional_positive(value: Any, name: str) -> Optional[float]:
    if value is None:
        return None
    num = _finite(value, name)
    if num <= 0:
        raise ValueError(f"{name} must be positive")
    return num


def apply_partial(config: PlacementConfig, partial: Mapping[str, Any],
                  presets: PresetLibrary) -> PlacementConfig:
    """
    Merge a partial update. Raises ValueError on invalid input and leaves the
    caller's config untouched (nothing is applied unless everything parses).
    """
    changes: Dict[str, Any] = {}
    count = len(config.slot_offsets)

    if "design_size_percent" in partial:
        changes["design_size_percent"] = clamp_design_size(_finite(partial["design_size_percent"], "design_size_percent"))

    gx, gy = config.global_offset
    if "global_offset" in partial:
        gx, gy = parse_offset(partial["global_offset"], "global_offset")
    if "global_x_offset" in partial:
        gx = _finite(partial["global_x_offset"], "global_x_offset")
    if "global_y_offset" in partial:
        gy = _finite(partial["global_y_offset"], "global_y_offset")
    changes["global_offset"] = (gx, gy)

    if "slot_offsets" in partial:
        raw = partial["slot_offsets"]
        if not isinstance(raw, Sequence) or isinstance(raw, str):
            raise ValueError("slot_offsets must be a list")
        offsets = [parse_offset(o, f"slot_offsets[{i}]") for i, o in enumerate(raw[:count])]
        changes["slot_offsets"] = tuple(offsets) + (ZERO,) * (count - len(offsets))

    for key in ("footprint_width", "footprint_height"):
        if key in partial:
            changes[key] = _optional_positive(partial[key], key)

    if "selected_preset_index" in partial:
        index = partial["selected_preset_index"]
        if index is not None:
            index = int(_finite(index, "selected_preset_index"))
            preset = presets.get(index)
            if preset is None:
                raise ValueError(f"selected_preset_index must be between 0 and {len(presets) - 1}")
            # Picking a preset replaces the footprint unless one was sent alongside.
            if "footprint_width" not in partial and "footprint_height" not in partial:
                changes["footprint_width"] = preset.width
                changes["footprint_height"] = preset.height
        changes["selected_preset_index"] = index

    if "sync_all_slots" in partial:
        changes["sync_all_slots"] = bool(partial["sync_all_slots"])

    if "selected_slot" in partial:
        slot = partial["selected_slot"]
        if slot is not None:
            slot = int(_finite(slot, "selected_slot"))
            if not 0 <= slot < count:
                raise ValueError(f"selected_slot must be between 0 and {count - 1}")
        changes["selected_slot"] = slot

    return replace(config, **changes)
