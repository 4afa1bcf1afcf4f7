"""
PlacementConfig <-> project record fields.

Hydration never raises: every field that is missing or malformed falls back
to the engine default on its own, so a half-corrupt record still restores
whatever is readable.
"""
import base64
import binascii
import json
import logging
import math
from typing import Any, Dict, List, Mapping, Optional

from .placement import (
    DEFAULT_DESIGN_SIZE,
    ZERO,
    Offset,
    PlacementConfig,
    clamp_design_size,
)

log = logging.getLogger(__name__)


def serialize_placement(config: PlacementConfig) -> Dict[str, Any]:
    return {
        "design_size": config.design_size_percent,
        "global_x_offset": config.global_offset[0],
        "global_y_offset": config.global_offset[1],
        "footprint_width": config.footprint_width,
        "footprint_height": config.footprint_height,
        "placement_settings": json.dumps([{"x": dx, "y": dy} for dx, dy in config.slot_offsets]),
        "sync_all_slots": config.sync_all_slots,
        "selected_preset_index": config.selected_preset_index,
    }


def _number(value: Any, default, field: str):
    if value is None or isinstance(value, bool):
        return default
    try:
        num = float(value)
    except (TypeError, ValueError):
        log.debug("[HYDRATE] %s unreadable (%r); using default", field, value)
        return default
    return num if math.isfinite(num) else default


def _positive_or_none(value: Any, field: str) -> Optional[float]:
    num = _number(value, None, field)
    return num if num is not None and num > 0 else None


def _offset(item: Any) -> Offset:
    if isinstance(item, Mapping):
        return (_number(item.get("x"), 0.0, "offset.x"), _number(item.get("y"), 0.0, "offset.y"))
    if isinstance(item, (list, tuple)) and len(item) == 2:
        return (_number(item[0], 0.0, "offset[0]"), _number(item[1], 0.0, "offset[1]"))
    return ZERO


def _slot_offsets(raw: Any, slot_count: int) -> List[Offset]:
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            log.debug("[HYDRATE] placement_settings is not JSON; using zero offsets")
            raw = []
    if not isinstance(raw, list):
        raw = []
    offsets = [_offset(item) for item in raw[:slot_count]]
    return offsets + [ZERO] * (slot_count - len(offsets))


def _bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y", "on")
    return default


def hydrate_placement(record: Any, slot_count: int, preset_count: int) -> PlacementConfig:
    if not isinstance(record, Mapping):
        record = {}

    size = _number(record.get("design_size"), DEFAULT_DESIGN_SIZE, "design_size")
    preset_index = _number(record.get("selected_preset_index"), None, "selected_preset_index")
    if preset_index is not None:
        preset_index = int(preset_index)
        if not 0 <= preset_index < preset_count:
            preset_index = None

    return PlacementConfig(
        design_size_percent=clamp_design_size(size),
        global_offset=(
            _number(record.get("global_x_offset"), 0.0, "global_x_offset"),
            _number(record.get("global_y_offset"), 0.0, "global_y_offset"),
        ),
        slot_offsets=tuple(_slot_offsets(record.get("placement_settings"), slot_count)),
        footprint_width=_positive_or_none(record.get("footprint_width"), "footprint_width"),
        footprint_height=_positive_or_none(record.get("footprint_height"), "footprint_height"),
        selected_preset_index=preset_index,
        sync_all_slots=_bool(record.get("sync_all_slots"), False),
    )


# ----------------------------------------------------------------------
# Artwork blob
# ----------------------------------------------------------------------
def encode_data_url(data: bytes, mimetype: str = "image/png") -> str:
    return f"data:{mimetype};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_url(value: Any) -> Optional[bytes]:
    """Bytes from a data URL (or bare base64); None when it cannot be decoded."""
    if not isinstance(value, str) or not value:
        return None
    payload = value.split(",", 1)[1] if value.startswith("data:") and "," in value else value
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return None
