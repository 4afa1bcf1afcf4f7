import json
import logging
import math
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from .aspect import ASPECT_CLASSES, AspectClass

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Preset:
    """Nominal footprint (canvas px) for one aspect class, plus its auto-position Y offset."""

    aspect_class: AspectClass
    label: str
    width: float
    height: float
    y_offset: float

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["aspect_class"] = self.aspect_class.value
        return data


# Calibrated against the 4000x3000 catalog mockups. Compact artwork sits higher
# on the chest (more negative Y) than wide banner artwork.
DEFAULT_PRESETS = (
    Preset(AspectClass.VERY_WIDE, "Banner", 640, 200, -20),
    Preset(AspectClass.LANDSCAPE, "Landscape", 520, 330, -50),
    Preset(AspectClass.SQUARE, "Square", 440, 440, -80),
    Preset(AspectClass.PORTRAIT, "Portrait", 360, 520, -40),
    Preset(AspectClass.TALL, "Tall", 260, 600, -30),
)


def _positive(value: Any, fallback: float) -> float:
    try:
        num = float(value)
    except (TypeError, ValueError):
        return fallback
    return num if math.isfinite(num) and num > 0 else fallback


def _number(value: Any, fallback: float) -> float:
    try:
        num = float(value)
    except (TypeError, ValueError):
        return fallback
    return num if math.isfinite(num) else fallback


def _require_number(value: Any, name: str, positive: bool = False) -> float:
    try:
        num = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number")
    if not math.isfinite(num):
        raise ValueError(f"{name} must be finite")
    if positive and num <= 0:
        raise ValueError(f"{name} must be positive")
    return num


class PresetLibrary:
    """Footprint table indexed in ASPECT_CLASSES order; entries can be retuned at runtime."""

    def __init__(self, presets=DEFAULT_PRESETS):
        by_class = {p.aspect_class: p for p in presets}
        defaults = {p.aspect_class: p for p in DEFAULT_PRESETS}
        self._presets: List[Preset] = [by_class.get(c, defaults[c]) for c in ASPECT_CLASSES]

    def __len__(self) -> int:
        return len(self._presets)

    def __iter__(self):
        return iter(self._presets)

    def get(self, index: Optional[int]) -> Optional[Preset]:
        if index is None or not 0 <= index < len(self._presets):
            return None
        return self._presets[index]

    def index_of(self, aspect_class: AspectClass) -> int:
        return ASPECT_CLASSES.index(aspect_class)

    def for_class(self, aspect_class: AspectClass) -> Preset:
        return self._presets[self.index_of(aspect_class)]

    def update(self, aspect_class: AspectClass, width=None, height=None, y_offset=None) -> Preset:
        """Raises ValueError on a non-numeric, non-finite or non-positive size; nothing is changed then."""
        current = self.for_class(aspect_class)
        changes: Dict[str, float] = {}
        if width is not None:
            changes["width"] = _require_number(width, "width", positive=True)
        if height is not None:
            changes["height"] = _require_number(height, "height", positive=True)
        if y_offset is not None:
            changes["y_offset"] = _require_number(y_offset, "y_offset")
        updated = replace(current, **changes)
        self._presets[self.index_of(aspect_class)] = updated
        log.info("[PRESET] %s -> %sx%s (y %s)", aspect_class.value, updated.width, updated.height, updated.y_offset)
        return updated

    def to_list(self) -> List[Dict[str, Any]]:
        return [p.to_dict() for p in self._presets]

    # ------------------------------------------------------------------
    # Calibration file
    # ------------------------------------------------------------------
    @classmethod
    def from_file(cls, path: Optional[Path]) -> "PresetLibrary":
        """
        Load a calibration file shaped like {"square": {"width": .., "height": .., "y_offset": ..}}.
        Missing or malformed entries fall back to the built-in table.
        """
        if not path or not Path(path).exists():
            return cls()
        try:
            with Path(path).open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            log.warning("[PRESET] Could not read %s: %s", path, e)
            return cls()
        if not isinstance(raw, dict):
            return cls()

        presets = []
        for default in DEFAULT_PRESETS:
            entry = raw.get(default.aspect_class.value)
            if not isinstance(entry, dict):
                presets.append(default)
                continue
            presets.append(replace(
                default,
                label=str(entry.get("label") or default.label),
                width=_positive(entry.get("width"), default.width),
                height=_positive(entry.get("height"), default.height),
                y_offset=_number(entry.get("y_offset"), default.y_offset),
            ))
        return cls(presets)

    def save(self, path: Path) -> None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        data = {
            preset.aspect_class.value: {
                "label": preset.label,
                "width": preset.width,
                "height": preset.height,
                "y_offset": preset.y_offset,
            }
            for preset in self._presets
        }
        with p.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
