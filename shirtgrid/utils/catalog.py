from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from PIL import Image

CANVAS_SIZE = (4000, 3000)


@dataclass(frozen=True)
class Slot:
    """Anchor of one garment in a mockup photo: just below the collar, horizontally centred."""

    x: float
    y: float
    label: str

    @property
    def anchor(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Mockup:
    id: int
    name: str
    filename: str
    grid_layout: str
    slots: Tuple[Slot, ...]
    canvas_size: Tuple[int, int] = CANVAS_SIZE

    @property
    def slot_count(self) -> int:
        return len(self.slots)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "filename": self.filename,
            "grid_layout": self.grid_layout,
            "canvas_size": list(self.canvas_size),
            "slots": [{"x": s.x, "y": s.y, "label": s.label} for s in self.slots],
        }


def _grid_slots(xs: Sequence[float], ys: Sequence[float], labels: Sequence[str],
                skip: Iterable[int] = ()) -> Tuple[Slot, ...]:
    """Row-major slots, left to right then top to bottom; skipped cells carry no garment."""
    skipped = set(skip)
    cells = [(x, y) for y in ys for x in xs]
    kept = [cell for i, cell in enumerate(cells) if i not in skipped]
    return tuple(Slot(x, y, label) for (x, y), label in zip(kept, labels))


# Anchors were measured on the 4000x3000 photos, a few fingers below the tag.
_GRID_2X4 = ((500, 1335, 2665, 3500), (520, 2020))
_GRID_3X3 = ((668, 2000, 3332), (290, 1290, 2290))

_COLORS_A = ("White", "Ivory", "Butter", "Khaki", "Grey", "Navy", "Black", "Sage")
_COLORS_B = ("White", "Blossom", "Bay", "Mustard", "Denim", "Crimson", "Moss", "Espresso")
_COLORS_C = ("White", "Ivory", "Banana", "Peachy", "Seafoam", "Blue Jean", "Berry", "Pepper", "Black")
_COLORS_DARK = ("Black", "Navy", "True Navy", "Blue Spruce", "Grape", "Wine", "Espresso", "Pepper", "Grey")

MOCKUP_CATALOG: Dict[int, Mockup] = {
    m.id: m for m in (
        Mockup(1, "Mockup 1", "mockup-1.jpg", "2x4", _grid_slots(*_GRID_2X4, _COLORS_A)),
        Mockup(2, "Mockup 2", "mockup-2.jpg", "2x4", _grid_slots(*_GRID_2X4, _COLORS_B)),
        Mockup(3, "Mockup 3", "mockup-3.jpg", "2x4", _grid_slots(*_GRID_2X4, _COLORS_A)),
        Mockup(4, "Mockup 4", "mockup-4.jpg", "2x4", _grid_slots(*_GRID_2X4, _COLORS_B)),
        Mockup(5, "Mockup 5", "mockup-5.jpg", "2x4", _grid_slots(*_GRID_2X4, _COLORS_A)),
        Mockup(6, "Calvary White", "batch-white.jpg", "3x3", _grid_slots(*_GRID_3X3, _COLORS_C)),
        # Cell 7 of this photo holds the studio logo.
        Mockup(7, "Calvary White 2", "batch-white2.jpg", "3x3", _grid_slots(*_GRID_3X3, _COLORS_C, skip=(7,))),
        Mockup(8, "Calvary Black", "batch-black.jpg", "3x3", _grid_slots(*_GRID_3X3, _COLORS_DARK)),
    )
}


def get_mockup(mockup_id, catalog: Optional[Dict[int, Mockup]] = None) -> Optional[Mockup]:
    catalog = MOCKUP_CATALOG if catalog is None else catalog
    try:
        return catalog.get(int(mockup_id))
    except (TypeError, ValueError):
        return None


def list_mockups(catalog: Optional[Dict[int, Mockup]] = None) -> List[Mockup]:
    catalog = MOCKUP_CATALOG if catalog is None else catalog
    return [catalog[k] for k in sorted(catalog)]


def load_background(mockup: Mockup, mockups_dir: Path) -> Image.Image:
    """Decode the mockup photo; raises OSError if it is missing or unreadable."""
    path = Path(mockups_dir) / mockup.filename
    with Image.open(path) as img:
        img.load()
        return img.convert("RGB")
