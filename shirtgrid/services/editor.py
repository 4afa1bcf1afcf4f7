import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from PIL import Image

from ..utils.aspect import AspectClass, classify_ratio
from ..utils.catalog import MOCKUP_CATALOG, Mockup, get_mockup, load_background, list_mockups
from ..utils.export import DEFAULT_QUALITY, ExportResult, export_composite
from ..utils.mockups import ZOOM_STEP, apply_zoom, clamp_zoom, fit_for_display, render_composite
from ..utils.overlay import draw_overlay
from ..utils.persistence import decode_data_url, encode_data_url, hydrate_placement, serialize_placement
from ..utils.placement import (
    DEFAULT_DESIGN_SIZE,
    ComputedBox,
    PlacementConfig,
    apply_partial,
    auto_position,
    compute_boxes,
    resize_slot_offsets,
    with_slot_offset,
    with_sync_all,
)
from ..utils.presets import Preset, PresetLibrary
from .assets import Artwork, AssetLoader, decode_artwork

log = logging.getLogger(__name__)

THUMBNAIL_SIZE = (256, 256)


@dataclass(frozen=True)
class Notice:
    """User-visible outcome of a recoverable condition."""

    level: str
    message: str

    @property
    def ok(self) -> bool:
        return self.level != "error"

    def to_dict(self) -> Dict[str, str]:
        return {"level": self.level, "message": self.message}


@dataclass(frozen=True)
class LoadedMockup:
    mockup: Mockup
    background: Image.Image


class MockupEditor:
    """
    One editing session: the loaded artwork and mockup, the current
    PlacementConfig and the view state (overlay, zoom).

    All state changes and every render/export run under one lock, and the
    config is swapped as a whole, so a render never sees half an update.
    """

    def __init__(self, mockups_dir: Path, catalog: Optional[Dict[int, Mockup]] = None,
                 presets: Optional[PresetLibrary] = None, default_mockup_id: int = 1):
        self._lock = threading.RLock()
        self.mockups_dir = Path(mockups_dir)
        self.catalog = MOCKUP_CATALOG if catalog is None else catalog
        self.presets = presets or PresetLibrary()

        self.artwork_loader: AssetLoader[Artwork] = AssetLoader("artwork")
        self.mockup_loader: AssetLoader[LoadedMockup] = AssetLoader("mockup")

        initial = get_mockup(default_mockup_id, self.catalog) or list_mockups(self.catalog)[0]
        self.config = PlacementConfig.for_slot_count(initial.slot_count)
        self.overlay_enabled = True
        self.zoom = 100

        notice = self.set_mockup(initial.id)
        if not notice.ok:
            log.warning("[EDITOR] Starting without a mockup background: %s", notice.message)

    # ------------------------------------------------------------------
    # Loaded assets
    # ------------------------------------------------------------------
    @property
    def artwork(self) -> Optional[Artwork]:
        return self.artwork_loader.current

    @property
    def loaded_mockup(self) -> Optional[LoadedMockup]:
        return self.mockup_loader.current

    @property
    def mockup(self) -> Optional[Mockup]:
        loaded = self.mockup_loader.current
        return loaded.mockup if loaded else None

    @property
    def aspect_class(self) -> Optional[AspectClass]:
        return classify_ratio(self.artwork.ratio) if self.artwork else None

    def begin_artwork_load(self) -> int:
        with self._lock:
            return self.artwork_loader.begin()

    def finish_artwork_load(self, request_id: int, data: bytes) -> Notice:
        """Decode and apply an upload unless a newer upload has started since `request_id`."""
        try:
            artwork = decode_artwork(data)
        except ValueError as e:
            with self._lock:
                applied = self.artwork_loader.reject(request_id, str(e))
            if not applied:
                return Notice("info", "Upload superseded by a newer one")
            return Notice("error", f"Failed to load design image: {e}")

        with self._lock:
            if not self.artwork_loader.resolve(request_id, artwork):
                return Notice("info", "Upload superseded by a newer one")
        log.info("[EDITOR] Artwork %sx%s loaded (%s)", artwork.width, artwork.height,
                 classify_ratio(artwork.ratio).value)
        return Notice("info", f"Design loaded ({artwork.width}x{artwork.height})")

    def set_artwork(self, data: bytes) -> Notice:
        return self.finish_artwork_load(self.begin_artwork_load(), data)

    def begin_mockup_load(self) -> int:
        with self._lock:
            return self.mockup_loader.begin()

    def finish_mockup_load(self, request_id: int, mockup: Mockup, background: Optional[Image.Image],
                           error: Optional[str] = None) -> Notice:
        with self._lock:
            if background is None:
                applied = self.mockup_loader.reject(request_id, error or "no image")
                if not applied:
                    return Notice("info", "Mockup change superseded by a newer one")
                return Notice("error", f"Failed to load mockup image: {error or 'no image'}")

            if not self.mockup_loader.resolve(request_id, LoadedMockup(mockup, background)):
                return Notice("info", "Mockup change superseded by a newer one")
            self.config = resize_slot_offsets(self.config, mockup.slot_count)
        log.info("[EDITOR] Mockup %s (%s, %s slots) loaded", mockup.id, mockup.name, mockup.slot_count)
        return Notice("info", f"{mockup.name} loaded")

    def set_mockup(self, mockup_id) -> Notice:
        mockup = get_mockup(mockup_id, self.catalog)
        if mockup is None:
            return Notice("error", f"Mockup not found: {mockup_id}")

        request_id = self.begin_mockup_load()
        try:
            background = load_background(mockup, self.mockups_dir)
        except OSError as e:
            return self.finish_mockup_load(request_id, mockup, None, error=str(e))
        return self.finish_mockup_load(request_id, mockup, background)

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------
    def set_placement_config(self, partial: Mapping[str, Any]) -> PlacementConfig:
        """Raises ValueError on bad input; the current config is kept in that case."""
        with self._lock:
            self.config = apply_partial(self.config, partial, self.presets)
            return self.config

    def set_slot_offset(self, index: int, dx: float, dy: float) -> PlacementConfig:
        with self._lock:
            self.config = with_slot_offset(self.config, index, dx, dy)
            return self.config

    def set_sync_all(self, enabled: bool) -> PlacementConfig:
        with self._lock:
            self.config = with_sync_all(self.config, enabled)
            return self.config

    def select_slot(self, index: Optional[int]) -> PlacementConfig:
        return self.set_placement_config({"selected_slot": index})

    def reset_design_size(self) -> PlacementConfig:
        return self.set_placement_config({"design_size_percent": DEFAULT_DESIGN_SIZE})

    def auto_position(self) -> Notice:
        with self._lock:
            if self.artwork is None:
                return Notice("warning", "Upload a design before auto-positioning")
            self.config = auto_position(self.config, self.artwork.ratio, self.presets)
            aspect_class = self.aspect_class
        log.info("[EDITOR] Auto-positioned for %s artwork", aspect_class.value)
        return Notice("info", f"Auto-positioned for {aspect_class.value} artwork")

    def update_preset(self, aspect_class: AspectClass, **values) -> Preset:
        with self._lock:
            return self.presets.update(aspect_class, **values)

    def compute_boxes(self) -> List[ComputedBox]:
        with self._lock:
            if self.artwork is None or self.mockup is None:
                return []
            return compute_boxes(self.artwork.size, self.mockup, self.config, self.presets)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def _frame(self, with_overlay: bool) -> Optional[Image.Image]:
        loaded = self.loaded_mockup
        if loaded is None:
            return None
        artwork = self.artwork
        boxes = self.compute_boxes()
        frame = render_composite(loaded.mockup.canvas_size, loaded.background,
                                 artwork.image if artwork else None, boxes)
        if with_overlay:
            frame = draw_overlay(frame, loaded.mockup, boxes, self.config, self.config.selected_slot)
        return frame

    def render_preview(self) -> Optional[Image.Image]:
        """Full-resolution frame with guides when enabled; None until a mockup is loaded."""
        with self._lock:
            return self._frame(self.overlay_enabled)

    def display_preview(self, max_width: Optional[int] = None) -> Optional[Image.Image]:
        with self._lock:
            frame = self._frame(self.overlay_enabled)
            zoom = self.zoom
        if frame is None:
            return None
        return fit_for_display(apply_zoom(frame, zoom), max_width)

    def toggle_overlay(self) -> bool:
        with self._lock:
            self.overlay_enabled = not self.overlay_enabled
            return self.overlay_enabled

    def set_zoom(self, percent: float) -> int:
        with self._lock:
            self.zoom = clamp_zoom(percent)
            return self.zoom

    def zoom_in(self) -> int:
        return self.set_zoom(self.zoom + ZOOM_STEP)

    def zoom_out(self) -> int:
        return self.set_zoom(self.zoom - ZOOM_STEP)

    def export_image(self, quality=DEFAULT_QUALITY, fmt: str = "JPEG") -> Union[ExportResult, Notice]:
        """Overlay-free export; a Notice instead of an image when there is nothing to export."""
        with self._lock:
            if self.artwork is None:
                return Notice("warning", "Nothing to export: upload a design image first")
            loaded = self.loaded_mockup
            if loaded is None:
                return Notice("warning", "Nothing to export: no mockup is loaded")
            result = export_composite(
                loaded.mockup.canvas_size,
                loaded.background,
                self.artwork.image,
                self.compute_boxes(),
                loaded.mockup.id,
                quality=quality,
                fmt=fmt,
            )
        log.info("[EXPORT] %s at q%s: %s", result.filename, result.quality, result.describe_size())
        return result

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------
    def _thumbnail(self) -> str:
        thumb = self.artwork.image.copy()
        thumb.thumbnail(THUMBNAIL_SIZE, Image.LANCZOS)
        buf = BytesIO()
        thumb.save(buf, "PNG")
        return encode_data_url(buf.getvalue(), "image/png")

    def to_project_record(self, name: Optional[str] = None) -> Union[Dict[str, Any], Notice]:
        with self._lock:
            if self.artwork is None:
                return Notice("warning", "Please upload a design image before saving")
            now = datetime.now(timezone.utc)
            mockup = self.mockup
            record = {
                "name": name or f"Project {now.strftime('%Y-%m-%d %H:%M')}",
                "last_edited": now.isoformat(),
                "design_image": encode_data_url(self.artwork.data, self.artwork.mimetype),
                "thumbnail": self._thumbnail(),
                "selected_mockup_id": mockup.id if mockup else None,
            }
            record.update(serialize_placement(self.config))
            return record

    def load_project_record(self, record: Mapping[str, Any]) -> List[Notice]:
        """
        Restore a saved project. Unreadable parts are reported and skipped, never raised.

        Mockup photo and design are decoded first; mockup, placement and artwork
        are then swapped together, so a render sees either the old project or
        the new one. A project without a readable design clears the artwork.
        """
        if not isinstance(record, Mapping):
            record = {}
        notices: List[Notice] = []

        loaded: Optional[LoadedMockup] = None
        mockup_id = record.get("selected_mockup_id")
        if mockup_id is not None:
            mockup = get_mockup(mockup_id, self.catalog)
            if mockup is None:
                notices.append(Notice("error", f"Mockup not found: {mockup_id}"))
            else:
                try:
                    loaded = LoadedMockup(mockup, load_background(mockup, self.mockups_dir))
                except OSError as e:
                    notices.append(Notice("error", f"Failed to load mockup image: {e}"))

        artwork: Optional[Artwork] = None
        data = decode_data_url(record.get("design_image"))
        if data is None:
            notices.append(Notice("warning", "Project has no readable design image"))
        else:
            try:
                artwork = decode_artwork(data)
            except ValueError as e:
                notices.append(Notice("error", f"Failed to load design image: {e}"))

        with self._lock:
            if loaded is not None:
                self.mockup_loader.resolve(self.mockup_loader.begin(), loaded)
            slot_count = loaded.mockup.slot_count if loaded else len(self.config.slot_offsets)
            self.config = hydrate_placement(record, slot_count, len(self.presets))
            if artwork is None:
                self.artwork_loader.clear()
            else:
                self.artwork_loader.resolve(self.artwork_loader.begin(), artwork)

        return notices

    def state(self) -> Dict[str, Any]:
        with self._lock:
            artwork = self.artwork
            mockup = self.mockup
            return {
                "artwork": {
                    "width": artwork.width,
                    "height": artwork.height,
                    "aspect_class": classify_ratio(artwork.ratio).value,
                } if artwork else None,
                "mockup": mockup.to_dict() if mockup else None,
                "placement": self.config.to_dict(),
                "overlay_enabled": self.overlay_enabled,
                "zoom": self.zoom,
            }
