"""
Unit tests for the placement-guide overlay.
"""
import pytest
from PIL import Image

from shirtgrid.utils.catalog import Mockup, Slot
from shirtgrid.utils.overlay import ANCHOR_COLOR, GUIDE_COLOR, SELECTED_COLOR, draw_overlay, slot_label
from shirtgrid.utils.placement import ComputedBox, PlacementConfig


@pytest.fixture
def mockup():
    return Mockup(1, "Pair", "pair.png", "1x2", (Slot(150, 100, "Left"), Slot(450, 100, "Right")),
                  canvas_size=(600, 400))


@pytest.fixture
def frame():
    return Image.new("RGB", (600, 400), (255, 255, 255))


@pytest.mark.unit
class TestDrawOverlay:

    def test_does_not_touch_input(self, frame, mockup):
        before = frame.tobytes()

        guided = draw_overlay(frame, mockup, [], PlacementConfig.for_slot_count(2))

        assert guided is not frame
        assert frame.tobytes() == before
        assert guided.tobytes() != before

    def test_anchor_markers_without_artwork(self, frame, mockup):
        guided = draw_overlay(frame, mockup, [], PlacementConfig.for_slot_count(2))

        assert guided.getpixel((150, 100)) == ANCHOR_COLOR
        assert guided.getpixel((450, 100)) == ANCHOR_COLOR

    def test_selected_slot_uses_highlight_colour(self, frame, mockup):
        boxes = [ComputedBox(100, 100, 100, 100), ComputedBox(400, 100, 100, 100)]

        guided = draw_overlay(frame, mockup, boxes, PlacementConfig.for_slot_count(2), selected_slot=0)

        # left edges, half way down each box
        assert guided.getpixel((100, 150)) == SELECTED_COLOR
        assert guided.getpixel((400, 150)) == GUIDE_COLOR

    def test_box_outline_is_hollow(self, frame, mockup):
        boxes = [ComputedBox(100, 100, 100, 100)]

        guided = draw_overlay(frame, mockup, boxes, PlacementConfig.for_slot_count(2))

        assert guided.getpixel((120, 180)) == (255, 255, 255)


@pytest.mark.unit
class TestSlotLabel:

    def test_effective_offsets(self):
        config = PlacementConfig(global_offset=(0, -80), slot_offsets=((12, 5), (0, 0)))
        assert slot_label("White", config, 0) == "White (+12, -75)"
        assert slot_label("Navy", config, 1) == "Navy (+0, -80)"
