"""
Unit tests for the editor session.
"""
import pytest
from PIL import Image

from shirtgrid.services.editor import MockupEditor, Notice
from shirtgrid.utils.aspect import AspectClass
from shirtgrid.utils.placement import ZERO
from shirtgrid.utils.presets import PresetLibrary


@pytest.mark.unit
class TestMockupSelection:

    def test_starts_on_default_mockup(self, editor):
        assert editor.mockup.id == 1
        assert len(editor.config.slot_offsets) == 2
        assert editor.state()["mockup"]["name"] == "Two Up"

    def test_switch_resizes_slot_offsets(self, editor):
        notice = editor.set_mockup(2)

        assert notice.ok
        assert editor.mockup.id == 2
        assert len(editor.config.slot_offsets) == 8

    def test_unknown_mockup(self, editor):
        notice = editor.set_mockup(99)

        assert notice.level == "error"
        assert "Mockup not found" in notice.message
        assert editor.mockup.id == 1

    def test_missing_background_keeps_previous(self, editor):
        editor.set_slot_offset(1, 5, 5)

        notice = editor.set_mockup(3)

        assert notice.level == "error"
        assert notice.message.startswith("Failed to load mockup image")
        assert editor.mockup.id == 1
        assert editor.config.slot_offset(1) == (5.0, 5.0)

    def test_starts_without_background(self, tmp_path, test_catalog):
        editor = MockupEditor(mockups_dir=tmp_path, catalog=test_catalog, default_mockup_id=1)

        assert editor.mockup is None
        assert editor.render_preview() is None
        assert len(editor.config.slot_offsets) == 2


@pytest.mark.unit
class TestArtwork:

    def test_upload(self, editor, make_png):
        notice = editor.set_artwork(make_png(400, 1000))

        assert notice.ok
        assert editor.aspect_class == AspectClass.PORTRAIT
        assert editor.state()["artwork"] == {"width": 400, "height": 1000, "aspect_class": "portrait"}

    def test_bad_upload_keeps_previous(self, editor, make_png):
        editor.set_artwork(make_png(10, 10))

        notice = editor.set_artwork(b"garbage")

        assert notice.level == "error"
        assert editor.artwork.size == (10, 10)

    def test_stale_decode_is_discarded(self, editor, make_png):
        first = editor.begin_artwork_load()
        second = editor.begin_artwork_load()

        assert editor.finish_artwork_load(second, make_png(50, 50)).ok
        late = editor.finish_artwork_load(first, make_png(90, 10))

        assert late.level == "info"
        assert "superseded" in late.message
        assert editor.artwork.size == (50, 50)

    def test_stale_mockup_load_is_discarded(self, editor, test_catalog):
        first = editor.begin_mockup_load()
        editor.set_mockup(2)

        editor.finish_mockup_load(first, test_catalog[1], Image.new("RGB", (200, 150)))

        assert editor.mockup.id == 2


@pytest.mark.unit
class TestPlacementOperations:

    def test_no_boxes_until_artwork(self, editor):
        assert editor.compute_boxes() == []

    def test_boxes_follow_config(self, editor, sample_design_png):
        editor.set_artwork(sample_design_png)
        editor.set_placement_config({"footprint_width": 100, "footprint_height": 100})

        boxes = editor.compute_boxes()

        assert len(boxes) == 2
        assert (boxes[0].width, boxes[0].height) == pytest.approx((100, 50))
        assert boxes[0].center[0] == pytest.approx(50)

    def test_bad_partial_keeps_config(self, editor):
        before = editor.config
        with pytest.raises(ValueError):
            editor.set_placement_config({"design_size_percent": 150, "selected_slot": 7})
        assert editor.config == before

    def test_auto_position_needs_artwork(self, editor):
        notice = editor.auto_position()
        assert notice.level == "warning"

    def test_auto_position(self, editor, make_png):
        editor.set_artwork(make_png(400, 1000))
        editor.set_slot_offset(0, 9, 9)

        notice = editor.auto_position()

        assert notice.ok
        assert editor.config.selected_preset_index == 3
        assert editor.config.global_offset == (0.0, -40.0)
        assert editor.config.slot_offsets == (ZERO, ZERO)
        assert editor.config.sync_all_slots is True

    def test_non_finite_offset_keeps_config(self, editor, sample_design_png):
        editor.set_artwork(sample_design_png)
        editor.set_sync_all(True)
        before = editor.config

        with pytest.raises(ValueError):
            editor.set_slot_offset(0, "nan", 0)
        with pytest.raises(ValueError):
            editor.set_slot_offset(1, 0, float("inf"))

        assert editor.config == before
        assert editor.render_preview() is not None

    def test_non_finite_preset_rejected(self, editor, make_png):
        with pytest.raises(ValueError):
            editor.update_preset(AspectClass.LANDSCAPE, y_offset="inf")
        with pytest.raises(ValueError):
            editor.update_preset(AspectClass.LANDSCAPE, width=float("nan"))

        editor.set_artwork(make_png(160, 100))

        assert editor.auto_position().ok
        assert editor.render_preview() is not None

    def test_select_and_reset(self, editor):
        editor.set_placement_config({"design_size_percent": 60})
        assert editor.select_slot(1).selected_slot == 1
        assert editor.reset_design_size().design_size_percent == 100

    def test_update_preset_changes_boxes(self, editor, make_png):
        editor.set_artwork(make_png(100, 100))

        editor.update_preset(AspectClass.SQUARE, width=100, height=100)

        assert editor.compute_boxes()[0].width == pytest.approx(100)


@pytest.mark.unit
class TestView:

    def test_zoom_limits(self, editor):
        editor.set_zoom(195)
        assert editor.zoom_in() == 200
        assert editor.zoom_in() == 200
        editor.set_zoom(55)
        assert editor.zoom_out() == 50

    def test_non_finite_zoom_rejected(self, editor):
        editor.set_zoom(120)
        for bad in (float("inf"), float("nan")):
            with pytest.raises(ValueError):
                editor.set_zoom(bad)
        assert editor.zoom == 120

    def test_display_preview_size(self, editor):
        assert editor.display_preview().size == (200, 150)
        assert editor.display_preview(max_width=100).size == (100, 75)

    def test_toggle_overlay(self, editor):
        assert editor.toggle_overlay() is False
        assert editor.toggle_overlay() is True


@pytest.mark.unit
class TestProjectRecords:

    def test_needs_artwork(self, editor):
        assert isinstance(editor.to_project_record("x"), Notice)

    def test_save_and_restore(self, editor, mockups_dir, test_catalog, make_png):
        editor.set_mockup(2)
        editor.set_artwork(make_png(120, 40))
        editor.set_placement_config({"design_size_percent": 80, "global_y_offset": -12})
        editor.set_slot_offset(5, 3, 4)
        record = editor.to_project_record("Spring drop")

        fresh = MockupEditor(mockups_dir=mockups_dir, catalog=test_catalog, presets=PresetLibrary())
        notices = fresh.load_project_record(record)

        assert notices == []
        assert record["name"] == "Spring drop"
        assert record["thumbnail"].startswith("data:image/png;base64,")
        assert fresh.mockup.id == 2
        assert fresh.artwork.size == (120, 40)
        assert fresh.compute_boxes() == editor.compute_boxes()

    def test_broken_record_still_loads_placement(self, editor):
        notices = editor.load_project_record({
            "design_image": "data:image/png;base64,!!!",
            "design_size": 50,
            "placement_settings": "nope",
        })

        assert [n.level for n in notices] == ["warning"]
        assert editor.config.design_size_percent == 50
        assert editor.config.slot_offsets == (ZERO, ZERO)

    def test_missing_mockup_reported(self, editor, make_png):
        record = {"selected_mockup_id": 3, "design_image": None}
        editor.set_artwork(make_png())

        notices = editor.load_project_record(record)

        assert notices[0].level == "error"
        assert editor.mockup.id == 1

    def test_unreadable_design_clears_artwork(self, editor, make_png):
        editor.set_artwork(make_png(300, 100))

        notices = editor.load_project_record({
            "design_image": "data:image/png;base64,AAAA",
            "design_size": 70,
        })

        assert [n.level for n in notices] == ["error"]
        assert editor.artwork is None
        assert editor.compute_boxes() == []
        assert editor.config.design_size_percent == 70

    def test_design_and_placement_swap_together(self, editor, mockups_dir, test_catalog, make_png):
        source = MockupEditor(mockups_dir=mockups_dir, catalog=test_catalog, presets=PresetLibrary())
        source.set_artwork(make_png(90, 90))
        source.set_placement_config({"design_size_percent": 150})
        record = source.to_project_record("Square")
        editor.set_artwork(make_png(300, 100))
        editor.set_placement_config({"design_size_percent": 40})

        assert editor.load_project_record(record) == []

        assert editor.artwork.size == (90, 90)
        assert editor.config.design_size_percent == 150
        assert editor.compute_boxes() == source.compute_boxes()
