"""
Unit tests for ProjectStore class.
"""
import json

import pytest

from shirtgrid.storage.project_store import ProjectStore


@pytest.mark.unit
class TestProjectStore:
    """Tests for the JSON-on-disk project collection."""

    def test_init_creates_directory(self, tmp_path):
        data_dir = tmp_path / "new_data_dir"
        assert not data_dir.exists()

        ProjectStore(data_dir)

        assert data_dir.exists()

    def test_empty(self, project_store):
        assert project_store.list() == []
        assert project_store.get(1) is None

    def test_create_assigns_increasing_ids(self, project_store):
        first = project_store.create({"name": "A"})
        second = project_store.create({"name": "B"})

        assert first["id"] == 1
        assert second["id"] == 2
        assert project_store.get(2)["name"] == "B"

    def test_ids_continue_after_delete(self, project_store):
        project_store.create({"name": "A"})
        project_store.create({"name": "B"})
        project_store.delete(1)

        assert project_store.create({"name": "C"})["id"] == 3

    def test_list_most_recent_first(self, project_store):
        project_store.create({"name": "old", "last_edited": "2024-01-01T00:00:00+00:00"})
        project_store.create({"name": "new", "last_edited": "2024-06-01T00:00:00+00:00"})
        project_store.create({"name": "mid", "last_edited": "2024-03-01T00:00:00+00:00"})

        assert [p["name"] for p in project_store.list()] == ["new", "mid", "old"]

    def test_update_merges(self, project_store):
        project_store.create({"name": "A", "design_size": 100})

        updated = project_store.update(1, {"design_size": 140, "id": 77})

        assert updated == {"name": "A", "design_size": 140, "id": 1}
        assert project_store.get(1)["design_size"] == 140

    def test_update_missing(self, project_store):
        assert project_store.update(5, {"name": "x"}) is None

    def test_delete(self, project_store):
        project_store.create({"name": "A"})

        assert project_store.delete(1) is True
        assert project_store.delete(1) is False
        assert project_store.get(1) is None

    def test_persisted_as_json(self, project_store, temp_data_dir):
        project_store.create({"name": "A"})

        with open(temp_data_dir / "projects.json") as f:
            data = json.load(f)

        assert data == {"1": {"name": "A", "id": 1}}

    def test_shared_between_instances(self, temp_data_dir):
        ProjectStore(temp_data_dir).create({"name": "A"})
        assert ProjectStore(temp_data_dir).get(1)["name"] == "A"
