"""
Shared test fixtures and configuration for shirtgrid tests.
"""
from io import BytesIO
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient
from PIL import Image

from shirtgrid import create_app
from shirtgrid.services.editor import MockupEditor
from shirtgrid.storage.project_store import ProjectStore
from shirtgrid.utils.catalog import Mockup, Slot
from shirtgrid.utils.presets import PresetLibrary


@pytest.fixture(scope="session")
def app() -> Flask:
    """Create and configure a test Flask application instance."""
    app = create_app()
    app.config.update({
        "TESTING": True,
    })
    yield app


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Create a Flask test client."""
    return app.test_client()


@pytest.fixture
def test_catalog() -> dict:
    """
    Small stand-ins for the catalog photos:
      1 - two shirts on a 200x150 canvas
      2 - eight shirts (2x4) on a 400x300 canvas
      3 - background file never written to disk
    """
    two_up = Mockup(1, "Two Up", "two-up.png", "1x2",
                    (Slot(50, 40, "Left"), Slot(150, 40, "Right")), canvas_size=(200, 150))
    eight_up = Mockup(2, "Eight Up", "eight-up.png", "2x4",
                      tuple(Slot(50 + 100 * (i % 4), 40 + 150 * (i // 4), f"Shirt {i + 1}") for i in range(8)),
                      canvas_size=(400, 300))
    missing = Mockup(3, "Missing", "missing.png", "1x2",
                     (Slot(50, 40, "Left"), Slot(150, 40, "Right")), canvas_size=(200, 150))
    return {m.id: m for m in (two_up, eight_up, missing)}


@pytest.fixture
def mockups_dir(tmp_path: Path) -> Path:
    """Background photos for test_catalog (plain fills, so pixels are predictable)."""
    d = tmp_path / "mockups"
    d.mkdir()
    Image.new("RGB", (200, 150), (200, 200, 200)).save(d / "two-up.png", "PNG")
    Image.new("RGB", (400, 300), (180, 180, 180)).save(d / "eight-up.png", "PNG")
    return d


@pytest.fixture
def editor(mockups_dir: Path, test_catalog: dict) -> MockupEditor:
    """Fresh editor session on the small test catalog, starting on mockup 1."""
    return MockupEditor(mockups_dir=mockups_dir, catalog=test_catalog, presets=PresetLibrary(),
                        default_mockup_id=1)


@pytest.fixture
def temp_data_dir(tmp_path: Path) -> Path:
    """Create a temporary data directory for ProjectStore tests."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def project_store(temp_data_dir: Path) -> ProjectStore:
    """Create a ProjectStore instance with temporary directory."""
    return ProjectStore(temp_data_dir)


@pytest.fixture
def sample_design_png() -> bytes:
    """A 40x20 opaque red design, encoded as PNG."""
    return create_test_png(40, 20)


@pytest.fixture
def make_png():
    """Factory for PNG-encoded test designs of any size and colour."""
    return create_test_png


# Helper functions for tests

def create_test_png(width: int = 100, height: int = 100, color: tuple = (255, 0, 0, 255)) -> bytes:
    """Create a test image and return its PNG bytes."""
    buf = BytesIO()
    Image.new('RGBA', (width, height), color).save(buf, "PNG")
    return buf.getvalue()
