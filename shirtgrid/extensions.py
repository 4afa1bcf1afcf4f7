# shirtgrid/extensions.py
from flask_cors import CORS

from .config import Config
from .services.editor import MockupEditor
from .storage.project_store import ProjectStore
from .utils.presets import PresetLibrary

# CORS is a real Flask extension (keeps init_app)
cors = CORS()

# Saved projects, one JSON file on disk
store = ProjectStore(Config.DATA_DIR)

# The single editing session served by this process
editor = MockupEditor(
    mockups_dir=Config.MOCKUPS_DIR,
    presets=PresetLibrary.from_file(Config.PRESETS_FILE),
    default_mockup_id=Config.DEFAULT_MOCKUP_ID,
)
