import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


class Config:
    BASE_DIR = Path(__file__).resolve().parent.parent
    DATA_DIR = Path(os.getenv("DATA_DIR", BASE_DIR / "data"))
    ASSETS_DIR = BASE_DIR / "assets"
    MOCKUPS_DIR = Path(os.getenv("MOCKUPS_DIR", ASSETS_DIR / "mockups"))
    GENERATED_MOCKUPS_DIR = BASE_DIR / "generated_mockups"
    PRESETS_FILE = Path(os.getenv("PRESETS_FILE", DATA_DIR / "presets.json"))
    ALLOWED_EXTS = {".png", ".jpg", ".jpeg", ".webp"}

    DEFAULT_MOCKUP_ID = int(os.getenv("DEFAULT_MOCKUP_ID", "1"))
    DEFAULT_EXPORT_QUALITY = int(os.getenv("DEFAULT_EXPORT_QUALITY", "85"))
    DEFAULT_EXPORT_FORMAT = os.getenv("DEFAULT_EXPORT_FORMAT", "JPEG")
    PREVIEW_MAX_WIDTH = int(os.getenv("PREVIEW_MAX_WIDTH", "1600"))

    # Artwork uploads and project payloads carry base64 images.
    MAX_CONTENT_LENGTH = 64 * 1024 * 1024


class DevConfig(Config):
    DEBUG = True


class ProdConfig(Config):
    DEBUG = False
