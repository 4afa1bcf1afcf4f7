from io import BytesIO

from flask import Blueprint, jsonify, send_file, send_from_directory
from PIL import Image

from ..extensions import editor
from ..utils.catalog import get_mockup, load_background

bp = Blueprint("mockups_pages", __name__)

THUMBNAIL_SIZE = (400, 300)


@bp.get("/mockups/<path:filename>")
def serve_mockup(filename):
    return send_from_directory(editor.mockups_dir, filename)


@bp.get("/mockups/<int:mockup_id>/thumbnail")
def mockup_thumbnail(mockup_id: int):
    """Small JPEG of a catalog photo for the mockup picker."""
    mockup = get_mockup(mockup_id, editor.catalog)
    if mockup is None:
        return jsonify({"error": "Mockup not found"}), 404
    try:
        background = load_background(mockup, editor.mockups_dir)
    except OSError:
        return jsonify({"error": f"Mockup image missing: {mockup.filename}"}), 404

    background.thumbnail(THUMBNAIL_SIZE, Image.LANCZOS)
    buf = BytesIO()
    background.save(buf, "JPEG", quality=80)
    buf.seek(0)
    return send_file(buf, mimetype="image/jpeg")
