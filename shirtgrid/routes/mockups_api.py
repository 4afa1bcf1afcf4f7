from flask import Blueprint, jsonify

from ..extensions import editor
from ..utils.catalog import list_mockups

bp = Blueprint("mockups_api", __name__)


# -----------------------------
# Catalog: fixed mockup photos and their slot tables
# -----------------------------
@bp.get("/mockups")
def api_list_mockups():
    current = editor.mockup
    items = []
    for m in list_mockups(editor.catalog):
        item = m.to_dict()
        item["slot_count"] = m.slot_count
        item["available"] = (editor.mockups_dir / m.filename).is_file()
        item["selected"] = current is not None and current.id == m.id
        items.append(item)
    return jsonify(items)
