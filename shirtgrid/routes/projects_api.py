from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request

from ..extensions import editor, store
from ..services.editor import Notice

bp = Blueprint("projects_api", __name__)

# Fields a client may write directly; id is always assigned by the store.
PROJECT_FIELDS = (
    "name",
    "last_edited",
    "design_image",
    "thumbnail",
    "selected_mockup_id",
    "design_size",
    "global_x_offset",
    "global_y_offset",
    "footprint_width",
    "footprint_height",
    "placement_settings",
    "sync_all_slots",
    "selected_preset_index",
)


def _project_id(raw: str):
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _pick(payload: dict) -> dict:
    return {k: payload[k] for k in PROJECT_FIELDS if k in payload}


@bp.get("/projects")
def list_projects():
    return jsonify(store.list())


@bp.get("/projects/<project_id>")
def get_project(project_id):
    pid = _project_id(project_id)
    if pid is None:
        return jsonify({"error": "Invalid project ID"}), 400
    project = store.get(pid)
    if project is None:
        return jsonify({"error": "Project not found"}), 404
    return jsonify(project)


@bp.post("/projects")
def create_project():
    payload = request.json or {}
    missing = [k for k in ("name", "design_image") if not payload.get(k)]
    if missing:
        return jsonify({"error": f"Missing fields: {', '.join(missing)}"}), 400

    record = {
        "last_edited": datetime.now(timezone.utc).isoformat(),
        "thumbnail": None,
        "selected_mockup_id": 1,
        "design_size": 100,
        **_pick(payload),
    }
    project = store.create(record)
    current_app.logger.info("[PROJECT] Created #%s (%s)", project["id"], project["name"])
    return jsonify(project), 201


@bp.put("/projects/<project_id>")
def update_project(project_id):
    pid = _project_id(project_id)
    if pid is None:
        return jsonify({"error": "Invalid project ID"}), 400
    changes = _pick(request.json or {})
    changes.setdefault("last_edited", datetime.now(timezone.utc).isoformat())
    project = store.update(pid, changes)
    if project is None:
        return jsonify({"error": "Project not found"}), 404
    return jsonify(project)


@bp.delete("/projects/<project_id>")
def delete_project(project_id):
    pid = _project_id(project_id)
    if pid is None:
        return jsonify({"error": "Invalid project ID"}), 400
    if not store.delete(pid):
        return jsonify({"error": "Project not found"}), 404
    current_app.logger.info("[PROJECT] Deleted #%s", pid)
    return "", 204


# -----------------------------
# Editor <-> saved project
# -----------------------------
@bp.post("/projects/save")
def save_current():
    """
    Snapshot the editor into a project. JSON body: {"name"?, "id"?}.
    With an id the existing project is overwritten, otherwise a new one is created.
    """
    payload = request.get_json(silent=True) or {}
    record = editor.to_project_record(payload.get("name"))
    if isinstance(record, Notice):
        return jsonify({"error": record.message, "notice": record.to_dict()}), 409

    if payload.get("id") is None:
        project = store.create(record)
        current_app.logger.info("[PROJECT] Saved editor as #%s", project["id"])
        return jsonify(project), 201

    pid = _project_id(payload["id"])
    if pid is None:
        return jsonify({"error": "Invalid project ID"}), 400
    if not payload.get("name"):
        existing = store.get(pid)
        if existing and existing.get("name"):
            record["name"] = existing["name"]
    project = store.update(pid, record)
    if project is None:
        return jsonify({"error": "Project not found"}), 404
    current_app.logger.info("[PROJECT] Saved editor over #%s", pid)
    return jsonify(project)


@bp.post("/projects/<project_id>/load")
def load_into_editor(project_id):
    pid = _project_id(project_id)
    if pid is None:
        return jsonify({"error": "Invalid project ID"}), 400
    project = store.get(pid)
    if project is None:
        return jsonify({"error": "Project not found"}), 404

    notices = editor.load_project_record(project)
    for n in notices:
        current_app.logger.warning("[PROJECT] Loading #%s: %s", pid, n.message)
    return jsonify({
        "id": pid,
        "notices": [n.to_dict() for n in notices],
        "state": editor.state(),
    })
