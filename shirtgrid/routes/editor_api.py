from io import BytesIO
from pathlib import Path

from flask import Blueprint, current_app, jsonify, request, send_file
from werkzeug.utils import secure_filename

from .. import Config
from ..extensions import editor
from ..services.editor import Notice
from ..utils.aspect import AspectClass

bp = Blueprint("editor_api", __name__)


def _to_bool(param):
    if isinstance(param, bool):
        return param
    if isinstance(param, (int, float)):
        return param != 0
    if isinstance(param, str):
        return param.strip().lower() in ("1", "true", "yes", "y", "on")
    return False


def _notice_response(notice: Notice, error_status: int = 422):
    body = {"notice": notice.to_dict(), "state": editor.state()}
    if not notice.ok:
        body["error"] = notice.message
        return jsonify(body), error_status
    return jsonify(body)


@bp.get("/editor/state")
def editor_state():
    return jsonify(editor.state())


# -----------------------------
# Assets
# -----------------------------
@bp.post("/editor/artwork")
def upload_artwork():
    """
    Either multipart form-data with a `file` part, or the raw image as the request body.
    """
    f = request.files.get("file")
    if f is not None:
        if not f.filename:
            return jsonify({"error": "file is required"}), 400
        ext = Path(secure_filename(f.filename)).suffix.lower()
        if ext not in Config.ALLOWED_EXTS:
            return jsonify({"error": f"file must be one of {sorted(Config.ALLOWED_EXTS)}"}), 400
        data = f.read()
    else:
        data = request.get_data()
    if not data:
        return jsonify({"error": "No image data received"}), 400

    notice = editor.set_artwork(data)
    current_app.logger.info("[EDITOR] Artwork upload (%s bytes): %s", len(data), notice.message)
    return _notice_response(notice)


@bp.put("/editor/mockup")
def select_mockup():
    payload = request.json or {}
    if "mockup_id" not in payload:
        return jsonify({"error": "Missing field: mockup_id"}), 400
    notice = editor.set_mockup(payload["mockup_id"])
    status = 404 if notice.message.startswith("Mockup not found") else 422
    return _notice_response(notice, error_status=status)


# -----------------------------
# Placement
# -----------------------------
@bp.patch("/editor/placement")
def update_placement():
    payload = request.json or {}
    try:
        config = editor.set_placement_config(payload)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(config.to_dict())


@bp.put("/editor/slots/<int:index>/offset")
def update_slot_offset(index: int):
    payload = request.json or {}
    try:
        config = editor.set_slot_offset(index, payload.get("x") or 0, payload.get("y") or 0)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(config.to_dict())


@bp.post("/editor/sync")
def update_sync():
    payload = request.json or {}
    config = editor.set_sync_all(_to_bool(payload.get("enabled")))
    return jsonify(config.to_dict())


@bp.post("/editor/select")
def select_slot():
    payload = request.json or {}
    try:
        config = editor.select_slot(payload.get("slot"))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(config.to_dict())


@bp.post("/editor/auto-position")
def auto_position():
    notice = editor.auto_position()
    if notice.level == "warning":
        return jsonify({"error": notice.message, "notice": notice.to_dict()}), 409
    return _notice_response(notice)


@bp.post("/editor/reset-size")
def reset_size():
    return jsonify(editor.reset_design_size().to_dict())


@bp.get("/editor/boxes")
def computed_boxes():
    mockup = editor.mockup
    boxes = editor.compute_boxes()
    labels = [s.label for s in mockup.slots] if mockup else []
    return jsonify([
        {"slot": i, "label": labels[i] if i < len(labels) else None, **box.to_dict()}
        for i, box in enumerate(boxes)
    ])


# -----------------------------
# Presets
# -----------------------------
@bp.get("/editor/presets")
def list_presets():
    return jsonify(editor.presets.to_list())


@bp.put("/editor/presets/<aspect_class>")
def update_preset(aspect_class: str):
    try:
        cls = AspectClass(aspect_class)
    except ValueError:
        return jsonify({"error": f"Unknown aspect class: {aspect_class}"}), 400

    payload = request.json or {}
    values = {k: payload[k] for k in ("width", "height", "y_offset") if k in payload}
    try:
        preset = editor.update_preset(cls, **values)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    presets_file = current_app.config.get("PRESETS_FILE")
    if presets_file and _to_bool(payload.get("persist", True)):
        try:
            editor.presets.save(presets_file)
        except OSError as e:
            current_app.logger.warning("[PRESET] Could not write %s: %s", presets_file, e)
    return jsonify(preset.to_dict())


# -----------------------------
# View: overlay, zoom, preview image
# -----------------------------
@bp.post("/editor/overlay/toggle")
def toggle_overlay():
    return jsonify({"overlay_enabled": editor.toggle_overlay()})


@bp.post("/editor/zoom")
def zoom():
    payload = request.json or {}
    direction = payload.get("direction")
    if direction == "in":
        level = editor.zoom_in()
    elif direction == "out":
        level = editor.zoom_out()
    elif "zoom" in payload:
        try:
            level = editor.set_zoom(float(payload["zoom"]))
        except (TypeError, ValueError):
            return jsonify({"error": "zoom must be a number"}), 400
    else:
        return jsonify({"error": "Send zoom or direction (in|out)"}), 400
    return jsonify({"zoom": level})


@bp.get("/editor/preview")
def preview():
    max_width = request.args.get("max_width", type=int) or current_app.config.get("PREVIEW_MAX_WIDTH")
    frame = editor.display_preview(max_width=max_width)
    if frame is None:
        return jsonify({"error": "No mockup loaded"}), 409

    buf = BytesIO()
    frame.save(buf, "PNG")
    buf.seek(0)
    return send_file(buf, mimetype="image/png")


# -----------------------------
# Export (overlay-free, full resolution)
# -----------------------------
@bp.post("/editor/export")
def export():
    payload = request.get_json(silent=True) or {}
    quality = payload.get("quality", current_app.config.get("DEFAULT_EXPORT_QUALITY", 85))
    fmt = payload.get("format", current_app.config.get("DEFAULT_EXPORT_FORMAT", "JPEG"))
    try:
        result = editor.export_image(quality=quality, fmt=fmt)
    except (TypeError, ValueError) as e:
        return jsonify({"error": str(e)}), 400

    if isinstance(result, Notice):
        return jsonify({"error": result.message, "notice": result.to_dict()}), 409

    if _to_bool(payload.get("save")):
        out_dir = Path(current_app.config.get("GENERATED_MOCKUPS_DIR", Config.GENERATED_MOCKUPS_DIR))
        out_dir.mkdir(parents=True, exist_ok=True)
        out_path = out_dir / result.filename
        out_path.write_bytes(result.encoded_bytes)
        current_app.logger.info("[EXPORT] Saved %s (%s)", out_path, result.describe_size())
        return jsonify({
            "path": str(out_path),
            "estimated_size_mb": result.estimated_size_mb,
            "size": result.describe_size(),
            "quality": result.quality,
            "format": result.format,
        })

    response = send_file(
        BytesIO(result.encoded_bytes),
        mimetype=result.mimetype,
        as_attachment=True,
        download_name=result.filename,
    )
    response.headers["X-Estimated-Size-MB"] = f"{result.estimated_size_mb:.2f}"
    response.headers["X-Export-Quality"] = str(result.quality)
    return response
