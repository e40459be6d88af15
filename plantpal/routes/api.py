"""
Defines JSON endpoints used by the front end and scripts.

Endpoints:
- /plants: Projected gallery (GET) and add plant (POST)
- /plants/<id>/water: Mark a plant watered
- /plants/<id>: Delete a plant (requires ?confirm=true)
- /export: Full collection as JSON
- /import: Merge a JSON array of plants
- /theme: Read or set the theme preference
"""

from flask import Blueprint, Response, current_app, jsonify, request
from ..constants import ALL_TYPES, DEFAULT_SORT, EXPORT_FILENAME
from ..extensions import limiter
from ..services.projector import project
from ..services.storage import get_store
from ..utils.errors import PlantPalError, sanitize_error


api_bp = Blueprint("api", __name__)


@api_bp.before_request
def _enforce_ajax_for_mutations():
    """Enforce X-Requested-With header on all state-changing API requests.

    Provides CSRF protection for the entire API blueprint because:
    1. Custom headers cannot be set by cross-origin requests without CORS
    2. HTML forms cannot set custom headers
    3. Only JavaScript (same-origin) can set this header
    """
    if request.method in ("POST", "PUT", "DELETE", "PATCH"):
        if request.headers.get("X-Requested-With") != "XMLHttpRequest":
            return jsonify({
                "success": False,
                "error": "Invalid request. Please refresh the page and try again."
            }), 403


def _error(e: PlantPalError, error_type: str, log_prefix: str):
    return jsonify({"success": False, "error": sanitize_error(e, error_type, log_prefix)}), 400


@api_bp.route("/plants", methods=["GET"])
def list_plants():
    """
    Filtered, sorted gallery plus summary counts.

    Query params:
        type: plant type to keep, or "all" (default)
        sort: nextWatering (default) | name | createdAt

    Example response:
        {
            "success": true,
            "plants": [{..., "nextWatering": "2024-01-08", "daysLeft": 3, "needsWater": false}],
            "types": ["fern", "succulent"],
            "dueCount": 1,
            "total": 4,
            "type": "all",
            "sort": "nextWatering"
        }
    """
    view = project(
        get_store().plants,
        request.args.get("type", ALL_TYPES),
        request.args.get("sort", DEFAULT_SORT),
    )
    return jsonify({"success": True, **view.to_dict()}), 200


@api_bp.route("/plants", methods=["POST"])
def create_plant():
    """
    Add a plant.

    Request body (JSON):
        {"name": "Rosie", "type": "Fern", "wateringFrequency": 5,
         "sunlight": "Low light", "lastWatered": "2024-01-01", "image": ""}

    Returns:
        201 with the new plant, 400 if the name is missing
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"success": False, "error": "Invalid request body"}), 400

    try:
        plant = get_store().add_plant(data)
    except PlantPalError as e:
        return _error(e, "validation", "API add plant rejected")
    return jsonify({"success": True, "plant": plant}), 201


@api_bp.route("/plants/<plant_id>/water", methods=["POST"])
def water_plant(plant_id: str):
    """Mark watered; unknown ids succeed with "watered": false."""
    plant = get_store().mark_watered(plant_id)
    return jsonify({"success": True, "watered": plant is not None, "plant": plant}), 200


@api_bp.route("/plants/<plant_id>", methods=["DELETE"])
def delete_plant(plant_id: str):
    """Delete a plant. ``?confirm=true`` answers the delete prompt."""
    confirmed = request.args.get("confirm", "").lower() in ("true", "1", "yes")
    removed = get_store().remove_plant(plant_id, confirm=lambda prompt: confirmed)
    return jsonify({"success": True, "removed": removed}), 200


@api_bp.route("/export", methods=["GET"])
def export_plants():
    return Response(
        get_store().export_plants(),
        mimetype="application/json",
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
    )


@api_bp.route("/import", methods=["POST"])
@limiter.limit(lambda: current_app.config["IMPORT_RATE_LIMIT"])
def import_plants():
    """
    Merge a JSON array of plants (raw request body) in front of the collection.

    Returns:
        200: {"success": true, "imported": n, "total": m}
        400: malformed JSON or not an array
        413: body larger than IMPORT_MAX_BYTES
    """
    max_bytes = current_app.config.get("IMPORT_MAX_BYTES", 2 * 1024 * 1024)
    if request.content_length and request.content_length > max_bytes:
        return jsonify({"success": False, "error": "Import file is too large."}), 413

    store = get_store()
    try:
        count = store.import_plants(request.get_data(cache=False))
    except PlantPalError as e:
        return _error(e, "import", "API import rejected")
    return jsonify({"success": True, "imported": count, "total": len(store)}), 200


@api_bp.route("/theme", methods=["GET"])
def get_theme():
    return jsonify({"success": True, "theme": get_store().theme}), 200


@api_bp.route("/theme", methods=["POST"])
def update_theme():
    """
    Set the theme ("light" or "dark"), or toggle it when no theme is given.

    Request body (JSON):
        {"theme": "light" | "dark"}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    store = get_store()
    try:
        theme = store.set_theme(data["theme"]) if data.get("theme") is not None else store.toggle_theme()
    except PlantPalError as e:
        return _error(e, "validation", "Theme update rejected")
    return jsonify({"success": True, "theme": theme}), 200

