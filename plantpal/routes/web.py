"""
Gallery page and form handlers.

Handles:
- Plant gallery (filter by type, sort, due badge)
- Adding plants from the slide-in form
- Marking plants watered and deleting them (with confirmation)
- Theme toggle
- JSON export download and import upload
"""

from __future__ import annotations
from datetime import date
from flask import (
    Blueprint,
    Response,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)
from plantpal.constants import (
    ALL_TYPES,
    DEFAULT_SORT,
    DEFAULT_SUNLIGHT,
    DEFAULT_WATERING_FREQUENCY,
    EXPORT_FILENAME,
    SORT_MODES,
    SUNLIGHT_OPTIONS,
)
from plantpal.extensions import limiter
from plantpal.services.projector import project
from plantpal.services.storage import get_store
from plantpal.utils.errors import PlantPalError, sanitize_error
from plantpal.utils.file_upload import validate_import_file


web_bp = Blueprint("web", __name__)


def _gallery_redirect():
    """Back to the gallery, keeping the active filter/sort from the submitting form."""
    params = {}
    for key in ("type", "sort"):
        value = request.form.get(key) or request.args.get(key)
        if value:
            params[key] = value
    return redirect(url_for("web.index", **params))


def _empty_form() -> dict:
    return {
        "name": "",
        "type": "",
        "wateringFrequency": DEFAULT_WATERING_FREQUENCY,
        "sunlight": DEFAULT_SUNLIGHT,
        "lastWatered": date.today().isoformat(),
        "image": "",
    }


@web_bp.route("/")
def index():
    """Plant gallery with type filter and sort selector."""
    store = get_store()
    view = project(
        store.plants,
        request.args.get("type", ALL_TYPES),
        request.args.get("sort", DEFAULT_SORT),
    )
    return render_template(
        "index.html",
        view=view,
        form=_empty_form(),
        show_form=False,
        sort_modes=SORT_MODES,
        sunlight_options=SUNLIGHT_OPTIONS,
    )


@web_bp.route("/plants/add", methods=["POST"])
def add():
    """Add a new plant from the form."""
    store = get_store()
    try:
        plant = store.add_plant(request.form)
    except PlantPalError as e:
        flash(sanitize_error(e, "validation", "Add plant rejected"), "error")
        # Re-render with the form open and the user's input kept
        view = project(store.plants, request.args.get("type", ALL_TYPES), request.args.get("sort", DEFAULT_SORT))
        form = _empty_form()
        form.update({k: request.form.get(k, v) for k, v in form.items()})
        return render_template(
            "index.html",
            view=view,
            form=form,
            show_form=True,
            sort_modes=SORT_MODES,
            sunlight_options=SUNLIGHT_OPTIONS,
        ), 400

    flash(f"🌱 {plant['name']} added!", "success")
    return _gallery_redirect()


@web_bp.route("/plants/<plant_id>/water", methods=["POST"])
def water(plant_id):
    """Mark a plant as watered now. Unknown ids are ignored."""
    plant = get_store().mark_watered(plant_id)
    if plant:
        flash(f"💧 {plant['name']} watered.", "success")
    return _gallery_redirect()


@web_bp.route("/plants/<plant_id>/delete", methods=["POST"])
def delete(plant_id):
    """Delete a plant. The form must carry confirm=yes (set by the browser prompt)."""
    store = get_store()
    plant = store.get(plant_id)
    removed = store.remove_plant(plant_id, confirm=lambda prompt: request.form.get("confirm") == "yes")
    if removed and plant:
        flash(f"🗑️ {plant['name']} removed from your collection.", "success")
    return _gallery_redirect()


@web_bp.route("/theme/toggle", methods=["POST"])
def toggle_theme():
    get_store().toggle_theme()
    return _gallery_redirect()


@web_bp.route("/export")
def export():
    """Download the full collection as a JSON file."""
    data = get_store().export_plants()
    return Response(
        data,
        mimetype="application/json",
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
    )


@web_bp.route("/import", methods=["POST"])
@limiter.limit(lambda: current_app.config["IMPORT_RATE_LIMIT"])
def import_plants():
    """Merge plants from an uploaded JSON export."""
    file = request.files.get("file")
    is_valid, error, file_bytes = validate_import_file(
        file, max_size=current_app.config.get("IMPORT_MAX_BYTES", 2 * 1024 * 1024)
    )
    if not is_valid:
        flash(error or "Choose a JSON file to import.", "error")
        return _gallery_redirect()

    try:
        count = get_store().import_plants(file_bytes)
    except PlantPalError as e:
        flash(sanitize_error(e, "import", "Import rejected"), "error")
        return _gallery_redirect()

    flash(f"Imported {count} plants (merged).", "success")
    return _gallery_redirect()
