"""
Wires the plant store into the Flask app.

``init_storage`` builds the configured key-value backend, loads a
``PlantStore`` from it and attaches it to the app. Routes and CLI commands
fetch it with ``get_store()``.
"""

from __future__ import annotations
import os
from flask import current_app

from plantpal.services.persistence import JsonFileBackend, MemoryBackend, Persistence
from plantpal.services.store import PlantStore

EXTENSION_KEY = "plantpal_store"


def build_backend(app) -> Persistence:
    """Create the backend named by ``STORAGE_BACKEND`` ("file" or "memory")."""
    kind = (app.config.get("STORAGE_BACKEND") or "file").strip().lower()
    if kind == "memory":
        app.logger.info("[Storage] Using in-memory backend (data is lost on exit)")
        return MemoryBackend()

    if kind != "file":
        app.logger.warning(f"[Storage] Unknown STORAGE_BACKEND '{kind}', falling back to file backend")

    path = app.config.get("PLANTPAL_DATA_FILE") or os.path.join(app.instance_path, "plantpal.json")
    app.logger.info(f"[Storage] Using JSON file backend at {path}")
    return JsonFileBackend(path)


def init_storage(app, backend: Persistence | None = None) -> PlantStore:
    """
    Load the plant store and attach it to ``app``.

    Call this from the Flask app factory. Tests may pass a ``backend`` to
    bypass configuration.
    """
    store = PlantStore(backend or build_backend(app))
    with app.app_context():
        store.load()
    app.extensions[EXTENSION_KEY] = store
    return store


def get_store() -> PlantStore:
    """Get the plant store of the current app."""
    return current_app.extensions[EXTENSION_KEY]
