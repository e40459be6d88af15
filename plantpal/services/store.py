"""
Plant store: the in-memory plant collection and its mutations.

The store owns an ordered list of plant records (newest first in raw order)
plus the theme preference. It restores both from an injected key-value
backend on ``load()`` and writes the full snapshot back after every mutation.
Write failures are logged and never roll back in-memory state.
"""

from __future__ import annotations
import copy
import json
import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from plantpal.constants import DEFAULT_THEME, PLANTS_KEY, THEME_KEY, THEMES
from plantpal.services.persistence import Persistence
from plantpal.services.transfer import clean_batch, dump_snapshot, parse_import
from plantpal.utils.errors import PersistenceError, ValidationError, log_info, log_warning
from plantpal.utils.validation import new_plant_id, normalize_plant, utc_now_iso, validate_plant_form

DELETE_PROMPT = "Delete this plant?"

Confirm = Callable[[str], bool]


class PlantStore:
    """Ordered plant collection persisted through a ``Persistence`` backend."""

    def __init__(self, backend: Persistence):
        self.backend = backend
        self._plants: List[Dict[str, Any]] = []
        self._theme = DEFAULT_THEME
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def load(self) -> "PlantStore":
        """Restore plants and theme. Any read failure starts from an empty collection."""
        with self._lock:
            self._plants = self._read_plants()
            self._theme = self._read_theme()
        log_info("[Store] Loaded plants", count=len(self._plants), theme=self._theme)
        return self

    def _read_plants(self) -> List[Dict[str, Any]]:
        try:
            raw = self.backend.get(PLANTS_KEY)
            if not raw:
                return []
            try:
                data = json.loads(raw)
            except ValueError as e:
                raise PersistenceError(f"Stored snapshot is not valid JSON: {e}") from e
            if not isinstance(data, list):
                raise PersistenceError("Stored snapshot is not an array")
        except PersistenceError as e:
            log_warning("[Store] Failed to load plants, starting empty", error=e.message)
            return []

        now = utc_now_iso()
        plants = []
        seen = set()
        for item in data:
            if not isinstance(item, dict):
                continue
            plant = normalize_plant(item, now=now)
            if plant["id"] in seen:
                plant["id"] = new_plant_id()
            seen.add(plant["id"])
            plants.append(plant)
        return plants

    def _read_theme(self) -> str:
        try:
            theme = self.backend.get(THEME_KEY)
        except PersistenceError as e:
            log_warning("[Store] Failed to load theme", error=e.message)
            return DEFAULT_THEME
        return theme if theme in THEMES else DEFAULT_THEME

    def save(self) -> bool:
        """Write the full plant snapshot. Returns False (after logging) if the backend fails."""
        return self._write(PLANTS_KEY, dump_snapshot(self._plants))

    def _write(self, key: str, value: str) -> bool:
        try:
            self.backend.set(key, value)
        except PersistenceError as e:
            log_warning("[Store] Snapshot write failed, keeping in-memory state", key=key, error=e.message)
            return False
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def plants(self) -> List[Dict[str, Any]]:
        """A deep copy of the collection in raw (newest-first) order."""
        with self._lock:
            return copy.deepcopy(self._plants)

    def __len__(self) -> int:
        return len(self._plants)

    def get(self, plant_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            plant = self._find(plant_id)
            return dict(plant) if plant else None

    def _find(self, plant_id: str) -> Optional[Dict[str, Any]]:
        for plant in self._plants:
            if plant["id"] == plant_id:
                return plant
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add_plant(self, form: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Validate form input and prepend a new plant.

        Raises:
            ValidationError: If the name is blank. The collection is unchanged.
        """
        plant = validate_plant_form(form)
        with self._lock:
            while self._find(plant["id"]):
                plant["id"] = new_plant_id()
            self._plants.insert(0, plant)
            self.save()
        log_info("[Store] Plant added", plant_id=plant["id"], plant_name=plant["name"])
        return dict(plant)

    def mark_watered(self, plant_id: str, now: Union[str, datetime, None] = None) -> Optional[Dict[str, Any]]:
        """Set ``lastWatered`` to now. Unknown ids are ignored and return None."""
        if isinstance(now, datetime):
            now = now.isoformat()
        with self._lock:
            plant = self._find(plant_id)
            if plant is None:
                return None
            plant["lastWatered"] = now or utc_now_iso()
            self.save()
            return dict(plant)

    def remove_plant(self, plant_id: str, confirm: Confirm) -> bool:
        """
        Delete a plant after ``confirm`` approves.

        Returns True if a plant was removed. Denied confirmation or an unknown
        id leaves the collection untouched.
        """
        with self._lock:
            if self._find(plant_id) is None:
                return False
        if not confirm(DELETE_PROMPT):
            return False
        with self._lock:
            before = len(self._plants)
            self._plants = [p for p in self._plants if p["id"] != plant_id]
            removed = len(self._plants) != before
            if removed:
                self.save()
        if removed:
            log_info("[Store] Plant removed", plant_id=plant_id)
        return removed

    def import_plants(self, raw: Union[str, bytes], now: Optional[str] = None) -> int:
        """
        Merge an imported JSON array in front of the existing plants.

        Ids that collide with existing plants (or earlier records in the same
        batch) are replaced so ids stay unique.

        Returns:
            Number of plants imported (at most the import cap).

        Raises:
            ParseError: Malformed JSON. The collection is unchanged.
            ShapeError: Top level is not an array. The collection is unchanged.
        """
        batch = clean_batch(parse_import(raw), now=now)
        with self._lock:
            taken = {p["id"] for p in self._plants}
            for plant in batch:
                if plant["id"] in taken:
                    plant["id"] = new_plant_id()
                taken.add(plant["id"])
            self._plants = batch + self._plants
            self.save()
        log_info("[Import] Plants merged", imported=len(batch), total=len(self._plants))
        return len(batch)

    def export_plants(self) -> str:
        """Serialize the full collection as a pretty-printed JSON document."""
        with self._lock:
            return dump_snapshot(self._plants)

    # ------------------------------------------------------------------
    # Theme
    # ------------------------------------------------------------------
    @property
    def theme(self) -> str:
        return self._theme

    def set_theme(self, theme: str) -> str:
        value = str(theme or "").strip().lower()
        if value not in THEMES:
            raise ValidationError("Invalid theme. Must be 'light' or 'dark'.")
        with self._lock:
            self._theme = value
            self._write(THEME_KEY, value)
        return value

    def toggle_theme(self) -> str:
        with self._lock:
            return self.set_theme("light" if self._theme == "dark" else "dark")
