import json
import threading
from datetime import date

import pytest

from plantpal.constants import MAX_WATERING_FREQUENCY, PLANTS_KEY, THEME_KEY
from plantpal.services.persistence import MemoryBackend
from plantpal.services.projector import project
from plantpal.services.store import DELETE_PROMPT, PlantStore
from plantpal.utils.errors import ParseError, PersistenceError, ShapeError, ValidationError
from tests.conftest import make_plant


class FailingBackend(MemoryBackend):
    """Backend whose reads and/or writes always fail."""

    def __init__(self, fail_get=False, fail_set=False, **kwargs):
        super().__init__(**kwargs)
        self.fail_get = fail_get
        self.fail_set = fail_set

    def get(self, key):
        if self.fail_get:
            raise PersistenceError("disk on fire")
        return super().get(key)

    def set(self, key, value):
        if self.fail_set:
            raise PersistenceError("quota exceeded")
        super().set(key, value)


def _store(plants=None, theme=None):
    data = {}
    if plants is not None:
        data[PLANTS_KEY] = json.dumps(plants)
    if theme is not None:
        data[THEME_KEY] = theme
    backend = MemoryBackend(data)
    return PlantStore(backend).load(), backend


def test_load_empty_backend():
    store, _ = _store()
    assert store.plants == []
    assert store.theme == "light"


def test_load_restores_snapshot_in_order():
    store, _ = _store([make_plant(id="a"), make_plant(id="b")], theme="dark")
    assert [p["id"] for p in store.plants] == ["a", "b"]
    assert store.theme == "dark"


def test_load_repairs_records_and_duplicate_ids():
    store, _ = _store([make_plant(id="a", wateringFrequency=0), make_plant(id="a"), "junk"])
    plants = store.plants
    assert len(plants) == 2
    assert plants[0]["wateringFrequency"] == 7
    assert plants[0]["id"] != plants[1]["id"]


@pytest.mark.parametrize("raw", ["{not json", '{"a": 1}', "42"])
def test_load_bad_snapshot_starts_empty(raw):
    store = PlantStore(MemoryBackend({PLANTS_KEY: raw})).load()
    assert len(store) == 0


def test_load_backend_failure_starts_empty():
    store = PlantStore(FailingBackend(fail_get=True)).load()
    assert store.plants == []
    assert store.theme == "light"


def test_add_prepends_and_persists():
    store, backend = _store([make_plant(id="old")])
    plant = store.add_plant({"name": "Rosie", "type": "Fern", "wateringFrequency": "3"})
    assert [p["id"] for p in store.plants] == [plant["id"], "old"]
    assert plant["type"] == "fern"
    assert plant["wateringFrequency"] == 3
    saved = json.loads(backend.get(PLANTS_KEY))
    assert saved[0]["id"] == plant["id"]


def test_add_empty_name_rejected():
    store, backend = _store([make_plant()])
    before = backend.get(PLANTS_KEY)
    with pytest.raises(ValidationError):
        store.add_plant({"name": "", "type": "fern"})
    assert len(store) == 1
    assert backend.get(PLANTS_KEY) == before


def test_add_survives_write_failure():
    store = PlantStore(FailingBackend(fail_set=True)).load()
    plant = store.add_plant({"name": "Rosie"})
    assert store.get(plant["id"])["name"] == "Rosie"
    assert store.save() is False


def test_mark_watered_updates_timestamp():
    store, backend = _store([make_plant(id="a", lastWatered="2024-01-01")])
    plant = store.mark_watered("a", now="2024-02-02T10:00:00+00:00")
    assert plant["lastWatered"] == "2024-02-02T10:00:00+00:00"
    assert json.loads(backend.get(PLANTS_KEY))[0]["lastWatered"] == "2024-02-02T10:00:00+00:00"


def test_mark_watered_defaults_to_now():
    store, _ = _store([make_plant(id="a", lastWatered="2024-01-01")])
    plant = store.mark_watered("a")
    assert plant["lastWatered"] != "2024-01-01"
    assert "T" in plant["lastWatered"]


def test_mark_watered_unknown_id_is_noop():
    store, backend = _store([make_plant(id="a")])
    before = backend.get(PLANTS_KEY)
    assert store.mark_watered("missing") is None
    assert backend.get(PLANTS_KEY) == before


def test_remove_requires_confirmation():
    store, _ = _store([make_plant(id="a"), make_plant(id="b")])
    prompts = []

    def deny(prompt):
        prompts.append(prompt)
        return False

    assert store.remove_plant("a", deny) is False
    assert prompts == [DELETE_PROMPT]
    assert len(store) == 2

    assert store.remove_plant("a", lambda prompt: True) is True
    assert [p["id"] for p in store.plants] == ["b"]


def test_remove_unknown_id():
    store, _ = _store([make_plant(id="a")])
    assert store.remove_plant("zzz", lambda prompt: True) is False
    assert len(store) == 1


def test_plants_property_is_a_copy():
    store, _ = _store([make_plant(id="a", name="Rosie")])
    store.plants[0]["name"] = "Changed"
    assert store.get("a")["name"] == "Rosie"


def test_import_merges_in_front():
    store, _ = _store([make_plant(id="existing")])
    raw = json.dumps([{"id": "n1", "name": "One"}, {"name": "Two"}])
    assert store.import_plants(raw) == 2
    plants = store.plants
    assert [p["name"] for p in plants] == ["One", "Two", "Rosie"]
    assert plants[0]["id"] == "n1"


def test_import_renames_colliding_ids():
    store, _ = _store([make_plant(id="a")])
    store.import_plants(json.dumps([make_plant(id="a"), make_plant(id="b"), make_plant(id="b")]))
    ids = [p["id"] for p in store.plants]
    assert len(ids) == len(set(ids)) == 4
    assert "b" in ids


@pytest.mark.parametrize(
    "raw, error",
    [
        ("{oops", ParseError),
        (b"\xff\xfe\x00", ParseError),
        ('{"plants": []}', ShapeError),
        ("null", ShapeError),
    ],
)
def test_import_errors_leave_store_untouched(raw, error):
    store, backend = _store([make_plant(id="a")])
    before = backend.get(PLANTS_KEY)
    with pytest.raises(error):
        store.import_plants(raw)
    assert backend.get(PLANTS_KEY) == before
    assert [p["id"] for p in store.plants] == ["a"]


def test_import_caps_at_500():
    store, _ = _store([make_plant(id="existing")])
    batch = [make_plant(id=f"n{i}", name=f"Plant {i}") for i in range(600)]
    assert store.import_plants(json.dumps(batch)) == 500
    plants = store.plants
    assert len(plants) == 501
    assert plants[0]["id"] == "n0"
    assert plants[499]["id"] == "n499"
    assert plants[-1]["id"] == "existing"


def test_export_import_round_trip():
    original = [
        make_plant(id="a", name="Rosie", wateringFrequency=3),
        make_plant(id="b", name="Spike", type="succulent", wateringFrequency=21),
    ]
    source, _ = _store(original)
    target, _ = _store()
    target.import_plants(source.export_plants())
    assert target.plants == source.plants


def test_export_is_pretty_json():
    store, _ = _store([make_plant(id="a")])
    text = store.export_plants()
    assert text.startswith("[\n  {")
    assert json.loads(text)[0]["id"] == "a"


def test_theme_toggle_and_persist():
    store, backend = _store()
    assert store.toggle_theme() == "dark"
    assert backend.get(THEME_KEY) == "dark"
    assert store.toggle_theme() == "light"
    assert store.set_theme("DARK") == "dark"
    with pytest.raises(ValidationError):
        store.set_theme("sepia")
    assert store.theme == "dark"


def test_unknown_stored_theme_falls_back():
    store, _ = _store(theme="neon")
    assert store.theme == "light"


def test_import_extreme_values_keep_gallery_renderable():
    store, _ = _store()
    raw = json.dumps([
        {"name": "Big", "wateringFrequency": 1e9},
        {"name": "Late", "lastWatered": "9999-12-30"},
        {"name": "Ancient", "createdAt": "9999-12-31T23:59:59Z"},
    ])
    assert store.import_plants(raw, now="2024-01-01T00:00:00+00:00") == 3

    plants = {p["name"]: p for p in store.plants}
    assert plants["Big"]["wateringFrequency"] == MAX_WATERING_FREQUENCY
    assert plants["Late"]["lastWatered"] == "2024-01-01T00:00:00+00:00"
    assert plants["Ancient"]["createdAt"] == "2024-01-01T00:00:00+00:00"

    for mode in ("nextWatering", "name", "createdAt"):
        view = project(store.plants, mode=mode, today=date(2024, 1, 8))
        assert view.total == 3


def test_theme_toggles_are_serialized():
    store, backend = _store()
    threads = [threading.Thread(target=store.toggle_theme) for _ in range(40)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert store.theme == "light"
    assert backend.get(THEME_KEY) == "light"
