import json

import pytest

from plantpal.services.transfer import clean_batch, dump_snapshot, parse_import
from plantpal.utils.errors import ParseError, ShapeError

NOW = "2024-05-01T12:00:00+00:00"


def test_parse_accepts_text_and_bytes():
    assert parse_import('[{"name": "A"}]') == [{"name": "A"}]
    assert parse_import(b'\xef\xbb\xbf[{"name": "A"}]') == [{"name": "A"}]


def test_parse_malformed():
    with pytest.raises(ParseError) as exc:
        parse_import("[{]")
    assert exc.value.message.startswith("Failed to import")


def test_parse_not_an_array():
    with pytest.raises(ShapeError) as exc:
        parse_import('{"name": "A"}')
    assert "not an array" in exc.value.message


def test_clean_batch_defaults_each_record_independently():
    batch = clean_batch([{"name": "Good", "wateringFrequency": 3}, {"wateringFrequency": "x"}, 5, None], now=NOW)
    assert [p["name"] for p in batch] == ["Good", "Unnamed", "Unnamed", "Unnamed"]
    assert [p["wateringFrequency"] for p in batch] == [3, 7, 7, 7]
    assert batch[1]["lastWatered"] == NOW
    assert len({p["id"] for p in batch}) == 4


def test_clean_batch_turns_non_objects_into_default_plants():
    batch = clean_batch([1, "fern", [2]], now=NOW)
    assert len(batch) == 3
    assert all(p["type"] == "unknown" and p["createdAt"] == NOW for p in batch)


def test_clean_batch_caps():
    assert len(clean_batch([{}] * 12, now=NOW, cap=10)) == 10
    assert len(clean_batch([{}] * 600, now=NOW)) == 500


def test_dump_snapshot_keeps_unicode():
    text = dump_snapshot([{"name": "Fleur 🌸"}])
    assert "🌸" in text
    assert json.loads(text) == [{"name": "Fleur 🌸"}]
