"""
Import/export of plant collections as JSON documents.

The export format is the persisted snapshot: a pretty-printed JSON array of
plant records. Imports accept the same shape loosely; each element is cleaned
on its own so one bad record never fails the batch.
"""

from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Optional, Union

from plantpal.constants import IMPORT_CAP
from plantpal.utils.errors import ParseError, ShapeError
from plantpal.utils.validation import normalize_plant, utc_now_iso

logger = logging.getLogger(__name__)


def parse_import(raw: Union[str, bytes]) -> List[Any]:
    """
    Parse an import document and check its top-level shape.

    Raises:
        ParseError: The document is not valid JSON (or not UTF-8 text).
        ShapeError: The document is valid JSON but not an array.
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseError(f"Failed to import: file is not UTF-8 text ({e.reason})") from e

    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Failed to import: {e}") from e

    if not isinstance(data, list):
        raise ShapeError("Failed to import: not an array")
    return data


def clean_batch(items: List[Any], now: Optional[str] = None, cap: int = IMPORT_CAP) -> List[Dict[str, Any]]:
    """
    Normalize every element and keep at most ``cap`` records.

    Elements that are not objects (numbers, strings, null) carry no fields and
    become all-default "Unnamed" plants.
    """
    now = now or utc_now_iso()
    clean = []
    defaulted = 0
    for item in items:
        if not isinstance(item, dict):
            defaulted += 1
            item = {}
        clean.append(normalize_plant(item, now=now))

    if defaulted:
        logger.info(f"[Import] {defaulted} non-object element(s) imported with default fields")
    if len(clean) > cap:
        logger.info(f"[Import] Dropping {len(clean) - cap} record(s) over the {cap} record cap")
    return clean[:cap]


def dump_snapshot(plants: List[Dict[str, Any]]) -> str:
    return json.dumps(plants, indent=2, ensure_ascii=False)
