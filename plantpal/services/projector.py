"""
Gallery projection: filter, sort and summarize the plant collection.

Every function here is pure given ``(plants, today)``; inputs are never
mutated and results are recomputed on each call.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from plantpal.constants import ALL_TYPES, DEFAULT_SORT
from plantpal.services.schedule import (
    days_until_next_watering,
    needs_watering_today,
    next_watering_date,
    parse_timestamp,
)

Plant = Dict[str, Any]


@dataclass
class GalleryView:
    """Everything the gallery needs to render one request."""

    cards: List[Plant] = field(default_factory=list)
    types: List[str] = field(default_factory=list)
    due_count: int = 0
    total: int = 0
    selected_type: str = ALL_TYPES
    sort_mode: str = DEFAULT_SORT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plants": self.cards,
            "types": self.types,
            "dueCount": self.due_count,
            "total": self.total,
            "type": self.selected_type,
            "sort": self.sort_mode,
        }


def distinct_types(plants: Iterable[Plant]) -> List[str]:
    """Non-empty plant types, each listed once in first-seen order."""
    seen: Dict[str, None] = {}
    for plant in plants:
        plant_type = plant.get("type")
        if plant_type:
            seen.setdefault(plant_type, None)
    return list(seen)


def filter_plants(plants: Iterable[Plant], selected_type: Optional[str]) -> List[Plant]:
    """Keep plants whose type matches exactly; "all" (or nothing) keeps everything."""
    if not selected_type or selected_type == ALL_TYPES:
        return list(plants)
    return [p for p in plants if p.get("type") == selected_type]


def sort_plants(plants: Iterable[Plant], mode: Optional[str], today: Optional[date] = None) -> List[Plant]:
    """
    Return plants ordered by ``mode``.

    - nextWatering: soonest first, ties keep their original order
    - name: case-insensitive alphabetical
    - createdAt: newest first
    Unknown modes keep the original order.
    """
    plants = list(plants)
    if mode == "nextWatering":
        return sorted(plants, key=lambda p: next_watering_date(p, today))
    if mode == "name":
        return sorted(plants, key=lambda p: (p.get("name", "").casefold(), p.get("name", "")))
    if mode == "createdAt":
        return sorted(plants, key=lambda p: parse_timestamp(p["createdAt"]), reverse=True)
    return plants


def due_count(plants: Iterable[Plant], today: Optional[date] = None) -> int:
    """Number of plants due on ``today``, over whatever collection is passed in."""
    return sum(1 for p in plants if needs_watering_today(p, today))


def plant_card(plant: Plant, today: Optional[date] = None) -> Plant:
    """Copy of ``plant`` with its schedule fields attached for display."""
    card = dict(plant)
    card["nextWatering"] = next_watering_date(plant, today).isoformat()
    card["daysLeft"] = days_until_next_watering(plant, today)
    card["needsWater"] = needs_watering_today(plant, today)
    return card


def project(
    plants: List[Plant],
    selected_type: Optional[str] = ALL_TYPES,
    mode: Optional[str] = DEFAULT_SORT,
    today: Optional[date] = None,
) -> GalleryView:
    """Run the full pipeline: filter, sort, attach schedule info, count due plants."""
    today = today or date.today()
    selected_type = selected_type or ALL_TYPES
    mode = mode or DEFAULT_SORT
    visible = sort_plants(filter_plants(plants, selected_type), mode, today)
    return GalleryView(
        cards=[plant_card(p, today) for p in visible],
        types=distinct_types(plants),
        # Counted over the full collection, not the filtered view
        due_count=due_count(plants, today),
        total=len(plants),
        selected_type=selected_type,
        sort_mode=mode,
    )
