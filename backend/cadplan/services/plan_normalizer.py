# backend/cadplan/services/plan_normalizer.py
"""
Normalize raw AI plan output into a complete Plan.

The model often leaves out derived fields (ids, areas, positions). This
pass fills them in from what is present and rejects payloads that do not
have the floors/rooms structure at all. The input is never mutated.
"""

import copy
import json
import math
import logging
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union

from ..errors import PlanParseError
from .plan_model import (
    BuildingDimensions,
    Dimensions,
    Door,
    Floor,
    Plan,
    Position,
    Room,
    Window,
    list_or_empty,
    to_float,
)

logger = logging.getLogger(__name__)

DEFAULT_BUILDING_TYPE = "Residential"
MIN_BUILDING_SIDE = 20
FALLBACK_BUILDING_DIMENSIONS = (40, 30)

DEFAULT_EXTERIOR = {
    "mainEntrance": {"wall": "south", "position": 0},
    "style": "modern",
}


def _name_contains(*keywords: str) -> Callable[[str], bool]:
    return lambda name: any(k in name for k in keywords)


# Ordered (predicate, room type) pairs, first match wins
ROOM_TYPE_RULES: List[Tuple[Callable[[str], bool], str]] = [
    (_name_contains("bedroom", "master"), "bedroom"),
    (_name_contains("bath", "toilet", "wc"), "bathroom"),
    (_name_contains("kitchen"), "kitchen"),
    (_name_contains("living", "lounge", "drawing"), "living"),
    (_name_contains("dining"), "dining"),
    (_name_contains("office", "study"), "office"),
    (_name_contains("corridor", "hall", "lobby"), "corridor"),
    (_name_contains("stair"), "staircase"),
    (_name_contains("storage", "closet", "store"), "storage"),
    (_name_contains("garage", "parking"), "garage"),
    (_name_contains("balcony", "porch", "veranda"), "outdoor"),
]

DEFAULT_ROOM_TYPE = "room"


def infer_room_type(name: Optional[str]) -> str:
    """Infer a room type from its display name (case-insensitive substring match)."""
    lowered = (name or "").lower()
    for predicate, room_type in ROOM_TYPE_RULES:
        if predicate(lowered):
            return room_type
    return DEFAULT_ROOM_TYPE


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _is_missing(value: Any) -> bool:
    return value is None or value == "" or value == 0


# =============================================================================
# ROOMS / FLOORS
# =============================================================================

def _normalize_room(raw: Mapping[str, Any], floor_index: int, room_index: int) -> Room:
    room_id = raw.get("id")
    if _is_missing(room_id):
        room_id = f"room-{floor_index}-{room_index}"

    name = raw.get("name")
    if _is_missing(name):
        name = raw.get("type") or f"Room {room_index + 1}"

    room_type = raw.get("type")
    if _is_missing(room_type):
        room_type = infer_room_type(str(name))

    dimensions = Dimensions.from_dict(raw.get("dimensions"))
    area = to_float(raw.get("areaSqft"))

    if _is_missing(area) and dimensions is not None:
        area = round_half_up(dimensions.length * dimensions.width)

    if dimensions is None and not _is_missing(area):
        side = round_half_up(math.sqrt(area))
        dimensions = Dimensions(length=side, width=side)

    position = Position.from_dict(raw.get("position")) or Position(0.0, 0.0)

    base = Room.from_dict(raw)
    return Room(
        id=str(room_id),
        name=str(name),
        type=str(room_type),
        area_sqft=area,
        dimensions=dimensions,
        position=position,
        doors=[Door.from_dict(d) for d in list_or_empty(raw.get("doors")) if isinstance(d, dict)],
        windows=[Window.from_dict(w) for w in list_or_empty(raw.get("windows")) if isinstance(w, dict)],
        extra=base.extra,
    )


def _normalize_floor(raw: Mapping[str, Any], floor_index: int) -> Floor:
    level = raw.get("level")
    if _is_missing(level):
        level = "Ground" if floor_index == 0 else f"Floor {floor_index}"

    raw_rooms = raw.get("rooms")
    if not isinstance(raw_rooms, list):
        raise ValueError(f"Floor {level} is missing rooms array")
    if not raw_rooms:
        raise ValueError(f"Floor {level} must have at least one room")

    rooms = [
        _normalize_room(r, floor_index, i)
        for i, r in enumerate(raw_rooms)
        if isinstance(r, Mapping)
    ]
    if not rooms:
        raise ValueError(f"Floor {level} must have at least one room")

    total_area = to_float(raw.get("totalArea"))
    if _is_missing(total_area):
        total_area = sum(r.area_sqft or 0 for r in rooms)

    base = Floor.from_dict(raw, floor_index)
    return Floor(level=str(level), rooms=rooms, total_area=total_area, extra=base.extra)


def calculate_building_dimensions(rooms: List[Room]) -> BuildingDimensions:
    """Bounding box of the given rooms, never smaller than 20x20 ft."""
    if not rooms:
        return BuildingDimensions(*FALLBACK_BUILDING_DIMENSIONS)

    max_x = 0.0
    max_y = 0.0
    for room in rooms:
        if room.position is None or room.dimensions is None:
            continue
        max_x = max(max_x, room.right)
        max_y = max(max_y, room.bottom)

    return BuildingDimensions(
        width=max(max_x, MIN_BUILDING_SIDE),
        depth=max(max_y, MIN_BUILDING_SIDE),
    )


# =============================================================================
# PLAN
# =============================================================================

def normalize_plan(
    raw: Union[str, bytes, Mapping[str, Any]],
    meta: Optional[Mapping[str, Any]] = None
) -> Plan:
    """
    Build a complete Plan from raw AI output.

    Raises:
        PlanParseError: if the payload is not JSON, has no floors array,
            or any floor has no rooms.
    """
    meta = meta or {}

    try:
        data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
        if not isinstance(data, Mapping):
            raise ValueError("Response is not a JSON object")

        raw_floors = data.get("floors")
        if not isinstance(raw_floors, list):
            raise ValueError("Missing or invalid floors array in response")
        if not raw_floors:
            raise ValueError("Plan must have at least one floor")

        floors = []
        for index, raw_floor in enumerate(raw_floors):
            if not isinstance(raw_floor, Mapping):
                raise ValueError(f"Floor {index} is not an object")
            floors.append(_normalize_floor(raw_floor, index))

        base = Plan.from_dict(data)

    except (ValueError, TypeError, AttributeError) as e:
        # json.JSONDecodeError is a ValueError; wrongly typed fields raise the others
        preview = raw[:500] if isinstance(raw, (str, bytes)) else ""
        logger.error(f"Failed to parse AI response: {e} (preview: {preview!r})")
        raise PlanParseError(f"Failed to parse AI response: {e}") from e

    building_type = data.get("buildingType")
    if _is_missing(building_type):
        building_type = meta.get("buildingType") or DEFAULT_BUILDING_TYPE

    building_dimensions = BuildingDimensions.from_dict(data.get("buildingDimensions"))
    if building_dimensions is None:
        building_dimensions = calculate_building_dimensions(floors[0].rooms)

    total_area = to_float(data.get("totalArea"))
    if _is_missing(total_area):
        total_area = sum(f.total_area or 0 for f in floors)

    exterior = data.get("exterior") or copy.deepcopy(DEFAULT_EXTERIOR)

    return Plan(
        building_type=str(building_type),
        floors=floors,
        total_area=total_area,
        building_dimensions=building_dimensions,
        exterior=exterior,
        compliance=base.compliance,
        fire_safety=base.fire_safety,
        design_notes=base.design_notes,
        validation_warnings=[],
        extra=base.extra,
    )
