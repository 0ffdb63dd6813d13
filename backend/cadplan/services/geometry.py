# backend/cadplan/services/geometry.py
# Geometric validation for generated floor plans
# Room overlap detection, envelope bounds checks, and minimum room sizes

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import logging

from .plan_model import Plan, Room, format_number

logger = logging.getLogger(__name__)

# =============================================================================
# TOLERANCE CONSTANTS (feet)
# =============================================================================

# Adjacent rooms share exact wall edges; rounding noise must not read as overlap
OVERLAP_TOLERANCE = 0.5

# Rooms may overrun the building envelope by this much before being flagged
BOUNDS_TOLERANCE = 1.0

# Minimum room areas (sqft). Checked in order, first substring match on room type wins.
MIN_ROOM_AREAS: Tuple[Tuple[str, float], ...] = (
    ("bedroom", 70),
    ("bathroom", 35),
    ("kitchen", 50),
    ("living", 120),
    ("dining", 80),
    ("office", 64),
)


@dataclass
class ValidationReport:
    """Advisory result; callers decide whether errors are fatal."""
    valid: bool
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {"valid": self.valid, "errors": list(self.errors)}


# =============================================================================
# ROOM OVERLAP DETECTION
# =============================================================================

def rooms_overlap(room1: Room, room2: Room, tolerance: float = OVERLAP_TOLERANCE) -> bool:
    """
    Check if two rooms share interior space.

    Rooms are separated when, on at least one axis, one ends within
    ``tolerance`` of where the other begins.
    """
    if (room1.right <= room2.left + tolerance or
            room1.left >= room2.right - tolerance):
        return False

    if (room1.bottom <= room2.top + tolerance or
            room1.top >= room2.bottom - tolerance):
        return False

    return True


# =============================================================================
# ENVELOPE CHECKS
# =============================================================================

def room_fits_in_envelope(
    room: Room,
    building_width: float,
    building_depth: float,
    tolerance: float = BOUNDS_TOLERANCE
) -> bool:
    """True if the room lies inside the building envelope (plus tolerance)."""
    if room.left < 0 or room.top < 0:
        return False
    return (room.right <= building_width + tolerance and
            room.bottom <= building_depth + tolerance)


def minimum_area_for(room_type: Optional[str]) -> Optional[Tuple[str, float]]:
    """Return (matched_type, min_sqft) for a room type, or None when no minimum applies."""
    lowered = (room_type or "").lower()
    for key, min_area in MIN_ROOM_AREAS:
        if key in lowered:
            return key, min_area
    return None


# =============================================================================
# PLAN VALIDATION
# =============================================================================

def validate_plan_geometry(
    plan: Plan,
    overlap_tolerance: float = OVERLAP_TOLERANCE,
    bounds_tolerance: float = BOUNDS_TOLERANCE
) -> ValidationReport:
    """
    Validate plan geometry: rooms fit inside the building, do not overlap,
    have non-negative positions and meet minimum sizes.

    Never raises. Returns a report with human-readable error strings.
    """
    errors: List[str] = []

    if plan.building_dimensions is None:
        errors.append("Missing building dimensions")
        return ValidationReport(valid=False, errors=errors)

    building_width = plan.building_dimensions.width
    building_depth = plan.building_dimensions.depth

    for floor in plan.floors:
        rooms = floor.rooms

        for i, room in enumerate(rooms):
            if room.position is None or room.dimensions is None:
                errors.append(f'Room "{room.name}" on {floor.level} missing position or dimensions')
                continue

            x, y = room.position.x, room.position.y
            width, length = room.dimensions.width, room.dimensions.length

            if x + width > building_width + bounds_tolerance:
                errors.append(
                    f'Room "{room.name}" exceeds building width '
                    f'({format_number(x)} + {format_number(width)} > {format_number(building_width)})'
                )

            if y + length > building_depth + bounds_tolerance:
                errors.append(
                    f'Room "{room.name}" exceeds building depth '
                    f'({format_number(y)} + {format_number(length)} > {format_number(building_depth)})'
                )

            if x < 0 or y < 0:
                errors.append(f'Room "{room.name}" has negative position')

            # Only check each pair once (i < j)
            for other in rooms[i + 1:]:
                if other.position is None or other.dimensions is None:
                    continue
                if rooms_overlap(room, other, overlap_tolerance):
                    errors.append(f'Rooms "{room.name}" and "{other.name}" overlap on {floor.level}')

            minimum = minimum_area_for(room.type)
            if minimum and room.area_sqft is not None:
                matched_type, min_area = minimum
                if room.area_sqft < min_area:
                    errors.append(
                        f'Room "{room.name}" ({format_number(room.area_sqft)} sqft) is below '
                        f'minimum size for {matched_type} ({format_number(min_area)} sqft)'
                    )

    if errors:
        logger.debug(f"Geometry validation found {len(errors)} issue(s)")

    return ValidationReport(valid=not errors, errors=errors)
