# backend/cadplan/services/plan_model.py
"""
Plan data structures shared by the generator, validator and DXF encoder.

JSON payloads use camelCase keys (``buildingType``, ``areaSqft``); the
dataclasses use snake_case. ``from_dict`` is lenient and fills nothing in,
that is the normalizer's job. Keys the core does not understand are kept
in ``extra`` and written back out unchanged.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def format_number(value: Optional[float]) -> str:
    """Render 16.0 as '16' and 12.5 as '12.5'."""
    if value is None:
        return "0"
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(round(value, 4))


def list_or_empty(value: Any) -> List[Any]:
    """The value if it is a list, otherwise an empty list."""
    return value if isinstance(value, list) else []


def as_list(value: Any) -> List[Any]:
    """Copy a list; wrap a single scalar; treat None and "" as empty."""
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return list(value)
    return [value]


def _number_out(value: Optional[float]) -> Any:
    if value is None:
        return None
    value = float(value)
    return int(value) if value.is_integer() else value


@dataclass
class BuildingDimensions:
    width: float
    depth: float

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> Optional["BuildingDimensions"]:
        if not isinstance(data, dict):
            return None
        width = to_float(data.get("width"))
        depth = to_float(data.get("depth"))
        if width is None or depth is None:
            return None
        return cls(width=width, depth=depth)

    def to_dict(self) -> Dict[str, Any]:
        return {"width": _number_out(self.width), "depth": _number_out(self.depth)}


@dataclass
class Dimensions:
    length: float
    width: float

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> Optional["Dimensions"]:
        if not isinstance(data, dict):
            return None
        return cls(
            length=to_float(data.get("length")) or 0.0,
            width=to_float(data.get("width")) or 0.0,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"length": _number_out(self.length), "width": _number_out(self.width)}


@dataclass
class Position:
    x: float = 0.0
    y: float = 0.0

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> Optional["Position"]:
        if not isinstance(data, dict):
            return None
        return cls(x=to_float(data.get("x")) or 0.0, y=to_float(data.get("y")) or 0.0)

    def to_dict(self) -> Dict[str, Any]:
        return {"x": _number_out(self.x), "y": _number_out(self.y)}


@dataclass
class Opening:
    """Door or window on one wall of a room. Position is measured from the wall's left corner."""
    wall: str
    position: float = 0.0
    width: Optional[float] = None
    height: Optional[float] = None
    type: Optional[str] = None
    id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN_KEYS = ("wall", "position", "width", "height", "type", "id")

    @classmethod
    def from_dict(cls, data: Dict) -> "Opening":
        extra = {k: v for k, v in data.items() if k not in cls._KNOWN_KEYS}
        return cls(
            wall=str(data.get("wall", "")).lower(),
            position=to_float(data.get("position")) or 0.0,
            width=to_float(data.get("width")),
            height=to_float(data.get("height")),
            type=data.get("type"),
            id=data.get("id"),
            extra=extra,
        )

    def to_dict(self) -> Dict[str, Any]:
        out = {"wall": self.wall, "position": _number_out(self.position)}
        if self.width is not None:
            out["width"] = _number_out(self.width)
        if self.height is not None:
            out["height"] = _number_out(self.height)
        if self.type is not None:
            out["type"] = self.type
        if self.id is not None:
            out["id"] = self.id
        out.update(self.extra)
        return out


class Door(Opening):
    pass


class Window(Opening):
    pass


@dataclass
class Room:
    id: str
    name: str
    type: str
    area_sqft: Optional[float] = None
    dimensions: Optional[Dimensions] = None
    position: Optional[Position] = None
    doors: List[Door] = field(default_factory=list)
    windows: List[Window] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN_KEYS = ("id", "name", "type", "areaSqft", "dimensions", "position", "doors", "windows")

    @property
    def left(self) -> float:
        return self.position.x

    @property
    def right(self) -> float:
        return self.position.x + self.dimensions.width

    @property
    def top(self) -> float:
        return self.position.y

    @property
    def bottom(self) -> float:
        return self.position.y + self.dimensions.length

    @classmethod
    def from_dict(cls, data: Dict, default_id: str = "") -> "Room":
        return cls(
            id=str(data.get("id") or default_id),
            name=str(data.get("name") or ""),
            type=str(data.get("type") or ""),
            area_sqft=to_float(data.get("areaSqft")),
            dimensions=Dimensions.from_dict(data.get("dimensions")),
            position=Position.from_dict(data.get("position")),
            doors=[Door.from_dict(d) for d in list_or_empty(data.get("doors")) if isinstance(d, dict)],
            windows=[Window.from_dict(w) for w in list_or_empty(data.get("windows")) if isinstance(w, dict)],
            extra={k: v for k, v in data.items() if k not in cls._KNOWN_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "areaSqft": _number_out(self.area_sqft),
            "dimensions": self.dimensions.to_dict() if self.dimensions else None,
            "position": self.position.to_dict() if self.position else None,
            "doors": [d.to_dict() for d in self.doors],
            "windows": [w.to_dict() for w in self.windows],
        }
        out.update(self.extra)
        return out


@dataclass
class Floor:
    level: str
    rooms: List[Room] = field(default_factory=list)
    total_area: Optional[float] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN_KEYS = ("level", "rooms", "totalArea")

    @classmethod
    def from_dict(cls, data: Dict, index: int = 0) -> "Floor":
        rooms = [
            Room.from_dict(r, default_id=f"room-{index}-{i}")
            for i, r in enumerate(list_or_empty(data.get("rooms")))
            if isinstance(r, dict)
        ]
        return cls(
            level=str(data.get("level") or ""),
            rooms=rooms,
            total_area=to_float(data.get("totalArea")),
            extra={k: v for k, v in data.items() if k not in cls._KNOWN_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "level": self.level,
            "totalArea": _number_out(self.total_area),
            "rooms": [r.to_dict() for r in self.rooms],
        }
        out.update(self.extra)
        return out


@dataclass
class Plan:
    building_type: str
    floors: List[Floor] = field(default_factory=list)
    total_area: Optional[float] = None
    building_dimensions: Optional[BuildingDimensions] = None
    exterior: Optional[Dict[str, Any]] = None
    compliance: Optional[Dict[str, Any]] = None
    fire_safety: Optional[Dict[str, Any]] = None
    design_notes: List[Any] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN_KEYS = (
        "buildingType", "floors", "totalArea", "buildingDimensions", "exterior",
        "compliance", "fireSafety", "designNotes", "validationWarnings",
    )

    @classmethod
    def from_dict(cls, data: Dict) -> "Plan":
        return cls(
            building_type=str(data.get("buildingType") or ""),
            floors=[Floor.from_dict(f, i) for i, f in enumerate(list_or_empty(data.get("floors"))) if isinstance(f, dict)],
            total_area=to_float(data.get("totalArea")),
            building_dimensions=BuildingDimensions.from_dict(data.get("buildingDimensions")),
            exterior=data.get("exterior"),
            compliance=data.get("compliance"),
            fire_safety=data.get("fireSafety"),
            design_notes=as_list(data.get("designNotes")),
            validation_warnings=[str(w) for w in as_list(data.get("validationWarnings"))],
            extra={k: v for k, v in data.items() if k not in cls._KNOWN_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "buildingType": self.building_type,
            "totalArea": _number_out(self.total_area),
            "buildingDimensions": self.building_dimensions.to_dict() if self.building_dimensions else None,
            "floors": [f.to_dict() for f in self.floors],
            "exterior": self.exterior,
            "designNotes": self.design_notes,
        }
        if self.compliance is not None:
            out["compliance"] = self.compliance
        if self.fire_safety is not None:
            out["fireSafety"] = self.fire_safety
        if self.validation_warnings:
            out["validationWarnings"] = self.validation_warnings
        out.update(self.extra)
        return out


@dataclass
class TokenUsage:
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None

    def to_dict(self) -> Dict[str, Optional[int]]:
        return {
            "promptTokens": self.prompt_tokens,
            "completionTokens": self.completion_tokens,
            "totalTokens": self.total_tokens,
        }


@dataclass
class GenerationResult:
    plan: Plan
    usage: TokenUsage

    def to_dict(self) -> Dict[str, Any]:
        return {"plan": self.plan.to_dict(), "usage": self.usage.to_dict()}
