# backend/cadplan/services/dxf_generator.py
"""
DXF Floor Plan Generator
========================
Encodes one floor of a plan as an AutoCAD-compatible ASCII DXF (AC1021).

Sections:
- HEADER: version, units, extents from building dimensions x scale
- TABLES: line type, AIA-style layers, text style
- BLOCKS: reserved, empty
- ENTITIES: building outline, room outlines and labels, doors, windows, title

Coordinates are emitted with fixed 4-decimal precision so identical input
always produces byte-identical output.
"""

import math
import logging
from typing import List, Optional, Sequence, Tuple

from ..errors import FloorNotFoundError
from .plan_model import Floor, Opening, Plan, Room, format_number

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# Layer names (AIA CAD layer guidelines)
DXF_LAYERS = {
    'walls': 'A-WALL',
    'walls_interior': 'A-WALL-INTR',
    'doors': 'A-DOOR',
    'windows': 'A-GLAZ',
    'rooms': 'A-AREA',
    'labels': 'A-ANNO-TEXT',
    'dimensions': 'A-ANNO-DIMS',
    'furniture': 'A-FURN',
    'grid': 'A-GRID',
    'title': 'A-ANNO-TITL',
}

# AutoCAD color index
DXF_COLORS = {
    'white': 7,
    'red': 1,
    'yellow': 2,
    'green': 3,
    'cyan': 4,
    'blue': 5,
    'magenta': 6,
    'gray': 8,
}

# (layer, color, lineweight in 1/100 mm), in table order
LAYER_DEFINITIONS: List[Tuple[str, int, int]] = [
    (DXF_LAYERS['walls'], DXF_COLORS['white'], 50),
    (DXF_LAYERS['walls_interior'], DXF_COLORS['white'], 25),
    (DXF_LAYERS['doors'], DXF_COLORS['green'], 18),
    (DXF_LAYERS['windows'], DXF_COLORS['cyan'], 18),
    (DXF_LAYERS['rooms'], DXF_COLORS['gray'], 13),
    (DXF_LAYERS['labels'], DXF_COLORS['white'], 13),
    (DXF_LAYERS['dimensions'], DXF_COLORS['red'], 13),
    (DXF_LAYERS['furniture'], DXF_COLORS['magenta'], 13),
    (DXF_LAYERS['grid'], DXF_COLORS['gray'], 9),
    (DXF_LAYERS['title'], DXF_COLORS['white'], 35),
]

# Fallback extents when the plan has no building dimensions (feet)
DEFAULT_BUILDING_WIDTH = 50
DEFAULT_BUILDING_DEPTH = 40

DEFAULT_DOOR_WIDTH = 3      # feet
DEFAULT_WINDOW_WIDTH = 4    # feet
WINDOW_LINE_OFFSET = 0.15   # half gap between the glazing lines, feet

# MTEXT attachment points
ATTACH_MIDDLE_LEFT = 4
ATTACH_MIDDLE_CENTER = 5
ATTACH_MIDDLE_RIGHT = 6

ALIGNMENTS = {
    'left': ATTACH_MIDDLE_LEFT,
    'center': ATTACH_MIDDLE_CENTER,
    'right': ATTACH_MIDDLE_RIGHT,
}


def fmt(value: float) -> str:
    """Fixed 4-decimal coordinate; -0.0000 is written as 0.0000."""
    text = f"{float(value):.4f}"
    if text == "-0.0000":
        return "0.0000"
    return text


class DXFGenerator:
    """Generate ASCII DXF drawings for a single floor of a plan"""

    def generate(self, plan: Plan, floor_index: int = 0, scale: float = 1.0) -> str:
        """
        Encode one floor as DXF text.

        Raises:
            FloorNotFoundError: floor_index is outside plan.floors
        """
        if floor_index < 0 or floor_index >= len(plan.floors):
            raise FloorNotFoundError(floor_index)

        floor = plan.floors[floor_index]
        lines: List[str] = []

        self._header(lines, plan, scale)
        self._tables(lines)
        self._blocks(lines)
        self._entities(lines, plan, floor, scale)
        lines += ['0', 'EOF']

        logger.debug(
            f"DXF generated for floor {floor_index} ({floor.level}): "
            f"{len(floor.rooms)} rooms, {len(lines)} lines"
        )
        return "\n".join(lines) + "\n"

    # =========================================================================
    # SECTIONS
    # =========================================================================

    def _extents(self, plan: Plan, scale: float) -> Tuple[float, float]:
        dims = plan.building_dimensions
        width = (dims.width if dims and dims.width else DEFAULT_BUILDING_WIDTH) * scale
        depth = (dims.depth if dims and dims.depth else DEFAULT_BUILDING_DEPTH) * scale
        return width, depth

    def _header(self, out: List[str], plan: Plan, scale: float):
        width, depth = self._extents(plan, scale)
        out += [
            '0', 'SECTION', '2', 'HEADER',
            '9', '$ACADVER', '1', 'AC1021',
            '9', '$DWGCODEPAGE', '3', 'ANSI_1252',
            '9', '$INSBASE', '10', '0.0', '20', '0.0', '30', '0.0',
            '9', '$EXTMIN', '10', '0.0', '20', '0.0', '30', '0.0',
            '9', '$EXTMAX', '10', fmt(width), '20', fmt(depth), '30', '0.0',
            '9', '$LIMMIN', '10', '0.0', '20', '0.0',
            '9', '$LIMMAX', '10', fmt(width), '20', fmt(depth),
            '9', '$INSUNITS', '70', '1',
            '9', '$LUNITS', '70', '2',
            '9', '$LUPREC', '70', '4',
            '9', '$MEASUREMENT', '70', '0',
            '0', 'ENDSEC',
        ]

    def _tables(self, out: List[str]):
        out += ['0', 'SECTION', '2', 'TABLES']

        # Line types
        out += [
            '0', 'TABLE', '2', 'LTYPE', '70', '1',
            '0', 'LTYPE', '2', 'CONTINUOUS', '70', '0', '3', 'Solid line',
            '72', '65', '73', '0', '40', '0.0',
            '0', 'ENDTAB',
        ]

        # Layers
        out += ['0', 'TABLE', '2', 'LAYER', '70', str(len(LAYER_DEFINITIONS))]
        for name, color, lineweight in LAYER_DEFINITIONS:
            out += [
                '0', 'LAYER', '2', name, '70', '0',
                '62', str(color), '6', 'CONTINUOUS', '370', str(lineweight),
            ]
        out += ['0', 'ENDTAB']

        # Text style
        out += [
            '0', 'TABLE', '2', 'STYLE', '70', '1',
            '0', 'STYLE', '2', 'STANDARD', '70', '0',
            '40', '0.0', '41', '1.0', '50', '0.0', '71', '0', '42', '0.2',
            '3', 'txt', '4', '',
            '0', 'ENDTAB',
        ]

        out += ['0', 'ENDSEC']

    def _blocks(self, out: List[str]):
        out += ['0', 'SECTION', '2', 'BLOCKS', '0', 'ENDSEC']

    def _entities(self, out: List[str], plan: Plan, floor: Floor, scale: float):
        out += ['0', 'SECTION', '2', 'ENTITIES']

        # Building outline
        if plan.building_dimensions is not None:
            bw = plan.building_dimensions.width * scale
            bd = plan.building_dimensions.depth * scale
            self._polyline(out, [(0, 0), (bw, 0), (bw, bd), (0, bd), (0, 0)], DXF_LAYERS['walls'])

        for room in floor.rooms:
            self._room(out, room, scale)

        # Title block, right aligned below the drawing
        width, _ = self._extents(plan, scale)
        self._mtext(
            out, (plan.building_type or 'FLOOR PLAN').upper(),
            width - 2, -3, DXF_LAYERS['title'], 1.2 * scale, 'right'
        )
        self._mtext(
            out, f"{floor.level} - {format_number(floor.total_area or 0)} SF",
            width - 2, -5, DXF_LAYERS['labels'], 0.6 * scale, 'right'
        )

        out += ['0', 'ENDSEC']

    # =========================================================================
    # ROOMS, DOORS, WINDOWS
    # =========================================================================

    def _room(self, out: List[str], room: Room, scale: float):
        fallback_side = math.sqrt(room.area_sqft) if room.area_sqft and room.area_sqft > 0 else 0.0

        x = (room.position.x if room.position else 0) * scale
        y = (room.position.y if room.position else 0) * scale
        w = ((room.dimensions.width if room.dimensions else 0) or fallback_side) * scale
        h = ((room.dimensions.length if room.dimensions else 0) or fallback_side) * scale

        self._polyline(
            out, [(x, y), (x + w, y), (x + w, y + h), (x, y + h), (x, y)],
            DXF_LAYERS['walls_interior']
        )

        cx = x + w / 2
        cy = y + h / 2

        dim_w = (room.dimensions.width if room.dimensions else 0) or (round(w / scale) if scale else 0)
        dim_l = (room.dimensions.length if room.dimensions else 0) or (round(h / scale) if scale else 0)

        self._mtext(out, room.name.upper(), cx, cy + 1, DXF_LAYERS['labels'], 0.8 * scale)
        self._mtext(
            out, f"{format_number(dim_w)}' x {format_number(dim_l)}'",
            cx, cy - 0.5, DXF_LAYERS['labels'], 0.5 * scale
        )
        self._mtext(
            out, f"{format_number(room.area_sqft)} SF",
            cx, cy - 1.5, DXF_LAYERS['labels'], 0.4 * scale
        )

        for door in room.doors:
            self._door(out, x, y, w, h, door, scale)
        for window in room.windows:
            self._window(out, x, y, w, h, window, scale)

    def _door(self, out: List[str], x: float, y: float, w: float, h: float, door: Opening, scale: float):
        """Opening segment, 90 degree swing arc and door leaf."""
        dw = (door.width or DEFAULT_DOOR_WIDTH) * scale
        pos = (door.position or 0) * scale
        layer = DXF_LAYERS['doors']

        if door.wall == 'north':
            dx, dy = x + pos, y
            self._line(out, dx, dy, dx + dw, dy, layer)
            self._arc(out, dx, dy, dw, 0, 90, layer)
            self._line(out, dx, dy, dx, dy + dw, layer)
        elif door.wall == 'south':
            dx, dy = x + pos, y + h
            self._line(out, dx, dy, dx + dw, dy, layer)
            self._arc(out, dx, dy, dw, 270, 360, layer)
            self._line(out, dx, dy, dx, dy - dw, layer)
        elif door.wall == 'west':
            dx, dy = x, y + pos
            self._line(out, dx, dy, dx, dy + dw, layer)
            self._arc(out, dx, dy, dw, 0, 90, layer)
            self._line(out, dx, dy, dx + dw, dy, layer)
        elif door.wall == 'east':
            dx, dy = x + w, y + pos
            self._line(out, dx, dy, dx, dy + dw, layer)
            self._arc(out, dx, dy, dw, 90, 180, layer)
            self._line(out, dx, dy, dx - dw, dy, layer)
        else:
            logger.debug(f"Skipping door on unknown wall {door.wall!r}")

    def _window(self, out: List[str], x: float, y: float, w: float, h: float, window: Opening, scale: float):
        """Double glazing lines, two end caps and a centre divider."""
        ww = (window.width or DEFAULT_WINDOW_WIDTH) * scale
        pos = (window.position or 0) * scale
        off = WINDOW_LINE_OFFSET * scale
        layer = DXF_LAYERS['windows']

        if window.wall in ('north', 'south'):
            wx = x + pos
            wy = y if window.wall == 'north' else y + h
            self._line(out, wx, wy - off, wx + ww, wy - off, layer)
            self._line(out, wx, wy + off, wx + ww, wy + off, layer)
            self._line(out, wx, wy - off, wx, wy + off, layer)
            self._line(out, wx + ww, wy - off, wx + ww, wy + off, layer)
            self._line(out, wx + ww * 0.5, wy - off, wx + ww * 0.5, wy + off, layer)
        elif window.wall in ('west', 'east'):
            wx = x if window.wall == 'west' else x + w
            wy = y + pos
            self._line(out, wx - off, wy, wx - off, wy + ww, layer)
            self._line(out, wx + off, wy, wx + off, wy + ww, layer)
            self._line(out, wx - off, wy, wx + off, wy, layer)
            self._line(out, wx - off, wy + ww, wx + off, wy + ww, layer)
            self._line(out, wx - off, wy + ww * 0.5, wx + off, wy + ww * 0.5, layer)
        else:
            logger.debug(f"Skipping window on unknown wall {window.wall!r}")

    # =========================================================================
    # PRIMITIVES
    # =========================================================================

    def _polyline(self, out: List[str], points: Sequence[Tuple[float, float]], layer: str, closed: bool = True):
        out += ['0', 'LWPOLYLINE', '8', layer, '90', str(len(points)), '70', '1' if closed else '0']
        for px, py in points:
            out += ['10', fmt(px), '20', fmt(py)]

    def _line(self, out: List[str], x1: float, y1: float, x2: float, y2: float, layer: str):
        out += ['0', 'LINE', '8', layer, '10', fmt(x1), '20', fmt(y1), '11', fmt(x2), '21', fmt(y2)]

    def _arc(self, out: List[str], cx: float, cy: float, radius: float, start: float, end: float, layer: str):
        out += [
            '0', 'ARC', '8', layer,
            '10', fmt(cx), '20', fmt(cy), '40', fmt(radius),
            '50', fmt(start), '51', fmt(end),
        ]

    def _mtext(self, out: List[str], text: str, x: float, y: float, layer: str,
               height: float, align: str = 'center'):
        out += [
            '0', 'MTEXT', '8', layer,
            '10', fmt(x), '20', fmt(y), '40', fmt(height),
            '71', str(ALIGNMENTS.get(align, ATTACH_MIDDLE_CENTER)),
            '1', text,
        ]


# Factory function for easy instantiation
def generate_dxf(plan: Plan, floor_index: int = 0, scale: float = 1.0,
                 generator: Optional[DXFGenerator] = None) -> str:
    """Encode one floor of a plan as DXF text"""
    return (generator or DXFGenerator()).generate(plan, floor_index, scale)
