"""Tests for services/dxf_generator.py."""
import re

import pytest

from cadplan.errors import FloorNotFoundError
from cadplan.services.dxf_generator import DXF_LAYERS, DXFGenerator, fmt, generate_dxf
from cadplan.services.plan_model import Plan


def pairs(dxf: str):
    """(group code, value) pairs of a DXF document."""
    lines = dxf.split("\n")
    if lines[-1] == "":
        lines.pop()
    assert len(lines) % 2 == 0
    return [(lines[i], lines[i + 1]) for i in range(0, len(lines), 2)]


def entities(dxf: str):
    """List of (type, [(code, value), ...]) in the ENTITIES section."""
    items = pairs(dxf)
    start = items.index(("2", "ENTITIES")) + 1
    result = []
    for code, value in items[start:]:
        if code == "0":
            if value == "ENDSEC":
                break
            result.append((value, []))
        else:
            result[-1][1].append((code, value))
    return result


def single_room_plan(doors=(), windows=()):
    return Plan.from_dict({
        "buildingType": "Office",
        "buildingDimensions": {"width": 40, "depth": 30},
        "floors": [{
            "level": "Level 1",
            "totalArea": 100,
            "rooms": [{
                "id": "r1",
                "name": "Office",
                "type": "office",
                "areaSqft": 100,
                "dimensions": {"length": 10, "width": 10},
                "position": {"x": 5, "y": 5},
                "doors": list(doors),
                "windows": list(windows),
            }],
        }],
    })


class TestDocumentStructure:
    def test_sections_in_order(self, valid_plan):
        dxf = generate_dxf(valid_plan)
        sections = [v for c, v in pairs(dxf) if c == "2" and v in ("HEADER", "TABLES", "BLOCKS", "ENTITIES")]
        assert sections == ["HEADER", "TABLES", "BLOCKS", "ENTITIES"]
        assert dxf.startswith("0\nSECTION\n2\nHEADER\n")
        assert dxf.endswith("0\nENDSEC\n0\nEOF\n")

    def test_header_extents_scaled(self, valid_plan):
        dxf = generate_dxf(valid_plan, scale=2)
        assert "9\n$ACADVER\n1\nAC1021\n" in dxf
        assert "9\n$EXTMAX\n10\n80.0000\n20\n60.0000\n30\n0.0\n" in dxf
        assert "9\n$LIMMAX\n10\n80.0000\n20\n60.0000\n" in dxf

    def test_default_extents_without_dimensions(self, valid_plan_data):
        del valid_plan_data["buildingDimensions"]
        dxf = generate_dxf(Plan.from_dict(valid_plan_data))
        assert "9\n$EXTMAX\n10\n50.0000\n20\n40.0000\n" in dxf

    def test_layer_table(self, valid_plan):
        dxf = generate_dxf(valid_plan)
        assert "0\nTABLE\n2\nLAYER\n70\n10\n" in dxf
        assert "0\nLAYER\n2\nA-WALL\n70\n0\n62\n7\n6\nCONTINUOUS\n370\n50\n" in dxf
        assert "0\nLAYER\n2\nA-DOOR\n70\n0\n62\n3\n6\nCONTINUOUS\n370\n18\n" in dxf
        assert "0\nLAYER\n2\nA-GRID\n70\n0\n62\n8\n6\nCONTINUOUS\n370\n9\n" in dxf
        assert len(DXF_LAYERS) == 10

    def test_blocks_section_empty(self, valid_plan):
        dxf = generate_dxf(valid_plan)
        assert "0\nSECTION\n2\nBLOCKS\n0\nENDSEC\n" in dxf

    def test_deterministic(self, valid_plan):
        assert generate_dxf(valid_plan, 0, 1.5) == generate_dxf(valid_plan, 0, 1.5)

    def test_coordinates_have_four_decimals(self, valid_plan):
        dxf = generate_dxf(valid_plan)
        for etype, codes in entities(dxf):
            for code, value in codes:
                if code in ("10", "20", "11", "21", "40", "50", "51"):
                    assert re.fullmatch(r"-?\d+\.\d{4}", value), (etype, code, value)

    def test_floor_out_of_range(self, valid_plan):
        with pytest.raises(FloorNotFoundError) as exc_info:
            DXFGenerator().generate(valid_plan, floor_index=3)
        assert exc_info.value.message == "Floor index 3 not found in plan data"
        with pytest.raises(FloorNotFoundError):
            DXFGenerator().generate(valid_plan, floor_index=-1)


class TestEntities:
    def test_entity_order(self, valid_plan):
        types = [t for t, _ in entities(generate_dxf(valid_plan))]
        # outline, then per room: outline, 3 labels, door (3), window (5)
        room_block = ["LWPOLYLINE", "MTEXT", "MTEXT", "MTEXT", "LINE", "ARC", "LINE"] + ["LINE"] * 5
        assert types == ["LWPOLYLINE"] + room_block * 2 + ["MTEXT", "MTEXT"]

    def test_building_outline(self, valid_plan):
        etype, codes = entities(generate_dxf(valid_plan))[0]
        assert etype == "LWPOLYLINE"
        assert codes[:4] == [("8", "A-WALL"), ("90", "5"), ("70", "1"), ("10", "0.0000")]
        xs = [v for c, v in codes if c == "10"]
        ys = [v for c, v in codes if c == "20"]
        assert xs == ["0.0000", "40.0000", "40.0000", "0.0000", "0.0000"]
        assert ys == ["0.0000", "0.0000", "30.0000", "30.0000", "0.0000"]

    def test_no_outline_without_dimensions(self, valid_plan_data):
        del valid_plan_data["buildingDimensions"]
        first = entities(generate_dxf(Plan.from_dict(valid_plan_data)))[0]
        assert first[1][0] == ("8", "A-WALL-INTR")

    def test_room_labels(self):
        dxf = generate_dxf(single_room_plan())
        labels = [dict(codes) for t, codes in entities(dxf) if t == "MTEXT"]
        assert [l["1"] for l in labels[:3]] == ["OFFICE", "10' x 10'", "100 SF"]
        assert (labels[0]["10"], labels[0]["20"], labels[0]["40"], labels[0]["71"]) == (
            "10.0000", "11.0000", "0.8000", "5"
        )
        assert labels[1]["20"] == "9.5000"
        assert labels[2]["20"] == "8.5000"

    def test_title_block(self):
        dxf = generate_dxf(single_room_plan())
        title, level = [dict(codes) for t, codes in entities(dxf) if t == "MTEXT"][-2:]
        assert title["1"] == "OFFICE"
        assert (title["8"], title["10"], title["20"], title["40"], title["71"]) == (
            "A-ANNO-TITL", "38.0000", "-3.0000", "1.2000", "6"
        )
        assert level["1"] == "Level 1 - 100 SF"
        assert (level["8"], level["20"], level["71"]) == ("A-ANNO-TEXT", "-5.0000", "6")

    @pytest.mark.parametrize("wall,opening,arc,leaf", [
        ("north", (7, 5, 10, 5), (7, 5, 3, 0, 90), (7, 5, 7, 8)),
        ("south", (7, 15, 10, 15), (7, 15, 3, 270, 360), (7, 15, 7, 12)),
        ("west", (5, 7, 5, 10), (5, 7, 3, 0, 90), (5, 7, 8, 7)),
        ("east", (15, 7, 15, 10), (15, 7, 3, 90, 180), (15, 7, 12, 7)),
    ])
    def test_door_geometry(self, wall, opening, arc, leaf):
        dxf = generate_dxf(single_room_plan(doors=[{"wall": wall, "position": 2}]))
        door = [(t, dict(c)) for t, c in entities(dxf) if dict(c).get("8") == "A-DOOR"]
        assert [t for t, _ in door] == ["LINE", "ARC", "LINE"]

        def line(c):
            return tuple(float(c[k]) for k in ("10", "20", "11", "21"))

        assert line(door[0][1]) == opening
        assert tuple(float(door[1][1][k]) for k in ("10", "20", "40", "50", "51")) == arc
        assert line(door[2][1]) == leaf

    def test_north_window_geometry(self):
        dxf = generate_dxf(single_room_plan(windows=[{"wall": "north", "position": 1, "width": 4}]))
        lines = [dict(c) for t, c in entities(dxf) if dict(c).get("8") == "A-GLAZ"]
        coords = [tuple(l[k] for k in ("10", "20", "11", "21")) for l in lines]
        assert coords == [
            ("6.0000", "4.8500", "10.0000", "4.8500"),
            ("6.0000", "5.1500", "10.0000", "5.1500"),
            ("6.0000", "4.8500", "6.0000", "5.1500"),
            ("10.0000", "4.8500", "10.0000", "5.1500"),
            ("8.0000", "4.8500", "8.0000", "5.1500"),
        ]

    def test_east_window_geometry(self):
        dxf = generate_dxf(single_room_plan(windows=[{"wall": "east", "position": 2}]))
        lines = [dict(c) for t, c in entities(dxf) if dict(c).get("8") == "A-GLAZ"]
        coords = [tuple(l[k] for k in ("10", "20", "11", "21")) for l in lines]
        assert coords == [
            ("14.8500", "7.0000", "14.8500", "11.0000"),
            ("15.1500", "7.0000", "15.1500", "11.0000"),
            ("14.8500", "7.0000", "15.1500", "7.0000"),
            ("14.8500", "11.0000", "15.1500", "11.0000"),
            ("14.8500", "9.0000", "15.1500", "9.0000"),
        ]

    def test_unknown_wall_is_skipped(self):
        dxf = generate_dxf(single_room_plan(
            doors=[{"wall": "up", "position": 1}],
            windows=[{"wall": "diagonal", "position": 1}],
        ))
        layers = {dict(c).get("8") for _, c in entities(dxf)}
        assert "A-DOOR" not in layers
        assert "A-GLAZ" not in layers

    def test_scale_applies_to_geometry(self):
        dxf = generate_dxf(single_room_plan(), scale=2)
        room = entities(dxf)[1][1]
        xs = [v for c, v in room if c == "10"]
        assert xs == ["10.0000", "30.0000", "30.0000", "10.0000", "10.0000"]


class TestFormat:
    def test_negative_zero(self):
        assert fmt(-0.0) == "0.0000"
        assert fmt(-0.00001) == "0.0000"

    def test_rounding(self):
        assert fmt(1.23456) == "1.2346"
        assert fmt(-2.5) == "-2.5000"
