"""Tests for services/geometry.py: overlap, bounds and minimum sizes."""
import pytest

from cadplan.services.geometry import (
    BOUNDS_TOLERANCE,
    OVERLAP_TOLERANCE,
    minimum_area_for,
    room_fits_in_envelope,
    rooms_overlap,
    validate_plan_geometry,
)
from cadplan.services.plan_model import Dimensions, Plan, Position, Room


def make_room(name, x, y, width, length, room_type="room", area=None):
    return Room(
        id=name.lower(),
        name=name,
        type=room_type,
        area_sqft=area if area is not None else width * length,
        dimensions=Dimensions(length=length, width=width),
        position=Position(x, y),
    )


def plan_with(rooms, width=40, depth=30):
    return Plan.from_dict({
        "buildingType": "Residential",
        "buildingDimensions": {"width": width, "depth": depth},
        "floors": [{"level": "Ground", "rooms": [r.to_dict() for r in rooms]}],
    })


class TestRoomsOverlap:
    def test_shared_wall_is_not_overlap(self):
        a = make_room("A", 0, 0, 16, 14)
        b = make_room("B", 16, 0, 12, 10)
        assert not rooms_overlap(a, b)
        assert not rooms_overlap(b, a)

    def test_within_tolerance_is_not_overlap(self):
        a = make_room("A", 0, 0, 10, 10)
        b = make_room("B", 10 - OVERLAP_TOLERANCE, 0, 10, 10)
        assert not rooms_overlap(a, b)

    def test_vertical_separation(self):
        a = make_room("A", 0, 0, 10, 10)
        b = make_room("B", 0, 10.2, 10, 10)
        assert not rooms_overlap(a, b)

    def test_interpenetrating_rooms_overlap(self):
        a = make_room("A", 0, 0, 10, 10)
        b = make_room("B", 5, 5, 10, 10)
        assert rooms_overlap(a, b)
        assert rooms_overlap(b, a)

    def test_contained_room_overlaps(self):
        outer = make_room("Outer", 0, 0, 20, 20)
        inner = make_room("Inner", 5, 5, 5, 5)
        assert rooms_overlap(outer, inner)

    def test_custom_tolerance(self):
        a = make_room("A", 0, 0, 10, 10)
        b = make_room("B", 9, 0, 10, 10)
        assert rooms_overlap(a, b)
        assert not rooms_overlap(a, b, tolerance=1.0)


class TestEnvelope:
    def test_fits(self):
        assert room_fits_in_envelope(make_room("A", 0, 0, 40, 30), 40, 30)

    def test_overrun_within_tolerance(self):
        assert room_fits_in_envelope(make_room("A", 31, 0, 10, 10), 40, 30)

    def test_overrun_beyond_tolerance(self):
        assert not room_fits_in_envelope(make_room("A", 35, 0, 10, 10), 40, 30)

    def test_negative_position(self):
        assert not room_fits_in_envelope(make_room("A", -1, 0, 10, 10), 40, 30)

    def test_tolerance_constant(self):
        assert BOUNDS_TOLERANCE == 1.0
        assert OVERLAP_TOLERANCE == 0.5


class TestMinimumArea:
    @pytest.mark.parametrize("room_type,expected", [
        ("bedroom", ("bedroom", 70)),
        ("master_bedroom", ("bedroom", 70)),
        ("Bathroom", ("bathroom", 35)),
        ("kitchen", ("kitchen", 50)),
        ("living", ("living", 120)),
        ("dining", ("dining", 80)),
        ("office", ("office", 64)),
    ])
    def test_known_types(self, room_type, expected):
        assert minimum_area_for(room_type) == expected

    def test_unknown_type(self):
        assert minimum_area_for("garage") is None
        assert minimum_area_for(None) is None


class TestValidatePlanGeometry:
    def test_adjacent_rooms_are_valid(self):
        plan = plan_with([
            make_room("A", 0, 0, 16, 14),
            make_room("B", 16, 0, 12, 10),
        ])
        report = validate_plan_geometry(plan)
        assert report.valid
        assert report.errors == []

    def test_overlap_reported_once(self):
        plan = plan_with([
            make_room("A", 0, 0, 10, 10),
            make_room("B", 5, 5, 10, 10),
        ], width=20, depth=20)
        report = validate_plan_geometry(plan)
        assert not report.valid
        assert report.errors == ['Rooms "A" and "B" overlap on Ground']

    def test_width_overrun(self):
        plan = plan_with([make_room("Study", 35, 0, 10, 10)])
        report = validate_plan_geometry(plan)
        assert 'Room "Study" exceeds building width (35 + 10 > 40)' in report.errors

    def test_depth_overrun(self):
        plan = plan_with([make_room("Store", 0, 25, 10, 10)])
        report = validate_plan_geometry(plan)
        assert 'Room "Store" exceeds building depth (25 + 10 > 30)' in report.errors

    def test_negative_position(self):
        plan = plan_with([make_room("Porch", -2, 0, 5, 5)])
        report = validate_plan_geometry(plan)
        assert 'Room "Porch" has negative position' in report.errors

    def test_undersized_room(self):
        plan = plan_with([make_room("Bed 2", 0, 0, 6, 10, room_type="bedroom", area=60)])
        report = validate_plan_geometry(plan)
        assert report.errors == [
            'Room "Bed 2" (60 sqft) is below minimum size for bedroom (70 sqft)'
        ]

    def test_missing_building_dimensions(self):
        plan = Plan.from_dict({"buildingType": "Residential", "floors": []})
        report = validate_plan_geometry(plan)
        assert report.errors == ["Missing building dimensions"]

    def test_missing_room_geometry(self):
        plan = Plan.from_dict({
            "buildingDimensions": {"width": 40, "depth": 30},
            "floors": [{"level": "Ground", "rooms": [{"name": "Hall", "areaSqft": 50}]}],
        })
        report = validate_plan_geometry(plan)
        assert report.errors == ['Room "Hall" on Ground missing position or dimensions']

    def test_does_not_raise_on_bad_input(self, overlapping_plan_data):
        report = validate_plan_geometry(Plan.from_dict(overlapping_plan_data))
        assert report.to_dict() == {
            "valid": False,
            "errors": ['Rooms "A" and "B" overlap on Ground'],
        }
