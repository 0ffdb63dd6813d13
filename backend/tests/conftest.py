"""Shared fixtures for planner and CAD export tests."""
import copy
import json

import pytest

from cadplan.services.completion_provider import CompletionProvider, CompletionResult
from cadplan.services.plan_model import Plan, TokenUsage


VALID_PLAN = {
    "buildingType": "Residential",
    "totalArea": 364,
    "buildingDimensions": {"width": 40, "depth": 30},
    "floors": [
        {
            "level": "Ground Floor",
            "totalArea": 364,
            "rooms": [
                {
                    "id": "living-1",
                    "name": "Living Room",
                    "type": "living",
                    "areaSqft": 224,
                    "dimensions": {"length": 14, "width": 16},
                    "position": {"x": 0, "y": 0},
                    "doors": [{"wall": "south", "position": 2, "width": 3}],
                    "windows": [{"wall": "north", "position": 4, "width": 4}],
                },
                {
                    "id": "bed-1",
                    "name": "Bedroom",
                    "type": "bedroom",
                    "areaSqft": 120,
                    "dimensions": {"length": 10, "width": 12},
                    "position": {"x": 16, "y": 0},
                    "doors": [{"wall": "west", "position": 1}],
                    "windows": [{"wall": "east", "position": 2, "width": 4}],
                },
            ],
        }
    ],
    "exterior": {"mainEntrance": {"wall": "south", "position": 10}, "style": "modern"},
    "designNotes": ["Open plan living"],
}

# Rooms A and B overlap on a 20x20 footprint
OVERLAPPING_PLAN = {
    "buildingType": "Residential",
    "buildingDimensions": {"width": 20, "depth": 20},
    "floors": [
        {
            "level": "Ground",
            "rooms": [
                {"id": "a", "name": "A", "type": "room", "areaSqft": 100,
                 "dimensions": {"length": 10, "width": 10}, "position": {"x": 0, "y": 0}},
                {"id": "b", "name": "B", "type": "room", "areaSqft": 100,
                 "dimensions": {"length": 10, "width": 10}, "position": {"x": 5, "y": 5}},
            ],
        }
    ],
}


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeProvider(CompletionProvider):
    """Returns queued responses in order; an Exception in the queue is raised."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def complete(self, system_prompt, user_prompt, *, model, temperature, max_tokens, json_mode=True):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "json_mode": json_mode,
        })
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return CompletionResult(content=response, usage=TokenUsage(100, 200, 300))


@pytest.fixture
def valid_plan_data():
    return copy.deepcopy(VALID_PLAN)


@pytest.fixture
def overlapping_plan_data():
    return copy.deepcopy(OVERLAPPING_PLAN)


@pytest.fixture
def valid_plan(valid_plan_data):
    return Plan.from_dict(valid_plan_data)


@pytest.fixture
def valid_plan_json(valid_plan_data):
    return json.dumps(valid_plan_data)


@pytest.fixture
def overlapping_plan_json(overlapping_plan_data):
    return json.dumps(overlapping_plan_data)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleeps():
    """Records requested sleep durations instead of sleeping."""
    return []
