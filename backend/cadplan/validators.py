from typing import Any, List, Mapping, Optional

MIN_PROMPT_LENGTH = 10
MAX_PROMPT_LENGTH = 5000
MAX_SCALE = 100
MAX_FLOORS = 20


class PlanValidators:
    """Validation rules for planner and CAD requests"""

    @staticmethod
    def validate_prompt(prompt: str) -> bool:
        """Validate the design request length"""
        length = len(prompt.strip())
        if length < MIN_PROMPT_LENGTH:
            raise ValueError(f"Prompt must be at least {MIN_PROMPT_LENGTH} characters")
        if length > MAX_PROMPT_LENGTH:
            raise ValueError(f"Prompt must be at most {MAX_PROMPT_LENGTH} characters")
        return True

    @staticmethod
    def validate_scale(scale: float) -> bool:
        """Validate drawing scale (1 foot = scale units)"""
        if scale <= 0 or scale > MAX_SCALE:
            raise ValueError(f"Scale must be greater than 0 and at most {MAX_SCALE}")
        return True

    @staticmethod
    def validate_output_formats(dxf: bool, dwg: bool) -> bool:
        if not (dxf or dwg):
            raise ValueError("At least one output format must be selected")
        return True

    @staticmethod
    def validate_plan_data(plan_data: Optional[Mapping[str, Any]]) -> List[str]:
        """
        Structural pre-check for CAD export.

        Only checks that floors and rooms exist and that every room has a
        name and a positive area; geometry is not validated. Returns every
        problem found, empty when the plan is usable.
        """
        if not plan_data:
            return ["Plan data is required"]

        errors = []
        floors = plan_data.get("floors")
        if not isinstance(floors, list) or not floors:
            errors.append("Plan must have at least one floor")
            return errors

        for index, floor in enumerate(floors):
            rooms = floor.get("rooms") if isinstance(floor, Mapping) else None
            if not isinstance(rooms, list) or not rooms:
                errors.append(f"Floor {index} must have at least one room")
                continue

            for room_index, room in enumerate(rooms):
                room = room if isinstance(room, Mapping) else {}
                if not room.get("name"):
                    errors.append(f"Floor {index}, Room {room_index}: name is required")

                area = room.get("areaSqft")
                if not isinstance(area, (int, float)) or isinstance(area, bool) or area <= 0:
                    errors.append(f"Floor {index}, Room {room_index}: valid areaSqft is required")

        return errors
