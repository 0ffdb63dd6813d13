# backend/cadplan/services/planner_prompts.py
# Prompts for architectural plan generation

from typing import Any, Mapping, Optional

SYSTEM_PROMPT = """You are an expert architectural planning assistant that converts building requirements into precise, connected floor plans.

CRITICAL RULES:
- Rooms MUST NOT overlap - verify x, y positions and dimensions
- Room positions + dimensions MUST fit within buildingDimensions
- Adjacent rooms MUST share exact wall edges (no gaps)
- Every habitable room needs at least one window on an exterior wall

OUTPUT RULES:
- Return ONLY valid JSON - no markdown, no explanations
- All measurements in feet
- (0,0) is the top-left corner of the building; x grows right, y grows down
- Door and window positions are measured from the LEFT edge of their wall

JSON STRUCTURE:
{
  "buildingType": "string",
  "totalArea": number,
  "buildingDimensions": {"width": number, "depth": number},
  "floors": [
    {
      "level": "string",
      "totalArea": number,
      "rooms": [
        {
          "id": "string",
          "name": "string",
          "type": "bedroom|bathroom|kitchen|living|dining|office|corridor|staircase|storage|garage|outdoor",
          "areaSqft": number,
          "dimensions": {"length": number, "width": number},
          "position": {"x": number, "y": number},
          "doors": [{"wall": "north|south|east|west", "position": number, "width": number}],
          "windows": [{"wall": "north|south|east|west", "position": number, "width": number, "height": number}]
        }
      ]
    }
  ],
  "exterior": {"mainEntrance": {"wall": "string", "position": number}, "style": "string"},
  "designNotes": ["string"]
}"""

# Additional guidance for specific building types
BUILDING_TYPE_PROMPTS = {
    "residential": "Focus on comfort, privacy, and family flow. Keep bedrooms away from living areas and bathrooms close to bedrooms.",
    "commercial": "Focus on client flow and employee productivity. Reception must make a good first impression.",
    "bank": "Security is paramount. Vault at the most secure interior location, separate customer and employee zones.",
    "hospital": "Focus on patient flow, infection control, and wide corridors for gurneys.",
    "school": "Focus on supervision, natural light, and emergency egress with wide corridors.",
    "restaurant": "Separate front of house and back of house circulation. Kitchen needs fire suppression.",
    "warehouse": "Focus on logistics flow, loading docks, and clear heights for racking.",
}

CRITICAL_REQUIREMENTS = [
    "Every room MUST have valid x, y position coordinates",
    "All rooms must fit within buildingDimensions (no overflow)",
    "Adjacent rooms must share exact wall edges (no gaps)",
    "Include doors with correct wall and position for EVERY room",
    "Include windows on exterior walls for habitable rooms",
    "Verify: room.position.x + room.dimensions.width <= buildingDimensions.width",
    "Verify: room.position.y + room.dimensions.length <= buildingDimensions.depth",
]


def _join(values: Any) -> str:
    return ", ".join(str(v) for v in values)


def build_user_prompt(prompt: str, meta: Optional[Mapping[str, Any]] = None) -> str:
    """Build the user message from the design request and optional hints."""
    meta = meta or {}
    lines = [f"DESIGN REQUEST:\n{prompt}"]

    if meta:
        lines.append("\nADDITIONAL SPECIFICATIONS:")

        building_type = meta.get("buildingType")
        if building_type:
            lines.append(f"- Building Type: {building_type}")
            focus = BUILDING_TYPE_PROMPTS.get(str(building_type).lower())
            if focus:
                lines.append(f"- IMPORTANT DESIGN FOCUS: {focus}")

        if meta.get("city"):
            lines.append(f"- City/Location: {meta['city']}")
        if meta.get("authority"):
            lines.append(f"- Authority/Zoning: {meta['authority']}")

        plot_area = meta.get("plotArea")
        if plot_area:
            lines.append(f"- Plot Area: {plot_area} sqft")
            lines.append(
                f"- Note: Building footprint should be approximately "
                f"{round(plot_area * 0.6)}-{round(plot_area * 0.7)} sqft (60-70% coverage) to allow for setbacks"
            )

        floors = meta.get("floors")
        if isinstance(floors, (list, tuple)) and floors:
            lines.append(f"- Required Floors: {_join(floors)}")
            lines.append(f"- Total Floors: {len(floors)}")

        if meta.get("budget"):
            lines.append(f"- Budget Range: {meta['budget']}")
        if meta.get("style"):
            lines.append(f"- Architectural Style: {meta['style']}")

        special = meta.get("specialRequirements")
        if isinstance(special, (list, tuple)) and special:
            lines.append(f"- Special Requirements: {_join(special)}")

    lines.append("\nCRITICAL REQUIREMENTS:")
    for i, requirement in enumerate(CRITICAL_REQUIREMENTS, 1):
        lines.append(f"{i}. {requirement}")
    lines.append("\nGenerate the complete architectural plan as valid JSON only.")

    return "\n".join(lines)
