from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Any, Dict, List, Optional

from .validators import MAX_FLOORS, PlanValidators


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# Planner Schemas
class PlanMeta(CamelModel):
    building_type: Optional[str] = Field(None, alias="buildingType")
    city: Optional[str] = None
    authority: Optional[str] = None
    plot_area: Optional[float] = Field(None, alias="plotArea", gt=0)
    floors: Optional[List[str]] = None
    budget: Optional[str] = None
    style: Optional[str] = None
    special_requirements: Optional[List[str]] = Field(None, alias="specialRequirements")

    def to_meta(self) -> Dict[str, Any]:
        """camelCase hints with unset fields dropped"""
        return self.model_dump(by_alias=True, exclude_none=True)


class GeneratePlanRequest(CamelModel):
    prompt: str
    meta: Optional[PlanMeta] = None

    @field_validator('prompt')
    @classmethod
    def validate_prompt(cls, v):
        PlanValidators.validate_prompt(v)
        return v


class ValidatePlanRequest(CamelModel):
    plan: Dict[str, Any]


class ValidationResponse(BaseModel):
    valid: bool
    errors: List[str]


class TokenUsageResponse(CamelModel):
    prompt_tokens: Optional[int] = Field(None, alias="promptTokens")
    completion_tokens: Optional[int] = Field(None, alias="completionTokens")
    total_tokens: Optional[int] = Field(None, alias="totalTokens")


class GeneratePlanResponse(BaseModel):
    success: bool = True
    plan: Dict[str, Any]
    usage: TokenUsageResponse


# CAD Schemas
class OutputFormats(BaseModel):
    dxf: bool = True
    dwg: bool = False

    @model_validator(mode='after')
    def validate_formats(self):
        PlanValidators.validate_output_formats(self.dxf, self.dwg)
        return self


class CadGenerateRequest(CamelModel):
    plan_data: Dict[str, Any] = Field(..., alias="planData")
    output_formats: OutputFormats = Field(default_factory=OutputFormats, alias="outputFormats")
    floor_index: int = Field(0, alias="floorIndex", ge=0)
    scale: float = 1.0

    @field_validator('scale')
    @classmethod
    def validate_scale(cls, v):
        PlanValidators.validate_scale(v)
        return v

    @field_validator('plan_data')
    @classmethod
    def validate_floor_count(cls, v):
        floors = v.get('floors')
        if isinstance(floors, list) and len(floors) > MAX_FLOORS:
            raise ValueError(f"Plan cannot have more than {MAX_FLOORS} floors")
        return v


class CadFileResponse(CamelModel):
    content: str  # base64
    filename: str
    mime_type: str = Field(..., alias="mimeType")
    size: int
    note: Optional[str] = None


class CadGenerateResponse(BaseModel):
    success: bool = True
    files: Dict[str, CadFileResponse]
    metadata: Dict[str, Any]
    warnings: List[str] = []
