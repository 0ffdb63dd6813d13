# backend/cadplan/routers/planner.py
# AI plan generation and geometry validation

import logging

from fastapi import APIRouter, Depends

from .. import schemas
from ..dependencies import get_plan_generator
from ..services.geometry import validate_plan_geometry
from ..services.plan_generator import PlanGenerator
from ..services.plan_model import Plan

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/planner", tags=["planner"])


@router.post("/generate", response_model=schemas.GeneratePlanResponse)
def generate_plan(
    request: schemas.GeneratePlanRequest,
    generator: PlanGenerator = Depends(get_plan_generator)
):
    """Generate an architectural plan from a natural-language request."""
    meta = request.meta.to_meta() if request.meta else {}
    result = generator.generate_plan(request.prompt, meta)
    return {"success": True, **result.to_dict()}


@router.post("/validate", response_model=schemas.ValidationResponse)
def validate_plan(request: schemas.ValidatePlanRequest):
    """Check room bounds, overlaps and minimum sizes without calling the AI."""
    report = validate_plan_geometry(Plan.from_dict(request.plan))
    return report.to_dict()
