# backend/cadplan/services/cad_service.py
"""
CAD export orchestration.

Turns one floor of a plan into downloadable DXF and, on request, DWG files.
Results are cached per (building type, building dimensions, floor, scale)
so re-exporting the same floor within the TTL returns the same files.
"""

import re
import json
import time
import hashlib
import logging
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from ..cache import TTLCache
from ..errors import FloorNotFoundError, InvalidPlanError, InvalidRequestError
from ..validators import PlanValidators
from .dwg_converter import DWGConversionChain
from .dxf_generator import DXFGenerator
from .plan_model import Plan, format_number

logger = logging.getLogger(__name__)

MIME_DXF = "application/dxf"
MIME_DWG = "application/acad"

DEFAULT_FORMATS = {"dxf": True, "dwg": False}

DWG_FALLBACK_NOTE = "DWG conversion unavailable - DXF provided instead"


@dataclass
class CadFile:
    content: bytes
    filename: str
    mime_type: str
    size: int
    note: Optional[str] = None


@dataclass
class CadExportResult:
    files: Dict[str, CadFile] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]", "-", value.lower())
    return re.sub(r"-+", "-", slug)


def export_cache_key(plan_data: Mapping[str, Any], floor_index: int, scale: float) -> str:
    """Fingerprint of the parts of a plan that affect one floor's drawing."""
    fingerprint = json.dumps(
        {
            "buildingType": plan_data.get("buildingType"),
            "dimensions": plan_data.get("buildingDimensions"),
            "floor": plan_data["floors"][floor_index],
            "scale": scale,
        },
        sort_keys=True,
        default=str,
    )
    digest = hashlib.sha256(fingerprint.encode("utf-8")).hexdigest()[:16]
    return f"cad_{digest}_{floor_index}_{format_number(scale)}"


class CadExportService:
    """Generate CAD files for a single floor of a plan"""

    def __init__(
        self,
        converter: DWGConversionChain,
        cache: Optional[TTLCache] = None,
        generator: Optional[DXFGenerator] = None,
        clock: Callable[[], float] = time.time
    ):
        self.converter = converter
        self.cache = cache
        self.generator = generator or DXFGenerator()
        self._clock = clock

    @property
    def conversion_available(self) -> bool:
        return self.converter.available

    def cache_stats(self) -> Dict[str, Any]:
        if self.cache is None:
            return {"size": 0, "maxSize": 0, "ttlSeconds": 0}
        return self.cache.stats()

    def clear_cache(self) -> None:
        if self.cache is not None:
            self.cache.clear()

    def _filename(self, plan: Plan, floor_index: int, extension: str) -> str:
        building = slugify(plan.building_type or "floor-plan")
        level = slugify(plan.floors[floor_index].level or "floor")
        timestamp = int(self._clock() * 1000)
        return f"{building}-{level}-{timestamp}.{extension}"

    def export_floor(
        self,
        plan: Union[Plan, Mapping[str, Any]],
        formats: Optional[Mapping[str, bool]] = None,
        floor_index: int = 0,
        scale: float = 1.0
    ) -> CadExportResult:
        """
        Export one floor as DXF and/or DWG.

        Raises:
            InvalidPlanError: plan fails the structural pre-check
            FloorNotFoundError: floor_index is outside the plan's floors
            InvalidRequestError: no output format selected
        """
        plan_data = plan.to_dict() if isinstance(plan, Plan) else plan

        errors = PlanValidators.validate_plan_data(plan_data)
        if errors:
            raise InvalidPlanError(errors)

        formats = {**DEFAULT_FORMATS, **(formats or {})}
        if not (formats.get("dxf") or formats.get("dwg")):
            raise InvalidRequestError("At least one output format must be selected")

        if floor_index < 0 or floor_index >= len(plan_data["floors"]):
            raise FloorNotFoundError(floor_index)

        cache_key = export_cache_key(plan_data, floor_index, scale)
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.info("Returning cached CAD files")
                return cached

        plan_obj = plan if isinstance(plan, Plan) else Plan.from_dict(dict(plan_data))
        floor = plan_obj.floors[floor_index]
        start = time.perf_counter()

        result = CadExportResult(metadata={
            "buildingType": plan_obj.building_type,
            "floorLevel": floor.level or "Ground Floor",
            "totalArea": floor.total_area or 0,
            "roomCount": len(floor.rooms),
            "scale": scale,
            "generatedAt": datetime.now(timezone.utc).isoformat(),
        })

        # DXF is always produced; DWG conversion works from it
        logger.info("Generating DXF file...")
        dxf_text = self.generator.generate(plan_obj, floor_index, scale)
        dxf_bytes = dxf_text.encode("utf-8")

        if formats.get("dxf"):
            result.files["dxf"] = CadFile(
                content=dxf_bytes,
                filename=self._filename(plan_obj, floor_index, "dxf"),
                mime_type=MIME_DXF,
                size=len(dxf_bytes),
            )
            logger.info(f"DXF generated: {len(dxf_bytes)} bytes")

        if formats.get("dwg"):
            logger.info("Converting to DWG format...")
            conversion = self.converter.convert(dxf_text)

            if conversion.is_fallback:
                result.warnings.append(conversion.warning)
                result.files["dwg"] = CadFile(
                    content=dxf_bytes,
                    filename=self._filename(plan_obj, floor_index, "dxf"),
                    mime_type=MIME_DXF,
                    size=len(dxf_bytes),
                    note=DWG_FALLBACK_NOTE,
                )
            else:
                result.files["dwg"] = CadFile(
                    content=conversion.content,
                    filename=self._filename(plan_obj, floor_index, "dwg"),
                    mime_type=MIME_DWG,
                    size=len(conversion.content),
                )
            result.metadata["conversionStrategy"] = conversion.strategy
            if conversion.failures:
                # "<strategy>: timeout: ..." entries keep timeouts distinct from failures
                result.metadata["conversionFailures"] = list(conversion.failures)
                if conversion.is_fallback:
                    result.warnings.extend(
                        f"DWG conversion attempt failed ({failure})" for failure in conversion.failures
                    )
            logger.info(f"DWG generated: {result.files['dwg'].size} bytes")

        result.metadata["generationTimeMs"] = int((time.perf_counter() - start) * 1000)

        if self.cache is not None:
            self.cache.set(cache_key, result)

        logger.info(f"CAD generation completed in {result.metadata['generationTimeMs']}ms")
        return result
