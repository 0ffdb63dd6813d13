# backend/cadplan/routers/cad.py
# DXF / DWG export

import base64
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from .. import schemas
from ..dependencies import get_cad_service
from ..services.cad_service import CadExportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cad", tags=["cad"])


@router.post("/generate", response_model=schemas.CadGenerateResponse)
def generate_cad(
    request: schemas.CadGenerateRequest,
    service: CadExportService = Depends(get_cad_service)
):
    """Export one floor as DXF and/or DWG; file contents are base64 encoded."""
    result = service.export_floor(
        request.plan_data,
        formats=request.output_formats.model_dump(),
        floor_index=request.floor_index,
        scale=request.scale,
    )

    files = {
        name: {
            "content": base64.b64encode(f.content).decode("ascii"),
            "filename": f.filename,
            "mimeType": f.mime_type,
            "size": f.size,
            "note": f.note,
        }
        for name, f in result.files.items()
    }
    return {
        "success": True,
        "files": files,
        "metadata": result.metadata,
        "warnings": result.warnings,
    }


@router.post("/dxf")
def download_dxf(
    request: schemas.CadGenerateRequest,
    service: CadExportService = Depends(get_cad_service)
):
    """Download the DXF file directly."""
    result = service.export_floor(
        request.plan_data,
        formats={"dxf": True, "dwg": False},
        floor_index=request.floor_index,
        scale=request.scale,
    )
    dxf = result.files["dxf"]
    return Response(
        content=dxf.content,
        media_type=dxf.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{dxf.filename}"'},
    )


@router.get("/stats")
def cad_stats(service: CadExportService = Depends(get_cad_service)):
    return {
        "cache": service.cache_stats(),
        "supportedFormats": ["dxf", "dwg"],
        "dwgConversionAvailable": service.conversion_available,
        "conversionMethods": service.converter.available_strategies(),
    }
