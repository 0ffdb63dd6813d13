# backend/cadplan/services/__init__.py
# Plan generation and CAD export services

from .plan_model import (
    BuildingDimensions,
    Dimensions,
    Position,
    Door,
    Window,
    Room,
    Floor,
    Plan,
    TokenUsage,
    GenerationResult,
)

from .geometry import (
    rooms_overlap,
    room_fits_in_envelope,
    validate_plan_geometry,
    ValidationReport,
    OVERLAP_TOLERANCE,
    BOUNDS_TOLERANCE,
    MIN_ROOM_AREAS,
)

from .plan_normalizer import (
    normalize_plan,
    infer_room_type,
    calculate_building_dimensions,
)

from .completion_provider import (
    CompletionProvider,
    CompletionResult,
    OpenAICompletionProvider,
    create_completion_provider,
)

from .plan_generator import PlanGenerator

from .dxf_generator import (
    DXFGenerator,
    generate_dxf,
    DXF_LAYERS,
    DXF_COLORS,
)

from .dwg_converter import (
    ConversionResult,
    ConversionStrategy,
    CloudConvertStrategy,
    LibreDWGStrategy,
    ODAConverterStrategy,
    DWGConversionChain,
    build_default_chain,
)

from .cad_service import (
    CadExportService,
    CadExportResult,
    CadFile,
)

__all__ = [
    # Plan model
    'BuildingDimensions',
    'Dimensions',
    'Position',
    'Door',
    'Window',
    'Room',
    'Floor',
    'Plan',
    'TokenUsage',
    'GenerationResult',
    # Geometry
    'rooms_overlap',
    'room_fits_in_envelope',
    'validate_plan_geometry',
    'ValidationReport',
    'OVERLAP_TOLERANCE',
    'BOUNDS_TOLERANCE',
    'MIN_ROOM_AREAS',
    # Normalizer
    'normalize_plan',
    'infer_room_type',
    'calculate_building_dimensions',
    # Completion provider
    'CompletionProvider',
    'CompletionResult',
    'OpenAICompletionProvider',
    'create_completion_provider',
    # Generation
    'PlanGenerator',
    # DXF
    'DXFGenerator',
    'generate_dxf',
    'DXF_LAYERS',
    'DXF_COLORS',
    # DWG
    'ConversionResult',
    'ConversionStrategy',
    'CloudConvertStrategy',
    'LibreDWGStrategy',
    'ODAConverterStrategy',
    'DWGConversionChain',
    'build_default_chain',
    # CAD export
    'CadExportService',
    'CadExportResult',
    'CadFile',
]
