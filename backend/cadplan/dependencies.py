# backend/cadplan/dependencies.py
# Process-wide service instances, overridable in tests via app.dependency_overrides

from functools import lru_cache

from . import config
from .cache import FifoTTLCache, SweepingTTLCache
from .errors import AppError
from .services.cad_service import CadExportService
from .services.completion_provider import create_completion_provider
from .services.dwg_converter import build_default_chain
from .services.plan_generator import PlanGenerator


@lru_cache()
def get_plan_generator() -> PlanGenerator:
    provider = create_completion_provider()
    if provider is None:
        raise AppError("AI service is not configured", status_code=503, kind="provider_unavailable")

    cache = SweepingTTLCache(
        max_entries=config.PLAN_CACHE_MAX_ENTRIES,
        ttl_seconds=config.PLAN_CACHE_TTL_SECONDS,
        name="plan cache",
    )
    return PlanGenerator(provider, cache)


@lru_cache()
def get_cad_service() -> CadExportService:
    cache = FifoTTLCache(
        max_entries=config.CAD_CACHE_MAX_ENTRIES,
        ttl_seconds=config.CAD_CACHE_TTL_SECONDS,
        name="CAD cache",
    )
    return CadExportService(build_default_chain(), cache)
