# backend/cadplan/services/plan_generator.py
"""
AI floor plan generator with bounded retries.

Flow per request:
1. Return a cached result for an identical (prompt, meta) pair
2. Call the completion provider (JSON mode)
3. Normalize the response into a Plan
4. Validate geometry; retry with backoff on violations
5. On the final attempt accept the plan with validation warnings
"""

import hashlib
import json
import time
import logging
from typing import Any, Callable, Mapping, Optional

from .. import config
from ..cache import TTLCache
from ..errors import (
    AppError,
    GenerationFailedError,
    InvalidRequestError,
    PlanParseError,
    ProviderError,
    QuotaExceededError,
    RequestTooLargeError,
    TooManyRequestsError,
)
from .completion_provider import CompletionProvider
from .geometry import validate_plan_geometry
from .plan_model import GenerationResult
from .plan_normalizer import normalize_plan
from .planner_prompts import SYSTEM_PROMPT, build_user_prompt

logger = logging.getLogger(__name__)


def generation_cache_key(prompt: str, meta: Optional[Mapping[str, Any]]) -> str:
    """Stable fingerprint of a generation request."""
    canonical = json.dumps({"prompt": prompt, "meta": meta or {}}, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class PlanGenerator:
    """Generate validated floor plans from natural-language requests."""

    def __init__(
        self,
        provider: CompletionProvider,
        cache: Optional[TTLCache] = None,
        model: str = config.OPENAI_MODEL,
        temperature: float = config.PLAN_TEMPERATURE,
        max_tokens: int = config.PLAN_MAX_TOKENS,
        max_attempts: int = config.PLAN_MAX_ATTEMPTS,
        retry_delay: float = config.PLAN_RETRY_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.provider = provider
        self.cache = cache
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self._sleep = sleep

    def _backoff(self, attempt: int) -> None:
        if attempt < self.max_attempts:
            self._sleep(self.retry_delay * attempt)

    def generate_plan(self, prompt: str, meta: Optional[Mapping[str, Any]] = None) -> GenerationResult:
        """
        Generate an architectural plan.

        Args:
            prompt: Natural-language design request
            meta: Optional hints (buildingType, city, plotArea, floors, ...)

        Returns:
            GenerationResult with the normalized plan and token usage

        Raises:
            InvalidRequestError: prompt is empty
            QuotaExceededError / RequestTooLargeError: non-retryable provider errors
            TooManyRequestsError: still rate limited after the last attempt
            GenerationFailedError: every attempt failed
        """
        if not prompt or not prompt.strip():
            raise InvalidRequestError("Prompt is required")

        meta = dict(meta or {})
        cache_key = generation_cache_key(prompt, meta)

        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug("Returning cached plan")
                return cached

        user_prompt = build_user_prompt(prompt, meta)
        logger.debug(
            f"Generating architectural plan (prompt length {len(prompt)}, "
            f"building type {meta.get('buildingType')})"
        )

        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                completion = self.provider.complete(
                    SYSTEM_PROMPT,
                    user_prompt,
                    model=self.model,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    json_mode=True,
                )

                if not completion.content:
                    raise PlanParseError("Failed to generate plan: Empty response from AI")

                plan = normalize_plan(completion.content, meta)

                validation = validate_plan_geometry(plan)
                if not validation.valid:
                    logger.warning(
                        f"Plan geometry validation failed on attempt {attempt}: "
                        f"{len(validation.errors)} issue(s)"
                    )
                    if attempt < self.max_attempts:
                        self._backoff(attempt)
                        continue

                    # Last attempt: accept with warnings rather than fail
                    plan.validation_warnings = list(validation.errors)

                logger.info(
                    f"Architectural plan generated: {plan.building_type}, "
                    f"{len(plan.floors)} floor(s), {plan.total_area} sqft, attempt {attempt}"
                )

                result = GenerationResult(plan=plan, usage=completion.usage)
                if self.cache is not None:
                    self.cache.set(cache_key, result)
                return result

            except ProviderError as e:
                last_error = e
                logger.warning(f"Generation attempt {attempt} failed: {e.message} ({e.kind})")

                if e.kind == ProviderError.QUOTA_EXCEEDED:
                    raise QuotaExceededError("AI service quota exceeded. Please try again later.") from e
                if e.kind == ProviderError.CONTEXT_TOO_LONG:
                    raise RequestTooLargeError("Request too large. Please simplify your requirements.") from e

                self._backoff(attempt)

            except AppError as e:
                last_error = e
                logger.warning(f"Generation attempt {attempt} failed: {e.message}")
                self._backoff(attempt)

        logger.error(f"All {self.max_attempts} generation attempts failed: {last_error}")

        if isinstance(last_error, ProviderError) and last_error.kind == ProviderError.RATE_LIMITED:
            raise TooManyRequestsError("Too many requests. Please wait and try again.") from last_error

        raise GenerationFailedError(
            "Failed to generate architectural plan after multiple attempts. Please try again."
        ) from last_error
