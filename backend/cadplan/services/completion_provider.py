# backend/cadplan/services/completion_provider.py
"""
OpenAI-backed completion provider.

Wraps the chat completions API behind a small interface so the plan
generator can be driven by any provider (or a fake in tests). SDK errors
are translated into ProviderError kinds the generator knows how to retry.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import openai
from openai import OpenAI

from .. import config
from ..errors import ProviderError
from .plan_model import TokenUsage

logger = logging.getLogger(__name__)


@dataclass
class CompletionResult:
    content: Optional[str]
    usage: TokenUsage = field(default_factory=TokenUsage)


class CompletionProvider:
    """Interface for chat completion backends."""

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool = True
    ) -> CompletionResult:
        raise NotImplementedError


def classify_openai_error(error: Exception) -> str:
    """Map an OpenAI SDK exception to a ProviderError kind."""
    code = getattr(error, "code", None)

    if code == "insufficient_quota":
        return ProviderError.QUOTA_EXCEEDED
    if code == "context_length_exceeded":
        return ProviderError.CONTEXT_TOO_LONG
    if code == "rate_limit_exceeded" or isinstance(error, openai.RateLimitError):
        return ProviderError.RATE_LIMITED
    if isinstance(error, openai.APIConnectionError):
        return ProviderError.UNAVAILABLE
    return ProviderError.UPSTREAM_ERROR


class OpenAICompletionProvider(CompletionProvider):
    """Generate completions using the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[OpenAI] = None
    ):
        if client is not None:
            self.client = client
        else:
            self.client = OpenAI(
                api_key=api_key or config.OPENAI_API_KEY,
                base_url=base_url or config.OPENAI_BASE_URL,
            )

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool = True
    ) -> CompletionResult:
        request = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        try:
            response = self.client.chat.completions.create(**request)
        except openai.OpenAIError as e:
            kind = classify_openai_error(e)
            logger.warning(f"OpenAI request failed ({kind}): {e}")
            raise ProviderError(kind, str(e), getattr(e, "status_code", None)) from e

        content = response.choices[0].message.content if response.choices else None

        usage = TokenUsage()
        if response.usage is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )

        return CompletionResult(content=content, usage=usage)


# Factory function for easy instantiation
def create_completion_provider() -> Optional[OpenAICompletionProvider]:
    """Create an OpenAI provider if an API key is configured."""
    if not config.OPENAI_API_KEY:
        logger.warning("OpenAI API key not configured")
        return None
    return OpenAICompletionProvider()
