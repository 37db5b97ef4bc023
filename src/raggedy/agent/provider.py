"""LLM provider interface and Gemini implementation."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from google import genai
from google.genai import errors, types

from raggedy import config
from raggedy.agent.usage import (
    TokenUsage,
    compute_cost,
    format_meta,
    pricing_for,
)
from raggedy.errors import ModelCallError

logger = logging.getLogger(__name__)


@dataclass
class ModelCallResult:
    """Text plus accounting for one request/response round-trip."""

    text: str
    model: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    elapsed: float = 0.0
    cost: float = 0.0

    @property
    def meta(self) -> str:
        return format_meta(self.model, self.cost, self.elapsed, self.usage)

    def to_dict(self) -> dict:
        return {
            "model": self.model,
            "cost": self.cost,
            "elapsed": round(self.elapsed, 3),
            "input_tokens": self.usage.input_tokens,
            "output_tokens": self.usage.output_tokens,
            "cache_read_tokens": self.usage.cache_read_tokens,
            "cache_write_tokens": self.usage.cache_write_tokens,
            "meta": self.meta,
        }


class GenerationProvider(Protocol):
    """Protocol for text generation providers."""

    model: str

    def generate(
        self,
        prompt: str,
        system: Sequence[str] = (),
        documents: Sequence[str] = (),
    ) -> ModelCallResult:
        """Generate text from a prompt.

        Args:
            prompt: The user turn.
            system: System instruction blocks, joined by the provider.
            documents: Auxiliary context blocks, each sent as its own part
                ahead of the prompt so the transport can cache them separately.
        """
        ...


def extract_usage(response: types.GenerateContentResponse) -> TokenUsage:
    """Token counts from a Gemini response; missing counters read as zero.

    Thinking tokens are billed at the output rate, so they count as output.
    """
    meta = getattr(response, "usage_metadata", None)
    if meta is None:
        return TokenUsage()
    return TokenUsage(
        input_tokens=meta.prompt_token_count or 0,
        output_tokens=(meta.candidates_token_count or 0) + (meta.thoughts_token_count or 0),
        cache_read_tokens=meta.cached_content_token_count or 0,
    )


def thinking_config(budget: int | None = None) -> types.ThinkingConfig | None:
    """ThinkingConfig for a budget; a negative budget leaves the model default."""
    if budget is None:
        budget = config.GEMINI_THINKING_BUDGET
    if budget < 0:
        return None
    return types.ThinkingConfig(thinking_budget=budget)


def create_client(api_key: str | None = None) -> genai.Client:
    """Gemini client from an explicit key or GEMINI_API_KEY."""
    key = api_key or config.GEMINI_API_KEY
    if not key:
        raise ModelCallError("GEMINI_API_KEY is not set")
    http_options = None
    if config.GEMINI_TIMEOUT_MS:
        http_options = types.HttpOptions(timeout=config.GEMINI_TIMEOUT_MS)
    return genai.Client(api_key=key, http_options=http_options)


class GeminiProvider:
    """Gemini implementation of GenerationProvider."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_output_tokens: int | None = None,
        thinking_budget: int | None = None,
        client: genai.Client | None = None,
    ) -> None:
        self.model = model or config.GEMINI_MODEL
        # Unknown models fail before any request is made
        self._pricing = pricing_for(self.model)
        self._client = client or create_client(api_key)
        self._max_output_tokens = max_output_tokens or config.MAX_OUTPUT_TOKENS
        self._thinking_budget = (
            config.GEMINI_THINKING_BUDGET if thinking_budget is None else thinking_budget
        )

    @property
    def client(self) -> genai.Client:
        return self._client

    def _config(self, system: Sequence[str]) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction="\n\n".join(system) if system else None,
            max_output_tokens=self._max_output_tokens,
            thinking_config=thinking_config(self._thinking_budget),
        )

    def generate(
        self,
        prompt: str,
        system: Sequence[str] = (),
        documents: Sequence[str] = (),
    ) -> ModelCallResult:
        """Generate text using Gemini.

        Args:
            prompt: The user prompt.
            system: System instruction blocks.
            documents: Context blocks sent as separate parts before the prompt.

        Returns:
            The response text with usage, elapsed time and cost.

        Raises:
            ModelCallError: the API call failed.
        """
        parts = [types.Part.from_text(text=d) for d in documents]
        parts.append(types.Part.from_text(text=prompt))
        contents = [types.Content(role="user", parts=parts)]

        logger.debug(
            "Generate via %s (%d char prompt, %d document(s))",
            self.model, len(prompt), len(documents),
        )
        t0 = time.perf_counter()
        try:
            response = self._client.models.generate_content(
                model=self.model,
                contents=contents,
                config=self._config(system),
            )
        except errors.APIError as e:
            raise ModelCallError(f"Gemini call failed ({e.code}): {e.message}") from e
        elapsed = time.perf_counter() - t0

        usage = extract_usage(response)
        text = response.text or ""
        logger.debug("Generate complete: %d chars, %.0fms", len(text), elapsed * 1000)
        return ModelCallResult(
            text=text,
            model=self.model,
            usage=usage,
            elapsed=elapsed,
            cost=compute_cost(self._pricing, usage),
        )
