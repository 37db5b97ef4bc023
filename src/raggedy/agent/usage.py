"""Token usage, cost accounting, and metadata-line formatting."""

from __future__ import annotations

from dataclasses import dataclass, field

from raggedy.errors import UnknownModelError

M = 1_000_000


@dataclass(frozen=True)
class ModelPricing:
    """USD per million tokens."""

    input: float
    output: float
    cache_read: float = 0.0
    cache_write: float = 0.0


# Matched by longest prefix, so dated preview ids fall back to their family.
PRICING: dict[str, ModelPricing] = {
    "gemini-2.0-flash": ModelPricing(input=0.10, output=0.40, cache_read=0.025),
    "gemini-2.0-flash-lite": ModelPricing(input=0.075, output=0.30),
    "gemini-2.5-flash": ModelPricing(input=0.30, output=2.50, cache_read=0.03),
    "gemini-2.5-flash-preview-05-20": ModelPricing(input=0.15, output=0.60, cache_read=0.0375),
    "gemini-2.5-flash-lite": ModelPricing(input=0.10, output=0.40, cache_read=0.01),
    "gemini-2.5-pro": ModelPricing(input=1.25, output=10.00, cache_read=0.125),
    "gemini-3-flash-preview": ModelPricing(input=0.50, output=3.00, cache_read=0.05),
    "gemini-3-pro-preview": ModelPricing(input=2.00, output=12.00, cache_read=0.20),
}


def pricing_for(model: str, table: dict[str, ModelPricing] | None = None) -> ModelPricing:
    """Look up rates for a model id by longest matching prefix.

    Raises:
        UnknownModelError: no table entry is a prefix of the model id.
    """
    table = PRICING if table is None else table
    name = model.removeprefix("models/")
    matches = [key for key in table if name.startswith(key)]
    if not matches:
        raise UnknownModelError(model)
    return table[max(matches, key=len)]


@dataclass(frozen=True)
class TokenUsage:
    """Token counts reported for one model call."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_write_tokens: int = 0

    def __add__(self, other: TokenUsage) -> TokenUsage:
        return TokenUsage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            cache_read_tokens=self.cache_read_tokens + other.cache_read_tokens,
            cache_write_tokens=self.cache_write_tokens + other.cache_write_tokens,
        )


def compute_cost(pricing: ModelPricing, usage: TokenUsage) -> float:
    """Dollar cost of one call; cache hits are billed at the cache-read rate, not the input rate."""
    uncached = usage.input_tokens - usage.cache_read_tokens
    return (
        uncached * pricing.input
        + usage.output_tokens * pricing.output
        + usage.cache_read_tokens * pricing.cache_read
        + usage.cache_write_tokens * pricing.cache_write
    ) / M


@dataclass
class UsageStats:
    """Usage and cost accumulated over several calls."""

    calls: int = 0
    usage: TokenUsage = field(default_factory=TokenUsage)
    elapsed: float = 0.0
    cost: float = 0.0

    def add(self, usage: TokenUsage, elapsed: float = 0.0, cost: float = 0.0) -> None:
        self.calls += 1
        self.usage = self.usage + usage
        self.elapsed += elapsed
        self.cost += cost

    def to_dict(self, model: str) -> dict:
        return {
            "model": model,
            "calls": self.calls,
            "input_tokens": self.usage.input_tokens,
            "output_tokens": self.usage.output_tokens,
            "cache_read_tokens": self.usage.cache_read_tokens,
            "cache_write_tokens": self.usage.cache_write_tokens,
            "elapsed": round(self.elapsed, 3),
            "estimated_cost": self.cost,
        }


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_cost(usd: float) -> str:
    """'$0.00465': up to 5 decimals, at least 2."""
    text = f"{usd:,.5f}".rstrip("0")
    whole, _, frac = text.partition(".")
    return f"${whole}.{frac.ljust(2, '0')}"


def format_seconds(seconds: float) -> str:
    return f"{seconds:.2f}".rstrip("0").rstrip(".") + " s"


def format_tokens(usage: TokenUsage) -> str:
    """'I: 1200 (R: 500, W: 40) -> 200'; cache counts only when non-zero."""
    text = f"I: {usage.input_tokens}"
    parts = []
    if usage.cache_read_tokens:
        parts.append(f"R: {usage.cache_read_tokens}")
    if usage.cache_write_tokens:
        parts.append(f"W: {usage.cache_write_tokens}")
    if parts:
        text += f" ({', '.join(parts)})"
    return f"{text} -> {usage.output_tokens}"


def format_meta(model: str, cost: float, elapsed: float, usage: TokenUsage) -> str:
    return " | ".join([
        f"`{model}`",
        format_cost(cost),
        format_seconds(elapsed),
        format_tokens(usage),
    ])
