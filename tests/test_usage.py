"""Tests for cost accounting and metadata formatting."""

from __future__ import annotations

import pytest

from raggedy.agent.usage import (
    PRICING,
    ModelPricing,
    TokenUsage,
    UsageStats,
    compute_cost,
    format_cost,
    format_meta,
    format_seconds,
    format_tokens,
    pricing_for,
)
from raggedy.errors import UnknownModelError

SONNET_LIKE = ModelPricing(input=3, output=15, cache_read=0.3, cache_write=3.75)


class TestComputeCost:
    def test_cache_hits_billed_at_cache_rate(self):
        usage = TokenUsage(input_tokens=1000, output_tokens=200, cache_read_tokens=500)
        cost = compute_cost(SONNET_LIKE, usage)
        assert cost == pytest.approx(0.00465)
        assert cost == pytest.approx(0.0015 + 0.003 + 0.00015)

    def test_cache_writes(self):
        usage = TokenUsage(input_tokens=0, output_tokens=0, cache_write_tokens=1_000_000)
        assert compute_cost(SONNET_LIKE, usage) == pytest.approx(3.75)

    def test_zero_usage(self):
        assert compute_cost(SONNET_LIKE, TokenUsage()) == 0.0

    def test_gemini_preview_rates(self):
        pricing = pricing_for("gemini-2.5-flash-preview-05-20")
        usage = TokenUsage(input_tokens=2_000_000, output_tokens=1_000_000, cache_read_tokens=1_000_000)
        assert compute_cost(pricing, usage) == pytest.approx(0.15 + 0.60 + 0.0375)


class TestPricingFor:
    def test_exact(self):
        assert pricing_for("gemini-2.5-pro") is PRICING["gemini-2.5-pro"]

    def test_longest_prefix_wins(self):
        assert pricing_for("gemini-2.5-flash-lite-001") is PRICING["gemini-2.5-flash-lite"]
        assert pricing_for("gemini-2.5-flash-001") is PRICING["gemini-2.5-flash"]

    def test_models_prefix_stripped(self):
        assert pricing_for("models/gemini-2.5-flash") is PRICING["gemini-2.5-flash"]

    def test_unknown_model_fails_fast(self):
        with pytest.raises(UnknownModelError) as exc:
            pricing_for("gpt-4o")
        assert exc.value.model == "gpt-4o"

    def test_custom_table(self):
        table = {"claude-sonnet": SONNET_LIKE}
        assert pricing_for("claude-sonnet-4-5", table) is SONNET_LIKE


class TestUsageStats:
    def test_accumulates(self):
        stats = UsageStats()
        stats.add(TokenUsage(input_tokens=100, output_tokens=10, cache_read_tokens=5), 1.0, 0.01)
        stats.add(TokenUsage(input_tokens=200, output_tokens=20), 0.5, 0.02)
        assert stats.calls == 2
        assert stats.usage == TokenUsage(input_tokens=300, output_tokens=30, cache_read_tokens=5)
        assert stats.elapsed == pytest.approx(1.5)
        assert stats.cost == pytest.approx(0.03)

    def test_to_dict(self):
        stats = UsageStats()
        stats.add(TokenUsage(input_tokens=1, output_tokens=2), 0.1234, 0.5)
        d = stats.to_dict("gemini-2.5-flash")
        assert d["model"] == "gemini-2.5-flash"
        assert d["input_tokens"] == 1
        assert d["output_tokens"] == 2
        assert d["elapsed"] == 0.123
        assert d["estimated_cost"] == 0.5


class TestFormatting:
    @pytest.mark.parametrize("usd,expected", [
        (0.00465, "$0.00465"),
        (0.0, "$0.00"),
        (1.5, "$1.50"),
        (0.1, "$0.10"),
        (0.000001, "$0.00"),
        (1234.5, "$1,234.50"),
    ])
    def test_format_cost(self, usd, expected):
        assert format_cost(usd) == expected

    @pytest.mark.parametrize("seconds,expected", [
        (1.234, "1.23 s"),
        (2.0, "2 s"),
        (0.5, "0.5 s"),
    ])
    def test_format_seconds(self, seconds, expected):
        assert format_seconds(seconds) == expected

    def test_format_tokens_plain(self):
        assert format_tokens(TokenUsage(input_tokens=1000, output_tokens=200)) == "I: 1000 -> 200"

    def test_format_tokens_with_cache(self):
        usage = TokenUsage(input_tokens=1000, output_tokens=200, cache_read_tokens=500, cache_write_tokens=40)
        assert format_tokens(usage) == "I: 1000 (R: 500, W: 40) -> 200"

    def test_format_meta(self):
        usage = TokenUsage(input_tokens=10, output_tokens=5)
        assert format_meta("gemini-2.5-flash", 0.00465, 1.234, usage) == (
            "`gemini-2.5-flash` | $0.00465 | 1.23 s | I: 10 -> 5"
        )
