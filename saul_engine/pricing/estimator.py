"""Cost estimation utilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .tables import load_pricing_tables

DEFAULT_PRICING_KEY = "claude-sonnet-4-5-20250929"
_FALLBACK_RATES = (3.0, 15.0)


@dataclass(frozen=True)
class TokenRates:
    input_per_million_usd: float
    output_per_million_usd: float


class PricingEstimator:
    def __init__(self, tables: dict[str, dict[str, Any]] | None = None) -> None:
        self.tables = tables if tables is not None else load_pricing_tables()

    def rates(self, pricing_key: str | None) -> TokenRates:
        """Rates for a model; unknown keys use the default Sonnet row."""
        row = self.tables.get(pricing_key or "") or self.tables.get(DEFAULT_PRICING_KEY) or {}
        try:
            return TokenRates(
                input_per_million_usd=float(row["input_per_million_usd"]),
                output_per_million_usd=float(row["output_per_million_usd"]),
            )
        except (KeyError, TypeError, ValueError):
            return TokenRates(*_FALLBACK_RATES)

    def estimate_text_cost(self, pricing_key: str | None, tokens_in: int, tokens_out: int) -> float:
        rates = self.rates(pricing_key)
        input_cost = (tokens_in / 1_000_000) * rates.input_per_million_usd
        output_cost = (tokens_out / 1_000_000) * rates.output_per_million_usd
        return input_cost + output_cost


def format_cost_usd(value: float) -> str:
    return f"${value:.4f}"
