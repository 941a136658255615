"""Per-model token rates with user overrides."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ..utils import read_json


DEFAULT_PRICING_PATH = Path(__file__).with_name("default_pricing.json")
OVERRIDE_PATH = Path.home() / ".config" / "svg-saul" / "pricing_overrides.json"

RATE_FIELDS = ("input_per_million_usd", "output_per_million_usd")


def load_pricing_tables() -> dict[str, dict[str, float]]:
    """Bundled rates per model id, patched field by field from the override file.

    Rows that end up without both numeric rates are dropped so the estimator
    falls back to its default row for that model.
    """
    merged: dict[str, dict[str, Any]] = {}
    for source in (read_json(DEFAULT_PRICING_PATH, {}), read_json(OVERRIDE_PATH, {})):
        if not isinstance(source, dict):
            continue
        for model, row in source.items():
            if isinstance(row, dict):
                merged.setdefault(model, {}).update(
                    {name: row[name] for name in RATE_FIELDS if name in row}
                )
    tables: dict[str, dict[str, float]] = {}
    for model, row in merged.items():
        rates = _numeric_rates(row)
        if rates is not None:
            tables[model] = rates
    return tables


def _numeric_rates(row: dict[str, Any]) -> dict[str, float] | None:
    try:
        rates = {name: float(row[name]) for name in RATE_FIELDS}
    except (KeyError, TypeError, ValueError):
        return None
    if any(value < 0 for value in rates.values()):
        return None
    return rates
