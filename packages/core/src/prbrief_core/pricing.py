"""Token usage to estimated USD cost. Used for logging only."""

from __future__ import annotations

from dataclasses import dataclass

from prbrief_core.models import TokenUsage


@dataclass(frozen=True)
class ModelPrice:
    # USD per million tokens.
    input: float
    output: float
    cached_input: float | None = None


# Keyed by model id prefix; the longest matching prefix wins so dated
# snapshots ("gpt-4o-2024-08-06") resolve to their family price.
PRICES: dict[str, ModelPrice] = {
    "claude-sonnet-4": ModelPrice(input=3.00, output=15.00, cached_input=0.30),
    "claude-3-5-haiku": ModelPrice(input=0.80, output=4.00, cached_input=0.08),
    "claude-opus-4": ModelPrice(input=15.00, output=75.00, cached_input=1.50),
    "gpt-4o": ModelPrice(input=2.50, output=10.00, cached_input=1.25),
    "gpt-4o-mini": ModelPrice(input=0.15, output=0.60, cached_input=0.075),
    "gpt-4.1": ModelPrice(input=2.00, output=8.00, cached_input=0.50),
    "o1-mini": ModelPrice(input=1.10, output=4.40, cached_input=0.55),
    "deepseek/deepseek-r1": ModelPrice(input=0.55, output=2.19),
}


def lookup_price(model: str) -> ModelPrice | None:
    matches = [prefix for prefix in PRICES if model.startswith(prefix)]
    if not matches:
        return None
    return PRICES[max(matches, key=len)]


def estimate_cost(model: str, usage: TokenUsage) -> float | None:
    """Return the estimated cost in USD, or None for an unpriced model.

    usage.prompt_tokens includes cached tokens; those are billed at the cached
    rate when the model has one.
    """
    price = lookup_price(model)
    if price is None:
        return None
    cached = min(usage.cached_tokens or 0, usage.prompt_tokens)
    cached_rate = price.cached_input if price.cached_input is not None else price.input
    total = (
        (usage.prompt_tokens - cached) * price.input
        + cached * cached_rate
        + usage.completion_tokens * price.output
    )
    return total / 1_000_000
