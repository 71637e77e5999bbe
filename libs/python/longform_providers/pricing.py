"""USD cost estimates for backend responses."""

from __future__ import annotations

from typing import Dict, Tuple

# (backend, model) -> (input, output) USD per one million tokens.
_RATES: Dict[Tuple[str, str], Tuple[float, float]] = {
    ("openai", "gpt-4o"): (2.5, 10.0),
    ("openai", "gpt-4o-mini"): (0.15, 0.6),
    ("openai", "gpt-5"): (1.25, 10.0),
    ("openai", "gpt-5-mini"): (0.25, 2.0),
    ("gemini", "gemini-2.5-pro"): (1.25, 10.0),
    ("gemini", "gemini-2.5-flash"): (0.30, 2.5),
    ("deepseek", "deepseek-chat"): (0.27, 1.10),
    ("mistral", "mistral-large-latest"): (2.0, 6.0),
    ("mistral", "mistral-small-latest"): (0.2, 0.6),
}

_FREE_BACKENDS = frozenset({"mock"})


def estimate_cost(
    provider: str,
    model: str,
    prompt_tokens: int | float | None,
    completion_tokens: int | float | None,
) -> float | None:
    """Return the USD cost of one response, ``None`` when the model has no known rate."""

    backend = (provider or "").lower()
    if backend in _FREE_BACKENDS:
        return 0.0
    rates = _RATES.get((backend, (model or "").lower()))
    if rates is None:
        return None
    input_rate, output_rate = rates
    billed_in = max(float(prompt_tokens or 0), 0.0)
    billed_out = max(float(completion_tokens or 0), 0.0)
    return round((billed_in * input_rate + billed_out * output_rate) / 1_000_000, 6)


__all__ = ["estimate_cost"]
