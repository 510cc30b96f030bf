"""Token-based cost estimation for the external reasoning service."""

from __future__ import annotations

import math

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Rough token count: one token per four characters of English text."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def calculate_cost(
    prompt_tokens: int,
    completion_tokens: int,
    input_price_per_1m: float,
    output_price_per_1m: float,
) -> float:
    """USD cost of a call given token counts and per-million-token prices."""
    input_cost = (prompt_tokens / 1_000_000) * input_price_per_1m
    output_cost = (completion_tokens / 1_000_000) * output_price_per_1m
    return input_cost + output_cost
