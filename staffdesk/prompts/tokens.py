"""
tokens.py - Character-based token estimation for prompt budget display.

No tokenizer is involved. The estimate is ceil(code_points / CHARS_PER_TOKEN),
so it is an upper bound for UIs that compare against a hard ceiling, and it
never decreases as text grows.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from staffdesk.config.runtime_config import get_token_ceiling

# ~4 characters per token, counted in Unicode code points (not bytes)
CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Estimate the token count of text, rounding up.

    Raises:
        TypeError: If text is not a str.
    """
    if not isinstance(text, str):
        raise TypeError(f"estimate_tokens expects str, got {type(text).__name__}")
    # Ceiling division without floats
    return -(-len(text) // CHARS_PER_TOKEN)


@dataclass(frozen=True)
class TokenBudget:
    """Token estimate measured against a fixed ceiling."""

    estimate: int
    ceiling: int

    @property
    def remaining(self) -> int:
        return max(self.ceiling - self.estimate, 0)

    @property
    def over_budget(self) -> bool:
        return self.estimate > self.ceiling

    def format(self) -> str:
        """Render as "estimate / ceiling tokens", e.g. "1,234 / 120,000 tokens"."""
        return f"{self.estimate:,} / {self.ceiling:,} tokens"


def token_budget(text: str, ceiling: Optional[int] = None) -> TokenBudget:
    """Estimate text against a ceiling (the configured one by default)."""
    if ceiling is None:
        ceiling = get_token_ceiling()
    return TokenBudget(estimate=estimate_tokens(text), ceiling=ceiling)
