"""Approximate token accounting.

There is no tokenizer: one token is counted per four characters of text,
rounded up, which is the usual rule of thumb for English.
"""

from __future__ import annotations

import math
from typing import Iterable

from .models import EmbeddingUsage, Usage

CHARS_PER_TOKEN = 4


class UsageCalculator:
    def estimate(self, text: str) -> int:
        if not text:
            return 0
        return math.ceil(len(text) / CHARS_PER_TOKEN)

    def estimate_many(self, texts: Iterable[str]) -> int:
        return sum(self.estimate(text) for text in texts)

    def max_chars(self, max_tokens: int) -> int:
        """Longest text whose estimate stays within ``max_tokens``."""

        return max_tokens * CHARS_PER_TOKEN

    def usage(self, prompt_tokens: int, completion_tokens: int) -> Usage:
        return Usage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        )

    def embedding_usage(self, prompt_tokens: int) -> EmbeddingUsage:
        return EmbeddingUsage(prompt_tokens=prompt_tokens, total_tokens=prompt_tokens)
