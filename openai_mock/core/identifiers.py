"""Response identifiers and creation timestamps."""

from __future__ import annotations

import time
from typing import Callable, Dict, Tuple
from uuid import uuid4

# kind -> (prefix, separator, number of hex characters)
_ID_FORMATS: Dict[str, Tuple[str, str, int]] = {
    "completion": ("cmpl", "-", 24),
    "chat": ("chatcmpl", "-", 29),
    "embedding": ("emb", "-", 24),
    "tool_call": ("call", "_", 24),
}


class IdentifierGenerator:
    """Produces ``<prefix>-<random hex>`` identifiers and Unix timestamps.

    Uniqueness is best-effort (process-local ``uuid4`` randomness). The clock is
    injectable so tests can pin ``created``.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock

    def next(self, kind: str) -> str:
        try:
            prefix, separator, length = _ID_FORMATS[kind]
        except KeyError:
            raise ValueError(f"Unknown identifier kind: {kind!r}") from None
        return f"{prefix}{separator}{uuid4().hex[:length]}"

    def timestamp(self) -> int:
        return int(self._clock())
