"""Deterministic fake embedding vectors."""

from __future__ import annotations

import base64
import hashlib
from typing import List, Optional, Sequence

import numpy as np

from .config import MockConfig

_SEPARATOR = "\x1f"


class DeterministicVectorGenerator:
    """Maps ``(text, model, dimensions)`` to a unit-length vector.

    The seed is the SHA-256 digest of the unit kind, text and model, so the
    output is bit-identical across calls and process restarts. A truncated
    vector is the rescaled prefix of the model's full-length one.
    """

    def __init__(self, config: MockConfig) -> None:
        self._dimensions_by_model = config.default_embedding_dimensions_by_model
        self._fallback_dimensions = config.default_embedding_dimensions

    def default_dimensions(self, model: str) -> int:
        return self._dimensions_by_model.get(model, self._fallback_dimensions)

    def vector_length(self, model: str, dimensions: Optional[int] = None) -> int:
        default = self.default_dimensions(model)
        if dimensions is None:
            return default
        return min(dimensions, default)

    def vector(
        self,
        text: str,
        model: str,
        dimensions: Optional[int] = None,
        *,
        kind: str = "text",
    ) -> List[float]:
        """``kind`` keeps token-id units apart from text that spells them out."""

        length = self.vector_length(model, dimensions)
        rng = np.random.default_rng(_seed(kind, text, model))
        values = rng.uniform(-1.0, 1.0, length)
        norm = np.linalg.norm(values)
        if norm == 0.0:
            return values.tolist()
        return (values / norm).tolist()


def _seed(kind: str, text: str, model: str) -> int:
    key = _SEPARATOR.join((kind, text, model))
    return int.from_bytes(hashlib.sha256(key.encode("utf-8")).digest(), "big")


def encode_base64(vector: Sequence[float]) -> str:
    """Pack as little-endian float32, the wire format of ``encoding_format=base64``."""

    packed = np.asarray(vector, dtype="<f4").tobytes()
    return base64.b64encode(packed).decode("ascii")
