"""Vector helpers for query-to-document similarity."""

from __future__ import annotations

from collections.abc import Sequence

from src.utils.errors import DimensionMismatchError


def dot_product(a: Sequence[float], b: Sequence[float]) -> float:
    """Return the dot product of two equal-length vectors.

    Raises
    ------
    DimensionMismatchError
        If ``len(a) != len(b)``.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(left=len(a), right=len(b))
    return float(sum(x * y for x, y in zip(a, b)))


def flatten(vectors: Sequence[Sequence[float]]) -> list[float]:
    """Concatenate per-chunk vectors, in order, into one flat vector."""
    flat: list[float] = []
    for vector in vectors:
        flat.extend(float(v) for v in vector)
    return flat
