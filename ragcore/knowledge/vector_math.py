# ==============================
# Vector Math
# ==============================
"""
Pure numeric helpers shared by the in-memory collection and the embedding
provider. No I/O.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

import numpy as np


def to_float32_list(values: Iterable[float]) -> List[float]:
    """Round every value through single precision; returns plain Python floats."""
    return np.asarray(list(values), dtype=np.float32).tolist()


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    dot(a, b) / (|a| * |b|), in [-1, 1].

    Returns 0.0 when either vector has zero norm or the score is not finite. Vectors of different length
    are a caller error; filter by dimension before scoring.
    """
    if len(a) != len(b):
        raise ValueError(f"Vector length mismatch: {len(a)} != {len(b)}")
    if len(a) == 0:
        return 0.0

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0
    score = float(np.dot(va, vb)) / norm
    # NaN/inf components must not outrank real matches
    if not np.isfinite(score):
        return 0.0
    return max(-1.0, min(1.0, score))
