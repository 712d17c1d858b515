# ==============================
# Sentence-Transformers Backend (native tier)
# ==============================
"""
In-process embedding with a sentence-transformers model.

The library is an optional extra (`pip install manifest-rag[native]`). Importing
or loading the model happens in __init__; any failure there propagates so the
provider can disable the native tier for its lifetime.

encode() is CPU-bound, so it runs in a worker thread.
"""

from __future__ import annotations

import asyncio
from typing import Any, List

import numpy as np

from ragcore.contracts.embedding_schema import EmbedResult

TIER = "native"


class SentenceTransformersBackend:
    name: str = "sentence_transformers"

    def __init__(self, *, model: str) -> None:
        from sentence_transformers import SentenceTransformer

        self.model_name = model
        self._model = SentenceTransformer(model)

    async def embed(self, text: str) -> EmbedResult:
        raw = await asyncio.to_thread(self._model.encode, text, show_progress_bar=False)
        vector = native_vector(raw)
        if not vector:
            return EmbedResult.miss("native backend returned an empty vector", tier=TIER)
        return EmbedResult.hit(vector, tier=TIER)


def native_vector(raw: Any) -> List[float]:
    """
    Flatten a native encode() result to a float32 vector.

    Accepts a 1-D array/list directly, or the first row of a 2-D result.
    Non-finite values are dropped.
    """
    if raw is None:
        return []
    arr = np.asarray(raw)
    if arr.size == 0:
        return []
    if arr.ndim == 2:
        arr = arr[0]
    if arr.ndim != 1 or not np.issubdtype(arr.dtype, np.number):
        return []
    arr = arr.astype(np.float32)
    return arr[np.isfinite(arr)].tolist()
