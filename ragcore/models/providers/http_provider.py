# ==============================
# HTTP Embedding Backend
# ==============================
"""
Embedding over a local model server (Ollama and look-alikes).

Servers disagree on the path and on the request/response field names, so this
backend probes an ordered list of endpoint paths and remembers the first one
that produced a vector.

Request body: {"model": ..., "prompt": text, "input": text}
Accepted responses, checked in order:
- {"embedding": [...]}
- {"embeddings": [[...], ...]}   (first element used)
- [...]                          (bare array)

Never raises for transport/server failures; every problem becomes a miss.
"""

from __future__ import annotations

import logging
import math
from typing import Any, List, Optional, Sequence

import httpx

from ragcore.config.schema import DEFAULT_EMBEDDING_ENDPOINTS
from ragcore.contracts.embedding_schema import EmbedRequest, EmbedResult
from ragcore.knowledge.vector_math import to_float32_list

logger = logging.getLogger(__name__)

TIER = "http"


class HttpEmbeddingBackend:
    name: str = TIER

    def __init__(
        self,
        *,
        base_url: str,
        model: str,
        client: httpx.AsyncClient,
        endpoints: Optional[Sequence[str]] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.client = client
        self.endpoints = list(endpoints or DEFAULT_EMBEDDING_ENDPOINTS)
        # Best-effort hint shared by all calls on this instance. Concurrent calls
        # may race on it; the worst case is one wasted probe.
        self.working_endpoint: Optional[str] = None

    async def embed(self, text: str) -> EmbedResult:
        reasons: List[str] = []

        cached = self.working_endpoint
        if cached is not None:
            result = await self._try_endpoint(cached, text)
            if result.ok:
                return result
            logger.info("Cached embedding endpoint stopped working: %s", result.reason, extra={"endpoint": cached})
            reasons.append(f"{cached}: {result.reason}")
            self.working_endpoint = None

        for path in self.endpoints:
            result = await self._try_endpoint(path, text)
            if result.ok:
                self.working_endpoint = path
                return result
            reasons.append(f"{path}: {result.reason}")

        return EmbedResult.miss("; ".join(reasons) or "no endpoints configured", tier=TIER)

    async def _try_endpoint(self, path: str, text: str) -> EmbedResult:
        url = f"{self.base_url}{path}"
        body = EmbedRequest.for_text(self.model, text).model_dump()
        logger.debug("POST %s (text length %d)", url, len(text), extra={"endpoint": path})

        try:
            resp = await self.client.post(url, json=body)
        except httpx.HTTPError as e:
            return EmbedResult.miss(f"transport error: {e.__class__.__name__}: {e}", tier=TIER, endpoint=path)

        if not resp.is_success:
            logger.info("Non-success status %s for %s", resp.status_code, url, extra={"endpoint": path})
            return EmbedResult.miss(f"status {resp.status_code}", tier=TIER, endpoint=path)

        try:
            data = resp.json()
        except ValueError:
            return EmbedResult.miss("response body is not JSON", tier=TIER, endpoint=path)

        vector = parse_embedding_response(data)
        if not vector:
            logger.debug("No embedding found in response from %s", url, extra={"endpoint": path})
            return EmbedResult.miss("no embedding in response", tier=TIER, endpoint=path)
        return EmbedResult.hit(vector, tier=TIER, endpoint=path)


def parse_embedding_response(data: Any) -> List[float]:
    if isinstance(data, dict):
        if "embedding" in data:
            return coerce_vector(data["embedding"])
        embeddings = data.get("embeddings")
        if isinstance(embeddings, list) and embeddings:
            return coerce_vector(embeddings[0])
        return []
    if isinstance(data, list):
        return coerce_vector(data)
    return []


def coerce_vector(values: Any) -> List[float]:
    """
    Numbers -> float, numeric strings -> float, anything else skipped.
    NaN and infinities are dropped.
    Output is rounded to single precision.
    """
    if not isinstance(values, list):
        return []
    out: List[float] = []
    for item in values:
        if isinstance(item, bool):
            continue
        if isinstance(item, (int, float)):
            try:
                value = float(item)
            except OverflowError:
                continue
        elif isinstance(item, str):
            try:
                value = float(item.strip())
            except ValueError:
                continue
        else:
            continue
        if math.isfinite(value):
            out.append(value)
    # values beyond single-precision range become inf once rounded
    return [v for v in to_float32_list(out) if math.isfinite(v)]
