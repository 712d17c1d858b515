# ==============================
# Remote Collection (Chroma REST)
# ==============================
"""
Collection backed by a Chroma server over HTTP.

Failure policy:
- upsert() fails loud: any transport error or non-2xx raises VectorStoreError.
  Losing a chunk silently during ingestion is worse than stopping.
- query() fails soft: errors degrade to an empty result set, which callers
  treat the same as "no relevant chunks found".
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ragcore.errors import VectorStoreError
from ragcore.knowledge.base import Collection, Embedding, check_parallel

logger = logging.getLogger(__name__)


class RemoteCollection(Collection):
    def __init__(
        self,
        *,
        client: httpx.AsyncClient,
        api_base: str,
        name: str,
        collection_id: str,
    ) -> None:
        self.client = client
        self.api_base = api_base.rstrip("/")
        self.name = name
        self.collection_id = collection_id

    def _url(self, action: str) -> str:
        return f"{self.api_base}/collections/{self.collection_id}/{action}"

    async def upsert(
        self,
        ids: Sequence[str],
        embeddings: Optional[Sequence[Optional[Embedding]]] = None,
        metadatas: Optional[Sequence[Optional[Dict[str, Any]]]] = None,
        documents: Optional[Sequence[Optional[str]]] = None,
    ) -> None:
        check_parallel(ids, embeddings=embeddings, metadatas=metadatas, documents=documents)
        body: Dict[str, Any] = {"ids": list(ids)}
        if embeddings is not None:
            body["embeddings"] = [list(e) if e is not None else None for e in embeddings]
        if metadatas is not None:
            body["metadatas"] = list(metadatas)
        if documents is not None:
            body["documents"] = list(documents)

        url = self._url("upsert")
        try:
            resp = await self.client.post(url, json=body)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logger.error("Upsert request failed: %s", e, extra={"collection": self.name})
            raise VectorStoreError(f"Upsert to {url} failed: {e}", collection=self.name) from e

        if not resp.is_success:
            logger.error(
                "Upsert rejected with status %s: %s",
                resp.status_code,
                resp.text[:500],
                extra={"collection": self.name},
            )
            raise VectorStoreError(
                f"Upsert to {url} rejected: {resp.text[:500]}",
                collection=self.name,
                status_code=resp.status_code,
            )

    async def query(self, query_embeddings: Sequence[Embedding], k: int) -> List[List[str]]:
        body = {
            "query_embeddings": [list(q) for q in query_embeddings],
            "n_results": k,
            "include": ["documents"],
        }
        url = self._url("query")
        try:
            resp = await self.client.post(url, json=body)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            # ValueError: body not JSON-encodable (NaN/inf in an embedding)
            logger.warning("Query request failed: %s", e, extra={"collection": self.name})
            return []

        if not resp.is_success:
            logger.warning(
                "Query returned status %s; treating as no results",
                resp.status_code,
                extra={"collection": self.name},
            )
            return []

        try:
            data = resp.json()
        except ValueError:
            logger.warning("Query returned a non-JSON body", extra={"collection": self.name})
            return []
        return parse_documents(data)


def parse_documents(data: Any) -> List[List[str]]:
    """Extract `documents` (outer = query, inner = ranked texts) from a query response."""
    if not isinstance(data, dict):
        return []
    docs = data.get("documents")
    if not isinstance(docs, list):
        return []
    out: List[List[str]] = []
    for per_query in docs:
        if not isinstance(per_query, list):
            out.append([])
            continue
        out.append(["" if d is None else str(d) for d in per_query])
    return out
