# ==============================
# Health Checks
# ==============================
"""
Readiness probes for the two external collaborators: the embedding model
server and the vector store. Probes report; they never raise.
"""

from __future__ import annotations

from typing import Optional

import httpx
from pydantic import BaseModel

from ragcore.errors import VectorStoreError
from ragcore.knowledge.vector_store import VectorStore


class HealthStatus(BaseModel):
    name: str
    healthy: bool
    detail: str = ""


async def check_embedding_server(client: httpx.AsyncClient, base_url: str) -> HealthStatus:
    try:
        resp = await client.get(base_url)
    except httpx.HTTPError as e:
        return HealthStatus(name="embeddings", healthy=False, detail=f"unreachable: {e}")
    if resp.is_success:
        return HealthStatus(name="embeddings", healthy=True, detail="model server reachable")
    return HealthStatus(name="embeddings", healthy=False, detail=f"model server returned {resp.status_code}")


async def check_vector_store(store: VectorStore, name: Optional[str] = None) -> HealthStatus:
    collection = name or store.default_collection
    try:
        await store.get_or_create_collection(collection)
    except VectorStoreError as e:
        return HealthStatus(name="vector_store", healthy=False, detail=str(e))
    return HealthStatus(name="vector_store", healthy=True, detail=f"collection '{collection}' ready")
