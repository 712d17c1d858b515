# ==============================
# Vector Store
# ==============================
"""
Collection lifecycle + routing.

VectorStore owns get-or-create by name and delegates upsert/query to the
configured Collection implementation:
- "memory": MemoryCollection, created in-process on first access
- "remote": RemoteCollection, resolved against a Chroma server

get_or_create_collection() is idempotent. A server answering "already exists"
is treated exactly like "created".
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ragcore.config.schema import Settings, VectorStoreConfig
from ragcore.errors import VectorStoreError
from ragcore.knowledge.base import Chunk, Collection, Embedding
from ragcore.knowledge.memory_collection import MemoryCollection
from ragcore.knowledge.remote_collection import RemoteCollection

logger = logging.getLogger(__name__)


class VectorStore:
    def __init__(
        self,
        *,
        config: Optional[VectorStoreConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config or VectorStoreConfig()
        self.backend = self.config.backend
        self.api_base = f"{self.config.url.rstrip('/')}/{self.config.api_path.strip('/')}"
        self._collections: Dict[str, Collection] = {}
        self._owns_client = client is None and self.backend == "remote"
        self._client = client
        if self._owns_client:
            self._client = httpx.AsyncClient(timeout=self.config.timeout_seconds)

    @classmethod
    def from_settings(cls, settings: Settings, *, client: Optional[httpx.AsyncClient] = None) -> "VectorStore":
        return cls(config=settings.vector_store, client=client)

    @property
    def default_collection(self) -> str:
        return self.config.collection_name

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()

    # ------------------------------
    # Lifecycle
    # ------------------------------

    async def get_or_create_collection(self, name: str) -> Collection:
        cached = self._collections.get(name)
        if cached is not None:
            return cached

        if self.backend == "memory":
            collection: Collection = MemoryCollection(name)
        else:
            collection = await self._resolve_remote(name)

        # concurrent first calls may both resolve; first one cached wins
        return self._collections.setdefault(name, collection)

    async def _resolve_remote(self, name: str) -> RemoteCollection:
        if self._client is None:
            raise VectorStoreError("Remote backend has no HTTP client", collection=name)
        url = f"{self.api_base}/collections"
        try:
            resp = await self._client.post(url, json={"name": name, "get_or_create": True})
            if _already_exists(resp):
                logger.debug("Collection already exists; fetching it", extra={"collection": name})
                resp = await self._client.get(f"{url}/{name}")
        except httpx.HTTPError as e:
            raise VectorStoreError(f"Could not reach vector store at {url}: {e}", collection=name) from e

        if not resp.is_success:
            raise VectorStoreError(
                f"get_or_create failed: {resp.text[:500]}",
                collection=name,
                status_code=resp.status_code,
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise VectorStoreError("get_or_create returned a non-JSON body", collection=name) from e

        collection_id = data.get("id") if isinstance(data, dict) else None
        if not collection_id:
            raise VectorStoreError("get_or_create response carried no collection id", collection=name)

        logger.info("Collection ready", extra={"collection": name})
        return RemoteCollection(
            client=self._client,
            api_base=self.api_base,
            name=name,
            collection_id=str(collection_id),
        )

    # ------------------------------
    # Delegation
    # ------------------------------

    async def upsert(
        self,
        name: str,
        ids: Sequence[str],
        embeddings: Optional[Sequence[Optional[Embedding]]] = None,
        metadatas: Optional[Sequence[Optional[Dict[str, Any]]]] = None,
        documents: Optional[Sequence[Optional[str]]] = None,
    ) -> None:
        collection = await self.get_or_create_collection(name)
        await collection.upsert(ids, embeddings, metadatas, documents)

    async def query(self, name: str, query_embeddings: Sequence[Embedding], k: int) -> List[List[str]]:
        try:
            collection = await self.get_or_create_collection(name)
        except VectorStoreError as e:
            # reads fail soft, including when the collection cannot be resolved
            logger.warning("Query skipped: %s", e, extra={"collection": name})
            return []
        return await collection.query(query_embeddings, k)

    async def add_chunk(self, name: str, chunk: Chunk, embedding: Embedding) -> None:
        await self.upsert(
            name,
            ids=[chunk.id],
            embeddings=[embedding],
            metadatas=[chunk.metadata()],
            documents=[chunk.content],
        )

    async def query_relevant_chunks(self, name: str, embedding: Embedding, n_results: int = 5) -> List[str]:
        results = await self.query(name, [embedding], n_results)
        return results[0] if results else []


def _already_exists(resp: httpx.Response) -> bool:
    if resp.status_code == 409:
        return True
    if resp.is_success:
        return False
    return "already exists" in resp.text.lower()
