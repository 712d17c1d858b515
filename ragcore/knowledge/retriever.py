# ==============================
# Retrieval Pipeline
# ==============================
"""
High-level retrieval orchestration.

- Thin composition of EmbeddingProvider + VectorStore.
- retrieve(): query text -> ordered chunk texts.
- ingest(): chunks -> embeddings -> upserts.

Empty embeddings and empty results are reported as structured errors rather
than exceptions; the gateway turns them into user-facing diagnostics.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ragcore.errors import VectorStoreError
from ragcore.knowledge.base import Chunk, IngestResult, RetrievalError, RetrievalResult
from ragcore.knowledge.vector_store import VectorStore
from ragcore.models.embedding_provider import EmbeddingProvider

logger = logging.getLogger(__name__)

EMBEDDING_UNAVAILABLE = "embedding_unavailable"
NO_CONTEXT = "no_context"


class RetrievalPipeline:
    def __init__(
        self,
        *,
        provider: EmbeddingProvider,
        store: VectorStore,
        collection: Optional[str] = None,
        default_top_k: int = 5,
    ) -> None:
        self.provider = provider
        self.store = store
        self.collection = collection or store.default_collection
        self.default_top_k = default_top_k

    async def retrieve(self, query: str, top_k: Optional[int] = None) -> RetrievalResult:
        k = top_k if top_k is not None else self.default_top_k

        vector = await self.provider.generate_embedding(query)
        if not vector:
            return RetrievalResult(
                ok=False,
                query=query,
                error=RetrievalError(
                    code=EMBEDDING_UNAVAILABLE,
                    message="Could not generate an embedding for the query. Check the embedding provider.",
                ),
            )

        chunks = await self.store.query_relevant_chunks(self.collection, vector, n_results=k)
        if not chunks:
            return RetrievalResult(
                ok=False,
                query=query,
                error=RetrievalError(
                    code=NO_CONTEXT,
                    message="No relevant context found. Check that ingestion has run.",
                ),
            )
        return RetrievalResult(ok=True, query=query, chunks=chunks)

    async def ingest(self, chunks: Iterable[Chunk]) -> IngestResult:
        # fail before embedding anything if the store is unreachable
        await self.store.get_or_create_collection(self.collection)

        inserted = 0
        skipped = 0
        errors = []
        for chunk in chunks:
            embedding = await self.provider.generate_embedding(chunk.content)
            if not embedding:
                skipped += 1
                logger.warning("Skipping chunk %s: no embedding produced", chunk.id, extra={"party": chunk.party_name})
                continue
            try:
                await self.store.add_chunk(self.collection, chunk, embedding)
            except VectorStoreError as e:
                logger.error("Failed to store chunk %s: %s", chunk.id, e, extra={"party": chunk.party_name})
                errors.append(f"{chunk.id}: {e}")
                continue
            inserted += 1

        return IngestResult(ok=not errors, inserted=inserted, skipped=skipped, errors=errors)
