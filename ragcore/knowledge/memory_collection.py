# ==============================
# In-Memory Collection
# ==============================
"""
Process-local Collection that ranks by cosine similarity.

Not durable. Linear scan per query; sized for hundreds to low thousands of
chunks. No index structure.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ragcore.knowledge.base import Collection, Embedding, StoredRecord, check_parallel
from ragcore.knowledge.vector_math import cosine_similarity

logger = logging.getLogger(__name__)


class MemoryCollection(Collection):
    def __init__(self, name: str) -> None:
        self.name = name
        # dict keeps insertion order; ties and fallbacks rely on it
        self._records: Dict[str, StoredRecord] = {}
        self._lock = threading.RLock()

    async def upsert(
        self,
        ids: Sequence[str],
        embeddings: Optional[Sequence[Optional[Embedding]]] = None,
        metadatas: Optional[Sequence[Optional[Dict[str, Any]]]] = None,
        documents: Optional[Sequence[Optional[str]]] = None,
    ) -> None:
        check_parallel(ids, embeddings=embeddings, metadatas=metadatas, documents=documents)
        with self._lock:
            for i, record_id in enumerate(ids):
                embedding = embeddings[i] if embeddings is not None else None
                metadata = metadatas[i] if metadatas is not None else None
                content = documents[i] if documents is not None else None

                existing = self._records.get(record_id)
                if existing is None:
                    self._records[record_id] = StoredRecord(
                        id=record_id,
                        embedding=list(embedding) if embedding is not None else None,
                        metadata=dict(metadata or {}),
                        content=content or "",
                    )
                    continue

                patch: Dict[str, Any] = {}
                if embedding is not None:
                    patch["embedding"] = list(embedding)
                if metadata is not None:
                    patch["metadata"] = dict(metadata)
                if content is not None:
                    patch["content"] = content
                if patch:
                    self._records[record_id] = existing.model_copy(update=patch)

    async def query(self, query_embeddings: Sequence[Embedding], k: int) -> List[List[str]]:
        with self._lock:
            records = list(self._records.values())
        return [self._rank(records, list(q), k) for q in query_embeddings]

    def _rank(self, records: List[StoredRecord], q: Embedding, k: int) -> List[str]:
        if k <= 0:
            return []
        if not q:
            return [r.content for r in records[:k]]

        scored: List[Tuple[float, StoredRecord]] = [
            (cosine_similarity(q, r.embedding), r)
            for r in records
            if r.embedding is not None and len(r.embedding) == len(q)
        ]
        if not scored:
            if records:
                logger.warning(
                    "No records with dimension %d in collection; returning insertion order",
                    len(q),
                    extra={"collection": self.name},
                )
            return [r.content for r in records[:k]]

        # sort is stable: equal scores keep insertion order
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [r.content for _, r in scored[:k]]

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def get(self, record_id: str) -> Optional[StoredRecord]:
        with self._lock:
            return self._records.get(record_id)
