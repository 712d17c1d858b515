# ==============================
# Knowledge Layer Contracts
# ==============================
"""
Core knowledge abstractions.

Design goals:
- Keep minimal and stable.
- No embedding calls here; vectors arrive precomputed.
- Provide a small, typed interface for:
  - Ingestion (id + vector + metadata + text)
  - Retrieval (query vectors -> ranked document texts)

Two Collection implementations live next to this module:
- memory_collection.MemoryCollection (process-local, ranks by cosine similarity)
- remote_collection.RemoteCollection (Chroma REST API)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

Embedding = List[float]


class Chunk(BaseModel):
    """A span of manifest text plus the metadata it is stored with."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    content: str
    party_name: str
    theme: str = "n/a"
    page_number: int = 0

    def metadata(self) -> Dict[str, Any]:
        return {"party": self.party_name, "theme": self.theme, "page": self.page_number}


class StoredRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    embedding: Optional[Embedding] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    content: str = ""


class IngestResult(BaseModel):
    ok: bool
    inserted: int = 0
    skipped: int = 0
    errors: List[str] = Field(default_factory=list)


class RetrievalError(BaseModel):
    code: str
    message: str


class RetrievalResult(BaseModel):
    ok: bool
    query: str
    chunks: List[str] = Field(default_factory=list)
    error: Optional[RetrievalError] = None


class Collection(ABC):
    """
    Named set of StoredRecords.

    upsert() takes parallel sequences; embeddings/metadatas/documents may be None
    (or contain None entries) to leave the corresponding field untouched.
    """

    name: str

    @abstractmethod
    async def upsert(
        self,
        ids: Sequence[str],
        embeddings: Optional[Sequence[Optional[Embedding]]] = None,
        metadatas: Optional[Sequence[Optional[Dict[str, Any]]]] = None,
        documents: Optional[Sequence[Optional[str]]] = None,
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    async def query(self, query_embeddings: Sequence[Embedding], k: int) -> List[List[str]]:
        """Return, per query embedding, up to k document texts ordered best-first."""
        raise NotImplementedError


def check_parallel(ids: Sequence[str], **columns: Optional[Sequence[Any]]) -> None:
    for column, values in columns.items():
        if values is not None and len(values) != len(ids):
            raise ValueError(f"upsert: '{column}' has {len(values)} entries, expected {len(ids)}")
