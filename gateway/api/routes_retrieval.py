# ==============================
# Ingestion, Matching & Health Routes
# ==============================
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status
from fastapi.exceptions import HTTPException
from pydantic import BaseModel, Field

from gateway.api.deps import (
    get_document_processor,
    get_embedding_provider,
    get_pipeline,
    get_settings,
    get_vector_store,
)
from ragcore.config.schema import Settings
from ragcore.errors import VectorStoreError
from ragcore.ingest.document_processor import DocumentProcessor
from ragcore.ingest.runner import find_manifests, ingest_directory
from ragcore.knowledge.health import check_embedding_server, check_vector_store
from ragcore.knowledge.retriever import EMBEDDING_UNAVAILABLE, RetrievalPipeline
from ragcore.knowledge.vector_store import VectorStore
from ragcore.models.embedding_provider import EmbeddingProvider


router = APIRouter()


class RetrieveRequest(BaseModel):
    query: str = Field(..., description="Statement or question to match against the manifests.")
    top_k: Optional[int] = Field(default=None, ge=1, le=50)


def _ok(data: Dict[str, Any], *, meta: Dict[str, Any] | None = None) -> Dict[str, Any]:
    return {"ok": True, "data": data, "error": None, "meta": meta or {}}


def _error(
    *,
    http_status: int,
    code: str,
    message: str,
    details: Dict[str, Any] | None = None,
    meta: Dict[str, Any] | None = None,
) -> Dict[str, Any]:
    payload = {
        "ok": False,
        "data": None,
        "error": {"code": code, "message": message, "details": details or {}},
        "meta": meta or {},
    }
    raise HTTPException(status_code=http_status, detail=payload)


@router.post("/ingestion/start-indexing")
async def start_indexing(
    settings: Settings = Depends(get_settings),
    pipeline: RetrievalPipeline = Depends(get_pipeline),
    processor: DocumentProcessor = Depends(get_document_processor),
) -> Dict[str, Any]:
    directory = settings.manifests_path()
    if not directory.is_dir():
        _error(
            http_status=status.HTTP_404_NOT_FOUND,
            code="manifests_dir_missing",
            message=f"Directory '{settings.ingestion.manifests_dir}' not found. Place the PDFs there.",
        )
    if not find_manifests(directory):
        _error(
            http_status=status.HTTP_404_NOT_FOUND,
            code="no_manifests",
            message=f"No PDF files found in '{settings.ingestion.manifests_dir}'.",
        )

    try:
        report = await ingest_directory(pipeline, processor, directory)
    except VectorStoreError as e:
        _error(
            http_status=status.HTTP_502_BAD_GATEWAY,
            code="vector_store_unavailable",
            message=str(e),
        )
    return _ok(report.model_dump(), meta={"collection": pipeline.collection})


@router.post("/matching/retrieve")
async def retrieve(
    body: RetrieveRequest,
    pipeline: RetrievalPipeline = Depends(get_pipeline),
) -> Dict[str, Any]:
    query = body.query.strip()
    if not query:
        _error(
            http_status=status.HTTP_400_BAD_REQUEST,
            code="empty_query",
            message="The query must not be empty.",
        )

    result = await pipeline.retrieve(query, top_k=body.top_k)
    if not result.ok and result.error is not None:
        http_status = (
            status.HTTP_503_SERVICE_UNAVAILABLE
            if result.error.code == EMBEDDING_UNAVAILABLE
            else status.HTTP_404_NOT_FOUND
        )
        _error(http_status=http_status, code=result.error.code, message=result.error.message)

    return _ok({"query": result.query, "sources": result.chunks}, meta={"collection": pipeline.collection})


@router.get("/health")
async def health(
    settings: Settings = Depends(get_settings),
    provider: EmbeddingProvider = Depends(get_embedding_provider),
    store: VectorStore = Depends(get_vector_store),
) -> Dict[str, Any]:
    checks = [
        await check_embedding_server(provider.client, settings.embeddings.base_url),
        await check_vector_store(store),
    ]
    statuses = {c.name: c.model_dump() for c in checks}
    if not all(c.healthy for c in checks):
        _error(
            http_status=status.HTTP_503_SERVICE_UNAVAILABLE,
            code="unhealthy",
            message="One or more dependencies are not ready.",
            details=statuses,
        )
    return _ok(statuses)
