# ==============================
# API Dependencies / Singletons
# ==============================
from __future__ import annotations

from functools import lru_cache

from ragcore.config.loader import load_settings
from ragcore.config.schema import Settings
from ragcore.ingest.document_processor import DocumentProcessor
from ragcore.knowledge.retriever import RetrievalPipeline
from ragcore.knowledge.vector_store import VectorStore
from ragcore.models.embedding_provider import EmbeddingProvider


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


@lru_cache(maxsize=1)
def get_embedding_provider() -> EmbeddingProvider:
    return EmbeddingProvider.from_settings(get_settings())


@lru_cache(maxsize=1)
def get_vector_store() -> VectorStore:
    return VectorStore.from_settings(get_settings())


@lru_cache(maxsize=1)
def get_document_processor() -> DocumentProcessor:
    ingestion = get_settings().ingestion
    return DocumentProcessor(chunk_size=ingestion.chunk_size, chunk_overlap=ingestion.chunk_overlap)


@lru_cache(maxsize=1)
def get_pipeline() -> RetrievalPipeline:
    settings = get_settings()
    return RetrievalPipeline(
        provider=get_embedding_provider(),
        store=get_vector_store(),
        collection=settings.vector_store.collection_name,
        default_top_k=settings.vector_store.default_top_k,
    )


def clear_caches() -> None:
    for fn in (get_pipeline, get_document_processor, get_vector_store, get_embedding_provider, get_settings):
        fn.cache_clear()
