# ==============================
# Testing Fixtures
# ==============================
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from ragcore.config.schema import EmbeddingsConfig, VectorStoreConfig
from ragcore.knowledge.vector_store import VectorStore
from ragcore.models.embedding_provider import EmbeddingProvider
from tests.fakes import FakeChromaServer, FakeEmbeddingServer


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def embedding_server() -> FakeEmbeddingServer:
    return FakeEmbeddingServer()


@pytest.fixture
def chroma_server() -> FakeChromaServer:
    return FakeChromaServer()


@pytest.fixture
def make_provider() -> Callable[..., EmbeddingProvider]:
    """Provider wired to a fake model server at http://ollama.test."""

    def _make(server: FakeEmbeddingServer, **config: Any) -> EmbeddingProvider:
        cfg = EmbeddingsConfig(base_url="http://ollama.test", **config)
        return EmbeddingProvider(config=cfg, client=server.client())

    return _make


@pytest.fixture
def memory_store() -> VectorStore:
    return VectorStore(config=VectorStoreConfig(backend="memory"))


@pytest.fixture
def remote_store(chroma_server: FakeChromaServer) -> VectorStore:
    cfg = VectorStoreConfig(backend="remote", url="http://chroma.test")
    return VectorStore(config=cfg, client=chroma_server.client())
