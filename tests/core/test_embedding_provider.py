# ==============================
# Tests: Embedding Provider
# ==============================
from __future__ import annotations

from typing import List

import httpx
import pytest

from ragcore.config.schema import EmbeddingsConfig
from ragcore.contracts.embedding_schema import EmbedResult
from ragcore.errors import ConfigurationError
from ragcore.models import router as backend_router
from ragcore.models.embedding_provider import EmbeddingProvider

from tests.fakes import FakeEmbeddingServer, ollama_embeddings

pytestmark = pytest.mark.anyio


class FakeNative:
    name = "fake"

    def __init__(self, *, results: List[object]) -> None:
        self.results = list(results)
        self.calls = 0

    async def embed(self, text: str) -> EmbedResult:
        self.calls += 1
        item = self.results.pop(0) if self.results else []
        if isinstance(item, Exception):
            raise item
        if not item:
            return EmbedResult.miss("empty", tier="native")
        return EmbedResult.hit(list(item), tier="native")


async def test_all_tiers_failing_returns_empty_vector() -> None:
    server = FakeEmbeddingServer()  # every path 404
    native = FakeNative(results=[RuntimeError("native exploded")])
    provider = EmbeddingProvider(
        config=EmbeddingsConfig(base_url="http://ollama.test"),
        client=server.client(),
        native=native,
    )

    vector = await provider.generate_embedding("any text")

    assert vector == []
    assert server.calls == ["/api/embeddings", "/api/embed", "/embed"]
    assert [m.tier for m in provider.last_misses] == ["native", "http"]


async def test_transport_errors_are_swallowed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = EmbeddingProvider(
        config=EmbeddingsConfig(base_url="http://ollama.test"),
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    assert await provider.generate_embedding("hello") == []
    assert provider.working_endpoint is None


async def test_endpoint_cache_is_tried_first(make_provider) -> None:
    server = FakeEmbeddingServer(routes={"/api/embed": lambda body: (200, {"embeddings": [[0.5, 0.25]]})})
    provider = make_provider(server)

    first = await provider.generate_embedding("eerste")
    assert first == [0.5, 0.25]
    assert server.calls == ["/api/embeddings", "/api/embed"]
    assert provider.working_endpoint == "/api/embed"

    server.calls.clear()
    second = await provider.generate_embedding("tweede")
    assert second == [0.5, 0.25]
    assert server.calls == ["/api/embed"]


async def test_cache_reset_when_cached_endpoint_fails(make_provider) -> None:
    server = FakeEmbeddingServer(routes={"/api/embed": ollama_embeddings([1.0])})
    provider = make_provider(server)
    await provider.generate_embedding("warm up")
    assert provider.working_endpoint == "/api/embed"

    server.routes = {"/embed": ollama_embeddings([2.0])}
    server.calls.clear()
    vector = await provider.generate_embedding("again")

    assert vector == [2.0]
    assert server.calls == ["/api/embed", "/api/embeddings", "/api/embed", "/embed"]
    assert provider.working_endpoint == "/embed"


async def test_request_carries_model_and_both_text_fields(make_provider) -> None:
    server = FakeEmbeddingServer(routes={"/api/embeddings": ollama_embeddings([1.0, 2.0])})
    provider = make_provider(server, model="nomic-embed-text")

    await provider.generate_embedding("Ik wil lagere belastingen")

    assert server.bodies[0] == {
        "model": "nomic-embed-text",
        "prompt": "Ik wil lagere belastingen",
        "input": "Ik wil lagere belastingen",
    }


async def test_native_tier_wins_when_available() -> None:
    server = FakeEmbeddingServer(routes={"/api/embeddings": ollama_embeddings([9.0])})
    native = FakeNative(results=[[0.25, 0.75]])
    provider = EmbeddingProvider(
        config=EmbeddingsConfig(base_url="http://ollama.test"),
        client=server.client(),
        native=native,
    )

    assert await provider.generate_embedding("text") == [0.25, 0.75]
    assert server.calls == []


async def test_native_failure_latches_off_for_lifetime() -> None:
    server = FakeEmbeddingServer(routes={"/api/embeddings": ollama_embeddings([9.0])})
    native = FakeNative(results=[RuntimeError("api changed"), [1.0, 1.0]])
    provider = EmbeddingProvider(
        config=EmbeddingsConfig(base_url="http://ollama.test"),
        client=server.client(),
        native=native,
    )

    assert await provider.generate_embedding("one") == [9.0]
    assert provider.native_available is False

    assert await provider.generate_embedding("two") == [9.0]
    assert native.calls == 1


async def test_native_empty_result_falls_through_without_latching() -> None:
    server = FakeEmbeddingServer(routes={"/api/embeddings": ollama_embeddings([9.0])})
    native = FakeNative(results=[[], [3.0]])
    provider = EmbeddingProvider(
        config=EmbeddingsConfig(base_url="http://ollama.test"),
        client=server.client(),
        native=native,
    )

    assert await provider.generate_embedding("one") == [9.0]
    assert provider.native_available is True
    assert await provider.generate_embedding("two") == [3.0]


def test_unavailable_native_backend_disables_tier(monkeypatch) -> None:
    def _broken(**kwargs):
        raise ImportError("No module named 'sentence_transformers'")

    monkeypatch.setitem(backend_router.NATIVE_BACKENDS, "sentence_transformers", _broken)
    provider = EmbeddingProvider(config=EmbeddingsConfig(native_backend="sentence_transformers"))

    assert provider.native is None
    assert provider.native_available is False


def test_configured_native_backend_is_built(monkeypatch) -> None:
    built = {}

    def _factory(**kwargs):
        built.update(kwargs)
        return FakeNative(results=[])

    monkeypatch.setitem(backend_router.NATIVE_BACKENDS, "fake", _factory)
    provider = EmbeddingProvider(config=EmbeddingsConfig(native_backend="fake", native_model="mini"))

    assert provider.native_available is True
    assert built == {"model": "mini"}


def test_unknown_native_backend_is_a_config_error() -> None:
    with pytest.raises(ConfigurationError):
        EmbeddingProvider(config=EmbeddingsConfig(native_backend="does_not_exist"))


def test_empty_base_url_is_a_config_error() -> None:
    with pytest.raises(ConfigurationError):
        EmbeddingProvider(config=EmbeddingsConfig(base_url="  "))


def test_unknown_native_backend_opens_no_client(monkeypatch) -> None:
    opened = []

    class _RecordingClient(httpx.AsyncClient):
        def __init__(self, *args, **kwargs) -> None:
            opened.append(True)
            super().__init__(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", _RecordingClient)
    with pytest.raises(ConfigurationError):
        EmbeddingProvider(config=EmbeddingsConfig(native_backend="does_not_exist"))
    assert opened == []
