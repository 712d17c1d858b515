# ==============================
# Embedding Provider
# ==============================
"""
Text -> vector with a tiered fallback chain.

Tier 1 (optional): a native in-process backend selected by configuration.
  If it cannot be instantiated, or raises during a call, it is disabled for
  the rest of this provider's lifetime (one-way latch, not a retry budget).
Tier 2: HttpEmbeddingBackend against the configured model server.

Contract:
- generate_embedding() never raises for transport/provider failures. It returns
  an empty list when every tier misses; callers must check for that.
- Only invalid configuration raises (ConfigurationError, at construction).
"""

from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from ragcore.config.schema import EmbeddingsConfig, Settings
from ragcore.contracts.embedding_schema import EmbedResult, EmbeddingBackend
from ragcore.errors import ConfigurationError
from ragcore.models.providers.http_provider import HttpEmbeddingBackend
from ragcore.models.router import BackendSelection, build_native, select_native

logger = logging.getLogger(__name__)


class EmbeddingProvider:
    """
    Example:
        >>> provider = EmbeddingProvider(config=EmbeddingsConfig(base_url="http://localhost:11434"))
        >>> vector = await provider.generate_embedding("Ik wil lagere belastingen")
        >>> if not vector: ...  # no embedding produced
    """

    def __init__(
        self,
        *,
        config: Optional[EmbeddingsConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        native: Optional[EmbeddingBackend] = None,
    ) -> None:
        self.config = config or EmbeddingsConfig()
        if not self.config.base_url.strip():
            raise ConfigurationError("embeddings.base_url must not be empty")
        if not self.config.model.strip():
            raise ConfigurationError("embeddings.model must not be empty")
        # unknown backend names fail before any client is opened
        selection = select_native(self.config) if native is None else None

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.config.timeout_seconds)
        self.http = HttpEmbeddingBackend(
            base_url=self.config.base_url,
            model=self.config.model,
            client=self._client,
            endpoints=self.config.endpoints,
        )

        self.native: Optional[EmbeddingBackend] = native if native is not None else self._init_native(selection)
        self.native_available = self.native is not None
        self.last_misses: List[EmbedResult] = []

    @classmethod
    def from_settings(cls, settings: Settings, *, client: Optional[httpx.AsyncClient] = None) -> "EmbeddingProvider":
        return cls(config=settings.embeddings, client=client)

    def _init_native(self, selection: Optional[BackendSelection]) -> Optional[EmbeddingBackend]:
        if selection is None:
            return None
        try:
            backend = build_native(selection)
        except Exception as e:
            logger.warning(
                "Native embedding backend '%s' unavailable (%s); using HTTP only",
                selection.backend,
                e,
                extra={"tier": "native"},
            )
            return None
        logger.info("Native embedding backend '%s' ready", selection.backend, extra={"tier": "native"})
        return backend

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    @property
    def working_endpoint(self) -> Optional[str]:
        return self.http.working_endpoint

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def embed(self, text: str) -> EmbedResult:
        """Run the tier chain and return the tagged result of the last tier tried."""
        text = text or ""
        misses: List[EmbedResult] = []

        if self.native_available and self.native is not None:
            try:
                result = await self.native.embed(text)
            except Exception as e:
                logger.warning(
                    "Native embedding failed; switching to HTTP fallback: %s",
                    e,
                    extra={"tier": "native"},
                )
                self.native_available = False
                result = EmbedResult.miss(f"{e.__class__.__name__}: {e}", tier="native")
            if result.ok:
                self.last_misses = misses
                return result
            misses.append(result)

        try:
            result = await self.http.embed(text)
        except Exception as e:
            logger.exception("Unexpected error in HTTP embedding tier", extra={"tier": "http"})
            result = EmbedResult.miss(f"{e.__class__.__name__}: {e}", tier="http")
        if not result.ok:
            misses.append(result)
            logger.warning("No embedding produced: %s", result.reason, extra={"tier": "http"})
        self.last_misses = misses
        return result

    async def generate_embedding(self, text: str) -> List[float]:
        result = await self.embed(text)
        return list(result.vector) if result.ok else []
