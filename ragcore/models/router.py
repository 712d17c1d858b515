# ==============================
# Embedding Backend Router
# ==============================
"""
Native embedding backend selection.

Goals:
- Centralize native backend selection behind a single lookup.
- Avoid vendor-specific imports outside providers/ (backends import their
  libraries lazily in __init__).
- No env reads here. Configuration is injected by the caller.

Backends are chosen by name from configuration, never discovered at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ragcore.config.schema import EmbeddingsConfig
from ragcore.contracts.embedding_schema import EmbeddingBackend
from ragcore.errors import ConfigurationError
from ragcore.models.providers.sentence_transformers_provider import SentenceTransformersBackend

BackendFactory = Callable[..., EmbeddingBackend]

NATIVE_BACKENDS: Dict[str, BackendFactory] = {
    "sentence_transformers": SentenceTransformersBackend,
}


@dataclass(frozen=True)
class BackendSelection:
    backend: str
    model: str


def select_native(config: EmbeddingsConfig) -> Optional[BackendSelection]:
    """
    Resolve which native backend (if any) the config asks for.

    Raises ConfigurationError for a name that is not registered.
    """
    name = (config.native_backend or "").strip()
    if not name:
        return None
    if name not in NATIVE_BACKENDS:
        known = ", ".join(sorted(NATIVE_BACKENDS))
        raise ConfigurationError(f"Unknown native embedding backend '{name}'. Known: {known}")
    return BackendSelection(backend=name, model=config.native_model or config.model)


def build_native(selection: BackendSelection) -> EmbeddingBackend:
    """Instantiate the selected backend. Errors propagate to the caller."""
    return NATIVE_BACKENDS[selection.backend](model=selection.model)
