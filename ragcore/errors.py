# ==============================
# Error Types
# ==============================
"""
Exception hierarchy for ragcore.

Two failure philosophies coexist:
- Embedding generation never raises for transport/provider failures (see
  ragcore/models/embedding_provider.py). Only ConfigurationError escapes it.
- Vector-store writes raise VectorStoreError; reads degrade to empty results.
"""

from __future__ import annotations

from typing import Optional


class RagCoreError(Exception):
    """Base class for all ragcore errors."""


class ConfigurationError(RagCoreError, ValueError):
    """Invalid or missing configuration detected at construction/load time."""


class VectorStoreError(RagCoreError):
    def __init__(
        self,
        message: str,
        *,
        collection: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.collection = collection
        self.status_code = status_code

    def __str__(self) -> str:
        parts = [self.message]
        if self.collection:
            parts.append(f"collection={self.collection}")
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        return " ".join(parts)
