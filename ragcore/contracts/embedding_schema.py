# ==============================
# Embedding Contracts
# ==============================
"""
Typed request/result models for embedding backends.

Every tier of the embedding provider returns an EmbedResult instead of raising.
The provider collapses the chain to "vector or empty list" only at its outer
boundary, so tests and logs can still see why each tier missed.
"""

# ==============================
# Imports
# ==============================
from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ==============================
# Models
# ==============================
class EmbedRequest(BaseModel):
    """Body posted to the HTTP embedding endpoints. Carries the text under both common field names."""
    model_config = ConfigDict(extra="forbid")

    model: str = Field(..., description="Embedding model name.")
    prompt: str = Field(default="", description="Text, for servers reading `prompt`.")
    input: str = Field(default="", description="Text, for servers reading `input`.")

    @classmethod
    def for_text(cls, model: str, text: str) -> "EmbedRequest":
        return cls(model=model, prompt=text, input=text)


class EmbedResult(BaseModel):
    """
    Tagged result of one embedding attempt.

    Pattern:
      ok: bool
      vector: non-empty when ok
      tier: which strategy produced it ("native" | "http")
      reason: why it missed when ok=False
    """
    model_config = ConfigDict(extra="forbid")

    ok: bool = Field(..., description="True if a non-empty vector was produced.")
    vector: List[float] = Field(default_factory=list)
    tier: str = Field(..., description="Strategy that produced this result.")
    endpoint: Optional[str] = Field(default=None, description="HTTP path used, for the http tier.")
    reason: Optional[str] = Field(default=None, description="Miss reason when ok=False.")

    @model_validator(mode="after")
    def _enforce_result_contract(self) -> "EmbedResult":
        if self.ok and not self.vector:
            raise ValueError("EmbedResult with ok=True requires a non-empty vector")
        if not self.ok and self.reason is None:
            raise ValueError("EmbedResult with ok=False requires a reason")
        return self

    @classmethod
    def hit(cls, vector: List[float], *, tier: str, endpoint: Optional[str] = None) -> "EmbedResult":
        return cls(ok=True, vector=vector, tier=tier, endpoint=endpoint)

    @classmethod
    def miss(cls, reason: str, *, tier: str, endpoint: Optional[str] = None) -> "EmbedResult":
        return cls(ok=False, vector=[], tier=tier, endpoint=endpoint, reason=reason)


# ==============================
# Backend Interface
# ==============================
@runtime_checkable
class EmbeddingBackend(Protocol):
    """
    One embedding strategy.

    Native backends may raise; the provider treats any exception as a miss and
    disables the native tier for the rest of its lifetime.
    """

    name: str

    async def embed(self, text: str) -> EmbedResult:
        ...
