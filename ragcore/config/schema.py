# ==============================
# Config Schemas (Pydantic)
# ==============================
"""
Pydantic settings models for ragcore.

Notes:
- Keep these schemas stable: provider, store and gateway all depend on them.
- No env reads here. No file IO here. Pure types + defaults.
- loader.py builds a single Settings object with precedence merging.

Precedence (implemented in loader.py):
env > .env > configs/*.yaml > defaults
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_COLLECTION_NAME = "verkiezingsprogrammas"
DEFAULT_EMBEDDING_ENDPOINTS = ["/api/embeddings", "/api/embed", "/embed"]


# ==============================
# App Settings
# ==============================


class PathsConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    repo_root: str = Field(default=".", description="Repo root (relative or absolute)")
    configs_dir: str = Field(default="configs", description="Configs directory")


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    env: str = Field(default="local", description="Environment name (local/stage/prod)")
    debug: bool = Field(default=False)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    paths: PathsConfig = Field(default_factory=PathsConfig)


# ==============================
# Embedding Settings
# ==============================


class EmbeddingsConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    base_url: str = Field(default="http://localhost:11434", description="Local model server base URL")
    model: str = Field(default="nomic-embed-text")
    timeout_seconds: float = Field(default=30.0)
    native_backend: Optional[str] = Field(
        default=None,
        description="Name of an in-process embedding backend tried before HTTP (e.g. 'sentence_transformers').",
    )
    native_model: Optional[str] = Field(
        default=None,
        description="Model id for the native backend. Falls back to `model` when unset.",
    )
    endpoints: List[str] = Field(
        default_factory=lambda: list(DEFAULT_EMBEDDING_ENDPOINTS),
        description="Ordered HTTP endpoint paths probed by the fallback tier.",
    )


# ==============================
# Vector Store Settings
# ==============================


class VectorStoreConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    backend: Literal["remote", "memory"] = Field(default="remote")
    url: str = Field(default="http://localhost:8000", description="Chroma server base URL")
    api_path: str = Field(default="/api/v1")
    collection_name: str = Field(default=DEFAULT_COLLECTION_NAME)
    timeout_seconds: float = Field(default=30.0)
    default_top_k: int = Field(default=5, ge=1)


# ==============================
# Ingestion Settings
# ==============================


class IngestionConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    manifests_dir: str = Field(default="Data/Manifesten", description="Directory scanned for *.pdf manifests")
    chunk_size: int = Field(default=300, ge=1, description="Chunk size in words")
    chunk_overlap: int = Field(default=50, ge=0, description="Words shared between consecutive chunks")


# ==============================
# Logging Settings
# ==============================


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: str = Field(default="INFO")
    console: bool = Field(default=True)
    json_lines: bool = Field(default=True, description="Emit one JSON object per log line")


# ==============================
# Top-Level Settings
# ==============================


class Settings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    app: AppConfig = Field(default_factory=AppConfig)
    embeddings: EmbeddingsConfig = Field(default_factory=EmbeddingsConfig)
    vector_store: VectorStoreConfig = Field(default_factory=VectorStoreConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def repo_root_path(self) -> Path:
        return Path(self.app.paths.repo_root).expanduser().resolve()

    def manifests_path(self) -> Path:
        p = Path(self.ingestion.manifests_dir).expanduser()
        return p if p.is_absolute() else self.repo_root_path() / p
