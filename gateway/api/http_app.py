# ==============================
# FastAPI App Factory
# ==============================
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from gateway.api import deps
from gateway.api.routes_retrieval import router as retrieval_router
from ragcore.logging.logger import bootstrap_logger


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    # only close what was actually built
    if deps.get_embedding_provider.cache_info().currsize:
        await deps.get_embedding_provider().aclose()
    if deps.get_vector_store.cache_info().currsize:
        await deps.get_vector_store().aclose()


def create_app(*, configure_logging: bool = True) -> FastAPI:
    if configure_logging:
        bootstrap_logger(deps.get_settings())
    app = FastAPI(title="manifest-rag", version="0.1.0", lifespan=_lifespan)
    app.include_router(retrieval_router, prefix="/api")
    return app
