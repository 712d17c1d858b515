# ==============================
# CLI Entrypoint
# ==============================
"""
CLI for manifest-rag.

Supported commands:
  ragcore ingest
  ragcore ingest --dir Data/Manifesten
  ragcore query "Ik wil lagere belastingen" --top-k 5
  ragcore health
"""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any, List, Optional

from ragcore.config.loader import load_settings
from ragcore.config.schema import Settings
from ragcore.ingest.document_processor import DocumentProcessor
from ragcore.ingest.runner import find_manifests, ingest_directory
from ragcore.knowledge.health import check_embedding_server, check_vector_store
from ragcore.knowledge.retriever import RetrievalPipeline
from ragcore.knowledge.vector_store import VectorStore
from ragcore.logging.logger import bootstrap_logger
from ragcore.models.embedding_provider import EmbeddingProvider


def _print_json(obj: Any) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False, default=str))


async def cmd_ingest(pipeline: RetrievalPipeline, processor: DocumentProcessor, directory: Path) -> int:
    if not directory.is_dir():
        raise SystemExit(f"Directory '{directory}' not found. Place the manifest PDFs there.")
    if not find_manifests(directory):
        raise SystemExit(f"No PDF files found in '{directory}'.")
    report = await ingest_directory(pipeline, processor, directory)
    _print_json(report.model_dump())
    return 0 if report.ok else 1


async def cmd_query(pipeline: RetrievalPipeline, query: str, top_k: Optional[int]) -> int:
    if not query.strip():
        raise SystemExit("Query must not be empty.")
    result = await pipeline.retrieve(query.strip(), top_k=top_k)
    _print_json(result.model_dump())
    return 0 if result.ok else 1


async def cmd_health(settings: Settings, provider: EmbeddingProvider, store: VectorStore) -> int:
    checks = [
        await check_embedding_server(provider.client, settings.embeddings.base_url),
        await check_vector_store(store),
    ]
    _print_json({c.name: c.model_dump() for c in checks})
    return 0 if all(c.healthy for c in checks) else 1


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    provider = EmbeddingProvider.from_settings(settings)
    store = VectorStore.from_settings(settings)
    pipeline = RetrievalPipeline(
        provider=provider,
        store=store,
        collection=settings.vector_store.collection_name,
        default_top_k=settings.vector_store.default_top_k,
    )
    try:
        if args.cmd == "ingest":
            processor = DocumentProcessor(
                chunk_size=settings.ingestion.chunk_size,
                chunk_overlap=settings.ingestion.chunk_overlap,
            )
            directory = Path(args.dir) if args.dir else settings.manifests_path()
            return await cmd_ingest(pipeline, processor, directory)
        if args.cmd == "query":
            return await cmd_query(pipeline, args.text, args.top_k)
        if args.cmd == "health":
            return await cmd_health(settings, provider, store)
        raise SystemExit("Unknown command")
    finally:
        await provider.aclose()
        await store.aclose()


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="ragcore")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_ingest = sub.add_parser("ingest")
    ap_ingest.add_argument("--dir", help="Directory with manifest PDFs (defaults to ingestion.manifests_dir)", default=None)

    ap_query = sub.add_parser("query")
    ap_query.add_argument("text", help="Query text")
    ap_query.add_argument("--top-k", type=int, default=None)

    sub.add_parser("health")

    args = ap.parse_args(argv)

    settings = load_settings()
    bootstrap_logger(settings)
    return asyncio.run(_run(args, settings))


if __name__ == "__main__":
    raise SystemExit(main())
