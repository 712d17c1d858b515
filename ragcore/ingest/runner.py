# ==============================
# Manifest Ingestion Runner
# ==============================
"""
Ingest every *.pdf in a directory into the configured collection.

- Party name = file stem (e.g. Data/Manifesten/VVD.pdf -> "VVD").
- One unreadable PDF does not stop the rest; it is recorded in the report.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Dict, List

from pydantic import BaseModel, Field

from ragcore.ingest.document_processor import DocumentProcessor
from ragcore.knowledge.retriever import RetrievalPipeline
from ragcore.logging.logger import LogContext, with_context

logger = logging.getLogger(__name__)


class IngestReport(BaseModel):
    ok: bool
    files: int = 0
    chunks: int = 0
    inserted: int = 0
    skipped: int = 0
    by_party: Dict[str, int] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)


def find_manifests(directory: Path) -> List[Path]:
    return sorted(p for p in directory.glob("*.pdf") if p.is_file())


async def ingest_directory(
    pipeline: RetrievalPipeline,
    processor: DocumentProcessor,
    directory: Path,
) -> IngestReport:
    files = find_manifests(directory)
    report = IngestReport(ok=True, files=len(files))

    for path in files:
        party = path.stem
        log = with_context(logger, LogContext(collection=pipeline.collection, party=party))
        log.info("Processing manifest %s", path.name)
        try:
            # pypdf parsing is CPU-bound; keep the event loop free
            chunks = await asyncio.to_thread(processor.process_pdf, path, party)
        except Exception as e:
            log.error("Could not read %s: %s", path.name, e)
            report.errors.append(f"{path.name}: {e}")
            continue

        result = await pipeline.ingest(chunks)
        report.chunks += len(chunks)
        report.inserted += result.inserted
        report.skipped += result.skipped
        report.by_party[party] = result.inserted
        report.errors.extend(result.errors)
        log.info("Finished %s: %d of %d chunks stored", party, result.inserted, len(chunks))

    report.ok = not report.errors
    return report
