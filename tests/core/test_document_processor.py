# ==============================
# Tests: Document chunking + manifest ingestion
# ==============================
from __future__ import annotations

import threading
from pathlib import Path

import pytest

from ragcore.ingest.document_processor import DocumentProcessor, chunk_words
from ragcore.ingest.runner import find_manifests, ingest_directory
from ragcore.knowledge.retriever import RetrievalPipeline

from tests.fakes import FakeEmbeddingServer, ollama_embeddings


def _words(n: int) -> str:
    return " ".join(f"w{i}" for i in range(n))


def test_chunk_words_overlapping_windows() -> None:
    chunks = chunk_words(_words(600), chunk_size=300, overlap=50)

    assert len(chunks) == 3
    assert chunks[0].split()[0] == "w0"
    assert chunks[0].split()[-1] == "w299"
    assert chunks[1].split()[0] == "w250"
    assert chunks[2].split()[0] == "w500"
    assert chunks[2].split()[-1] == "w599"


def test_chunk_words_short_and_empty_text() -> None:
    assert chunk_words("een twee drie", chunk_size=300, overlap=50) == ["een twee drie"]
    assert chunk_words("   ") == []


def test_chunk_words_stops_when_overlap_not_smaller_than_size() -> None:
    assert chunk_words(_words(10), chunk_size=3, overlap=3) == ["w0 w1 w2"]


def test_process_text_assigns_ids_and_metadata() -> None:
    processor = DocumentProcessor(chunk_size=4, chunk_overlap=1)

    chunks = processor.process_text(_words(7), "D66")

    assert [c.id for c in chunks] == ["D66_chunk_0", "D66_chunk_1", "D66_chunk_2"]
    assert chunks[1].content == "w3 w4 w5 w6"
    assert chunks[2].content == "w6"
    assert chunks[0].metadata() == {"party": "D66", "theme": "n/a", "page": 0}


# ==============================
# Directory ingestion
# ==============================


def test_find_manifests_only_pdfs_sorted(tmp_path: Path) -> None:
    for name in ("VVD.pdf", "CDA.pdf", "notes.txt"):
        (tmp_path / name).write_bytes(b"")
    (tmp_path / "sub.pdf").mkdir()

    assert [p.name for p in find_manifests(tmp_path)] == ["CDA.pdf", "VVD.pdf"]


@pytest.mark.anyio
async def test_ingest_directory_reports_per_party(tmp_path: Path, monkeypatch, make_provider, memory_store) -> None:
    for name in ("CDA.pdf", "VVD.pdf", "kapot.pdf"):
        (tmp_path / name).write_bytes(b"%PDF-")

    texts = {"CDA": _words(5), "VVD": _words(2)}
    processor = DocumentProcessor(chunk_size=3, chunk_overlap=1)

    def _extract(path: Path) -> str:
        if path.stem not in texts:
            raise ValueError("EOF marker not found")
        return texts[path.stem]

    monkeypatch.setattr(processor, "extract_text", _extract)

    server = FakeEmbeddingServer(routes={"/api/embeddings": ollama_embeddings([1.0, 0.0])})
    pipeline = RetrievalPipeline(provider=make_provider(server), store=memory_store)

    report = await ingest_directory(pipeline, processor, tmp_path)

    assert report.files == 3
    assert report.chunks == 4
    assert report.inserted == 4
    assert report.by_party == {"CDA": 3, "VVD": 1}
    assert not report.ok
    assert report.errors == ["kapot.pdf: EOF marker not found"]

    collection = await memory_store.get_or_create_collection(pipeline.collection)
    assert collection.count() == 4


@pytest.mark.anyio
async def test_pdf_parsing_runs_off_the_event_loop(tmp_path: Path, monkeypatch, make_provider, memory_store) -> None:
    (tmp_path / "SP.pdf").write_bytes(b"%PDF-")
    processor = DocumentProcessor()
    loop_thread = threading.get_ident()
    seen = []

    def _parse(path: Path, party: str):
        seen.append(threading.get_ident())
        return processor.process_text("gratis zorg", party)

    monkeypatch.setattr(processor, "process_pdf", _parse)
    server = FakeEmbeddingServer(routes={"/api/embeddings": ollama_embeddings([1.0])})
    pipeline = RetrievalPipeline(provider=make_provider(server), store=memory_store)

    report = await ingest_directory(pipeline, processor, tmp_path)

    assert report.inserted == 1
    assert seen and seen[0] != loop_thread
