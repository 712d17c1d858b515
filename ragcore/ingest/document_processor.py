# ==============================
# Document Processor
# ==============================
"""
PDF manifest -> overlapping word-window Chunks.

The whole document is joined before splitting so chunk boundaries do not depend
on page breaks; page numbers are therefore not tracked (page = 0).
"""

from __future__ import annotations

from pathlib import Path
from typing import List

from pypdf import PdfReader

from ragcore.knowledge.base import Chunk

DEFAULT_CHUNK_SIZE = 300
DEFAULT_CHUNK_OVERLAP = 50
DEFAULT_THEME = "n/a"


def chunk_words(text: str, *, chunk_size: int = DEFAULT_CHUNK_SIZE, overlap: int = DEFAULT_CHUNK_OVERLAP) -> List[str]:
    words = text.split()
    chunks: List[str] = []
    start = 0
    while start < len(words):
        end = min(start + chunk_size, len(words))
        chunks.append(" ".join(words[start:end]))
        if chunk_size <= overlap:
            break
        start += chunk_size - overlap
    return chunks


class DocumentProcessor:
    def __init__(self, *, chunk_size: int = DEFAULT_CHUNK_SIZE, chunk_overlap: int = DEFAULT_CHUNK_OVERLAP) -> None:
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def extract_text(self, path: Path) -> str:
        reader = PdfReader(str(path))
        return " ".join((page.extract_text() or "") for page in reader.pages)

    def process_text(self, text: str, party_name: str) -> List[Chunk]:
        return [
            Chunk(id=f"{party_name}_chunk_{i}", content=content, party_name=party_name, theme=DEFAULT_THEME)
            for i, content in enumerate(chunk_words(text, chunk_size=self.chunk_size, overlap=self.chunk_overlap))
        ]

    def process_pdf(self, path: Path, party_name: str) -> List[Chunk]:
        return self.process_text(self.extract_text(path), party_name)
