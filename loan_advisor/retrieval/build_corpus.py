"""Build the embeddings corpus from raw policy documents in data/raw and save to data/processed."""
from __future__ import annotations

import json
import logging
from pathlib import Path

from .embedder import EmbeddingClient

logger = logging.getLogger(__name__)

SAMPLE_DOCS = [
    ("home-0", "Home loans need salary slips for the last 3 months, Form 16 and 6 months of bank statements."),
    ("car-0", "Car loans need 20% down payment; most banks finance up to 80% of the on-road price."),
    ("personal-0", "Personal loans are unsecured. A CIBIL score of 750 or above usually gets the lowest interest rates."),
    ("education-0", "Education loans up to 7.5 lakh usually need no collateral; repayment starts after the moratorium period."),
]


def load_docs_jsonl(path: Path) -> list[tuple[str, str]]:
    """Load (doc_id, text) from JSONL. Each line: {"id": "...", "text": "..."} or {"doc_id": "...", "content": "..."}."""
    out = []
    with open(path, encoding="utf-8") as f:
        for i, line in enumerate(f):
            line = line.strip()
            if not line:
                continue
            obj = json.loads(line)
            doc_id = obj.get("id", obj.get("doc_id", str(i)))
            text = obj.get("text", obj.get("content", obj.get("body", "")))
            if text:
                out.append((str(doc_id), text))
    return out


def load_docs_txt(path: Path) -> list[tuple[str, str]]:
    """Load (doc_id, text) from plain text: paragraphs separated by blank lines."""
    content = path.read_text(encoding="utf-8")
    paragraphs = [p.strip() for p in content.split("\n\n")]
    return [(f"{path.stem}-{i}", p) for i, p in enumerate(paragraphs) if p]


def chunk_text(text: str, size: int = 800, overlap: int = 100) -> list[str]:
    """Split text into word-aligned chunks of at most ~size characters with overlap."""
    if size <= 0:
        raise ValueError("chunk size must be positive")
    if overlap >= size:
        raise ValueError("chunk overlap must be smaller than chunk size")
    words = text.split()
    chunks: list[str] = []
    start = 0
    while start < len(words):
        n = 0
        end = start
        while end < len(words) and (n + len(words[end]) + 1 <= size or end == start):
            n += len(words[end]) + 1
            end += 1
        chunks.append(" ".join(words[start:end]))
        if end >= len(words):
            break
        # Step back until `overlap` characters are repeated in the next chunk
        back = end
        m = 0
        while back > start + 1 and m + len(words[back - 1]) + 1 <= overlap:
            back -= 1
            m += len(words[back]) + 1
        start = back
    return chunks


def build_corpus(
    docs: list[tuple[str, str]],
    embedder: EmbeddingClient,
    output_path: Path,
    chunk_size: int = 800,
    chunk_overlap: int = 100,
) -> int:
    """Chunk and embed docs, write {"model", "dim", "chunks"} JSON. Returns number of chunks."""
    texts = [c for _, text in docs for c in chunk_text(text, chunk_size, chunk_overlap)]
    vectors = embedder.embed_batch(texts)
    dim = len(vectors[0]) if vectors else 0
    payload = {
        "model": embedder.model,
        "dim": dim,
        "chunks": [{"text": t, "embedding": v} for t, v in zip(texts, vectors)],
    }
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False)
    return len(texts)


def load_raw_docs(data_raw: Path) -> list[tuple[str, str]]:
    """All docs under data_raw (*.jsonl and *.txt), sorted by file name."""
    docs: list[tuple[str, str]] = []
    for path in sorted(data_raw.glob("*.jsonl")):
        docs.extend(load_docs_jsonl(path))
    for path in sorted(data_raw.glob("*.txt")):
        docs.extend(load_docs_txt(path))
    return docs


def build_corpus_from_raw(
    data_raw: Path,
    output_path: Path,
    embedder: EmbeddingClient,
    chunk_size: int = 800,
    chunk_overlap: int = 100,
) -> int:
    """Load from data_raw and build the corpus; falls back to a small sample when no docs are found."""
    docs = load_raw_docs(data_raw) if data_raw.exists() else []
    if not docs:
        logger.warning("No documents in %s, building sample corpus", data_raw)
        docs = SAMPLE_DOCS
    n = build_corpus(docs, embedder, output_path, chunk_size, chunk_overlap)
    logger.info("Built corpus: %d docs -> %d chunks -> %s", len(docs), n, output_path)
    return n
