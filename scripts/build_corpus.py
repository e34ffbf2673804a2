"""Build the retrieval corpus (embeddings.json) from loan policy documents.
Usage:
  Put documents in data/raw/: *.jsonl (each line {"id": "...", "text": "..."}) or *.txt (paragraphs).
  Run: python scripts/build_corpus.py
  Options: --local (sentence-transformers instead of the OpenAI API), --output, --chunk-size, --chunk-overlap
  Output: data/processed/embeddings.json ({"model", "dim", "chunks": [{"text", "embedding"}]})
  If data/raw is empty, builds a small sample corpus.
  The corpus must be embedded with the same model the advisor queries with (EMBEDDING_MODEL).
"""
import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from config import settings
from loan_advisor.errors import EmbeddingUnavailable
from loan_advisor.retrieval import OpenAIEmbeddingClient, SentenceTransformerEmbeddingClient
from loan_advisor.retrieval.build_corpus import build_corpus_from_raw


def main() -> int:
    ap = argparse.ArgumentParser(description="Embed raw loan documents into the advisor corpus")
    ap.add_argument("--data-raw", type=Path, default=settings.DATA_RAW)
    ap.add_argument("--output", type=Path, default=Path(settings.CORPUS_PATH))
    ap.add_argument("--local", action="store_true", help="Use local sentence-transformers model")
    ap.add_argument("--chunk-size", type=int, default=settings.CHUNK_SIZE)
    ap.add_argument("--chunk-overlap", type=int, default=settings.CHUNK_OVERLAP)
    args = ap.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    if args.local or not settings.OPENAI_API_KEY:
        embedder = SentenceTransformerEmbeddingClient(settings.LOCAL_EMBEDDING_MODEL)
    else:
        embedder = OpenAIEmbeddingClient(
            api_key=settings.OPENAI_API_KEY,
            model=settings.EMBEDDING_MODEL,
            timeout=settings.EMBED_TIMEOUT,
        )
    try:
        n = build_corpus_from_raw(args.data_raw, args.output, embedder, args.chunk_size, args.chunk_overlap)
    except EmbeddingUnavailable as exc:
        print("Embedding failed:", exc)
        return 1
    print(f"Corpus done: {n} chunks ({embedder.model}) in {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
