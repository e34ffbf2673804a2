"""Load the precomputed {text, embedding} corpus from a JSON file or URL."""
from __future__ import annotations

import json
import logging
import math
import numbers
from pathlib import Path

import requests

from loan_advisor.errors import CorpusMalformed, CorpusUnavailable
from loan_advisor.schema import Corpus, CorpusChunk

logger = logging.getLogger(__name__)

DEFAULT_HTTP_TIMEOUT = 10.0


def _is_url(source: str | Path) -> bool:
    return isinstance(source, str) and source.startswith(("http://", "https://"))


def _read_payload(source: str | Path, timeout: float):
    if _is_url(source):
        try:
            resp = requests.get(source, timeout=timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as exc:
            raise CorpusUnavailable(f"Could not fetch corpus from {source}: {exc}") from exc
        except ValueError as exc:
            raise CorpusUnavailable(f"Corpus at {source} is not JSON: {exc}") from exc
    path = Path(source)
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except OSError as exc:
        raise CorpusUnavailable(f"Could not read corpus file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise CorpusUnavailable(f"Corpus file {path} is not JSON: {exc}") from exc


def _parse_record(record) -> CorpusChunk | None:
    """Return a chunk, or None when the record is not a well-formed {text, embedding} pair."""
    if not isinstance(record, dict):
        return None
    text = record.get("text")
    embedding = record.get("embedding")
    if not isinstance(text, str) or not text.strip():
        return None
    if not isinstance(embedding, list) or not embedding:
        return None
    if not all(isinstance(x, numbers.Real) and not isinstance(x, bool) for x in embedding):
        return None
    if not all(math.isfinite(x) for x in embedding):
        return None
    return CorpusChunk(text=text, embedding=tuple(float(x) for x in embedding))


def parse_corpus(payload) -> Corpus:
    """
    Build a Corpus from decoded JSON. Accepts a bare list of records or
    {"model": ..., "dim": ..., "chunks": [...]}. Bad records are skipped with a warning.
    """
    model = None
    if isinstance(payload, dict):
        model = payload.get("model")
        if model is not None and not isinstance(model, str):
            raise CorpusMalformed(f"Corpus model must be a string, got {type(model).__name__}")
        records = payload.get("chunks")
    else:
        records = payload
    if not isinstance(records, list):
        raise CorpusMalformed("Corpus must be a list of {text, embedding} records")

    chunks: list[CorpusChunk] = []
    skipped = 0
    for i, record in enumerate(records):
        chunk = _parse_record(record)
        if chunk is None:
            skipped += 1
            logger.warning("Skipping malformed corpus record %d", i)
            continue
        chunks.append(chunk)
    if skipped:
        logger.warning("Skipped %d of %d corpus records", skipped, len(records))

    if chunks:
        dim = len(chunks[0].embedding)
        odd = sum(1 for c in chunks if len(c.embedding) != dim)
        if odd:
            # still loaded; the ranker scores them 0
            logger.warning("%d corpus chunks have embedding length != %d", odd, dim)
    return Corpus(chunks=tuple(chunks), model=model)


def load_corpus(source: str | Path, timeout: float = DEFAULT_HTTP_TIMEOUT) -> Corpus:
    """Load corpus from a file path or http(s) URL. Raises CorpusUnavailable / CorpusMalformed."""
    corpus = parse_corpus(_read_payload(source, timeout))
    logger.info("Loaded %d corpus chunks from %s", len(corpus), source)
    return corpus


def load_corpus_or_empty(source: str | Path, timeout: float = DEFAULT_HTTP_TIMEOUT) -> Corpus:
    """Like load_corpus, but degrades to an empty corpus so the advisor keeps working ungrounded."""
    try:
        return load_corpus(source, timeout=timeout)
    except (CorpusUnavailable, CorpusMalformed) as exc:
        logger.warning("Corpus unavailable, retrieval disabled: %s", exc)
        return Corpus.empty()
