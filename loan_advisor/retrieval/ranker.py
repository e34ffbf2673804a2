"""Brute-force cosine ranking of corpus chunks against a query embedding."""
from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from loan_advisor.schema import Corpus, CorpusChunk, ScoredChunk

DEFAULT_TOP_K = 5
DEFAULT_MIN_SCORE = 0.1


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine of a and b; 0.0 for mismatched lengths, empty, zero-norm or non-finite vectors.
    Each vector is first scaled by its largest magnitude, so huge components cannot overflow
    and vectors differing only in length score identically.
    """
    if len(a) != len(b) or len(a) == 0:
        return 0.0
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if not (np.isfinite(va).all() and np.isfinite(vb).all()):
        return 0.0
    ma = np.abs(va).max()
    mb = np.abs(vb).max()
    if ma == 0 or mb == 0:
        return 0.0
    va = va / ma
    vb = vb / mb
    score = float(np.dot(va, vb) / (np.linalg.norm(va) * np.linalg.norm(vb)))
    if not math.isfinite(score):
        return 0.0
    return float(np.clip(round(score, 12), -1.0, 1.0))


def score_chunks(query_embedding: Sequence[float], corpus: Corpus | Sequence[CorpusChunk]) -> list[ScoredChunk]:
    """Score every chunk, in corpus order."""
    return [ScoredChunk(chunk=c, score=cosine_similarity(query_embedding, c.embedding)) for c in corpus]


def rank(
    query_embedding: Sequence[float],
    corpus: Corpus | Sequence[CorpusChunk],
    k: int = DEFAULT_TOP_K,
    min_score: float = DEFAULT_MIN_SCORE,
) -> list[ScoredChunk]:
    """
    Top-k chunks by cosine similarity, then drop those with score <= min_score.
    Ties keep corpus order (stable sort), so output is deterministic.
    """
    if k <= 0:
        return []
    scored = score_chunks(query_embedding, corpus)
    top = sorted(scored, key=lambda s: -s.score)[:k]
    return [s for s in top if s.score > min_score]
