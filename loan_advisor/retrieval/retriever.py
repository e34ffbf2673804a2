"""Corpus retriever: embed query -> rank corpus -> context string."""
from __future__ import annotations

import logging
from typing import Sequence

from loan_advisor.errors import CorpusModelMismatch, EmbeddingUnavailable
from loan_advisor.schema import Corpus, ScoredChunk
from .context import assemble
from .embedder import AsyncEmbeddingClient, EmbeddingClient
from .ranker import DEFAULT_MIN_SCORE, DEFAULT_TOP_K, rank

logger = logging.getLogger(__name__)


class CorpusRetriever:
    """Ranks a loaded, read-only corpus against queries embedded by an injected client."""

    def __init__(
        self,
        corpus: Corpus,
        embedder: EmbeddingClient | AsyncEmbeddingClient | None,
        top_k: int = DEFAULT_TOP_K,
        min_score: float = DEFAULT_MIN_SCORE,
        model: str | None = None,
    ) -> None:
        query_model = model or getattr(embedder, "model", None)
        if corpus.model and query_model and corpus.model != query_model:
            raise CorpusModelMismatch(corpus.model, query_model)
        self.corpus = corpus
        self.embedder = embedder
        self.top_k = top_k
        self.min_score = min_score

    @property
    def available(self) -> bool:
        return len(self.corpus) > 0 and self.embedder is not None

    def rank_embedding(self, query_embedding: Sequence[float]) -> list[ScoredChunk]:
        if len(query_embedding) != self.corpus.dim:
            logger.warning(
                "Query embedding length %d != corpus dim %d; all scores will be 0",
                len(query_embedding),
                self.corpus.dim,
            )
        return rank(query_embedding, self.corpus, k=self.top_k, min_score=self.min_score)

    def retrieve(self, query: str) -> list[ScoredChunk]:
        """Top chunks for query. Raises EmbeddingUnavailable if the embed call fails."""
        if not self.available:
            return []
        if not isinstance(self.embedder, EmbeddingClient):
            raise EmbeddingUnavailable("Embedder has no synchronous embed()")
        return self.rank_embedding(self.embedder.embed(query))

    async def aretrieve(self, query: str) -> list[ScoredChunk]:
        if not self.available:
            return []
        if not isinstance(self.embedder, AsyncEmbeddingClient):
            raise EmbeddingUnavailable("Embedder has no async aembed()")
        return self.rank_embedding(await self.embedder.aembed(query))

    def context_for(self, query: str) -> str:
        return assemble(self.retrieve(query))
