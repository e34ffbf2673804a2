"""Advisor pipeline: retrieve -> assemble -> prompt -> LLM -> validated recommendation."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from loan_advisor.errors import EmbeddingUnavailable
from loan_advisor.logging.retrieval_logger import log_retrieval, now_seconds
from loan_advisor.retrieval import CorpusRetriever, assemble
from loan_advisor.schema import LoanRecommendation, RecommendationResult, ScoredChunk, UserProfile
from .llm import build_chat_prompt, build_rag_query, build_recommendation_prompt, parse_recommendation

logger = logging.getLogger(__name__)


class Generator(Protocol):
    def generate(self, prompt: str) -> str: ...


def _default_log_dir() -> Path | None:
    try:
        from config.settings import LOG_DIR
        return LOG_DIR
    except ImportError:
        return None


class AdvisorPipeline:
    """Synchronous recommend/chat flow. Retrieval failures degrade to no context; generation failures propagate."""

    def __init__(
        self,
        retriever: CorpusRetriever,
        generator: Generator,
        log_dir: Path | str | None = None,
    ) -> None:
        self.retriever = retriever
        self.generator = generator
        self.log_dir = Path(log_dir) if log_dir else None

    def _retrieve(self, kind: str, query: str) -> tuple[list[ScoredChunk], str]:
        t0 = now_seconds()
        error = None
        try:
            chunks = self.retriever.retrieve(query)
        except EmbeddingUnavailable as exc:
            logger.warning("Retrieval failed, continuing without context: %s", exc)
            chunks = []
            error = str(exc)
        context = assemble(chunks)
        if self.log_dir:
            log_retrieval(kind, query, chunks, context, now_seconds() - t0, self.log_dir, error=error)
        return chunks, context

    def recommend(self, profile: UserProfile) -> RecommendationResult:
        """Raises GenerationUnavailable / GenerationMalformed; never retries."""
        chunks, context = self._retrieve("recommend", build_rag_query(profile))
        if not context:
            logger.info("No policy context for %s; generating ungrounded recommendation", profile.name)
        text = self.generator.generate(build_recommendation_prompt(profile, context))
        recommendation = parse_recommendation(text)
        return RecommendationResult(
            recommendation=recommendation,
            context=context,
            grounded=bool(context),
            chunks=chunks,
        )

    def chat(self, profile: UserProfile, recommendation: LoanRecommendation, question: str) -> str:
        """Answer a follow-up question about a recommendation."""
        _, context = self._retrieve("chat", question)
        return self.generator.generate(build_chat_prompt(profile, recommendation, question, context))


def default_pipeline(log_dir: Path | str | None = None) -> AdvisorPipeline:
    """Pipeline wired from config.settings: OpenAI embedder + generator, corpus from CORPUS_PATH."""
    from config import settings
    from loan_advisor.retrieval import OpenAIEmbeddingClient, load_corpus_or_empty
    from .llm import OpenAIGenerationClient

    embedder = OpenAIEmbeddingClient(
        api_key=settings.OPENAI_API_KEY or None,
        model=settings.EMBEDDING_MODEL,
        timeout=settings.EMBED_TIMEOUT,
    )
    retriever = CorpusRetriever(
        load_corpus_or_empty(settings.CORPUS_PATH),
        embedder,
        top_k=settings.TOP_K,
        min_score=settings.MIN_SCORE,
    )
    generator = OpenAIGenerationClient(
        api_key=settings.OPENAI_API_KEY or None,
        model=settings.GENERATION_MODEL,
        timeout=settings.GENERATION_TIMEOUT,
    )
    return AdvisorPipeline(retriever, generator, log_dir=log_dir or _default_log_dir())
