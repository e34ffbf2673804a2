"""Async advisor session: one outstanding request at a time, explicit timeouts, stale results dropped.

Each request runs two stages (retrieve, then generate). ``reset()`` bumps a
generation counter; a request that finishes under an older counter raises
StaleResult instead of returning, so its result is never applied.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Protocol

from loan_advisor.errors import (
    EmbeddingTimeout,
    EmbeddingUnavailable,
    GenerationTimeout,
    RetrievalInProgress,
    StaleResult,
)
from loan_advisor.logging.retrieval_logger import log_retrieval, now_seconds
from loan_advisor.retrieval import CorpusRetriever, assemble
from loan_advisor.schema import LoanRecommendation, RecommendationResult, ScoredChunk, UserProfile
from .llm import build_chat_prompt, build_rag_query, build_recommendation_prompt, parse_recommendation

logger = logging.getLogger(__name__)


class AsyncGenerator(Protocol):
    async def agenerate(self, prompt: str) -> str: ...


class SessionState(str, Enum):
    IDLE = "idle"
    RETRIEVING = "retrieving"
    GENERATING = "generating"


class AdvisorSession:
    def __init__(
        self,
        retriever: CorpusRetriever,
        generator: AsyncGenerator,
        embed_timeout: float = 10.0,
        generation_timeout: float = 60.0,
        log_dir: Path | str | None = None,
    ) -> None:
        self.retriever = retriever
        self.generator = generator
        self.embed_timeout = embed_timeout
        self.generation_timeout = generation_timeout
        self.log_dir = Path(log_dir) if log_dir else None
        self.state = SessionState.IDLE
        self._generation = 0

    @property
    def busy(self) -> bool:
        """True while a request is outstanding; callers disable the submit control."""
        return self.state is not SessionState.IDLE

    @property
    def generation(self) -> int:
        return self._generation

    def reset(self) -> None:
        """Invalidate any outstanding request (form reset / navigation) and return to IDLE."""
        self._generation += 1
        self.state = SessionState.IDLE

    def _begin(self) -> int:
        if self.busy:
            raise RetrievalInProgress("A request is already in progress")
        self.state = SessionState.RETRIEVING
        return self._generation

    def _check(self, token: int) -> None:
        if token != self._generation:
            raise StaleResult("Session was reset; result discarded")

    def _finish(self, token: int) -> None:
        if token == self._generation:
            self.state = SessionState.IDLE

    async def _retrieve(self, kind: str, query: str) -> tuple[list[ScoredChunk], str]:
        t0 = now_seconds()
        error = None
        try:
            chunks = await asyncio.wait_for(self.retriever.aretrieve(query), timeout=self.embed_timeout)
        except asyncio.TimeoutError:
            exc = EmbeddingTimeout(f"Embedding timed out after {self.embed_timeout}s")
            logger.warning("Retrieval failed, continuing without context: %s", exc)
            chunks, error = [], str(exc)
        except EmbeddingUnavailable as exc:
            logger.warning("Retrieval failed, continuing without context: %s", exc)
            chunks, error = [], str(exc)
        context = assemble(chunks)
        if self.log_dir:
            log_retrieval(kind, query, chunks, context, now_seconds() - t0, self.log_dir, error=error)
        return chunks, context

    async def _generate(self, prompt: str) -> str:
        try:
            return await asyncio.wait_for(self.generator.agenerate(prompt), timeout=self.generation_timeout)
        except asyncio.TimeoutError as exc:
            raise GenerationTimeout(f"Generation timed out after {self.generation_timeout}s") from exc

    async def submit(self, profile: UserProfile) -> RecommendationResult:
        """
        Recommendation for profile. Raises RetrievalInProgress if busy, StaleResult if reset
        mid-flight, GenerationUnavailable/GenerationTimeout/GenerationMalformed on generation failure.
        """
        token = self._begin()
        try:
            chunks, context = await self._retrieve("recommend", build_rag_query(profile))
            self._check(token)
            self.state = SessionState.GENERATING
            text = await self._generate(build_recommendation_prompt(profile, context))
            self._check(token)
            recommendation = parse_recommendation(text)
            return RecommendationResult(
                recommendation=recommendation,
                context=context,
                grounded=bool(context),
                chunks=chunks,
            )
        finally:
            self._finish(token)

    async def ask(self, profile: UserProfile, recommendation: LoanRecommendation, question: str) -> str:
        """Chat answer; same guard, timeouts and stale-result rules as submit()."""
        token = self._begin()
        try:
            _, context = await self._retrieve("chat", question)
            self._check(token)
            self.state = SessionState.GENERATING
            answer = await self._generate(build_chat_prompt(profile, recommendation, question, context))
            self._check(token)
            return answer
        finally:
            self._finish(token)
