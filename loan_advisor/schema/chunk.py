"""Corpus chunks and the in-memory corpus."""
from __future__ import annotations

from typing import Iterator

from pydantic import BaseModel, ConfigDict, Field


class CorpusChunk(BaseModel):
    """One text passage with its precomputed embedding. Immutable once loaded."""
    model_config = ConfigDict(frozen=True)

    text: str = Field(min_length=1)
    embedding: tuple[float, ...]


class ScoredChunk(BaseModel):
    """Chunk scored against one query."""
    model_config = ConfigDict(frozen=True)

    chunk: CorpusChunk
    score: float = Field(ge=-1.0, le=1.0)

    @property
    def text(self) -> str:
        return self.chunk.text


class Corpus(BaseModel):
    """Read-only ordered collection of chunks, optionally tagged with the embedding model that built it."""
    model_config = ConfigDict(frozen=True)

    chunks: tuple[CorpusChunk, ...] = ()
    model: str | None = None

    @classmethod
    def empty(cls) -> "Corpus":
        return cls()

    @property
    def dim(self) -> int:
        """Embedding length of the first chunk (0 for an empty corpus)."""
        return len(self.chunks[0].embedding) if self.chunks else 0

    def __len__(self) -> int:
        return len(self.chunks)

    def __iter__(self) -> Iterator[CorpusChunk]:  # type: ignore[override]
        return iter(self.chunks)

    def __getitem__(self, i: int) -> CorpusChunk:
        return self.chunks[i]
