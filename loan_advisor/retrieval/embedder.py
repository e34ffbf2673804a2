"""Embedding clients: text -> vector. Constructed explicitly and passed in, never module-global."""
from __future__ import annotations

from abc import ABC, abstractmethod

import openai

from loan_advisor.errors import EmbeddingTimeout, EmbeddingUnavailable

DEFAULT_OPENAI_MODEL = "text-embedding-3-small"
DEFAULT_LOCAL_MODEL = "all-MiniLM-L6-v2"


def _check_vector(vec, model: str) -> list[float]:
    if not vec:
        raise EmbeddingUnavailable(f"Empty embedding returned by {model}")
    try:
        return [float(x) for x in vec]
    except (TypeError, ValueError) as exc:
        raise EmbeddingUnavailable(f"Non-numeric embedding returned by {model}") from exc


class EmbeddingClient(ABC):
    """Interface for query/corpus embedders."""

    model: str

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Return one embedding. Raises EmbeddingUnavailable on any failure."""
        ...

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [self.embed(t) for t in texts]


class AsyncEmbeddingClient(ABC):
    """Async counterpart used by AdvisorSession."""

    model: str

    @abstractmethod
    async def aembed(self, text: str) -> list[float]:
        ...


class OpenAIEmbeddingClient(EmbeddingClient, AsyncEmbeddingClient):
    """OpenAI embeddings API. One call per text, no retries."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_OPENAI_MODEL,
        timeout: float = 10.0,
        client: openai.OpenAI | None = None,
        async_client: openai.AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self.timeout = timeout
        self._api_key = api_key
        self._client = client
        self._async_client = async_client

    @property
    def client(self) -> openai.OpenAI:
        if self._client is None:
            self._client = openai.OpenAI(api_key=self._api_key, timeout=self.timeout, max_retries=0)
        return self._client

    @property
    def async_client(self) -> openai.AsyncOpenAI:
        if self._async_client is None:
            self._async_client = openai.AsyncOpenAI(api_key=self._api_key, timeout=self.timeout, max_retries=0)
        return self._async_client

    def _vector(self, resp) -> list[float]:
        try:
            vec = resp.data[0].embedding
        except (AttributeError, IndexError, TypeError) as exc:
            raise EmbeddingUnavailable(f"Malformed embedding response from {self.model}") from exc
        return _check_vector(vec, self.model)

    def embed(self, text: str) -> list[float]:
        try:
            resp = self.client.embeddings.create(model=self.model, input=text)
        except openai.APITimeoutError as exc:
            raise EmbeddingTimeout(f"Embedding timed out after {self.timeout}s") from exc
        except openai.OpenAIError as exc:
            raise EmbeddingUnavailable(f"Embedding call failed: {exc}") from exc
        return self._vector(resp)

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        try:
            resp = self.client.embeddings.create(model=self.model, input=texts)
        except openai.APITimeoutError as exc:
            raise EmbeddingTimeout(f"Embedding timed out after {self.timeout}s") from exc
        except openai.OpenAIError as exc:
            raise EmbeddingUnavailable(f"Embedding call failed: {exc}") from exc
        rows = sorted(resp.data, key=lambda d: d.index)
        if len(rows) != len(texts):
            raise EmbeddingUnavailable(f"Expected {len(texts)} embeddings, got {len(rows)}")
        return [_check_vector(r.embedding, self.model) for r in rows]

    async def aembed(self, text: str) -> list[float]:
        try:
            resp = await self.async_client.embeddings.create(model=self.model, input=text)
        except openai.APITimeoutError as exc:
            raise EmbeddingTimeout(f"Embedding timed out after {self.timeout}s") from exc
        except openai.OpenAIError as exc:
            raise EmbeddingUnavailable(f"Embedding call failed: {exc}") from exc
        return self._vector(resp)


class SentenceTransformerEmbeddingClient(EmbeddingClient):
    """Local sentence-transformers model, for building a corpus without an API key."""

    def __init__(self, model: str = DEFAULT_LOCAL_MODEL) -> None:
        self.model = model
        self._encoder = None

    def _load(self):
        if self._encoder is None:
            from sentence_transformers import SentenceTransformer
            self._encoder = SentenceTransformer(self.model)
        return self._encoder

    def embed(self, text: str) -> list[float]:
        try:
            vec = self._load().encode(text, convert_to_numpy=True)
        except (OSError, RuntimeError, ValueError) as exc:
            raise EmbeddingUnavailable(f"Local embedding failed: {exc}") from exc
        return _check_vector(vec.tolist(), self.model)

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        try:
            vecs = self._load().encode(texts, convert_to_numpy=True)
        except (OSError, RuntimeError, ValueError) as exc:
            raise EmbeddingUnavailable(f"Local embedding failed: {exc}") from exc
        return [_check_vector(v.tolist(), self.model) for v in vecs]
