"""Error taxonomy for retrieval and generation."""


class LoanAdvisorError(Exception):
    """Base class for all loan advisor failures."""


class CorpusUnavailable(LoanAdvisorError):
    """Corpus resource missing or unreachable (file or network error)."""


class CorpusMalformed(LoanAdvisorError):
    """Corpus payload is not a sequence of {text, embedding} records."""


class CorpusModelMismatch(LoanAdvisorError):
    """Corpus was embedded with a different model than the live query embedder."""

    def __init__(self, corpus_model: str, query_model: str) -> None:
        super().__init__(f"Corpus embedded with {corpus_model!r} but queries use {query_model!r}")
        self.corpus_model = corpus_model
        self.query_model = query_model


class EmbeddingUnavailable(LoanAdvisorError):
    """Embedding call failed (network, quota, malformed response)."""


class EmbeddingTimeout(EmbeddingUnavailable):
    """Embedding call did not finish within its timeout."""


class GenerationUnavailable(LoanAdvisorError):
    """Generation call failed (network, quota, empty response)."""


class GenerationTimeout(GenerationUnavailable):
    """Generation call did not finish within its timeout."""


class GenerationMalformed(LoanAdvisorError):
    """Generation response lacks a parseable, schema-valid JSON object."""


class RetrievalInProgress(LoanAdvisorError):
    """A request is already outstanding on this session."""


class StaleResult(LoanAdvisorError):
    """Result arrived after the session was reset; it was discarded."""
