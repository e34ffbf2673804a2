from .context import assemble
from .corpus_loader import load_corpus, load_corpus_or_empty, parse_corpus
from .embedder import (
    AsyncEmbeddingClient,
    EmbeddingClient,
    OpenAIEmbeddingClient,
    SentenceTransformerEmbeddingClient,
)
from .ranker import cosine_similarity, rank
from .retriever import CorpusRetriever

__all__ = [
    "assemble",
    "load_corpus",
    "load_corpus_or_empty",
    "parse_corpus",
    "AsyncEmbeddingClient",
    "EmbeddingClient",
    "OpenAIEmbeddingClient",
    "SentenceTransformerEmbeddingClient",
    "cosine_similarity",
    "rank",
    "CorpusRetriever",
]
