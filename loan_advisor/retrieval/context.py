"""Join ranked chunk texts into the prompt context."""
from loan_advisor.schema import ScoredChunk

SEPARATOR = "\n\n"


def assemble(scored_chunks: list[ScoredChunk]) -> str:
    """Chunk texts in rank order, blank line between. Empty input -> ""."""
    return SEPARATOR.join(s.chunk.text for s in scored_chunks)
