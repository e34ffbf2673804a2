"""Test context assembly."""
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(ROOT))

from loan_advisor.retrieval import assemble
from loan_advisor.schema import CorpusChunk, ScoredChunk


def _scored(text: str, score: float) -> ScoredChunk:
    return ScoredChunk(chunk=CorpusChunk(text=text, embedding=(1.0,)), score=score)


def test_assemble_empty() -> None:
    assert assemble([]) == ""


def test_assemble_two_chunks() -> None:
    assert assemble([_scored("A", 0.9), _scored("B", 0.5)]) == "A\n\nB"


def test_assemble_keeps_given_order() -> None:
    # order is the caller's rank order, not score
    assert assemble([_scored("low", 0.2), _scored("high", 0.9)]) == "low\n\nhigh"
