"""Test the interactive entry point's startup handling."""
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

import run
from loan_advisor.errors import CorpusModelMismatch


def test_load_pipeline_model_mismatch_prints_hint(monkeypatch, capsys) -> None:
    def boom():
        raise CorpusModelMismatch("all-MiniLM-L6-v2", "text-embedding-3-small")

    monkeypatch.setattr("loan_advisor.rag.default_pipeline", boom)
    assert run.load_pipeline() is None
    out = capsys.readouterr().out
    assert "all-MiniLM-L6-v2" in out
    assert "EMBEDDING_MODEL=text-embedding-3-small python scripts/build_corpus.py" in out


def test_load_pipeline_returns_pipeline(monkeypatch) -> None:
    sentinel = object()
    monkeypatch.setattr("loan_advisor.rag.default_pipeline", lambda: sentinel)
    assert run.load_pipeline() is sentinel
