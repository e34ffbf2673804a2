"""Log each retrieval + generation request (query, scores, grounding, latency) as JSONL."""
import json
import time
from pathlib import Path
from datetime import datetime, timezone

from loan_advisor.schema import ScoredChunk


def log_retrieval(
    kind: str,
    query: str,
    chunks: list[ScoredChunk],
    context: str,
    latency_seconds: float,
    log_dir: Path | str,
    error: str | None = None,
) -> None:
    """Append one row to retrieval_log.jsonl."""
    dir_path = Path(log_dir)
    dir_path.mkdir(parents=True, exist_ok=True)
    log_file = dir_path / "retrieval_log.jsonl"
    record = {
        "kind": kind,
        "query": query,
        "scores": [round(c.score, 4) for c in chunks],
        "previews": [c.text[:80] for c in chunks],
        "context_length": len(context),
        "grounded": bool(context),
        "error": error,
        "latency_seconds": round(latency_seconds, 4),
        "ts_utc": datetime.now(timezone.utc).isoformat(),
    }
    with open(log_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(record, ensure_ascii=False) + "\n")


def now_seconds() -> float:
    return time.perf_counter()
