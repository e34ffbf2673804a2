"""Load settings from env and config files."""
import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
# Always load .env from project root so OPENAI_API_KEY is found no matter where you run from
load_dotenv(dotenv_path=str(PROJECT_ROOT / ".env"), encoding="utf-8")

ADVISOR_CONFIG = Path(os.getenv("ADVISOR_CONFIG", str(PROJECT_ROOT / "config" / "advisor.yaml")))


def _load_defaults(path: Path) -> dict:
    """Flatten advisor.yaml sections into one {key: value} dict."""
    if not path.exists():
        return {}
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    flat = {}
    for section in data.values():
        if isinstance(section, dict):
            flat.update(section)
    return flat


_DEFAULTS = _load_defaults(ADVISOR_CONFIG)


def _get(name: str, fallback, cast=str):
    raw = os.getenv(name.upper())
    if raw is None or not raw.strip():
        return cast(_DEFAULTS.get(name, fallback))
    return cast(raw.strip())


OPENAI_API_KEY = (os.getenv("OPENAI_API_KEY") or "").strip()

DATA_RAW = Path(os.getenv("DATA_RAW", str(PROJECT_ROOT / "data" / "raw")))
DATA_PROCESSED = Path(os.getenv("DATA_PROCESSED", str(PROJECT_ROOT / "data" / "processed")))
LOG_DIR = Path(os.getenv("LOG_DIR", str(PROJECT_ROOT / "data" / "processed" / "logs")))
# Path or http(s) URL of the precomputed corpus
CORPUS_PATH = os.getenv("CORPUS_PATH", str(DATA_PROCESSED / "embeddings.json"))

EMBEDDING_MODEL = _get("embedding_model", "text-embedding-3-small")
GENERATION_MODEL = _get("generation_model", "gpt-4o-mini")
LOCAL_EMBEDDING_MODEL = _get("local_embedding_model", "all-MiniLM-L6-v2")

TOP_K = _get("top_k", 5, int)
MIN_SCORE = _get("min_score", 0.1, float)

EMBED_TIMEOUT = _get("embed_timeout", 10.0, float)
GENERATION_TIMEOUT = _get("generation_timeout", 60.0, float)

CHUNK_SIZE = _get("chunk_size", 800, int)
CHUNK_OVERLAP = _get("chunk_overlap", 100, int)
