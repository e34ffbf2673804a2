"""Pytest fixtures: sample corpus, profile, fake embedder and generator."""
import asyncio
import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from loan_advisor.errors import EmbeddingUnavailable
from loan_advisor.retrieval import AsyncEmbeddingClient, EmbeddingClient
from loan_advisor.schema import Corpus, CorpusChunk, UserProfile

HOME = "Home loans need salary slips"
CAR = "Car loans need 20% down payment"

RECOMMENDATION = {
    "loanType": "Home Loan",
    "recommendedBanks": ["SBI", "HDFC Bank", "ICICI Bank"],
    "interestRates": ["8.40%", "8.70%", "8.75%"],
    "repaymentOptions": ["20 year EMI", "Step-up EMI"],
    "riskLevel": "Low",
    "explanation": "Stable income and a strong CIBIL score.",
    "eligibility": "Eligible",
    "monthlyEMI": "43000",
    "processingTime": "7-10 days",
    "cibilImpact": "Score above 750 unlocks the lowest rates.",
    "maritalBenefit": "A co-applicant spouse can raise eligibility.",
    "specialOffers": ["Zero processing fee"],
    "approvalChance": "85%",
    "requiredDocuments": ["Salary slips", "Form 16"],
    "contextUsed": True,
}


class FakeEmbedder(EmbeddingClient, AsyncEmbeddingClient):
    """Returns vectors from a lookup table (default for unknown text); records calls."""

    def __init__(self, vectors=None, default=(1.0, 0.0), model="fake-embed", error=None, delay=0.0):
        self.vectors = vectors or {}
        self.default = list(default)
        self.model = model
        self.error = error
        self.delay = delay
        self.calls = []

    def embed(self, text):
        self.calls.append(text)
        if self.error:
            raise self.error
        return list(self.vectors.get(text, self.default))

    async def aembed(self, text):
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.embed(text)


class FakeGenerator:
    """Returns a canned response; optionally waits on a gate or sleeps (async)."""

    def __init__(self, response=None, error=None, delay=0.0):
        self.response = response if response is not None else json.dumps(RECOMMENDATION)
        self.error = error
        self.delay = delay
        self.gate = None
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.response

    async def agenerate(self, prompt):
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.generate(prompt)


@pytest.fixture
def corpus() -> Corpus:
    return Corpus(chunks=(
        CorpusChunk(text=HOME, embedding=(1.0, 0.0)),
        CorpusChunk(text=CAR, embedding=(0.0, 1.0)),
    ))


@pytest.fixture
def corpus_file(tmp_path: Path) -> Path:
    p = tmp_path / "embeddings.json"
    p.write_text(json.dumps([
        {"text": HOME, "embedding": [1, 0]},
        {"text": CAR, "embedding": [0, 1]},
    ]), encoding="utf-8")
    return p


@pytest.fixture
def profile() -> UserProfile:
    return UserProfile(
        name="Asha Rao",
        age=32,
        income=120000,
        loan_type="home",
        amount=5000000,
        cibil_score=780,
        married=True,
    )


@pytest.fixture
def recommendation_json() -> str:
    return json.dumps(RECOMMENDATION)


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def failing_embedder() -> FakeEmbedder:
    return FakeEmbedder(error=EmbeddingUnavailable("quota exceeded"))


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def make_embedder():
    return FakeEmbedder


@pytest.fixture
def make_generator():
    return FakeGenerator
