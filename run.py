"""Run the loan advisor: enter a profile, get a recommendation, then chat about it. Install first: pip install -e ."""
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

ROOT = Path(__file__).resolve().parent
# Load .env first so OPENAI_API_KEY is set before any other code runs
load_dotenv(dotenv_path=str(ROOT / ".env"), encoding="utf-8")
sys.path.insert(0, str(ROOT))

PROFILE_FIELDS = [
    ("name", "Name"),
    ("age", "Age"),
    ("income", "Monthly income (₹)"),
    ("loan_type", "Loan type (personal/home/car/education/business/health)"),
    ("amount", "Loan amount (₹)"),
    ("cibil_score", "CIBIL score"),
    ("married", "Married? (y/n)"),
]


def read_profile():
    from loan_advisor.schema import UserProfile
    raw = {}
    for key, label in PROFILE_FIELDS:
        value = input(f"{label}: ").strip()
        if key == "married":
            raw[key] = value.lower() in ("y", "yes")
        elif value:
            raw[key] = value
    return UserProfile.model_validate(raw)


def load_pipeline():
    """default_pipeline(), or None after printing a rebuild hint when the corpus model does not match."""
    from loan_advisor.errors import CorpusModelMismatch
    from loan_advisor.rag import default_pipeline
    try:
        return default_pipeline()
    except CorpusModelMismatch as exc:
        print(f"{exc}.")
        print(
            "Rebuild the corpus with the query model:",
            f"EMBEDDING_MODEL={exc.query_model} python scripts/build_corpus.py (without --local)",
        )
        return None


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    import os
    if not (os.getenv("OPENAI_API_KEY") or "").strip():
        print("OPENAI_API_KEY not found. Check that .env exists in", ROOT, "with line: OPENAI_API_KEY=sk-...")
        return 1
    from config.settings import DATA_PROCESSED
    from loan_advisor.errors import GenerationMalformed, GenerationUnavailable
    from loan_advisor.rag import write_report

    try:
        profile = read_profile()
    except ValidationError as exc:
        print("Invalid profile:", exc)
        return 1

    p = load_pipeline()
    if p is None:
        return 1
    print("Generating recommendation...")
    try:
        result = p.recommend(profile)
    except (GenerationUnavailable, GenerationMalformed) as exc:
        print("Unable to get recommendations. Please try again.", f"({exc})")
        return 1
    rec = result.recommendation
    if not result.grounded:
        print("(No policy documents matched; answer is from general knowledge.)")
    print("Loan type:", rec.loan_type)
    print("Eligibility:", rec.eligibility, "| Risk:", rec.risk_level, "| Approval chance:", rec.approval_chance)
    print("Banks:", ", ".join(rec.recommended_banks))
    print("Rates:", ", ".join(rec.interest_rates))
    print("EMI:", rec.monthly_emi, "| Processing time:", rec.processing_time)
    print("Explanation:", rec.explanation)

    path = write_report(DATA_PROCESSED / "reports", profile, result)
    print("Report saved to", path)

    # Chat until empty line
    while True:
        question = input("Ask about your recommendation (Enter to quit): ").strip()
        if not question:
            break
        try:
            print(p.chat(profile, rec, question))
        except GenerationUnavailable:
            print("I'm having trouble connecting right now. Please try again in a moment.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
