"""Downloadable JSON report of a recommendation."""
from __future__ import annotations

import json
import re
from datetime import datetime
from pathlib import Path

from loan_advisor.schema import RecommendationResult, UserProfile


def report_filename(profile: UserProfile) -> str:
    return "loan_recommendation_" + re.sub(r"\s+", "_", profile.name.strip()) + ".json"


def build_report(profile: UserProfile, result: RecommendationResult, generated_at: datetime | None = None) -> dict:
    recommendations = result.recommendation.model_dump(by_alias=True)
    recommendations["ragUsed"] = result.grounded
    recommendations["contextLength"] = result.context_length
    return {
        "applicant": profile.model_dump(),
        "recommendations": recommendations,
        "generatedAt": (generated_at or datetime.now()).isoformat(timespec="seconds"),
    }


def write_report(
    out_dir: Path | str,
    profile: UserProfile,
    result: RecommendationResult,
    generated_at: datetime | None = None,
) -> Path:
    """Write the report to out_dir/<report_filename>; returns the path."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / report_filename(profile)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(build_report(profile, result, generated_at), f, indent=2, ensure_ascii=False)
    return path
