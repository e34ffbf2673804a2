"""User profile and the strict loan recommendation schema returned by the model."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .chunk import ScoredChunk

LoanType = Literal["personal", "home", "car", "education", "business", "health"]


class UserProfile(BaseModel):
    """Financial profile entered by the user."""
    name: str = Field(min_length=1)
    age: int = Field(ge=18, le=100)
    income: float = Field(gt=0)  # monthly, INR
    loan_type: LoanType = "personal"
    amount: float = Field(gt=0)  # requested, INR
    cibil_score: int = Field(ge=300, le=900)
    married: bool = False

    @property
    def marital_status(self) -> str:
        return "Married" if self.married else "Single"


class LoanRecommendation(BaseModel):
    """Validated generation response. JSON keys are camelCase (loanType, recommendedBanks, ...)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    loan_type: str
    recommended_banks: list[str]
    interest_rates: list[str]
    repayment_options: list[str]
    risk_level: Literal["Low", "Medium", "High"]
    explanation: str
    eligibility: Literal["Eligible", "Partially Eligible", "Not Eligible"]
    monthly_emi: str = Field(alias="monthlyEMI")
    processing_time: str
    cibil_impact: str
    marital_benefit: str
    special_offers: list[str]
    approval_chance: str
    required_documents: list[str] = Field(default_factory=list)
    context_used: bool = False

    @field_validator("monthly_emi", "processing_time", "approval_chance", mode="before")
    @classmethod
    def _number_to_str(cls, v):
        # Models often answer 12500 instead of "12500"
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("risk_level", mode="before")
    @classmethod
    def _title_case_risk(cls, v):
        return v.strip().title() if isinstance(v, str) else v


class RecommendationResult(BaseModel):
    """Recommendation plus the retrieval context it was grounded on."""
    recommendation: LoanRecommendation
    context: str = ""
    grounded: bool = False  # False: generated without policy context
    chunks: list[ScoredChunk] = Field(default_factory=list)

    @property
    def context_length(self) -> int:
        return len(self.context)
