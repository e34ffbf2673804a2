"""LLM client for the advisor: build prompts, call the API, parse the JSON recommendation."""
from __future__ import annotations

import json

import openai
from pydantic import ValidationError

from loan_advisor.errors import GenerationMalformed, GenerationTimeout, GenerationUnavailable
from loan_advisor.schema import LoanRecommendation, UserProfile

DEFAULT_MODEL = "gpt-4o-mini"

NO_CONTEXT_NOTE = "(No matching policy documents were found. Answer from general knowledge and say so in the explanation.)"

RECOMMENDATION_SYSTEM = """You are an expert AI loan advisor for Indian customers.
Use the provided context from financial documents to give accurate and personalized loan recommendations.

CONTEXT FROM FINANCIAL DOCUMENTS:
{context}

Based on the context above and the user's profile, provide personalized loan recommendations.
Always respond in JSON format with these exact fields:
{{
  "loanType": "string",
  "recommendedBanks": ["bank1", "bank2", "bank3"],
  "interestRates": ["rate1", "rate2", "rate3"],
  "repaymentOptions": ["option1", "option2"],
  "riskLevel": "Low/Medium/High",
  "explanation": "detailed explanation based on the context provided",
  "eligibility": "Eligible/Partially Eligible/Not Eligible",
  "monthlyEMI": "estimated EMI amount",
  "processingTime": "time in days",
  "cibilImpact": "how CIBIL score affects the recommendation",
  "maritalBenefit": "how marital status affects the recommendation",
  "specialOffers": ["offer1", "offer2"],
  "approvalChance": "percentage",
  "requiredDocuments": ["doc1", "doc2", "doc3"],
  "contextUsed": {context_used}
}}

Guidelines:
1. Prioritize information from the provided context
2. If context is insufficient, use general knowledge but mention this in explanation
3. Be specific about Indian banks and financial institutions
4. Consider current market rates and conditions
5. Provide actionable advice based on the user's profile"""

CHAT_SYSTEM = """You are a helpful loan advisor assistant. The user has just received loan recommendations based on their profile.

{profile_block}

Recommendations Received:
- Eligibility: {rec.eligibility}
- Monthly EMI: ₹{rec.monthly_emi}
- Risk Level: {rec.risk_level}
- Recommended Banks: {banks}
- Interest Rates: {rates}
- Processing Time: {rec.processing_time}

Relevant policy context:
{context}

Guidelines:
1. Be helpful, professional, and conversational
2. Use the user's profile data to give personalized responses
3. Focus on loan-related topics (eligibility, documentation, processes, etc.)
4. Keep responses concise but informative
5. If asked about something outside loan/banking domain, politely redirect to loan topics"""


def build_rag_query(profile: UserProfile) -> str:
    """Retrieval query text for a profile."""
    return (
        "Best loan options and recommendations for:\n"
        f"- Person aged {profile.age}\n"
        f"- Monthly income: ₹{profile.income:.0f}\n"
        f"- Loan type: {profile.loan_type}\n"
        f"- Loan amount: ₹{profile.amount:.0f}\n"
        f"- CIBIL score: {profile.cibil_score}\n"
        f"- Marital status: {profile.marital_status}\n"
        "- Eligibility criteria, interest rates, processing time, required documents"
    )


def profile_block(profile: UserProfile) -> str:
    return (
        "User Profile:\n"
        f"- Name: {profile.name}\n"
        f"- Age: {profile.age}\n"
        f"- Income: ₹{profile.income:.0f}\n"
        f"- Loan Type: {profile.loan_type}\n"
        f"- Amount: ₹{profile.amount:.0f}\n"
        f"- CIBIL Score: {profile.cibil_score}\n"
        f"- Marital Status: {profile.marital_status}"
    )


def build_recommendation_prompt(profile: UserProfile, context: str) -> str:
    """Single user message: instructions + retrieved context + profile."""
    grounded = bool(context.strip())
    system = RECOMMENDATION_SYSTEM.format(
        context=context if grounded else NO_CONTEXT_NOTE,
        context_used="true" if grounded else "false",
    )
    return (
        f"{system}\n\n{profile_block(profile)}\n\n"
        "Please provide comprehensive loan recommendations using the context provided above."
    )


def build_chat_prompt(profile: UserProfile, rec: LoanRecommendation, question: str, context: str = "") -> str:
    system = CHAT_SYSTEM.format(
        profile_block=profile_block(profile),
        rec=rec,
        banks=", ".join(rec.recommended_banks),
        rates=", ".join(rec.interest_rates),
        context=context or "(none)",
    )
    return f"{system}\n\nUser Question: {question}"


def _candidate_objects(text: str):
    """Yield balanced top-level {...} substrings, left to right. Braces inside JSON strings are ignored."""
    i = text.find("{")
    while i != -1:
        depth = 0
        in_string = False
        escaped = False
        end = -1
        for j in range(i, len(text)):
            ch = text[j]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    end = j
                    break
        if end == -1:
            # unclosed brace; a later one may still open a complete object
            i = text.find("{", i + 1)
            continue
        yield text[i:end + 1]
        i = text.find("{", i + 1)


def extract_json_object(text: str) -> dict:
    """First top-level JSON object in free-form model output. Raises GenerationMalformed if none parses."""
    for candidate in _candidate_objects(text or ""):
        try:
            obj = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(obj, dict):
            return obj
    raise GenerationMalformed("No JSON object found in model response")


def parse_recommendation(text: str) -> LoanRecommendation:
    """Extract and validate the recommendation. Missing or invalid fields -> GenerationMalformed."""
    data = extract_json_object(text)
    try:
        return LoanRecommendation.model_validate(data)
    except ValidationError as exc:
        fields = sorted({".".join(str(p) for p in e["loc"]) for e in exc.errors()})
        raise GenerationMalformed(f"Recommendation failed validation: {', '.join(fields)}") from exc


class OpenAIGenerationClient:
    """OpenAI Chat Completions. No retries; timeouts surface as GenerationTimeout."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        timeout: float = 60.0,
        temperature: float = 0.2,
        max_tokens: int = 1024,
        client: openai.OpenAI | None = None,
        async_client: openai.AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._api_key = api_key
        self._client = client
        self._async_client = async_client

    @property
    def client(self) -> openai.OpenAI:
        if self._client is None:
            self._client = openai.OpenAI(api_key=self._api_key, timeout=self.timeout, max_retries=0)
        return self._client

    @property
    def async_client(self) -> openai.AsyncOpenAI:
        if self._async_client is None:
            self._async_client = openai.AsyncOpenAI(api_key=self._api_key, timeout=self.timeout, max_retries=0)
        return self._async_client

    def _kwargs(self, prompt: str) -> dict:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    @staticmethod
    def _content(resp) -> str:
        try:
            content = resp.choices[0].message.content
        except (AttributeError, IndexError) as exc:
            raise GenerationUnavailable("Malformed chat completion response") from exc
        if not content or not content.strip():
            raise GenerationUnavailable("Empty response from model")
        return content.strip()

    def generate(self, prompt: str) -> str:
        try:
            resp = self.client.chat.completions.create(**self._kwargs(prompt))
        except openai.APITimeoutError as exc:
            raise GenerationTimeout(f"Generation timed out after {self.timeout}s") from exc
        except openai.OpenAIError as exc:
            raise GenerationUnavailable(f"Generation call failed: {exc}") from exc
        return self._content(resp)

    async def agenerate(self, prompt: str) -> str:
        try:
            resp = await self.async_client.chat.completions.create(**self._kwargs(prompt))
        except openai.APITimeoutError as exc:
            raise GenerationTimeout(f"Generation timed out after {self.timeout}s") from exc
        except openai.OpenAIError as exc:
            raise GenerationUnavailable(f"Generation call failed: {exc}") from exc
        return self._content(resp)
