"""Test prompt building, JSON extraction and recommendation parsing."""
import json
import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai
import pytest

ROOT = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(ROOT))

from loan_advisor.errors import GenerationMalformed, GenerationTimeout, GenerationUnavailable
from loan_advisor.rag.llm import (
    NO_CONTEXT_NOTE,
    OpenAIGenerationClient,
    build_chat_prompt,
    build_rag_query,
    build_recommendation_prompt,
    extract_json_object,
    parse_recommendation,
)

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def test_extract_from_fenced_text() -> None:
    text = 'Sure! Here it is:\n```json\n{"a": 1, "b": {"c": [1, 2]}}\n```\nHope that helps {really}.'
    assert extract_json_object(text) == {"a": 1, "b": {"c": [1, 2]}}


def test_extract_ignores_braces_in_strings() -> None:
    text = 'prefix {"note": "use } and { freely", "x": "\\"quoted\\""} suffix'
    assert extract_json_object(text) == {"note": "use } and { freely", "x": '"quoted"'}


def test_extract_skips_non_json_braces() -> None:
    assert extract_json_object('Dear {name}, result: {"ok": true}') == {"ok": True}


def test_extract_skips_unclosed_brace() -> None:
    assert extract_json_object('Rates {see below\n{"a": 1}') == {"a": 1}
    assert extract_json_object('{ "x": 1 { "y": 2 }') == {"y": 2}


@pytest.mark.parametrize("text", ["", "no json here", "{unclosed", "[1, 2, 3]", "{'single': 'quotes'}"])
def test_extract_none_found(text: str) -> None:
    with pytest.raises(GenerationMalformed):
        extract_json_object(text)


def test_parse_recommendation_ok(recommendation_json: str) -> None:
    rec = parse_recommendation("Here you go:\n" + recommendation_json + "\nThanks")
    assert rec.loan_type == "Home Loan"
    assert rec.eligibility == "Eligible"


def test_parse_recommendation_missing_field(recommendation_json: str) -> None:
    data = json.loads(recommendation_json)
    del data["riskLevel"]
    with pytest.raises(GenerationMalformed) as info:
        parse_recommendation(json.dumps(data))
    assert "riskLevel" in str(info.value)


def test_rag_query_contains_profile(profile) -> None:
    q = build_rag_query(profile)
    assert "Person aged 32" in q
    assert "CIBIL score: 780" in q
    assert "Loan type: home" in q
    assert "Marital status: Married" in q
    # name is not part of the retrieval query
    assert "Asha" not in q


def test_recommendation_prompt_with_context(profile) -> None:
    p = build_recommendation_prompt(profile, "Home loans need salary slips")
    assert "Home loans need salary slips" in p
    assert '"contextUsed": true' in p
    assert "- Name: Asha Rao" in p
    assert NO_CONTEXT_NOTE not in p


def test_recommendation_prompt_without_context_says_so(profile) -> None:
    p = build_recommendation_prompt(profile, "")
    assert NO_CONTEXT_NOTE in p
    assert '"contextUsed": false' in p


def test_chat_prompt(profile, recommendation_json: str) -> None:
    rec = parse_recommendation(recommendation_json)
    p = build_chat_prompt(profile, rec, "Which documents do I need?", "Home loans need salary slips")
    assert "Recommended Banks: SBI, HDFC Bank, ICICI Bank" in p
    assert "Monthly EMI: ₹43000" in p
    assert p.endswith("User Question: Which documents do I need?")
    assert "Home loans need salary slips" in p


def _chat_client(content=None, error=None) -> MagicMock:
    client = MagicMock()
    if error is not None:
        client.chat.completions.create.side_effect = error
    else:
        client.chat.completions.create.return_value = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
        )
    return client


def test_generate_ok() -> None:
    client = _chat_client("  {\"a\": 1}  ")
    g = OpenAIGenerationClient(model="m", client=client)
    assert g.generate("prompt") == '{"a": 1}'
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "m"
    assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]


def test_generate_timeout_and_failure() -> None:
    with pytest.raises(GenerationTimeout):
        OpenAIGenerationClient(client=_chat_client(error=openai.APITimeoutError(request=REQUEST))).generate("p")
    with pytest.raises(GenerationUnavailable) as info:
        OpenAIGenerationClient(client=_chat_client(error=openai.APIConnectionError(request=REQUEST))).generate("p")
    assert not isinstance(info.value, GenerationTimeout)


def test_generate_empty_content() -> None:
    with pytest.raises(GenerationUnavailable):
        OpenAIGenerationClient(client=_chat_client("")).generate("p")
