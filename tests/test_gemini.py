"""Tests for Gemini response cost calculation."""

import json
from typing import Any, Dict, List

import pytest

from pricing_db import CalculateOptions, Pricer
from pricing_db.errors import InvalidResponseError
from pricing_db.gemini import calculate_gemini_response_cost, parse_gemini_response
from pricing_db.pricing import BillingModel

QUERIES = [f"query {i}" for i in range(11)]


def _response(
    model: str = "gemini-3-pro-preview",
    queries: List[str] = QUERIES,
    **usage: int,
) -> Dict[str, Any]:
    usage_metadata = {
        "promptTokenCount": 1826,
        "candidatesTokenCount": 486,
        "cachedContentTokenCount": 280,
        "thoughtsTokenCount": 478,
        "totalTokenCount": 2790,
    }
    usage_metadata.update(usage)
    candidate: Dict[str, Any] = {"content": {"parts": [{"text": "answer"}]}}
    if queries:
        candidate["groundingMetadata"] = {"webSearchQueries": list(queries)}
    return {"modelVersion": model, "candidates": [candidate], "usageMetadata": usage_metadata}


def test_parse_response_fields() -> None:
    """Test that the cost-relevant fields are extracted."""
    response = parse_gemini_response(json.dumps(_response()))

    assert response.model_version == "gemini-3-pro-preview"
    assert response.usage.prompt_tokens == 1826
    assert response.usage.cached_tokens == 280
    assert response.usage.completion_tokens == 486
    assert response.usage.thinking_tokens == 478
    assert response.web_search_queries == QUERIES
    assert response.grounded


def test_grounding_units_by_billing_model() -> None:
    """Test query and prompt counting."""
    response = parse_gemini_response(_response())
    assert response.grounding_units(BillingModel.PER_QUERY) == 11
    assert response.grounding_units(BillingModel.PER_PROMPT) == 1

    ungrounded = parse_gemini_response(_response(queries=[]))
    assert ungrounded.grounding_units(BillingModel.PER_QUERY) == 0
    assert ungrounded.grounding_units(BillingModel.PER_PROMPT) == 0


def test_queries_counted_across_candidates() -> None:
    """Test that queries from every candidate count and empty ones are skipped."""
    data = _response(queries=["a", ""])
    data["candidates"].append({"groundingMetadata": {"webSearchQueries": ["a", "b"]}})
    data["candidates"].append({"groundingMetadata": None})

    response = parse_gemini_response(data)

    assert response.web_search_queries == ["a", "a", "b"]


def test_response_cost(pricer: Pricer) -> None:
    """Test the itemized cost of a grounded Gemini 3 response."""
    cost = calculate_gemini_response_cost(pricer, parse_gemini_response(_response()))

    assert not cost.unknown
    assert cost.standard_input_cost == pytest.approx(1546 * 2.0 / 1e6)
    assert cost.cached_input_cost == pytest.approx(280 * 2.0 * 0.10 / 1e6)
    assert cost.output_cost == pytest.approx(486 * 12.0 / 1e6)
    assert cost.thinking_cost == pytest.approx(478 * 12.0 / 1e6)
    assert cost.grounding_cost == pytest.approx(0.154)
    expected = (1546 * 2.0 + 280 * 0.2 + 486 * 12.0 + 478 * 12.0) / 1e6 + 0.154
    assert cost.total_cost == pytest.approx(expected)


def test_response_cost_per_prompt_grounding(pricer: Pricer) -> None:
    """Test that per-prompt grounding bills once regardless of query count."""
    cost = calculate_gemini_response_cost(pricer, parse_gemini_response(_response(model="gemini-2.5-flash")))
    assert cost.grounding_cost == pytest.approx(0.035)


def test_response_cost_without_grounding(pricer: Pricer) -> None:
    """Test an ungrounded response."""
    response = parse_gemini_response(_response(model="gemini-2.5-flash", queries=[]))
    cost = calculate_gemini_response_cost(pricer, response)

    assert cost.grounding_cost == 0.0
    assert cost.warnings == []


def test_batch_response_excludes_grounding(pricer: Pricer) -> None:
    """Test that batch responses are discounted and exclude grounding."""
    response = parse_gemini_response(_response())
    regular = calculate_gemini_response_cost(pricer, response)
    batched = calculate_gemini_response_cost(pricer, response, options=CalculateOptions(batch_mode=True))

    assert batched.grounding_cost == 0.0
    assert batched.cached_input_cost == pytest.approx(regular.cached_input_cost)
    assert batched.output_cost == pytest.approx(regular.output_cost * 0.5)
    assert batched.batch_discount > 0
    assert len(batched.warnings) == 1


def test_model_override(pricer: Pricer) -> None:
    """Test that an explicit model replaces the response's model version."""
    response = parse_gemini_response(_response(model="", queries=[]))

    assert calculate_gemini_response_cost(pricer, response).unknown
    cost = calculate_gemini_response_cost(pricer, response, model="gemini-2.5-flash")
    assert not cost.unknown
    assert cost.model == "gemini-2.5-flash"


def test_unknown_model_version(pricer: Pricer) -> None:
    """Test that an unpriced model version is flagged."""
    response = parse_gemini_response(_response(model="gemini-9-ultra"))
    assert calculate_gemini_response_cost(pricer, response).unknown


def test_missing_usage_is_zero(pricer: Pricer) -> None:
    """Test a response without usage metadata."""
    response = parse_gemini_response({"modelVersion": "gemini-2.5-flash"})

    assert response.usage.prompt_tokens == 0
    assert calculate_gemini_response_cost(pricer, response).total_cost == 0.0


@pytest.mark.parametrize(
    "body",
    [
        "not json",
        b"\xff\xfe",
        "[1, 2]",
        '{"candidates": {"a": 1}}',
        '{"usageMetadata": [1]}',
    ],
)
def test_invalid_responses(body: Any) -> None:
    """Test that malformed bodies raise."""
    with pytest.raises(InvalidResponseError):
        parse_gemini_response(body)
