"""Cost calculation for raw Gemini ``generateContent`` responses.

Only the cost-relevant fields are extracted: ``modelVersion``, the
``usageMetadata`` counters and the ``webSearchQueries`` of each candidate's
``groundingMetadata``.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .engine import Pricer
from .errors import InvalidResponseError
from .pricing import BillingModel, CalculateOptions, CostBreakdown, TokenUsage


@dataclass(frozen=True)
class GeminiResponse:
    """Cost-relevant view of a Gemini API response."""

    model_version: str = ""
    usage: TokenUsage = field(default_factory=TokenUsage)
    web_search_queries: List[str] = field(default_factory=list)
    grounded: bool = False

    def grounding_units(self, billing_model: BillingModel) -> int:
        """Count grounding units in the unit of ``billing_model``.

        ``per_query`` counts non-empty search queries; ``per_prompt`` counts
        one grounded prompt if any grounding occurred.
        """
        if billing_model == BillingModel.PER_PROMPT:
            return 1 if self.grounded else 0
        return len(self.web_search_queries)


def _candidates(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    candidates = data.get("candidates") or []
    if not isinstance(candidates, list):
        raise InvalidResponseError("'candidates' must be a list")
    return [c for c in candidates if isinstance(c, dict)]


def parse_gemini_response(data: Union[str, bytes, Dict[str, Any]]) -> GeminiResponse:
    """Parse a Gemini response body.

    Args:
        data: Raw JSON text or bytes, or an already decoded mapping

    Returns:
        The cost-relevant fields of the response

    Raises:
        InvalidResponseError: If the body is not valid JSON or not a JSON object
    """
    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidResponseError(f"Invalid Gemini response JSON: {e}") from e
    if not isinstance(data, dict):
        raise InvalidResponseError(f"Expected a JSON object, got {type(data).__name__}")

    usage_metadata = data.get("usageMetadata") or {}
    if not isinstance(usage_metadata, dict):
        raise InvalidResponseError("'usageMetadata' must be an object")

    queries: List[str] = []
    grounded = False
    for candidate in _candidates(data):
        grounding = candidate.get("groundingMetadata")
        if not isinstance(grounding, dict):
            continue
        candidate_queries = [q for q in grounding.get("webSearchQueries") or [] if isinstance(q, str) and q]
        if candidate_queries:
            grounded = True
            queries.extend(candidate_queries)

    return GeminiResponse(
        model_version=str(data.get("modelVersion") or ""),
        usage=TokenUsage.from_gemini(usage_metadata),
        web_search_queries=queries,
        grounded=grounded,
    )


def calculate_gemini_response_cost(
    pricer: Pricer,
    response: GeminiResponse,
    model: Optional[str] = None,
    options: Optional[CalculateOptions] = None,
) -> CostBreakdown:
    """Calculate the cost of a parsed Gemini response.

    Args:
        pricer: Pricer to calculate with
        response: Parsed response
        model: Overrides ``response.model_version`` when given
        options: Calculation options (batch mode)

    Returns:
        Itemized cost breakdown; ``unknown`` when no model name is available
        or the model is not priced
    """
    model_name = model or response.model_version
    grounding = pricer.get_grounding_pricing(model_name) if model_name else None
    if grounding is not None:
        units = response.grounding_units(grounding.billing_model)
    else:
        units = response.grounding_units(BillingModel.PER_QUERY)
    return pricer.calculate_usage(model_name, response.usage, grounding_units=units, options=options)
