"""
Defensive parsing of reviewer output.

Model output is untrusted. parse_review() returns a tagged result so a
decode failure can never be mistaken for a real verdict; to_verdict()
then turns either branch into a ReviewVerdict.
"""

import json
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from verdant.domain.models import Rationale, ReviewVerdict, Verdict

PARSE_FAILURE_MARKER = "Response parsing failed"
RAW_PREFIX_LIMIT = 200
DEFAULT_SCORE = 50

_FENCE = re.compile(r"```(?:json)?\s*\n?([\s\S]*?)```")

# Verdicts a reviewer may legitimately issue; "unavailable" is reserved
# for transport failures and is never accepted from model output.
_ISSUABLE = {Verdict.APPROVED.value, Verdict.NEEDS_WORK.value, Verdict.VETOED.value}


@dataclass(frozen=True)
class ParsedVerdict:
    """Structured decode succeeded (fields may still have been defaulted)."""

    verdict: ReviewVerdict


@dataclass(frozen=True)
class ParseFailure:
    """The payload could not be decoded into a JSON object."""

    raw: str
    reason: str


ParseResult = ParsedVerdict | ParseFailure


def strip_fence(raw: str) -> str:
    """Remove an optional surrounding ``` / ```json block."""
    cleaned = raw.strip()
    match = _FENCE.search(cleaned)
    if match:
        cleaned = match.group(1).strip()
    return cleaned


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _score(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return DEFAULT_SCORE
    if not math.isfinite(value):
        return DEFAULT_SCORE
    return int(round(max(0.0, min(100.0, float(value)))))


def _from_mapping(agent_id: str, data: Mapping[str, Any], raw: str) -> ReviewVerdict:
    verdict_value = data.get("verdict")
    verdict = (
        Verdict(verdict_value)
        if isinstance(verdict_value, str) and verdict_value in _ISSUABLE
        else Verdict.NEEDS_WORK
    )
    orpa = data.get("orpa")
    if not isinstance(orpa, Mapping):
        orpa = {}
    citations = data.get("citations")
    conditional = data.get("conditionalApproval")
    dimensions = data.get("dimensionScores")
    return ReviewVerdict(
        agent_id=agent_id,
        verdict=verdict,
        score=_score(data.get("score")),
        rationale=Rationale(
            observation=_text(orpa.get("observation")),
            reflection=_text(orpa.get("reflection")),
            plan=_text(orpa.get("plan")),
            action=_text(orpa.get("action")),
        ),
        analysis=_text(data.get("analysis")),
        citations=(
            tuple(str(c) for c in citations) if isinstance(citations, list) else ()
        ),
        conditional_approval=(
            conditional if isinstance(conditional, str) and conditional else None
        ),
        dimension_scores=(
            {str(k): v for k, v in dimensions.items()}
            if isinstance(dimensions, Mapping)
            else {}
        ),
        raw=raw,
    )


def parse_review(raw: str, agent_id: str) -> ParseResult:
    """
    Decode a reviewer response.

    Args:
        raw: Text returned by the completion service
        agent_id: Reviewer the response belongs to

    Returns:
        ParsedVerdict when the payload decodes to a JSON object,
        otherwise ParseFailure carrying the raw text and the reason
    """
    cleaned = strip_fence(raw)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        return ParseFailure(raw=raw, reason=str(e))
    if not isinstance(data, dict):
        return ParseFailure(
            raw=raw, reason=f"Expected a JSON object, got {type(data).__name__}"
        )
    return ParsedVerdict(verdict=_from_mapping(agent_id, data, raw))


def failure_verdict(agent_id: str, failure: ParseFailure) -> ReviewVerdict:
    """Conservative verdict for an undecodable response, flagged as such."""
    prefix = failure.raw[:RAW_PREFIX_LIMIT]
    return ReviewVerdict(
        agent_id=agent_id,
        verdict=Verdict.NEEDS_WORK,
        score=0,
        rationale=Rationale(
            observation=PARSE_FAILURE_MARKER,
            reflection=f"The agent returned malformed JSON: {failure.reason}",
            plan="Re-run this review",
            action="Review deferred: response could not be parsed",
        ),
        analysis=(
            f"Parse error: {failure.reason}. "
            f"Raw response (first {RAW_PREFIX_LIMIT} chars): {prefix}"
        ),
        raw=failure.raw,
        parse_failed=True,
    )


def to_verdict(result: ParseResult, agent_id: str) -> ReviewVerdict:
    match result:
        case ParsedVerdict(verdict=verdict):
            return verdict
        case ParseFailure():
            return failure_verdict(agent_id, result)
    raise TypeError(f"Unexpected parse result: {result!r}")


def unavailable_verdict(agent_id: str, error: str) -> ReviewVerdict:
    """Explicit verdict for a review the completion service could not serve."""
    return ReviewVerdict(
        agent_id=agent_id,
        verdict=Verdict.UNAVAILABLE,
        score=0,
        rationale=Rationale(
            observation="API call failed",
            reflection=f"Error: {error}",
            plan="Retry when the completion service is available",
            action="Review deferred: completion service unavailable",
        ),
        analysis=(
            f"API unavailable: {error}. This review must be re-run when the "
            "completion service is reachable; no synthetic verdict is provided."
        ),
    )
