"""
Best-effort decoding of the model's reply into a ``CandidateResult``.

The reply is supposed to be a JSON object, but models wrap it in prose or
drop fields. ``decode_analysis`` tolerates both and says which happened:
``Parsed`` when a JSON object was found, ``Defaulted`` when the neutral
result had to stand in.
"""

import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, List, Union

from assessor.constants import (
    MISSING_AREAS,
    MISSING_FEEDBACK,
    MISSING_STRENGTHS,
    NEUTRAL_AREAS,
    NEUTRAL_FEEDBACK,
    NEUTRAL_SCORE,
    NEUTRAL_STRENGTHS,
)
from assessor.models import Candidate, CandidateResult, ScoreSet

JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

# reply key -> ScoreSet field
SCORE_FIELDS = {
    "readability": "readability",
    "extensibility": "extensibility",
    "testability": "testability",
    "originalityScore": "originality",
    "seniorityFit": "seniority_fit",
}


@dataclass(frozen=True)
class Parsed:
    result: CandidateResult


@dataclass(frozen=True)
class Defaulted:
    result: CandidateResult
    reason: str


DecodedAnalysis = Union[Parsed, Defaulted]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: int) -> int:
    return max(0, min(100, value))


def mean_score(*scores: int) -> int:
    return round_half_up(sum(scores) / len(scores))


def _to_score(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return clamp_score(round_half_up(value))


def _to_list(value: Any, placeholder: List[str]) -> List[str]:
    if not isinstance(value, list):
        return list(placeholder)
    return [item if isinstance(item, str) else json.dumps(item) for item in value]


def neutral_result(candidate: Candidate) -> CandidateResult:
    return CandidateResult(
        candidate_id=candidate.id,
        candidate_name=candidate.display_name,
        scores=ScoreSet(
            readability=NEUTRAL_SCORE,
            extensibility=NEUTRAL_SCORE,
            testability=NEUTRAL_SCORE,
            originality=NEUTRAL_SCORE,
            seniority_fit=NEUTRAL_SCORE,
            overall_score=NEUTRAL_SCORE,
        ),
        feedback=list(NEUTRAL_FEEDBACK),
        strengths=list(NEUTRAL_STRENGTHS),
        areas_to_improve=list(NEUTRAL_AREAS),
    )


def extract_json(text: str) -> Any:
    match = JSON_OBJECT.search(text)
    return json.loads(match.group(0) if match else text)


def decode_analysis(text: str, candidate: Candidate) -> DecodedAnalysis:
    logging.info(f"Parsing LLM response: {text[:100]}...")
    try:
        payload = extract_json(text)
    except ValueError as e:
        logging.error(f"JSON parse error for {candidate.display_name}: {e}")
        return Defaulted(neutral_result(candidate), reason=str(e))

    if not isinstance(payload, dict):
        logging.error(f"LLM response for {candidate.display_name} is not a JSON object")
        return Defaulted(neutral_result(candidate), reason="response is not a JSON object")

    raw_scores = payload.get("scores")
    if not isinstance(raw_scores, dict):
        raw_scores = {}

    scores = {field: _to_score(raw_scores.get(key)) for key, field in SCORE_FIELDS.items()}
    overall = _to_score(raw_scores.get("overallScore"))
    if not overall:
        overall = mean_score(*scores.values())

    result = CandidateResult(
        candidate_id=candidate.id,
        candidate_name=candidate.display_name,
        scores=ScoreSet(overall_score=overall, **scores),
        feedback=_to_list(payload.get("feedback"), MISSING_FEEDBACK),
        strengths=_to_list(payload.get("strengths"), MISSING_STRENGTHS),
        areas_to_improve=_to_list(payload.get("areasToImprove"), MISSING_AREAS),
    )
    return Parsed(result)
