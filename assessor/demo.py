"""Synthesized results so the assessment flow works without an API key."""

import logging
import random
from typing import List, Optional, Sequence

from assessor.constants import DEMO_AREAS, DEMO_FEEDBACK, DEMO_STRENGTHS
from assessor.errors import NoResults
from assessor.models import AssessmentRequest, Candidate, CandidateResult, ScoreSet
from assessor.parsing import clamp_score, mean_score

DEMO_TOP_SCORE = 88
DEMO_STEP = 6
DEMO_FLOOR = 55
DEMO_JITTER = 5


def _pick(pool: List[str], rng: random.Random) -> List[str]:
    return rng.sample(pool, rng.randint(3, 4))


def demo_result(candidate: Candidate, index: int, rng: random.Random) -> CandidateResult:
    base = max(DEMO_FLOOR, DEMO_TOP_SCORE - DEMO_STEP * index)

    def score():
        return clamp_score(base + rng.randint(-DEMO_JITTER, DEMO_JITTER))

    readability, extensibility, testability, originality, seniority_fit = (score() for _ in range(5))
    return CandidateResult(
        candidate_id=candidate.id,
        candidate_name=candidate.display_name,
        scores=ScoreSet(
            readability=readability,
            extensibility=extensibility,
            testability=testability,
            originality=originality,
            seniority_fit=seniority_fit,
            overall_score=mean_score(readability, extensibility, testability, originality, seniority_fit),
        ),
        feedback=_pick(DEMO_FEEDBACK, rng),
        strengths=_pick(DEMO_STRENGTHS, rng),
        areas_to_improve=_pick(DEMO_AREAS, rng),
    )


def generate_demo_results(
    candidates: Sequence[Candidate],
    request: AssessmentRequest,
    rng: Optional[random.Random] = None,
) -> List[CandidateResult]:
    rng = rng or random.Random()
    analyzable = [c for c in candidates if c.has_code_source()]
    logging.info(f"Demo mode: synthesizing results for {len(analyzable)} candidates ({request.role_name})")

    results = [demo_result(candidate, index, rng) for index, candidate in enumerate(analyzable)]
    if not results:
        raise NoResults()
    return sorted(results, key=lambda r: r.scores.overall_score, reverse=True)
