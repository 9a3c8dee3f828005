"""Concurrent itinerary scoring against an external oracle."""
from __future__ import annotations

import asyncio
import json
import math
import re
from typing import Awaitable, List, Protocol, Sequence

from outing_planner.agents.rubric import build_rubric, render_rubric
from outing_planner.log import get_logger
from outing_planner.schemas import EnrichedCandidate, ItineraryRequest, ScoredCandidate

logger = get_logger(__name__)

FALLBACK_SCORE = 50
DEFAULT_BATCH_SIZE = 5

_BARE_INT = re.compile(r"[+-]?[0-9]+")


class ScoringOracle(Protocol):
    def __call__(self, rubric: str, request_json: str, candidate_json: str) -> Awaitable[str]:
        ...


def parse_score(raw: object) -> int:
    """Bare integer in [0, 100], otherwise the fallback score."""
    if not isinstance(raw, str):
        return FALLBACK_SCORE
    text = raw.strip()
    if not _BARE_INT.fullmatch(text):
        logger.warning("Invalid score from oracle: %r", raw)
        return FALLBACK_SCORE
    score = int(text)
    if score < 0 or score > 100:
        logger.warning("Out-of-range score from oracle: %d", score)
        return FALLBACK_SCORE
    return score


def serialize_request(request: ItineraryRequest) -> str:
    return json.dumps(request.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2)


def serialize_candidate(candidate: EnrichedCandidate) -> str:
    return json.dumps(candidate.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2)


async def score_candidate(
    candidate: EnrichedCandidate,
    rubric: str,
    request_json: str,
    oracle: ScoringOracle,
) -> int:
    try:
        raw = await oracle(rubric, request_json, serialize_candidate(candidate))
    except Exception:
        logger.warning("Scoring oracle call failed; using fallback score %d", FALLBACK_SCORE, exc_info=True)
        return FALLBACK_SCORE
    score = parse_score(raw)
    logger.debug("Oracle score: %d", score)
    return score


async def score_candidates(
    candidates: Sequence[EnrichedCandidate],
    request: ItineraryRequest,
    oracle: ScoringOracle,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> List[ScoredCandidate]:
    """Score candidates in sequential batches of ``batch_size`` concurrent oracle calls.

    A batch is fully resolved before the next one starts, so at most
    ``batch_size`` calls are in flight. Output order follows input order.
    """
    if not candidates:
        return []

    batch_size = max(1, int(batch_size))
    rubric = render_rubric(build_rubric(request))
    request_json = serialize_request(request)

    results: List[ScoredCandidate] = []
    for start in range(0, len(candidates), batch_size):
        batch = candidates[start : start + batch_size]
        scores = await asyncio.gather(
            *[score_candidate(candidate, rubric, request_json, oracle) for candidate in batch]
        )
        results.extend(ScoredCandidate(candidate=c, score=s) for c, s in zip(batch, scores))

    logger.info(
        "Scored %d candidate(s) in %d batch(es) of up to %d",
        len(results),
        math.ceil(len(candidates) / batch_size),
        batch_size,
    )
    return results
