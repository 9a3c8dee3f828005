"""Ranking helpers."""
from __future__ import annotations

from typing import List, Sequence

from outing_planner.schemas import ScoredCandidate


def rank_candidates(scored: Sequence[ScoredCandidate]) -> List[ScoredCandidate]:
    """Highest score first; equal scores keep their scoring order."""
    return sorted(scored, key=lambda item: item.score, reverse=True)


def ranked_scores(scored: Sequence[ScoredCandidate]) -> List[int]:
    return [item.score for item in rank_candidates(scored)]
