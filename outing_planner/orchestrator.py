# outing_planner/orchestrator.py
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from outing_planner.agents.candidate_generator import generate_candidates
from outing_planner.agents.ranker import rank_candidates
from outing_planner.agents.scorer import ScoringOracle, score_candidates
from outing_planner.agents.travel_enricher import DistanceMatrixProvider, enrich_candidates
from outing_planner.config import PlannerConfig, load_config
from outing_planner.llm import GroqScoringOracle
from outing_planner.log import get_logger
from outing_planner.schemas import (
    Category,
    PlanItineraryRequest,
    PlanItineraryResponse,
    ScoredCandidate,
    Slot,
    Venue,
)
from outing_planner.tools.openroute import OpenRouteMatrixProvider

logger = get_logger(__name__)

# the slot-filling assistant marks wildcards as {} or {"filters": {...}}
_WILDCARD_KEYS = {"filters"}


def build_matrix_provider(config: PlannerConfig) -> OpenRouteMatrixProvider:
    return OpenRouteMatrixProvider(
        api_key=config.openroute_api_key,
        base_url=config.openroute_url,
        profile=config.openroute_profile,
        timeout=config.matrix_timeout,
    )


def resolve_slots(
    preferred_types: Sequence[Mapping[str, Mapping[str, Any]]],
    pools: Mapping[str, Sequence[Venue]],
) -> List[Slot]:
    """Turn ``[{category: {} | venue}, ...]`` into ordered slots.

    An empty object (or one carrying only ``filters``) draws from the
    category's pool; anything else is a pinned venue. Unknown categories are
    skipped.
    """
    pools_by_category: Dict[Category, List[Venue]] = {}
    for name, venues in pools.items():
        try:
            category = Category.parse(name)
        except ValueError:
            logger.warning("Ignoring pool for unknown category '%s'", name)
            continue
        pools_by_category.setdefault(category, []).extend(venues)

    slots: List[Slot] = []
    for entry in preferred_types:
        name, value = next(iter(entry.items()))
        try:
            category = Category.parse(name)
        except ValueError:
            logger.warning("Skipping slot with unknown category '%s'", name)
            continue
        value = value or {}
        if set(value) <= _WILDCARD_KEYS:
            slots.append(Slot(category=category, pool=list(pools_by_category.get(category, []))))
        else:
            slots.append(Slot(category=category, pool=[Venue.model_validate(value)]))
    return slots


async def plan_itineraries(
    request: PlanItineraryRequest,
    *,
    matrix_provider: Optional[DistanceMatrixProvider] = None,
    oracle: Optional[ScoringOracle] = None,
    config: Optional[PlannerConfig] = None,
) -> List[ScoredCandidate]:
    """Run generation, travel enrichment, scoring and ranking for one request."""
    config = config or load_config()
    matrix_provider = matrix_provider or build_matrix_provider(config)
    owned_oracle = None
    if oracle is None:
        oracle = owned_oracle = GroqScoringOracle(config)
    policy = request.empty_slot_policy or config.empty_slot_policy

    slots = resolve_slots(request.preferred_types, request.pools)
    logger.info(
        "Planning %d slot(s) for %d people with budget %.2f starting at %.2f",
        len(slots),
        request.number_of_people,
        request.budget,
        request.start_time,
    )
    logger.debug("Slot pools: %s", [(s.category.value, len(s.pool)) for s in slots])

    candidates = generate_candidates(
        slots,
        request.budget,
        request.number_of_people,
        empty_slot_policy=policy,
    )
    enriched = await enrich_candidates(
        candidates,
        request.start_location,
        request.start_time,
        matrix_provider,
    )
    try:
        scored = await score_candidates(
            enriched,
            request.constraints(),
            oracle,
            batch_size=config.score_batch_size,
        )
    finally:
        if owned_oracle is not None:
            await owned_oracle.aclose()
    ranked = rank_candidates(scored)
    logger.info(
        "Pipeline finished: %d generated, %d feasible, top score %s",
        len(candidates),
        len(enriched),
        ranked[0].score if ranked else "n/a",
    )
    return ranked


async def orchestrate_itinerary_plan(
    payload: Dict[str, Any],
    *,
    matrix_provider: Optional[DistanceMatrixProvider] = None,
    oracle: Optional[ScoringOracle] = None,
    config: Optional[PlannerConfig] = None,
) -> Dict[str, Any]:
    """Validate a raw payload, plan, and return the JSON-ready response dict."""
    try:
        request = PlanItineraryRequest.model_validate(payload)
    except ValidationError:
        logger.warning("Rejected itinerary payload", exc_info=True)
        raise

    ranked = await plan_itineraries(request, matrix_provider=matrix_provider, oracle=oracle, config=config)
    response = PlanItineraryResponse(
        success=True,
        scores=[item.score for item in ranked],
        total_combinations=len(ranked),
        itineraries=ranked if request.include_itineraries else None,
    )
    return response.model_dump(mode="json", by_alias=True, exclude_none=True)
