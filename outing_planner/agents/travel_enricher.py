"""Travel enrichment: per-leg distance/time annotation and opening-hours feasibility."""
from __future__ import annotations

import math
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from outing_planner.log import get_logger
from outing_planner.schemas import Candidate, DistanceMatrix, EnrichedCandidate, EnrichedItem, Location


logger = get_logger(__name__)


class DistanceMatrixProvider(Protocol):
    async def get_matrix(self, locations: Sequence[Location]) -> DistanceMatrix:
        ...


def collect_locations(candidates: Sequence[Candidate], start_location: Location) -> List[Location]:
    """Start location first, then every venue location in encounter order, deduplicated by coordinates."""
    unique: Dict[str, Location] = {start_location.key: start_location}
    for candidate in candidates:
        for item in candidate.items:
            unique.setdefault(item.venue.location.key, item.venue.location)
    return list(unique.values())


async def enrich_candidates(
    candidates: Sequence[Candidate],
    start_location: Location,
    start_time: float,
    provider: DistanceMatrixProvider,
) -> List[EnrichedCandidate]:
    """Annotate every leg with travel distance/time and keep only candidates whose timeline fits.

    All candidates share a single matrix request. A provider failure means no
    candidate can be routed, so the whole batch comes back empty.
    """
    if not candidates:
        return []

    locations = collect_locations(candidates, start_location)
    try:
        matrix = await provider.get_matrix(locations)
    except Exception:
        logger.warning("Distance matrix provider raised for %d location(s)", len(locations), exc_info=True)
        return []
    if not matrix.success:
        logger.warning("Distance matrix unavailable (%s); no itinerary can be routed", matrix.error or "unknown")
        return []

    index = {loc.key: idx for idx, loc in enumerate(locations)}
    feasible: List[EnrichedCandidate] = []
    for candidate in candidates:
        enriched, ok = _walk(candidate, start_location, start_time, matrix, index)
        if ok:
            feasible.append(enriched)

    logger.info(
        "Travel enrichment kept %d of %d candidate(s) using a %dx%d matrix",
        len(feasible),
        len(candidates),
        len(locations),
        len(locations),
    )
    return feasible


def _walk(
    candidate: Candidate,
    start_location: Location,
    start_time: float,
    matrix: DistanceMatrix,
    index: Dict[str, int],
) -> Tuple[EnrichedCandidate, bool]:
    prev_idx = index[start_location.key]
    current_time = start_time
    ok = True
    items: List[EnrichedItem] = []

    for item in candidate.items:
        venue = item.venue
        curr_idx = index[venue.location.key]
        leg = _leg(matrix, prev_idx, curr_idx)
        if leg is None:
            # unroutable pair
            ok = False
            distance_km, travel_minutes = 0.0, 0
        else:
            distance_km, travel_minutes = leg

        current_time += travel_minutes / 60
        activity_start = current_time
        activity_end = activity_start + (venue.duration or 0) / 60

        opens = venue.available_time_start if venue.available_time_start is not None else 0
        closes = venue.available_time_end if venue.available_time_end is not None else 24
        if activity_start < opens or activity_end > closes:
            ok = False
            logger.debug(
                "%s %s does not fit: %.4f-%.4f outside %.2f-%.2f",
                item.category.value,
                venue.id or venue.name,
                activity_start,
                activity_end,
                opens,
                closes,
            )

        current_time = activity_end
        prev_idx = curr_idx
        items.append(
            EnrichedItem(
                category=item.category,
                venue=venue,
                distance_km=distance_km,
                travel_time_minutes=travel_minutes,
            )
        )

    return EnrichedCandidate(items=items, total_cost=candidate.total_cost), ok


def _leg(matrix: DistanceMatrix, frm: int, to: int) -> Optional[Tuple[float, int]]:
    distance = matrix.distances[frm][to]
    duration = matrix.durations[frm][to]
    if distance is None or duration is None:
        return None
    return round(distance / 1000, 2), math.ceil(duration / 60)
