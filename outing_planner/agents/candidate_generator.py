"""Candidate generation: every budget-feasible venue sequence for the requested slots."""
from __future__ import annotations

from typing import List, Sequence

from outing_planner.config import EmptySlotPolicy
from outing_planner.log import get_logger
from outing_planner.schemas import Candidate, CandidateItem, Slot

logger = get_logger(__name__)


def generate_candidates(
    slots: Sequence[Slot],
    budget: float,
    number_of_people: int,
    *,
    empty_slot_policy: EmptySlotPolicy = EmptySlotPolicy.DROP,
) -> List[Candidate]:
    """Expand ordered slots into every venue sequence whose total cost fits the budget.

    Slot ``i``'s choice always lands at position ``i`` of the sequence (after
    skipped slots are removed). Pool sizes are not bounded here; the query
    layer that supplies the pools is expected to cap them.

    A slot with an empty pool is either skipped (``DROP``, the itinerary simply
    gets shorter) or makes the whole request produce nothing (``REJECT``).
    """
    if not slots:
        return []

    empty = [idx for idx, slot in enumerate(slots) if not slot.pool]
    if empty:
        labels = ", ".join(f"#{idx} {slots[idx].category.value}" for idx in empty)
        if empty_slot_policy is EmptySlotPolicy.REJECT:
            logger.warning("Empty venue pool for slot(s) %s; rejecting itinerary generation", labels)
            return []
        logger.warning("Empty venue pool for slot(s) %s; generating itineraries without them", labels)

    active = [slot for slot in slots if slot.pool]
    if not active:
        return []

    # iterative cartesian product, slot order is axis order
    sequences: List[List[CandidateItem]] = [[]]
    for slot in active:
        sequences = [
            prefix + [CandidateItem(category=slot.category, venue=venue)]
            for prefix in sequences
            for venue in slot.pool
        ]

    candidates: List[Candidate] = []
    for items in sequences:
        total_cost = sum((item.venue.price_per_person or 0.0) * number_of_people for item in items)
        if total_cost <= budget:
            candidates.append(Candidate(items=items, total_cost=total_cost))

    logger.info(
        "Generated %d combination(s) across %d slot(s); %d within budget %.2f",
        len(sequences),
        len(active),
        len(candidates),
        budget,
    )
    return candidates
