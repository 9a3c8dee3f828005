import asyncio
from typing import Dict, List, Tuple

import pytest

from outing_planner.agents.travel_enricher import collect_locations, enrich_candidates
from outing_planner.schemas import Candidate, CandidateItem, Category, DistanceMatrix, Location, Venue


START = Location(lat=12.9716, lng=77.5946)
D1_LOC = {"lat": 12.9750, "lng": 77.6050}
M1_LOC = {"lat": 12.9800, "lng": 77.6400}


class FakeMatrixProvider:
    """Serves a matrix from a {(from_key, to_key): (meters, seconds)} table."""

    def __init__(self, legs: Dict[Tuple[str, str], Tuple[float, float]], *, success: bool = True):
        self.legs = legs
        self.success = success
        self.calls: List[List[Location]] = []

    async def get_matrix(self, locations):
        self.calls.append(list(locations))
        if not self.success:
            return DistanceMatrix(success=False, error="boom")
        size = len(locations)
        distances = [[0.0] * size for _ in range(size)]
        durations = [[0.0] * size for _ in range(size)]
        for i, a in enumerate(locations):
            for j, b in enumerate(locations):
                if (a.key, b.key) in self.legs:
                    distances[i][j], durations[i][j] = self.legs[(a.key, b.key)]
        return DistanceMatrix(success=True, distances=distances, durations=durations)


def _venue(venue_id, location, *, duration=None, start=None, end=None) -> Venue:
    data = {"_id": venue_id, "location": location, "pricePerPerson": 100}
    if duration is not None:
        data["duration"] = duration
    if start is not None:
        data["availableTimeStart"] = start
    if end is not None:
        data["availableTimeEnd"] = end
    return Venue.model_validate(data)


def _candidate(*items: Tuple[Category, Venue]) -> Candidate:
    return Candidate(
        items=[CandidateItem(category=cat, venue=venue) for cat, venue in items],
        total_cost=600,
    )


def _key(loc: dict) -> str:
    return Location(**loc).key


def _scenario_provider() -> FakeMatrixProvider:
    return FakeMatrixProvider(
        {
            (START.key, _key(D1_LOC)): (2346.0, 600.0),  # 10 min
            (_key(D1_LOC), _key(M1_LOC)): (4120.0, 900.0),  # 15 min
        }
    )


def test_dinner_and_movie_scenario_is_retained_and_annotated():
    d1 = _venue("D1", D1_LOC, duration=90, start=0, end=24)
    m1 = _venue("M1", M1_LOC, duration=120, start=19, end=23)
    provider = _scenario_provider()

    result = asyncio.run(
        enrich_candidates([_candidate((Category.DINING, d1), (Category.MOVIE, m1))], START, 18.0, provider)
    )

    assert len(result) == 1
    dining, movie = result[0].items
    assert dining.travel_time_minutes == 10
    assert dining.distance_km == 2.35
    assert movie.travel_time_minutes == 15
    assert movie.distance_km == 4.12
    assert result[0].total_cost == 600
    assert len(provider.calls) == 1


def test_dinner_and_movie_scenario_is_dropped_when_movie_closes_early():
    d1 = _venue("D1", D1_LOC, duration=90, start=0, end=24)
    m1 = _venue("M1", M1_LOC, duration=120, start=19, end=21)

    result = asyncio.run(
        enrich_candidates(
            [_candidate((Category.DINING, d1), (Category.MOVIE, m1))], START, 18.0, _scenario_provider()
        )
    )

    # movie would end at ~21.92
    assert result == []


def test_arriving_before_opening_rejects_the_whole_candidate():
    early = _venue("D1", D1_LOC, duration=60, start=20, end=24)
    fine = _venue("M1", M1_LOC, duration=60)

    result = asyncio.run(
        enrich_candidates(
            [_candidate((Category.DINING, early), (Category.MOVIE, fine))], START, 18.0, _scenario_provider()
        )
    )

    assert result == []


def test_travel_time_rounds_up_and_distance_rounds_to_two_decimals():
    venue = _venue("V", D1_LOC)
    provider = FakeMatrixProvider({(START.key, _key(D1_LOC)): (1234.567, 601.0)})

    result = asyncio.run(enrich_candidates([_candidate((Category.EVENT, venue))], START, 10.0, provider))

    item = result[0].items[0]
    assert item.travel_time_minutes == 11
    assert item.distance_km == pytest.approx(1.23)


def test_missing_venue_fields_default_to_open_all_day():
    venue = _venue("V", D1_LOC)
    provider = FakeMatrixProvider({(START.key, _key(D1_LOC)): (100.0, 60.0)})

    result = asyncio.run(enrich_candidates([_candidate((Category.PLAY, venue))], START, 23.9, provider))

    assert len(result) == 1


def test_locations_are_deduplicated_across_candidates():
    d1 = _venue("D1", D1_LOC, duration=30)
    d2 = _venue("D2", D1_LOC, duration=30)  # same coordinates as D1
    m1 = _venue("M1", M1_LOC, duration=30)
    at_start = _venue("S", {"lat": START.lat, "lng": START.lng}, duration=30)
    candidates = [
        _candidate((Category.DINING, d1), (Category.MOVIE, m1)),
        _candidate((Category.DINING, d2), (Category.MOVIE, m1)),
        _candidate((Category.ACTIVITY, at_start), (Category.MOVIE, m1)),
    ]
    provider = _scenario_provider()

    locations = collect_locations(candidates, START)
    asyncio.run(enrich_candidates(candidates, START, 12.0, provider))

    assert [loc.key for loc in locations] == [START.key, _key(D1_LOC), _key(M1_LOC)]
    assert len(provider.calls) == 1
    assert len(provider.calls[0]) == 3


def test_provider_failure_returns_empty_list():
    venue = _venue("V", D1_LOC)
    provider = FakeMatrixProvider({}, success=False)

    assert asyncio.run(enrich_candidates([_candidate((Category.DINING, venue))], START, 18.0, provider)) == []


def test_provider_exception_returns_empty_list():
    class ExplodingProvider:
        async def get_matrix(self, locations):
            raise ConnectionError("network down")

    venue = _venue("V", D1_LOC)

    assert asyncio.run(enrich_candidates([_candidate((Category.DINING, venue))], START, 18.0, ExplodingProvider())) == []


def test_no_candidates_skips_the_matrix_call():
    provider = _scenario_provider()

    assert asyncio.run(enrich_candidates([], START, 18.0, provider)) == []
    assert provider.calls == []


def test_unroutable_leg_rejects_candidate():
    class NoRouteProvider:
        async def get_matrix(self, locations):
            size = len(locations)
            grid = [[None] * size for _ in range(size)]
            return DistanceMatrix(success=True, distances=grid, durations=grid)

    venue = _venue("V", D1_LOC)

    assert asyncio.run(enrich_candidates([_candidate((Category.DINING, venue))], START, 18.0, NoRouteProvider())) == []


def test_enrichment_does_not_mutate_input_candidates():
    d1 = _venue("D1", D1_LOC, duration=90)
    candidate = _candidate((Category.DINING, d1))
    before = candidate.model_dump()

    enriched = asyncio.run(enrich_candidates([candidate], START, 18.0, _scenario_provider()))

    assert len(enriched) == 1
    assert enriched[0].items[0].distance_km > 0
    assert candidate.model_dump() == before
    assert type(candidate.items[0]) is CandidateItem
