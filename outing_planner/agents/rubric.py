"""Evaluation rubric for the scoring oracle.

Building the rubric is split in two steps: ``build_rubric`` decides which
constraints are active and returns clause objects, ``render_rubric`` turns
them into the system prompt text.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from outing_planner.schemas import DiningFilter, ItineraryRequest, MovieFilter, PlayFilter, VenueTypeFilter

ALL_ASPECTS = "all_aspects"


@dataclass(frozen=True)
class RubricClause:
    key: str
    params: Tuple[Tuple[str, Any], ...] = ()

    def param(self, name: str, default: Any = None) -> Any:
        return dict(self.params).get(name, default)


def build_rubric(request: ItineraryRequest) -> List[RubricClause]:
    clauses: List[RubricClause] = []

    if request.budget:
        clauses.append(RubricClause("budget", (("budget", request.budget), ("people", request.number_of_people))))
    if request.minimum_rating:
        clauses.append(RubricClause("minimum_rating", (("rating", request.minimum_rating),)))
    if request.travel_tolerance:
        clauses.append(RubricClause("travel_tolerance", (("minutes", request.travel_tolerance),)))
    if request.time_gap_between_things:
        clauses.append(RubricClause("time_gap", (("minutes", request.time_gap_between_things),)))
    if request.crowd_tolerance:
        clauses.append(RubricClause("crowd_tolerance", (("level", request.crowd_tolerance),)))
    if request.parking_accessible:
        clauses.append(RubricClause("parking"))
    if request.extra_info:
        clauses.append(RubricClause("extra_info", (("text", request.extra_info),)))

    for clause in (
        _dining_clause(request.dining),
        _venue_type_clause("event", request.event),
        _venue_type_clause("activity", request.activity),
        _play_clause(request.play),
        _movie_clause(request.movie),
    ):
        if clause is not None:
            clauses.append(clause)

    return clauses or [RubricClause(ALL_ASPECTS)]


def _filter_clause(key: str, filters: List[Tuple[str, Any]]) -> Optional[RubricClause]:
    active = tuple((name, value) for name, value in filters if value not in (None, [], ""))
    return RubricClause(key, active) if active else None


def _dining_clause(dining: Optional[DiningFilter]) -> Optional[RubricClause]:
    if dining is None:
        return None
    return _filter_clause(
        "dining",
        [("type", dining.type), ("cuisines", dining.cuisines), ("alcohol", dining.alcohol)],
    )


def _venue_type_clause(key: str, filters: Optional[VenueTypeFilter]) -> Optional[RubricClause]:
    if filters is None:
        return None
    return _filter_clause(key, [("type", filters.type), ("venue", filters.venue)])


def _play_clause(play: Optional[PlayFilter]) -> Optional[RubricClause]:
    if play is None:
        return None
    return _filter_clause(
        "play",
        [("type", play.type), ("venue", play.venue), ("intensity", play.intensity)],
    )


def _movie_clause(movie: Optional[MovieFilter]) -> Optional[RubricClause]:
    if movie is None:
        return None
    return _filter_clause(
        "movie",
        [
            ("genre", movie.genre),
            ("language", movie.language),
            ("format", movie.format),
            ("cast", movie.cast),
        ],
    )


# ------- rendering -------
_TEMPLATES = {
    "budget": "budget (₹{budget} for {people} people)",
    "minimum_rating": "minimum rating ({rating}+)",
    "travel_tolerance": "travel time limit (max {minutes} min per leg, check distanceKm and travelTimeMinutes)",
    "time_gap": "preferred gap between activities ({minutes} min)",
    "crowd_tolerance": "crowd tolerance ({level})",
    "parking": "parking required",
    "extra_info": 'user preferences: "{text}" (match with tags field)',
}

_FILTER_CLAUSES = {"dining", "event", "activity", "play", "movie"}


def _fmt(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        # whole numbers without ".0", everything else at full precision
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, (list, tuple)):
        return ",".join(_fmt(v) for v in value)
    return str(value)


def render_clause(clause: RubricClause) -> str:
    if clause.key in _FILTER_CLAUSES:
        filters = "; ".join(f"{name}: {_fmt(value)}" for name, value in clause.params)
        return f"{clause.key} ({filters})"
    template = _TEMPLATES[clause.key]
    return template.format(**{name: _fmt(value) for name, value in clause.params})


def render_rubric(clauses: List[RubricClause]) -> str:
    active = [clause for clause in clauses if clause.key != ALL_ASPECTS]
    if active:
        constraints_text = f"Evaluate based on: {', '.join(render_clause(c) for c in active)}."
    else:
        constraints_text = "Evaluate all aspects."
    return (
        f"You are a scoring engine. {constraints_text} "
        "Note: Each item has distanceKm and travelTimeMinutes from previous location. "
        "Return ONLY a single integer between 0 and 100. No explanation. No text."
    )
