from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from outing_planner.config import EmptySlotPolicy


class Category(str, Enum):
    DINING = "dining"
    MOVIE = "movie"
    EVENT = "event"
    ACTIVITY = "activity"
    PLAY = "play"

    @classmethod
    def parse(cls, raw: str) -> "Category":
        """Accept both the singular tag and the plural collection name ("dinings")."""
        value = (raw or "").strip().lower()
        if value in _PLURALS:
            return _PLURALS[value]
        return cls(value)


_PLURALS = {
    "dinings": Category.DINING,
    "movies": Category.MOVIE,
    "events": Category.EVENT,
    "activities": Category.ACTIVITY,
    "plays": Category.PLAY,
}


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ------- Venue models -------
class Location(BaseModel):
    lat: float
    lng: float

    @property
    def key(self) -> str:
        return f"{self.lat},{self.lng}"


class Venue(_CamelModel):
    # category-specific attributes (cuisines, genre, tags, parking, ...) ride along untouched
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "_id"))
    name: Optional[str] = None
    location: Location
    price_per_person: Optional[float] = Field(default=None, alias="pricePerPerson")
    duration: Optional[float] = None  # minutes
    available_time_start: Optional[float] = Field(default=None, alias="availableTimeStart")
    available_time_end: Optional[float] = Field(default=None, alias="availableTimeEnd")
    min_people: Optional[int] = Field(default=None, alias="minPeople")
    max_people: Optional[int] = Field(default=None, alias="maxPeople")
    rating: Optional[float] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if value is not None else None


@dataclass
class DistanceMatrix:
    """Pairwise travel table indexed by position in the requested location list.

    ``distances`` are meters and ``durations`` seconds; an entry is ``None``
    when the routing engine found no route between the pair.
    """

    success: bool
    distances: List[List[Optional[float]]] = field(default_factory=list)
    durations: List[List[Optional[float]]] = field(default_factory=list)
    error: Optional[str] = None


class Slot(BaseModel):
    category: Category
    pool: List[Venue] = Field(default_factory=list)


# ------- Pipeline models -------
class CandidateItem(_CamelModel):
    category: Category
    venue: Venue


class EnrichedItem(CandidateItem):
    distance_km: float = Field(..., alias="distanceKm")
    travel_time_minutes: int = Field(..., alias="travelTimeMinutes")


class Candidate(_CamelModel):
    items: List[CandidateItem]
    total_cost: float = Field(..., alias="totalCost")


class EnrichedCandidate(_CamelModel):
    items: List[EnrichedItem]
    total_cost: float = Field(..., alias="totalCost")


class ScoredCandidate(_CamelModel):
    candidate: EnrichedCandidate
    score: int = Field(..., ge=0, le=100)


# ------- Request models -------
class DiningFilter(_CamelModel):
    type: List[str] = Field(default_factory=list)
    cuisines: List[str] = Field(default_factory=list)
    alcohol: Optional[bool] = None


class VenueTypeFilter(_CamelModel):
    type: List[str] = Field(default_factory=list)
    venue: List[str] = Field(default_factory=list)


class PlayFilter(VenueTypeFilter):
    intensity: List[str] = Field(default_factory=list)


class MovieFilter(_CamelModel):
    genre: List[str] = Field(default_factory=list)
    language: List[str] = Field(default_factory=list)
    format: List[str] = Field(default_factory=list)
    cast: List[str] = Field(default_factory=list)


class ItineraryRequest(_CamelModel):
    # mandatory
    start_time: float = Field(..., alias="startTime", ge=0, le=24)
    budget: float = Field(..., gt=0)
    number_of_people: int = Field(..., alias="numberOfPeople", ge=1)
    start_location: Location = Field(..., alias="startLocation")

    # optional
    end_time: Optional[float] = Field(default=None, alias="endTime")
    end_location: Optional[Location] = Field(default=None, alias="endLocation")
    extra_info: Optional[str] = Field(default=None, alias="extraInfo")
    parking_accessible: Optional[bool] = Field(default=None, alias="parkingAccessible")
    crowd_tolerance: Optional[str] = Field(default=None, alias="crowdTolerance")
    travel_tolerance: Optional[float] = Field(default=None, alias="travelTolerance")
    time_gap_between_things: Optional[float] = Field(default=None, alias="timeGapBetweenThings")
    minimum_rating: Optional[float] = Field(default=None, alias="minimumRating")

    # type-specific filters
    dining: Optional[DiningFilter] = None
    event: Optional[VenueTypeFilter] = None
    activity: Optional[VenueTypeFilter] = None
    play: Optional[PlayFilter] = None
    movie: Optional[MovieFilter] = None


class PlanItineraryRequest(ItineraryRequest):
    """API payload: the itinerary request plus slot order and the venue pools."""

    preferred_types: List[Dict[str, Dict[str, Any]]] = Field(..., alias="preferredTypes", min_length=1)
    pools: Dict[str, List[Venue]] = Field(default_factory=dict)
    include_itineraries: bool = Field(default=False, alias="includeItineraries")
    empty_slot_policy: Optional[EmptySlotPolicy] = Field(default=None, alias="emptySlotPolicy")

    @field_validator("preferred_types")
    @classmethod
    def _single_key_entries(cls, value: List[Dict[str, Dict[str, Any]]]) -> List[Dict[str, Dict[str, Any]]]:
        for entry in value:
            if len(entry) != 1:
                raise ValueError("each preferredTypes entry must name exactly one category")
        return value

    def constraints(self) -> ItineraryRequest:
        """The request as the scoring oracle sees it, without pools or API switches."""
        return ItineraryRequest.model_validate(
            self.model_dump(
                by_alias=True,
                exclude={"preferred_types", "pools", "include_itineraries", "empty_slot_policy"},
            )
        )


# ------- Response models -------
class PlanItineraryResponse(_CamelModel):
    success: bool = True
    scores: List[int] = Field(default_factory=list)
    total_combinations: int = Field(default=0, alias="totalCombinations")
    itineraries: Optional[List[ScoredCandidate]] = None
