from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)

    def rounded(self, digits: int = 5) -> Tuple[float, float]:
        return (round(self.latitude, digits), round(self.longitude, digits))


@dataclass(frozen=True)
class SnappedPoint:
    coordinate: Coordinate
    hint: Optional[str] = None

    @property
    def snapped(self) -> bool:
        return self.hint is not None


@dataclass(frozen=True)
class ManeuverStep:
    type: str
    modifier: Optional[str]
    location: Coordinate
    street_name: str
    distance: float
    duration: float


@dataclass
class RouteCandidate:
    """A route as returned by the routing service, before any display mapping."""

    geometry: List[Coordinate]
    distance: float
    duration: float
    legs: List[List[ManeuverStep]] = field(default_factory=list)

    @property
    def steps(self) -> List[ManeuverStep]:
        return [step for leg in self.legs for step in leg]


@dataclass(frozen=True)
class TurnNode:
    coordinate: Coordinate
    street_name: str
    maneuver: str
    maneuver_type: str
    modifier: Optional[str]
    distance: float
    duration: float
    route_index: int


@dataclass(frozen=True)
class RouteView:
    id: str
    index: int
    coordinates: Tuple[Coordinate, ...]
    distance: float
    duration: float
    color: str
    is_primary: bool
    turns: Tuple[TurnNode, ...] = ()

    @property
    def turn_count(self) -> int:
        return len(self.turns)


@dataclass(frozen=True)
class RouteMarker:
    coordinate: Coordinate
    distance_covered: float
    distance_remaining: float
    time_remaining: Optional[float] = None
