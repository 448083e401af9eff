import os
from types import SimpleNamespace
from typing import Callable, List, Optional, Sequence, Tuple

os.environ.setdefault("OSRM_BASE_URL", "http://osrm.test")
os.environ.setdefault("ANTHROPIC_API_KEY", "")
os.environ.setdefault("OPENAI_API_KEY", "")
os.environ.setdefault("TIMEZONE", "Europe/Moscow")

import pytest

from route_alternatives.domain.routing.models import Coordinate, ManeuverStep, RouteCandidate


def make_step(
    maneuver_type: str,
    modifier: Optional[str] = None,
    *,
    lat: float = 56.3,
    lon: float = 44.0,
    name: str = "",
    distance: float = 120.0,
    duration: float = 15.0,
) -> ManeuverStep:
    return ManeuverStep(
        type=maneuver_type,
        modifier=modifier,
        location=Coordinate(lat, lon),
        street_name=name,
        distance=distance,
        duration=duration,
    )


def make_candidate(
    distance: float,
    duration: float,
    *,
    points: Optional[Sequence[Tuple[float, float]]] = None,
    steps: Optional[Sequence[ManeuverStep]] = None,
) -> RouteCandidate:
    points = points or [(0.0, 0.0), (0.0, 0.5), (0.0, 1.0)]
    return RouteCandidate(
        geometry=[Coordinate(lat, lon) for lat, lon in points],
        distance=distance,
        duration=duration,
        legs=[list(steps or [])],
    )


def osrm_step(
    maneuver_type: str,
    modifier: Optional[str],
    lat: float,
    lon: float,
    name: str = "",
    distance: float = 100.0,
    duration: float = 10.0,
) -> dict:
    maneuver = {"type": maneuver_type, "location": [lon, lat]}
    if modifier:
        maneuver["modifier"] = modifier
    return {"maneuver": maneuver, "name": name, "distance": distance, "duration": duration}


def osrm_route(
    distance: float,
    duration: float,
    coords: Sequence[Tuple[float, float]],
    steps: Optional[List[dict]] = None,
) -> dict:
    return {
        "geometry": {"type": "LineString", "coordinates": [[lon, lat] for lat, lon in coords]},
        "distance": distance,
        "duration": duration,
        "legs": [{"steps": steps or []}],
    }


class ScriptedRoutingClient:
    """Stands in for ``OSRMClient.route`` with scripted answers."""

    def __init__(
        self,
        direct=None,
        via: Optional[Callable[[List[Coordinate]], List[RouteCandidate]]] = None,
    ) -> None:
        self.direct = direct if direct is not None else []
        self.via = via or (lambda points: [])
        self.calls: List[SimpleNamespace] = []

    async def route(self, points, *, hints=None, alternatives=False):
        self.calls.append(SimpleNamespace(points=list(points), hints=hints, alternatives=alternatives))
        if alternatives:
            if isinstance(self.direct, Exception):
                raise self.direct
            return list(self.direct)
        return self.via(list(points))


@pytest.fixture
def scripted_client_factory():
    return ScriptedRoutingClient
