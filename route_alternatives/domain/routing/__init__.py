"""Route acquisition, display state and summary domain logic."""

from .acquisition import RouteFetcher, default_stages
from .exceptions import (
    BadRequestError,
    NoRouteFoundError,
    RateLimitedError,
    RoutePlanningError,
    RoutingServiceError,
    SummaryFailure,
)
from .models import Coordinate, RouteCandidate, RouteMarker, RouteView, SnappedPoint, TurnNode
from .selection import SelectionState

__all__ = [
    "BadRequestError",
    "Coordinate",
    "NoRouteFoundError",
    "RateLimitedError",
    "RouteCandidate",
    "RouteFetcher",
    "RouteMarker",
    "RoutePlanningError",
    "RouteView",
    "RoutingServiceError",
    "SelectionState",
    "SnappedPoint",
    "SummaryFailure",
    "TurnNode",
    "default_stages",
]
