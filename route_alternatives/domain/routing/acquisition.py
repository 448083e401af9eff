"""Multi-stage acquisition of diverse route candidates.

Stages are consumed in order and their candidates merged through the
signature set until enough unique routes are collected. A stage is any object
with a ``name`` and an async-generator ``candidates`` method, so the chain can
be extended or reordered without touching the fetcher.
"""

from __future__ import annotations

import logging
from contextlib import aclosing
from typing import AsyncIterator, List, Optional, Protocol, Sequence, Tuple

from .client import OSRMClient
from .constants import (
    MAX_ROUTES,
    VIA_DIAGONAL_DIRECTIONS,
    VIA_PRIMARY_DIRECTIONS,
    VIA_SPAN_FACTOR,
    VIA_WIDE_FACTOR,
)
from .exceptions import NoRouteFoundError, RoutePlanningError
from .models import Coordinate, RouteCandidate, SnappedPoint
from .signature import SignatureSet

logger = logging.getLogger(__name__)


class CandidateStage(Protocol):
    name: str

    def candidates(
        self, client: OSRMClient, start: SnappedPoint, end: SnappedPoint
    ) -> AsyncIterator[RouteCandidate]:
        ...


def via_points(start: Coordinate, end: Coordinate, offset_cap: float) -> List[Coordinate]:
    mid_lat = (start.latitude + end.latitude) / 2
    mid_lon = (start.longitude + end.longitude) / 2
    span = max(abs(end.latitude - start.latitude), abs(end.longitude - start.longitude))
    offset = min(offset_cap, VIA_SPAN_FACTOR * span)
    if offset <= 0:
        return []

    offsets: List[Tuple[float, float]] = []
    offsets.extend((d_lat * offset, d_lon * offset) for d_lat, d_lon in VIA_PRIMARY_DIRECTIONS)
    offsets.extend((d_lat * offset, d_lon * offset) for d_lat, d_lon in VIA_DIAGONAL_DIRECTIONS)
    wide = offset * VIA_WIDE_FACTOR
    offsets.extend((d_lat * wide, d_lon * wide) for d_lat, d_lon in VIA_PRIMARY_DIRECTIONS)

    points: List[Coordinate] = []
    seen = set()
    for d_lat, d_lon in offsets:
        point = Coordinate(mid_lat + d_lat, mid_lon + d_lon)
        key = point.rounded(7)
        if key in seen:
            continue
        seen.add(key)
        points.append(point)
    return points


def displace_endpoints(start: Coordinate, end: Coordinate, delta: float) -> Tuple[Coordinate, Coordinate]:
    """Push both endpoints ``delta`` degrees away from each other on each axis."""

    lat_sign = 1.0 if end.latitude >= start.latitude else -1.0
    lon_sign = 1.0 if end.longitude >= start.longitude else -1.0
    return (
        Coordinate(start.latitude - delta * lat_sign, start.longitude - delta * lon_sign),
        Coordinate(end.latitude + delta * lat_sign, end.longitude + delta * lon_sign),
    )


class DirectAlternativesStage:
    name = "direct"

    async def candidates(
        self, client: OSRMClient, start: SnappedPoint, end: SnappedPoint
    ) -> AsyncIterator[RouteCandidate]:
        routes = await client.route(
            [start.coordinate, end.coordinate],
            hints=[start.hint, end.hint],
            alternatives=True,
        )
        logger.info("Routing service returned %s organic alternatives", len(routes))
        for route in routes:
            yield route


class ViaDiversificationStage:
    """Force distinct paths by routing through points around the midpoint.

    With ``displacement`` set, both endpoints are first pushed outward so the
    router is not pinned to the same access roads near the true endpoints.
    """

    def __init__(self, offset_cap: float, displacement: float = 0.0, name: Optional[str] = None) -> None:
        self.offset_cap = offset_cap
        self.displacement = displacement
        self.name = name or ("displaced_via" if displacement else "via")

    async def candidates(
        self, client: OSRMClient, start: SnappedPoint, end: SnappedPoint
    ) -> AsyncIterator[RouteCandidate]:
        if self.displacement:
            origin, destination = displace_endpoints(start.coordinate, end.coordinate, self.displacement)
            start_hint = end_hint = None
        else:
            origin, destination = start.coordinate, end.coordinate
            start_hint, end_hint = start.hint, end.hint

        for via in via_points(origin, destination, self.offset_cap):
            try:
                routes = await client.route(
                    [origin, via, destination],
                    hints=[start_hint, None, end_hint],
                    alternatives=False,
                )
            except RoutePlanningError as exc:
                logger.debug("%s candidate via %s skipped: %s", self.name, via.rounded(), exc.message)
                continue
            if routes:
                yield routes[0]


def default_stages(offset_cap: float, displacement: float) -> List[CandidateStage]:
    return [
        DirectAlternativesStage(),
        ViaDiversificationStage(offset_cap),
        ViaDiversificationStage(offset_cap, displacement=displacement),
    ]


class RouteFetcher:
    def __init__(
        self,
        client: OSRMClient,
        stages: Sequence[CandidateStage],
        *,
        limit: int = MAX_ROUTES,
    ) -> None:
        self.client = client
        self.stages = list(stages)
        self.limit = limit

    async def fetch(self, start: SnappedPoint, end: SnappedPoint) -> List[RouteCandidate]:
        accepted: List[RouteCandidate] = []
        signatures = SignatureSet()
        first_error: Optional[RoutePlanningError] = None

        for stage in self.stages:
            if len(accepted) >= self.limit:
                break
            before = len(accepted)
            try:
                async with aclosing(stage.candidates(self.client, start, end)) as candidates:
                    async for candidate in candidates:
                        if not candidate.geometry or not signatures.add(candidate):
                            continue
                        accepted.append(candidate)
                        if len(accepted) >= self.limit:
                            break
            except RoutePlanningError as exc:
                logger.warning("Stage %s failed: %s", stage.name, exc.message)
                if first_error is None:
                    first_error = exc
                continue
            logger.info("Stage %s accepted %s unique routes", stage.name, len(accepted) - before)

        if not accepted:
            if first_error is not None:
                raise NoRouteFoundError(first_error.message, cause=first_error)
            raise NoRouteFoundError()

        return accepted[: self.limit]
