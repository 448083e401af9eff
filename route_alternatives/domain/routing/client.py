from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

import httpx

from .exceptions import (
    BadRequestError,
    NoRouteFoundError,
    RateLimitedError,
    RoutingServiceError,
    SnapFailure,
)
from .models import Coordinate, ManeuverStep, RouteCandidate, SnappedPoint

logger = logging.getLogger(__name__)


class OSRMClient:
    """Thin async wrapper over the OSRM ``nearest`` and ``route`` services."""

    def __init__(
        self,
        base_url: str,
        *,
        profile: str = "driving",
        snap_timeout: float = 4.0,
        route_timeout: float = 12.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.profile = profile
        self._snap_timeout = httpx.Timeout(snap_timeout, connect=min(snap_timeout, 2.0))
        self._route_timeout = httpx.Timeout(route_timeout, connect=min(route_timeout, 4.0))
        self._transport = transport

    def _client(self, timeout: httpx.Timeout) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    async def nearest(self, point: Coordinate) -> SnappedPoint:
        url = f"{self.base_url}/nearest/v1/{self.profile}/{point.longitude},{point.latitude}"
        try:
            async with self._client(self._snap_timeout) as client:
                response = await client.get(url, params={"number": 1})
        except httpx.HTTPError as exc:
            raise SnapFailure(f"nearest request failed: {exc!r}") from exc

        if response.status_code != 200:
            raise SnapFailure(f"nearest returned HTTP {response.status_code}")

        try:
            payload = response.json()
            if payload.get("code") != "Ok":
                raise SnapFailure(f"nearest returned code {payload.get('code')!r}")
            waypoint = (payload.get("waypoints") or [])[0]
            lon, lat = waypoint["location"][:2]
            hint = waypoint.get("hint") or None
            return SnappedPoint(Coordinate(float(lat), float(lon)), hint)
        except SnapFailure:
            raise
        except (ValueError, TypeError, KeyError, IndexError, AttributeError) as exc:
            raise SnapFailure(f"malformed nearest payload: {exc!r}") from exc

    async def route(
        self,
        points: Sequence[Coordinate],
        *,
        hints: Optional[Sequence[Optional[str]]] = None,
        alternatives: bool = False,
    ) -> List[RouteCandidate]:
        coord_pairs = ";".join(f"{p.longitude},{p.latitude}" for p in points)
        url = f"{self.base_url}/route/v1/{self.profile}/{coord_pairs}"
        params = {
            "alternatives": "true" if alternatives else "false",
            "steps": "true",
            "annotations": "distance,duration",
            "geometries": "geojson",
            "overview": "full",
        }
        if hints and len(hints) == len(points) and any(hints):
            params["hints"] = ";".join(hint or "" for hint in hints)

        try:
            async with self._client(self._route_timeout) as client:
                response = await client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise RoutingServiceError("Сервис маршрутизации не ответил вовремя", status_code=504) from exc
        except httpx.HTTPError as exc:
            logger.warning("OSRM route request failed: %s", exc)
            raise RoutingServiceError("Сервис маршрутизации недоступен") from exc

        if response.status_code == 429:
            raise RateLimitedError()
        if response.status_code == 400:
            raise BadRequestError()
        if response.status_code != 200:
            raise RoutingServiceError(
                f"Сервис маршрутизации вернул ошибку {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
            routes = payload.get("routes") or []
            if payload.get("code") != "Ok" and not routes:
                raise NoRouteFoundError(payload.get("message") or None)
            return [parse_route(route) for route in routes]
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            raise RoutingServiceError("Сервис маршрутизации вернул некорректный ответ") from exc


def _coordinate(value: Any) -> Coordinate:
    lon, lat = value[:2]
    return Coordinate(float(lat), float(lon))


def parse_route(route: dict) -> RouteCandidate:
    coordinates = route.get("geometry", {}).get("coordinates", [])
    geometry = [_coordinate(pair) for pair in coordinates]

    legs: List[List[ManeuverStep]] = []
    for leg in route.get("legs") or []:
        steps: List[ManeuverStep] = []
        for step in leg.get("steps") or []:
            maneuver = step.get("maneuver") or {}
            location = maneuver.get("location")
            if not location:
                continue
            steps.append(
                ManeuverStep(
                    type=maneuver.get("type") or "",
                    modifier=maneuver.get("modifier"),
                    location=_coordinate(location),
                    street_name=step.get("name") or step.get("ref") or "",
                    distance=float(step.get("distance") or 0.0),
                    duration=float(step.get("duration") or 0.0),
                )
            )
        legs.append(steps)

    return RouteCandidate(
        geometry=geometry,
        distance=float(route.get("distance") or 0.0),
        duration=float(route.get("duration") or 0.0),
        legs=legs,
    )
