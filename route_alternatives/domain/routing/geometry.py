"""Great-circle helpers and checkpoint sampling along route geometry.

Markers are placed at fixed cumulative distances measured with the haversine
formula. Inside a segment the position is interpolated linearly in lat/lon,
which is a planar approximation: at ~100 m spacing the error against a true
geodesic interpolation is far below GPS noise.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import List, Sequence

from .constants import DEFAULT_MARKER_SPACING_M, DEFAULT_MAX_MARKERS, EARTH_RADIUS_M
from .models import Coordinate, RouteMarker

_LENGTH_EPSILON_M = 1e-6


def haversine_m(a: Coordinate, b: Coordinate) -> float:
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)
    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_M * c


def cumulative_distances(points: Sequence[Coordinate]) -> List[float]:
    cumulative = [0.0]
    total = 0.0
    for previous, current in zip(points, points[1:]):
        total += haversine_m(previous, current)
        cumulative.append(total)
    return cumulative


def interpolate(a: Coordinate, b: Coordinate, fraction: float) -> Coordinate:
    return Coordinate(
        latitude=a.latitude + (b.latitude - a.latitude) * fraction,
        longitude=a.longitude + (b.longitude - a.longitude) * fraction,
    )


def sample_markers(
    points: Sequence[Coordinate],
    spacing: float = DEFAULT_MARKER_SPACING_M,
    max_markers: int = DEFAULT_MAX_MARKERS,
) -> List[RouteMarker]:
    """Place markers every ``spacing`` metres, strictly before the path end."""

    if len(points) < 2 or spacing <= 0 or max_markers <= 0:
        return []

    cumulative = cumulative_distances(points)
    total = cumulative[-1]
    if total <= 0:
        return []

    markers: List[RouteMarker] = []
    segment = 1
    step = 1
    target = spacing
    while target < total - _LENGTH_EPSILON_M and len(markers) < max_markers:
        while cumulative[segment] < target:
            segment += 1

        start_distance = cumulative[segment - 1]
        segment_length = cumulative[segment] - start_distance
        fraction = (target - start_distance) / segment_length if segment_length > 0 else 0.0

        markers.append(
            RouteMarker(
                coordinate=interpolate(points[segment - 1], points[segment], fraction),
                distance_covered=target,
                distance_remaining=total - target,
            )
        )
        step += 1
        target = spacing * step

    return markers


def build_route_markers(
    points: Sequence[Coordinate],
    total_duration: float,
    spacing: float = DEFAULT_MARKER_SPACING_M,
    max_markers: int = DEFAULT_MAX_MARKERS,
) -> List[RouteMarker]:
    """Sample markers and scale the remaining time from the route duration."""

    markers = sample_markers(points, spacing, max_markers)
    if not markers:
        return []

    total = markers[0].distance_covered + markers[0].distance_remaining
    return [
        replace(
            marker,
            time_remaining=max(total_duration, 0.0) * marker.distance_remaining / total,
        )
        for marker in markers
    ]
