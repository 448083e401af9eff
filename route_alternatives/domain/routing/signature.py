"""Cheap approximate equality for route candidates.

Two candidates with the same rounded metrics, endpoints and vertex count are
treated as the same route even if their interior paths differ.
"""

from __future__ import annotations

from typing import Iterable, List, Set

from .constants import SIGNATURE_PRECISION, SIGNATURE_SEPARATOR
from .models import RouteCandidate


def route_signature(route: RouteCandidate) -> str:
    parts: List[str] = [str(round(route.distance)), str(round(route.duration))]
    if route.geometry:
        first = route.geometry[0].rounded(SIGNATURE_PRECISION)
        last = route.geometry[-1].rounded(SIGNATURE_PRECISION)
        parts.append(f"{first[0]:.{SIGNATURE_PRECISION}f},{first[1]:.{SIGNATURE_PRECISION}f}")
        parts.append(f"{last[0]:.{SIGNATURE_PRECISION}f},{last[1]:.{SIGNATURE_PRECISION}f}")
    else:
        parts.extend(["-", "-"])
    parts.append(str(len(route.geometry)))
    return SIGNATURE_SEPARATOR.join(parts)


class SignatureSet:
    def __init__(self, routes: Iterable[RouteCandidate] = ()) -> None:
        self._seen: Set[str] = set()
        for route in routes:
            self.add(route)

    def __contains__(self, route: RouteCandidate) -> bool:
        return route_signature(route) in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def add(self, route: RouteCandidate) -> bool:
        """Record the route; True when its signature was not seen before."""

        signature = route_signature(route)
        if signature in self._seen:
            return False
        self._seen.add(signature)
        return True
