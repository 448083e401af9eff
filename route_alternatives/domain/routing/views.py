from __future__ import annotations

import hashlib
from typing import List, Optional, Sequence

from .constants import (
    MANEUVER_LABELS,
    MAX_ROUTES,
    MODIFIER_LABELS,
    ROUTE_COLORS,
    SKIPPED_MANEUVER_TYPES,
    UNNAMED_STREET,
)
from .models import ManeuverStep, RouteCandidate, RouteView, TurnNode
from .signature import route_signature


def primary_index(durations: Sequence[float]) -> Optional[int]:
    """Index of the fastest route; the lowest index wins an exact tie."""

    if not durations:
        return None
    return min(range(len(durations)), key=lambda idx: (durations[idx], idx))


def maneuver_label(maneuver_type: str, modifier: Optional[str]) -> str:
    base = MANEUVER_LABELS.get(maneuver_type, maneuver_type.capitalize() or "Манёвр")
    direction = MODIFIER_LABELS.get(modifier or "")
    if direction and maneuver_type in ("turn", "continue", "fork", "end of road", "merge", "new name"):
        return f"{base} {direction}"
    return base


def build_turns(steps: Sequence[ManeuverStep], route_index: int) -> List[TurnNode]:
    turns: List[TurnNode] = []
    for step in steps:
        if step.type in SKIPPED_MANEUVER_TYPES:
            continue
        turns.append(
            TurnNode(
                coordinate=step.location,
                street_name=step.street_name.strip() or UNNAMED_STREET,
                maneuver=maneuver_label(step.type, step.modifier),
                maneuver_type=step.type,
                modifier=step.modifier,
                distance=step.distance,
                duration=step.duration,
                route_index=route_index,
            )
        )
    return turns


def route_id(candidate: RouteCandidate) -> str:
    return hashlib.sha1(route_signature(candidate).encode()).hexdigest()[:12]


def build_route_views(candidates: Sequence[RouteCandidate]) -> List[RouteView]:
    """Map fetched candidates to display views in arrival order."""

    kept = list(candidates)[:MAX_ROUTES]
    fastest = primary_index([candidate.duration for candidate in kept])

    return [
        RouteView(
            id=route_id(candidate),
            index=idx,
            coordinates=tuple(candidate.geometry),
            distance=candidate.distance,
            duration=candidate.duration,
            color=ROUTE_COLORS[idx % len(ROUTE_COLORS)],
            is_primary=idx == fastest,
            turns=tuple(build_turns(candidate.steps, idx)),
        )
        for idx, candidate in enumerate(kept)
    ]
