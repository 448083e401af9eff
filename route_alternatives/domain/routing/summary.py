from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .constants import (
    LEFT_MODIFIER_MARKER,
    MANEUVER_SAMPLE_LIMIT,
    ROUNDABOUT_MARKERS,
    SIGNATURE_SEPARATOR,
)
from .models import RouteView
from .time_phase import resolve_time_band, time_band_label

logger = logging.getLogger(__name__)

UNPARSED_SUMMARY = "Не удалось разобрать ответ модели."

SUMMARY_INSTRUCTION = """Ты — помощник навигатора. Тебе передан JSON с несколькими вариантами маршрута между двумя точками.

Поля:
- context.time_bias — текущее время суток и связанное с ним предпочтение водителя
- context.hints — заранее посчитанные подсказки (самый быстрый, меньше всего поворотов, меньше всего левых поворотов)
- context.selected_index — маршрут, который пользователь сейчас смотрит
- routes[] — маршруты с расстоянием (м), временем (с), числом поворотов, левых поворотов, круговых развязок и первыми манёврами

ЗАДАЧА:
1. Кратко (3-5 предложений) сравни маршруты на русском языке
2. Учитывай предпочтение из context.time_bias
3. Называй маршруты как "маршрут №N", где N = index + 1
4. В последней строке укажи рекомендованный маршрут строго в формате: route_index = <index>

Не придумывай данные, которых нет в JSON."""

_ROUTE_INDEX_PATTERN = re.compile(r"route_index\s*=\s*(\d+)", re.IGNORECASE)
_ROUTE_NUMBER_PATTERN = re.compile(r"(?:маршрут|route)\s*[№#]\s*(\d+)", re.IGNORECASE)


class SummaryClient(Protocol):
    async def complete(self, system_prompt: str, user_prompt: str) -> List[str]:
        ...


@dataclass(frozen=True)
class RouteStats:
    index: int
    turn_count: int
    left_turn_count: int
    roundabout_count: int
    avg_step_distance: float


@dataclass(frozen=True)
class RouteSummary:
    text: str
    suggested_index: Optional[int]
    signature: str


def route_stats(route: RouteView) -> RouteStats:
    turns = route.turns
    left_turns = sum(
        1 for turn in turns if turn.modifier and LEFT_MODIFIER_MARKER in turn.modifier.lower()
    )
    roundabouts = sum(
        1
        for turn in turns
        if any(marker in turn.maneuver.lower() for marker in ROUNDABOUT_MARKERS)
    )
    avg_distance = sum(turn.distance for turn in turns) / len(turns) if turns else 0.0
    return RouteStats(
        index=route.index,
        turn_count=len(turns),
        left_turn_count=left_turns,
        roundabout_count=roundabouts,
        avg_step_distance=avg_distance,
    )


def _first_min(values: Sequence[float]) -> Optional[int]:
    if not values:
        return None
    return min(range(len(values)), key=lambda idx: (values[idx], idx))


def derive_hints(routes: Sequence[RouteView], stats: Sequence[RouteStats]) -> List[str]:
    hints: List[str] = []
    fastest = _first_min([route.duration for route in routes])
    fewest_turns = _first_min([item.turn_count for item in stats])
    fewest_left = _first_min([item.left_turn_count for item in stats])

    if fastest is not None:
        hints.append(f"Самый быстрый маршрут: index {routes[fastest].index}")
    if fewest_turns is not None:
        hints.append(f"Меньше всего поворотов: index {routes[fewest_turns].index}")
    if fewest_left is not None:
        hints.append(f"Меньше всего левых поворотов: index {routes[fewest_left].index}")
    return hints


def build_summary_payload(
    routes: Sequence[RouteView],
    selected_index: int,
    moment: datetime,
) -> Dict[str, Any]:
    stats = [route_stats(route) for route in routes]
    band = resolve_time_band(moment)

    serialized: List[Dict[str, Any]] = []
    for route, item in zip(routes, stats):
        serialized.append(
            {
                "index": route.index,
                "is_primary": route.is_primary,
                "distance_m": round(route.distance),
                "duration_s": round(route.duration),
                "turn_count": item.turn_count,
                "left_turn_count": item.left_turn_count,
                "roundabout_count": item.roundabout_count,
                "avg_step_distance_m": round(item.avg_step_distance, 1),
                "maneuvers": [
                    {
                        "type": turn.maneuver_type,
                        "modifier": turn.modifier,
                        "street": turn.street_name,
                        "location": list(turn.coordinate.rounded(5)),
                    }
                    for turn in route.turns[:MANEUVER_SAMPLE_LIMIT]
                ],
            }
        )

    return {
        "context": {
            "time_bias": band,
            "time_bias_label": time_band_label(band),
            "hints": derive_hints(routes, stats),
            "selected_index": selected_index,
        },
        "routes": serialized,
    }


def parse_suggested_index(text: str, route_count: int) -> Optional[int]:
    """Read the recommended index, preferring the explicit ``route_index`` line.

    The human-facing "маршрут №N" numbering is 1-based and only consulted when
    the explicit token is missing.
    """

    text = text or ""
    explicit = _ROUTE_INDEX_PATTERN.search(text)
    if explicit:
        index = int(explicit.group(1))
    else:
        numbered = _ROUTE_NUMBER_PATTERN.search(text)
        if not numbered:
            return None
        index = int(numbered.group(1)) - 1

    if 0 <= index < route_count:
        return index
    logger.info("Discarding out-of-range suggestion %s for %s routes", index, route_count)
    return None


def route_set_signature(routes: Sequence[RouteView]) -> str:
    return SIGNATURE_SEPARATOR.join(
        f"{route.index}:{round(route.distance)}:{round(route.duration)}:{route.turn_count}"
        for route in routes
    )


def should_refresh(routes: Sequence[RouteView], previous_signature: Optional[str]) -> bool:
    return route_set_signature(routes) != previous_signature


class RouteSummaryBridge:
    """Turns the current route set into a natural-language comparison."""

    def __init__(self, client: SummaryClient) -> None:
        self.client = client

    async def summarize(
        self,
        routes: Sequence[RouteView],
        selected_index: int,
        moment: datetime,
    ) -> RouteSummary:
        payload = build_summary_payload(routes, selected_index, moment)
        user_prompt = "Маршруты:\n" + json.dumps(payload, ensure_ascii=False, indent=2)

        fragments = await self.client.complete(SUMMARY_INSTRUCTION, user_prompt)
        text = "".join(fragment for fragment in fragments if fragment).strip()
        if not text:
            logger.warning("Summary response had no text fragments")
            text = UNPARSED_SUMMARY

        suggested = parse_suggested_index(text, len(routes))
        logger.info("✓ Route summary ready (%s chars, suggestion=%s)", len(text), suggested)
        return RouteSummary(text=text, suggested_index=suggested, signature=route_set_signature(routes))

    async def summarize_if_changed(
        self,
        routes: Sequence[RouteView],
        selected_index: int,
        moment: datetime,
        previous_signature: Optional[str],
    ) -> Optional[RouteSummary]:
        if not routes or not should_refresh(routes, previous_signature):
            return None
        return await self.summarize(routes, selected_index, moment)
