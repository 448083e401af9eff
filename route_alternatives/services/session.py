"""Per-user route session.

Holds the current route set and selection state between user actions. Every
fetch gets a generation number; results that arrive after a newer fetch has
started are dropped so a slow response can never overwrite fresher routes.
Summaries are dropped the same way when the route set they describe is no
longer current.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from route_alternatives.core.config import settings
from route_alternatives.domain.routing.exceptions import RoutePlanningError, SummaryFailure
from route_alternatives.domain.routing.models import Coordinate, RouteView
from route_alternatives.domain.routing.selection import SelectionState
from route_alternatives.domain.routing.summary import (
    RouteSummary,
    RouteSummaryBridge,
    route_set_signature,
    should_refresh,
)

from .routing import RouteAlternativesService, RouteSet

logger = logging.getLogger(__name__)


class RouteSession:
    def __init__(
        self,
        service: RouteAlternativesService,
        bridge: RouteSummaryBridge,
        *,
        timezone: Optional[str] = None,
    ) -> None:
        self.service = service
        self.bridge = bridge
        self.timezone = ZoneInfo(timezone or settings.TIMEZONE)

        self.routes: List[RouteView] = []
        self.selection = SelectionState()
        self.summary: Optional[RouteSummary] = None
        self.summary_error: Optional[SummaryFailure] = None
        self.suggested_index: Optional[int] = None
        self.summary_signature: Optional[str] = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def fetch(self, start: Coordinate, end: Coordinate) -> Optional[RouteSet]:
        """Replace the route set; returns None when superseded by a newer fetch."""

        self._generation += 1
        generation = self._generation

        try:
            route_set = await self.service.find_routes(start, end)
        except RoutePlanningError:
            if generation != self._generation:
                logger.info("Ignoring error from superseded fetch #%s", generation)
                return None
            raise

        if generation != self._generation:
            logger.info("Dropping result of superseded fetch #%s (current #%s)", generation, self._generation)
            return None

        self.routes = route_set.routes
        self.selection = route_set.selection
        self.summary = None
        self.suggested_index = None
        return route_set

    def select_route_only(self, index: int) -> SelectionState:
        if not 0 <= index < len(self.routes):
            raise IndexError(f"route index {index} out of range for {len(self.routes)} routes")
        self.selection = self.selection.select_route_only(index)
        return self.selection

    def toggle_show_all(self) -> SelectionState:
        self.selection = self.selection.toggle_show_all()
        return self.selection

    def accept_suggestion(self) -> SelectionState:
        if self.suggested_index is not None:
            self.selection = self.selection.select_route_only(self.suggested_index)
        return self.selection

    async def refresh_summary(self, moment: Optional[datetime] = None) -> Optional[RouteSummary]:
        routes = list(self.routes)
        if not routes or not should_refresh(routes, self.summary_signature):
            return None

        signature = route_set_signature(routes)
        self.summary_signature = signature

        try:
            summary = await self.bridge.summarize(
                routes,
                self.selection.selected_index,
                moment or datetime.now(self.timezone),
            )
        except SummaryFailure as exc:
            logger.warning("Route summary unavailable: %s", exc.message)
            self.summary_error = exc
            return None

        if route_set_signature(self.routes) != signature:
            logger.info("Discarding summary computed for a superseded route set")
            return None

        self.summary = summary
        self.summary_error = None
        self.suggested_index = summary.suggested_index
        return summary
