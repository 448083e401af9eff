import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from route_alternatives.core.config import settings
from route_alternatives.domain.routing.acquisition import CandidateStage, RouteFetcher, default_stages
from route_alternatives.domain.routing.client import OSRMClient
from route_alternatives.domain.routing.constants import MAX_ROUTES
from route_alternatives.domain.routing.geometry import build_route_markers
from route_alternatives.domain.routing.models import Coordinate, RouteMarker, RouteView, SnappedPoint
from route_alternatives.domain.routing.selection import SelectionState
from route_alternatives.domain.routing.snapping import GeocodeSnapper
from route_alternatives.domain.routing.views import build_route_views

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteSet:
    start: SnappedPoint
    end: SnappedPoint
    routes: List[RouteView]
    selection: SelectionState


class RouteAlternativesService:
    """Snap endpoints, collect diverse candidates and map them for display"""

    def __init__(
        self,
        client: Optional[OSRMClient] = None,
        *,
        stages: Optional[Sequence[CandidateStage]] = None,
    ):
        self.client = client or OSRMClient(
            settings.OSRM_BASE_URL,
            profile=settings.OSRM_PROFILE,
            snap_timeout=settings.SNAP_TIMEOUT_SECONDS,
            route_timeout=settings.ROUTE_TIMEOUT_SECONDS,
        )
        self.snapper = GeocodeSnapper(self.client)
        self.fetcher = RouteFetcher(
            self.client,
            stages if stages is not None else default_stages(
                settings.VIA_OFFSET_CAP_DEG, settings.DISPLACEMENT_DEG
            ),
            limit=min(settings.MAX_ALTERNATIVES, MAX_ROUTES),
        )

    async def find_routes(self, start: Coordinate, end: Coordinate) -> RouteSet:
        snapped_start, snapped_end = await self.snapper.snap_pair(start, end)
        candidates = await self.fetcher.fetch(snapped_start, snapped_end)
        routes = build_route_views(candidates)

        logger.info(
            "✓ %s routes between %s and %s",
            len(routes),
            snapped_start.coordinate.rounded(),
            snapped_end.coordinate.rounded(),
        )

        return RouteSet(
            start=snapped_start,
            end=snapped_end,
            routes=routes,
            selection=SelectionState.reset_for(routes),
        )

    def markers_for(
        self,
        coordinates: Sequence[Coordinate],
        duration: float,
        spacing: Optional[float] = None,
        max_markers: Optional[int] = None,
    ) -> List[RouteMarker]:
        return build_route_markers(
            coordinates,
            duration,
            spacing=spacing or settings.MARKER_SPACING_M,
            max_markers=max_markers or settings.MAX_MARKERS,
        )


route_service = RouteAlternativesService()
