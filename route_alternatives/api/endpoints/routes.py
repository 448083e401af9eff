from __future__ import annotations

import logging
from datetime import datetime
from functools import lru_cache
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException

from route_alternatives.core.config import settings
from route_alternatives.domain.routing.exceptions import SummaryFailure
from route_alternatives.domain.routing.selection import build_render_layers
from route_alternatives.domain.routing.summary import RouteSummaryBridge, route_set_signature
from route_alternatives.models.schemas import (
    LayersRequest,
    MarkerModel,
    MarkersRequest,
    RouteLayerModel,
    RouteOption,
    RouteRequest,
    RouteSetResponse,
    SelectionModel,
    SnappedEndpoint,
    SummaryRequest,
    SummaryResponse,
)
from route_alternatives.services.llm import LLMService
from route_alternatives.services.routing import RouteAlternativesService, route_service

logger = logging.getLogger(__name__)

router = APIRouter()


def get_route_service() -> RouteAlternativesService:
    return route_service


@lru_cache
def get_summary_bridge() -> RouteSummaryBridge:
    return RouteSummaryBridge(LLMService())


@router.post("", response_model=RouteSetResponse)
async def find_routes(
    request: RouteRequest,
    service: RouteAlternativesService = Depends(get_route_service),
) -> RouteSetResponse:
    route_set = await service.find_routes(request.start.to_domain(), request.end.to_domain())

    return RouteSetResponse(
        start=SnappedEndpoint.from_domain(route_set.start),
        end=SnappedEndpoint.from_domain(route_set.end),
        routes=[RouteOption.from_domain(route) for route in route_set.routes],
        selection=SelectionModel.from_domain(route_set.selection),
        layers=[
            RouteLayerModel.from_domain(layer)
            for layer in build_render_layers(route_set.routes, route_set.selection)
        ],
    )


@router.post("/markers", response_model=list[MarkerModel])
async def route_markers(
    request: MarkersRequest,
    service: RouteAlternativesService = Depends(get_route_service),
) -> list[MarkerModel]:
    markers = service.markers_for(
        [point.to_domain() for point in request.geometry],
        request.duration_s,
        spacing=request.spacing_m,
        max_markers=request.max_markers,
    )
    return [MarkerModel.from_domain(marker) for marker in markers]


@router.post("/layers", response_model=list[RouteLayerModel])
async def route_layers(request: LayersRequest) -> list[RouteLayerModel]:
    indices = [route.index for route in request.routes]
    if len(set(indices)) != len(indices):
        raise HTTPException(422, "Индексы маршрутов должны быть уникальными")

    layers = build_render_layers(request.routes, request.selection.to_domain())
    return [RouteLayerModel.from_domain(layer) for layer in layers]


@router.post("/summary", response_model=SummaryResponse)
async def route_summary(
    request: SummaryRequest,
    bridge: RouteSummaryBridge = Depends(get_summary_bridge),
) -> SummaryResponse:
    routes = [route.to_domain() for route in request.routes]
    moment = datetime.now(ZoneInfo(settings.TIMEZONE))

    try:
        summary = await bridge.summarize_if_changed(
            routes,
            request.selected_index,
            moment,
            request.previous_signature,
        )
    except SummaryFailure as exc:
        logger.warning("Route summary failed: %s", exc.message)
        raise HTTPException(502, "Сервис сравнения маршрутов недоступен") from exc

    if summary is None:
        return SummaryResponse(skipped=True, signature=route_set_signature(routes))

    return SummaryResponse(
        skipped=False,
        signature=summary.signature,
        text=summary.text,
        suggested_index=summary.suggested_index,
    )
