from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from route_alternatives.domain.routing.models import (
    Coordinate,
    RouteMarker,
    RouteView,
    SnappedPoint,
    TurnNode,
)
from route_alternatives.domain.routing.selection import RouteLayer, SelectionState


class CoordinatePoint(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)

    @classmethod
    def from_domain(cls, point: Coordinate) -> "CoordinatePoint":
        return cls(lat=point.latitude, lon=point.longitude)

    def to_domain(self) -> Coordinate:
        return Coordinate(self.lat, self.lon)


class RouteRequest(BaseModel):
    start: CoordinatePoint
    end: CoordinatePoint

    @model_validator(mode="after")
    def _ensure_distinct_endpoints(self) -> "RouteRequest":
        if self.start.lat == self.end.lat and self.start.lon == self.end.lon:
            raise ValueError("start and end must be different points")
        return self


class SnappedEndpoint(BaseModel):
    point: CoordinatePoint
    snapped: bool

    @classmethod
    def from_domain(cls, snapped: SnappedPoint) -> "SnappedEndpoint":
        return cls(point=CoordinatePoint.from_domain(snapped.coordinate), snapped=snapped.snapped)


class TurnInstruction(BaseModel):
    location: CoordinatePoint
    street_name: str
    maneuver: str
    maneuver_type: str
    modifier: Optional[str] = None
    distance_m: float
    duration_s: float
    route_index: int

    @classmethod
    def from_domain(cls, turn: TurnNode) -> "TurnInstruction":
        return cls(
            location=CoordinatePoint.from_domain(turn.coordinate),
            street_name=turn.street_name,
            maneuver=turn.maneuver,
            maneuver_type=turn.maneuver_type,
            modifier=turn.modifier,
            distance_m=turn.distance,
            duration_s=turn.duration,
            route_index=turn.route_index,
        )

    def to_domain(self) -> TurnNode:
        return TurnNode(
            coordinate=self.location.to_domain(),
            street_name=self.street_name,
            maneuver=self.maneuver,
            maneuver_type=self.maneuver_type,
            modifier=self.modifier,
            distance=self.distance_m,
            duration=self.duration_s,
            route_index=self.route_index,
        )


class RouteOption(BaseModel):
    id: str
    index: int = Field(..., ge=0)
    color: str
    is_primary: bool
    distance_m: float
    duration_s: float
    geometry: List[CoordinatePoint]
    turns: List[TurnInstruction] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, route: RouteView) -> "RouteOption":
        return cls(
            id=route.id,
            index=route.index,
            color=route.color,
            is_primary=route.is_primary,
            distance_m=route.distance,
            duration_s=route.duration,
            geometry=[CoordinatePoint.from_domain(point) for point in route.coordinates],
            turns=[TurnInstruction.from_domain(turn) for turn in route.turns],
        )

    def to_domain(self) -> RouteView:
        return RouteView(
            id=self.id,
            index=self.index,
            coordinates=tuple(point.to_domain() for point in self.geometry),
            distance=self.distance_m,
            duration=self.duration_s,
            color=self.color,
            is_primary=self.is_primary,
            turns=tuple(turn.to_domain() for turn in self.turns),
        )


class SelectionModel(BaseModel):
    selected_index: int = Field(0, ge=0)
    show_all_routes: bool = True

    @classmethod
    def from_domain(cls, state: SelectionState) -> "SelectionModel":
        return cls(selected_index=state.selected_index, show_all_routes=state.show_all_routes)

    def to_domain(self) -> SelectionState:
        return SelectionState(self.selected_index, self.show_all_routes)


class StrokeModel(BaseModel):
    color: str
    width: float
    opacity: float


class RouteLayerModel(BaseModel):
    route_index: int
    emphasis: str
    z_index: int
    visible: bool
    outline: StrokeModel
    fill: StrokeModel

    @classmethod
    def from_domain(cls, layer: RouteLayer) -> "RouteLayerModel":
        return cls(
            route_index=layer.route_index,
            emphasis=layer.emphasis.profile_key,
            z_index=layer.z_index,
            visible=layer.visible,
            outline=StrokeModel(**vars(layer.outline)),
            fill=StrokeModel(**vars(layer.fill)),
        )


class RouteSetResponse(BaseModel):
    start: SnappedEndpoint
    end: SnappedEndpoint
    routes: List[RouteOption]
    selection: SelectionModel
    layers: List[RouteLayerModel]


class LayerRoute(BaseModel):
    index: int = Field(..., ge=0)
    color: str
    is_primary: bool


class LayersRequest(BaseModel):
    routes: List[LayerRoute] = Field(..., min_length=1, max_length=5)
    selection: SelectionModel


class MarkersRequest(BaseModel):
    geometry: List[CoordinatePoint]
    duration_s: float = Field(..., ge=0)
    spacing_m: Optional[float] = Field(default=None, gt=0)
    max_markers: Optional[int] = Field(default=None, gt=0, le=2000)


class MarkerModel(BaseModel):
    location: CoordinatePoint
    distance_covered_m: float
    distance_remaining_m: float
    time_remaining_s: Optional[float] = None

    @classmethod
    def from_domain(cls, marker: RouteMarker) -> "MarkerModel":
        return cls(
            location=CoordinatePoint.from_domain(marker.coordinate),
            distance_covered_m=marker.distance_covered,
            distance_remaining_m=marker.distance_remaining,
            time_remaining_s=marker.time_remaining,
        )


class SummaryRequest(BaseModel):
    routes: List[RouteOption] = Field(..., min_length=1, max_length=5)
    selected_index: int = Field(0, ge=0)
    previous_signature: Optional[str] = None


class SummaryResponse(BaseModel):
    skipped: bool
    signature: str
    text: Optional[str] = None
    suggested_index: Optional[int] = None
