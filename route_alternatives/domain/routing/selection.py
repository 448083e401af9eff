"""Selection and visibility state for a displayed route set.

``SelectionState`` is an immutable value; every transition returns a new
state so the rendering layer can diff and tests can assert on plain values.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import List, Protocol, Sequence

from .constants import OUTLINE_COLOR, STROKE_PROFILES


class DisplayRoute(Protocol):
    index: int
    color: str
    is_primary: bool


class RouteEmphasis(IntEnum):
    OTHER = 0
    PRIMARY = 1
    SELECTED = 2
    SELECTED_PRIMARY = 3

    @property
    def profile_key(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class SelectionState:
    selected_index: int = 0
    show_all_routes: bool = True

    @classmethod
    def reset_for(cls, routes: Sequence[DisplayRoute]) -> "SelectionState":
        primary = next((route.index for route in routes if route.is_primary), 0)
        return cls(selected_index=primary, show_all_routes=True)

    def select_route_only(self, index: int) -> "SelectionState":
        return replace(self, selected_index=index, show_all_routes=False)

    def toggle_show_all(self) -> "SelectionState":
        return replace(self, show_all_routes=not self.show_all_routes)

    def is_selected(self, route: DisplayRoute) -> bool:
        return route.index == self.selected_index

    def is_visible(self, route: DisplayRoute) -> bool:
        return self.show_all_routes or self.is_selected(route)

    def emphasis(self, route: DisplayRoute) -> RouteEmphasis:
        selected = self.is_selected(route)
        if selected and route.is_primary:
            return RouteEmphasis.SELECTED_PRIMARY
        if selected:
            return RouteEmphasis.SELECTED
        if route.is_primary:
            return RouteEmphasis.PRIMARY
        return RouteEmphasis.OTHER


@dataclass(frozen=True)
class RouteStroke:
    color: str
    width: float
    opacity: float


@dataclass(frozen=True)
class RouteLayer:
    route_index: int
    emphasis: RouteEmphasis
    z_index: int
    visible: bool
    outline: RouteStroke
    fill: RouteStroke


def build_render_layers(routes: Sequence[DisplayRoute], state: SelectionState) -> List[RouteLayer]:
    """Two-layer strokes for every route, ordered from bottom to top."""

    ordered = sorted(routes, key=lambda route: (state.emphasis(route), -route.index))
    layers: List[RouteLayer] = []
    for z_index, route in enumerate(ordered):
        emphasis = state.emphasis(route)
        fill_width, fill_opacity, outline_width, outline_opacity = STROKE_PROFILES[emphasis.profile_key]
        layers.append(
            RouteLayer(
                route_index=route.index,
                emphasis=emphasis,
                z_index=z_index,
                visible=state.is_visible(route),
                outline=RouteStroke(OUTLINE_COLOR, outline_width, outline_opacity),
                fill=RouteStroke(route.color, fill_width, fill_opacity),
            )
        )
    return layers
