"""Service-layer orchestration for route alternatives."""

from __future__ import annotations

__all__ = ["RouteAlternativesService", "RouteSession", "RouteSet"]

from .routing import RouteAlternativesService, RouteSet  # noqa: E402
from .session import RouteSession  # noqa: E402
