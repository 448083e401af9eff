import asyncio
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from route_alternatives.domain.routing.exceptions import NoRouteFoundError, SummaryFailure
from route_alternatives.domain.routing.models import Coordinate, SnappedPoint
from route_alternatives.domain.routing.selection import SelectionState
from route_alternatives.domain.routing.summary import RouteSummaryBridge
from route_alternatives.domain.routing.views import build_route_views
from route_alternatives.services.routing import RouteSet
from route_alternatives.services.session import RouteSession

from conftest import make_candidate, make_step

FIRST = Coordinate(56.3268, 44.0059)
SECOND = Coordinate(56.2965, 43.9361)
END = Coordinate(56.3150, 43.9900)
NOON = datetime(2024, 5, 14, 12, 0)


def _route_set(start: Coordinate, durations) -> RouteSet:
    candidates = [
        make_candidate(
            1000 + idx * 100,
            duration,
            points=[start.as_tuple(), (56.31, 43.99 + idx * 0.001), END.as_tuple()],
            steps=[make_step("turn", "left" if idx % 2 else "right")],
        )
        for idx, duration in enumerate(durations)
    ]
    routes = build_route_views(candidates)
    return RouteSet(
        start=SnappedPoint(start, None),
        end=SnappedPoint(END, None),
        routes=routes,
        selection=SelectionState.reset_for(routes),
    )


def _session(service, complete=None) -> RouteSession:
    client = SimpleNamespace(complete=complete or AsyncMock(return_value=["route_index = 1"]))
    return RouteSession(service, RouteSummaryBridge(client), timezone="Europe/Moscow")


@pytest.mark.asyncio
async def test_fetch_resets_selection_to_primary():
    route_set = _route_set(FIRST, [700, 600, 650])
    session = _session(SimpleNamespace(find_routes=AsyncMock(return_value=route_set)))
    session.selection = SelectionState(selected_index=2, show_all_routes=False)

    result = await session.fetch(FIRST, END)

    assert result is route_set
    assert session.selection == SelectionState(selected_index=1, show_all_routes=True)
    assert session.generation == 1


@pytest.mark.asyncio
async def test_superseded_fetch_does_not_overwrite_newer_routes():
    release_first = asyncio.Event()
    first_set = _route_set(FIRST, [600])
    second_set = _route_set(SECOND, [500, 400])

    async def find_routes(start, end):
        if start == FIRST:
            await release_first.wait()
            return first_set
        return second_set

    session = _session(SimpleNamespace(find_routes=find_routes))

    first_task = asyncio.create_task(session.fetch(FIRST, END))
    await asyncio.sleep(0)
    second = await session.fetch(SECOND, END)
    release_first.set()
    first = await first_task

    assert first is None
    assert second is second_set
    assert session.routes == second_set.routes
    assert session.selection.selected_index == 1


@pytest.mark.asyncio
async def test_superseded_fetch_error_is_swallowed():
    release_first = asyncio.Event()
    second_set = _route_set(SECOND, [500])

    async def find_routes(start, end):
        if start == FIRST:
            await release_first.wait()
            raise NoRouteFoundError()
        return second_set

    session = _session(SimpleNamespace(find_routes=find_routes))

    first_task = asyncio.create_task(session.fetch(FIRST, END))
    await asyncio.sleep(0)
    await session.fetch(SECOND, END)
    release_first.set()

    assert await first_task is None
    assert session.routes == second_set.routes


@pytest.mark.asyncio
async def test_current_fetch_error_propagates_and_keeps_previous_routes():
    previous = _route_set(FIRST, [600])
    service = SimpleNamespace(find_routes=AsyncMock(side_effect=[previous, NoRouteFoundError()]))
    session = _session(service)

    await session.fetch(FIRST, END)
    with pytest.raises(NoRouteFoundError):
        await session.fetch(SECOND, END)

    assert session.routes == previous.routes


@pytest.mark.asyncio
async def test_refresh_summary_runs_once_per_route_set():
    complete = AsyncMock(return_value=["Маршрут №2 короче. route_index = 1"])
    session = _session(SimpleNamespace(find_routes=AsyncMock(return_value=_route_set(FIRST, [600, 700]))), complete)
    await session.fetch(FIRST, END)

    first = await session.refresh_summary(NOON)
    second = await session.refresh_summary(NOON)

    assert first is not None
    assert second is None
    assert complete.await_count == 1
    assert session.suggested_index == 1


@pytest.mark.asyncio
async def test_accept_suggestion_focuses_suggested_route():
    session = _session(SimpleNamespace(find_routes=AsyncMock(return_value=_route_set(FIRST, [600, 700]))))
    await session.fetch(FIRST, END)
    await session.refresh_summary(NOON)

    state = session.accept_suggestion()

    assert state == SelectionState(selected_index=1, show_all_routes=False)


@pytest.mark.asyncio
async def test_summary_for_replaced_route_set_is_discarded():
    release = asyncio.Event()

    async def slow_complete(system_prompt, user_prompt):
        await release.wait()
        return ["route_index = 0"]

    service = SimpleNamespace(
        find_routes=AsyncMock(side_effect=[_route_set(FIRST, [600, 700]), _route_set(SECOND, [300])])
    )
    session = _session(service, AsyncMock(side_effect=slow_complete))
    await session.fetch(FIRST, END)

    summary_task = asyncio.create_task(session.refresh_summary(NOON))
    await asyncio.sleep(0)
    await session.fetch(SECOND, END)
    release.set()

    assert await summary_task is None
    assert session.summary is None
    assert session.suggested_index is None


@pytest.mark.asyncio
async def test_summary_failure_leaves_routes_and_selection_untouched():
    route_set = _route_set(FIRST, [600, 700])
    session = _session(
        SimpleNamespace(find_routes=AsyncMock(return_value=route_set)),
        AsyncMock(side_effect=SummaryFailure(500, "upstream")),
    )
    await session.fetch(FIRST, END)
    selection = session.toggle_show_all()

    assert await session.refresh_summary(NOON) is None
    assert session.routes == route_set.routes
    assert session.selection == selection
    assert session.summary_error is not None


@pytest.mark.asyncio
async def test_select_route_only_rejects_unknown_index():
    session = _session(SimpleNamespace(find_routes=AsyncMock(return_value=_route_set(FIRST, [600]))))
    await session.fetch(FIRST, END)

    with pytest.raises(IndexError):
        session.select_route_only(3)
    assert session.select_route_only(0) == SelectionState(0, False)
