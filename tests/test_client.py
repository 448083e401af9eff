import httpx
import pytest

from route_alternatives.domain.routing.client import OSRMClient
from route_alternatives.domain.routing.exceptions import (
    BadRequestError,
    NoRouteFoundError,
    RateLimitedError,
    RoutingServiceError,
    SnapFailure,
)
from route_alternatives.domain.routing.models import Coordinate
from route_alternatives.domain.routing.snapping import GeocodeSnapper

from conftest import osrm_route, osrm_step

START = Coordinate(56.3268, 44.0059)
END = Coordinate(56.3150, 43.9900)


def _client(handler) -> OSRMClient:
    return OSRMClient("http://osrm.test/", profile="driving", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_route_request_carries_flags_and_hints():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = request.url
        route = osrm_route(
            1520.0,
            240.0,
            [(56.3268, 44.0059), (56.3200, 44.0000), (56.3150, 43.9900)],
            steps=[
                osrm_step("depart", None, 56.3268, 44.0059, "Рождественская улица"),
                osrm_step("turn", "left", 56.3200, 44.0000, "", distance=300.0),
                osrm_step("arrive", None, 56.3150, 43.9900, "Ковалихинская улица"),
            ],
        )
        return httpx.Response(200, json={"code": "Ok", "routes": [route], "waypoints": []})

    client = _client(handler)
    routes = await client.route([START, END], hints=["h1", None], alternatives=True)

    url = captured["url"]
    assert url.path == "/route/v1/driving/44.0059,56.3268;43.99,56.315"
    assert url.params["alternatives"] == "true"
    assert url.params["steps"] == "true"
    assert url.params["annotations"] == "distance,duration"
    assert url.params["geometries"] == "geojson"
    assert url.params["overview"] == "full"
    assert url.params["hints"] == "h1;"

    assert len(routes) == 1
    route = routes[0]
    assert route.distance == 1520.0
    assert route.geometry[0] == START
    assert [step.type for step in route.steps] == ["depart", "turn", "arrive"]
    assert route.steps[1].modifier == "left"
    assert route.steps[1].location == Coordinate(56.32, 44.0)


@pytest.mark.asyncio
async def test_route_without_hints_omits_parameter():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["params"] = request.url.params
        return httpx.Response(200, json={"code": "Ok", "routes": []})

    await _client(handler).route([START, END], hints=[None, None])

    assert "hints" not in captured["params"]
    assert captured["params"]["alternatives"] == "false"


@pytest.mark.parametrize(
    "status, error_type",
    [
        (429, RateLimitedError),
        (400, BadRequestError),
        (503, RoutingServiceError),
    ],
)
@pytest.mark.asyncio
async def test_route_maps_http_status_to_errors(status, error_type):
    client = _client(lambda request: httpx.Response(status, text="nope"))

    with pytest.raises(error_type) as exc_info:
        await client.route([START, END], alternatives=True)

    assert exc_info.value.status_code == status


@pytest.mark.asyncio
async def test_route_no_route_code_raises_with_service_message():
    client = _client(
        lambda request: httpx.Response(200, json={"code": "NoRoute", "message": "Impossible route", "routes": []})
    )

    with pytest.raises(NoRouteFoundError) as exc_info:
        await client.route([START, END])

    assert exc_info.value.message == "Impossible route"


@pytest.mark.asyncio
async def test_route_timeout_becomes_service_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(RoutingServiceError) as exc_info:
        await _client(handler).route([START, END])

    assert exc_info.value.status_code == 504


@pytest.mark.asyncio
async def test_nearest_returns_snapped_point_and_hint():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = request.url
        return httpx.Response(
            200,
            json={"code": "Ok", "waypoints": [{"location": [44.0061, 56.3270], "hint": "abc", "name": ""}]},
        )

    snapped = await _client(handler).nearest(START)

    assert captured["url"].path == "/nearest/v1/driving/44.0059,56.3268"
    assert captured["url"].params["number"] == "1"
    assert snapped.coordinate == Coordinate(56.3270, 44.0061)
    assert snapped.hint == "abc"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="error"),
        httpx.Response(200, json={"code": "InvalidQuery", "waypoints": []}),
        httpx.Response(200, json={"code": "Ok", "waypoints": []}),
        httpx.Response(200, json={"code": "Ok", "waypoints": [{"hint": "x"}]}),
        httpx.Response(200, text="not json"),
    ],
)
@pytest.mark.asyncio
async def test_nearest_raises_snap_failure_on_unusable_payload(response):
    with pytest.raises(SnapFailure):
        await _client(lambda request: response).nearest(START)


@pytest.mark.asyncio
async def test_snapper_falls_back_to_raw_point():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("down", request=request)

    snapper = GeocodeSnapper(_client(handler))

    snapped = await snapper.snap(START)

    assert snapped.coordinate == START
    assert snapped.hint is None
    assert snapped.snapped is False


@pytest.mark.asyncio
async def test_snap_pair_settles_each_point_independently():
    def handler(request: httpx.Request) -> httpx.Response:
        if "44.0059" in request.url.path:
            return httpx.Response(
                200, json={"code": "Ok", "waypoints": [{"location": [44.006, 56.327], "hint": "a"}]}
            )
        return httpx.Response(502)

    start, end = await GeocodeSnapper(_client(handler)).snap_pair(START, END)

    assert start.hint == "a"
    assert start.coordinate == Coordinate(56.327, 44.006)
    assert end.coordinate == END
    assert end.hint is None
