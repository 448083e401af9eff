import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, ORJSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from route_alternatives.api.router import api_router
from route_alternatives.core.config import settings
from route_alternatives.core.logging import configure_logging
from route_alternatives.core.tracing import (
    RESPONSE_TRACE_HEADER,
    current_trace_id,
    trace_id_from_headers,
    trace_scope,
)
from route_alternatives.domain.routing.exceptions import NoRouteFoundError, RoutePlanningError

logger = configure_logging("route-alternatives", settings.LOG_LEVEL)

@asynccontextmanager
async def lifespan(app: FastAPI):
    with trace_scope("bootstrap"):
        logger.info("Starting %s %s", settings.PROJECT_NAME, settings.VERSION)
        logger.info("Environment: %s", settings.ENVIRONMENT)
        logger.info("Routing backend: %s (%s)", settings.OSRM_BASE_URL, settings.OSRM_PROFILE)

    try:
        yield
    finally:
        logger.info("Shutting down %s", settings.PROJECT_NAME)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Diversified route alternatives with turn-by-turn data and LLM comparison",
    lifespan=lifespan,
    default_response_class=ORJSONResponse
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time

    logger.info(
        "%s %s - status=%s duration=%.3fs",
        request.method,
        request.url.path,
        response.status_code,
        duration,
    )

    return response

@app.middleware("http")
async def trace_middleware(request: Request, call_next):
    with trace_scope(trace_id_from_headers(request.headers)) as trace_id:
        response = await call_next(request)
    response.headers.setdefault(RESPONSE_TRACE_HEADER, trace_id)
    return response

@app.exception_handler(RoutePlanningError)
async def route_planning_error_handler(request: Request, exc: RoutePlanningError) -> JSONResponse:
    status_code = exc.effective_status_code if isinstance(exc, NoRouteFoundError) else exc.status_code
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        {"detail": exc.message, "error": type(exc).__name__},
        status_code=status_code,
        headers={RESPONSE_TRACE_HEADER: current_trace_id()},
    )

Instrumentator().instrument(app).expose(app, endpoint="/metrics")

app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/healthz")
async def health_check() -> JSONResponse:
    return JSONResponse(
        {"service": settings.PROJECT_NAME, "status": "ok", "version": settings.VERSION},
        headers={RESPONSE_TRACE_HEADER: current_trace_id()},
    )

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "route_alternatives.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
    )
