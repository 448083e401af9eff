from fastapi import APIRouter

from route_alternatives.api.endpoints import routes

api_router = APIRouter()

api_router.include_router(routes.router, prefix="/routes", tags=["routes"])
