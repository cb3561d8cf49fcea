"""
Main API router for v1 endpoints
"""
from fastapi import APIRouter

from planvision.api.v1.endpoints import render_configs

api_router = APIRouter()

api_router.include_router(render_configs.router, prefix="/render-configs", tags=["Generation"])


@api_router.get("/")
async def api_info():
    return {"message": "PlanVision API v1", "status": "active"}
