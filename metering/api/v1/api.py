"""
API v1 router aggregation
"""
from fastapi import APIRouter

from metering.api.v1.endpoints import operations, usage, billing, tiers, admin

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(operations.router, prefix="/operations", tags=["operations"])
api_router.include_router(usage.router, prefix="/usage", tags=["usage"])
api_router.include_router(billing.router, prefix="/billing", tags=["billing"])
api_router.include_router(tiers.router, prefix="/tiers", tags=["tiers"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
