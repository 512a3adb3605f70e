"""
Main API router for TalentPool

Aggregates all API routes and provides the main application router.
"""

from fastapi import APIRouter

from talentpool.api.endpoints import talent, interview, report, marketplace

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    talent.router,
    prefix="/talent",
    tags=["Talent"]
)

api_router.include_router(
    interview.router,
    prefix="/interview",
    tags=["Interview"]
)

api_router.include_router(
    report.router,
    prefix="/report",
    tags=["Report"]
)

api_router.include_router(
    marketplace.router,
    prefix="/marketplace",
    tags=["Marketplace"]
)
