from fastapi import APIRouter
from fitchallenge.api.v1.endpoints import (
    habits,
    leaderboards,
    scoring,
)

# Create main API router
api_router = APIRouter(redirect_slashes=False)

# Include all endpoint routers
api_router.include_router(leaderboards.router, prefix="", tags=["Leaderboards"])
api_router.include_router(habits.router, prefix="/habits", tags=["Habits"])
api_router.include_router(scoring.router, prefix="/scoring", tags=["Scoring"])
