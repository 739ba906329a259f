from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn
from dotenv import load_dotenv

from fitchallenge.core.config import settings
from fitchallenge.api.v1.router import api_router
from fitchallenge.core.health import build_health_report, HealthStatus
from fitchallenge.services.logger import logger

# Load environment variables
load_dotenv()

# Create FastAPI app
app = FastAPI(
    title="FitChallenge API",
    description="Challenge scoring, leaderboards and habit schedules",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
    redirect_slashes=False,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router, prefix="/api/v1")


# Health check endpoint
@app.get("/health")
async def health_check():
    report = await build_health_report(api_version=app.version)
    status_code = (
        status.HTTP_200_OK
        if report.status != HealthStatus.CRITICAL
        else status.HTTP_503_SERVICE_UNAVAILABLE
    )
    return JSONResponse(content=report.model_dump(mode="json"), status_code=status_code)


@app.on_event("startup")
async def startup_event():
    if not settings.supabase_configured:
        logger.warning(
            "Supabase is not configured; leaderboard endpoints will fail",
            {"environment": settings.ENVIRONMENT},
        )
    logger.info("FitChallenge API started", {"environment": settings.ENVIRONMENT})


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
    )
