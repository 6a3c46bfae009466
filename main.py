"""
FastAPI Skincare Recommendation Service - Main Application
Hybrid content-based / collaborative product recommendations
"""
import logging
from datetime import datetime
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from app.core.config import settings
from app.core.database import init_db
from app.routers import recommendations

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# Scheduler instance
scheduler = AsyncIOScheduler()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager
    Handles startup and shutdown events
    """
    logger.info("Starting %s", settings.APP_NAME)

    await init_db()

    # Nightly evaluation feeds precision back into the blend weights
    if settings.ENABLE_CRON:
        from app.services.recommendations_service import run_weight_rebalancing

        scheduler.add_job(
            run_weight_rebalancing,
            trigger=CronTrigger(hour=0, minute=0),
            id="weight_rebalancing",
            name="Nightly blend weight rebalancing",
            replace_existing=True
        )
        scheduler.start()
        logger.info("Weight rebalancing scheduled daily at 00:00")

    yield

    logger.info("Shutting down application")
    if scheduler.running:
        scheduler.shutdown()


# Create FastAPI application
app = FastAPI(
    title="Skincare Recommendation Service",
    description="Hybrid skincare product recommendations from skin profiles and user behaviour",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint - health check"""
    return {
        "message": "Skincare Recommendation Service API",
        "status": "running",
        "version": "1.0.0",
        "timestamp": datetime.now().isoformat()
    }


app.include_router(recommendations.router, prefix="/recommendations", tags=["recommendations"])


@app.exception_handler(404)
async def not_found_handler(request, exc):
    return JSONResponse(
        status_code=404,
        content={"message": "page not found"}
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG
    )
