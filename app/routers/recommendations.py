"""
Recommendations router
Endpoints for hybrid recommendations and blend-weight management
"""
import asyncio

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.services.recommendations import RecommendationError
from app.services.recommendations_service import RecommendationService, get_recommendation_service

router = APIRouter()


@router.get("/weights")
async def get_weights(service: RecommendationService = Depends(get_recommendation_service)):
    """
    Current blend weights with their clamping bounds and step
    """
    return service.get_weights()


@router.post("/weights")
async def update_weights(
    content_precision: float = Body(..., ge=0.0, le=1.0, description="Precision of content-based results"),
    collaborative_precision: float = Body(..., ge=0.0, le=1.0, description="Precision of collaborative results"),
    service: RecommendationService = Depends(get_recommendation_service)
):
    """
    Apply one hill-climbing step to the blend weights

    Example:
    ```json
    {
        "content_precision": 0.4,
        "collaborative_precision": 0.2
    }
    ```

    Weight moves towards the engine with the higher precision, clamped
    to the configured bounds.
    """
    return {
        "success": True,
        "weights": service.update_weights(content_precision, collaborative_precision)
    }


@router.post("/evaluate")
async def evaluate(
    adjust_weights: bool = Query(True, description="Rebalance weights after each evaluated user"),
    db: AsyncSession = Depends(get_db),
    service: RecommendationService = Depends(get_recommendation_service)
):
    """
    Evaluate content-based, collaborative and hybrid results against
    each user's purchases, favorites and high ratings
    """
    report = await service.evaluate(db=db, adjust_weights=adjust_weights)
    return report.to_dict()


@router.get("/{user_id}")
async def get_recommendations(
    user_id: str,
    limit: int = Query(10, ge=1, le=settings.ML_MAX_RECOMMENDATIONS, description="Number of recommendations"),
    include_explanations: bool = Query(True, description="Attach explanation and reasons"),
    db: AsyncSession = Depends(get_db),
    service: RecommendationService = Depends(get_recommendation_service)
):
    """
    Get hybrid recommendations for a user

    Returns ranked products with score, confidence and, optionally,
    explanation and reasons. A user without a skin profile gets an
    empty list.
    """
    try:
        result = await service.recommend(
            user_id=user_id,
            limit=limit,
            include_explanations=include_explanations,
            db=db
        )
    except RecommendationError as e:
        return JSONResponse(status_code=500, content={"message": str(e)})
    except asyncio.TimeoutError:
        return JSONResponse(status_code=504, content={"message": "Recommendation request timed out"})

    return result.to_dict()
