"""
Recommendations service - orchestration around the hybrid engine
The only layer that talks to the stores; the engines get plain data
"""
import asyncio
import logging
import time
from functools import partial
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, settings
from app.services.recommendations import (
    CollaborativeRecommendationAlgorithm,
    ContentBasedRecommendationAlgorithm,
    EngineWeights,
    HybridRecommendationEngine,
    RecommendationResult,
    RecommendOptions,
)
from app.services.recommendations.data_loader import DataLoader, StoreSnapshot
from app.services.recommendations.evaluation import EvaluationReport, evaluate
from app.services.recommendations.settings import (
    CollaborativeSettings,
    ContentSettings,
    HybridSettings,
)

logger = logging.getLogger(__name__)


def build_engine(config: Settings) -> HybridRecommendationEngine:
    """
    Create a hybrid engine, with its own weights, from application settings
    """
    content = ContentSettings(
        ingredient_weights=dict(config.ML_INGREDIENT_WEIGHTS),
        skin_types=tuple(config.ML_SKIN_TYPES),
        skin_concerns=tuple(config.ML_SKIN_CONCERNS),
        price_tier_low=config.ML_PRICE_TIER_LOW,
        price_tier_medium=config.ML_PRICE_TIER_MEDIUM,
        price_tier_high=config.ML_PRICE_TIER_HIGH,
        default_average_price=config.ML_DEFAULT_AVG_PRICE,
        default_average_rating=config.ML_DEFAULT_AVG_RATING
    )
    collaborative = CollaborativeSettings(
        view_weight=config.ML_VIEW_WEIGHT,
        time_threshold=config.ML_TIME_THRESHOLD,
        time_weight=config.ML_TIME_WEIGHT,
        purchase_weight=config.ML_PURCHASE_WEIGHT,
        favorite_weight=config.ML_FAVORITE_WEIGHT,
        review_weight=config.ML_REVIEW_WEIGHT,
        max_rating=config.ML_MAX_RATING,
        min_common_items=config.ML_MIN_COMMON_ITEMS,
        profile_weight=config.ML_PROFILE_SIMILARITY_WEIGHT,
        interaction_weight=config.ML_INTERACTION_SIMILARITY_WEIGHT
    )
    hybrid = HybridSettings(
        default_limit=config.ML_HYBRID_DEFAULT_LIMIT,
        limit_multiplier=config.ML_HYBRID_MULTIPLIER,
        same_brand_penalty=config.ML_SAME_BRAND_PENALTY,
        similar_concerns_penalty=config.ML_SIMILAR_CONCERNS_PENALTY,
        high_overlap_threshold=config.ML_HIGH_OVERLAP_THRESHOLD
    )
    weights = EngineWeights(
        content=config.ML_WEIGHT_CONTENT,
        collaborative=config.ML_WEIGHT_COLLABORATIVE,
        popularity=config.ML_WEIGHT_POPULARITY,
        diversity=config.ML_WEIGHT_DIVERSITY,
        min_weight=config.ML_MIN_WEIGHT,
        max_weight=config.ML_MAX_WEIGHT,
        step=config.ML_WEIGHT_STEP
    )
    return HybridRecommendationEngine(
        weights=weights,
        content_engine=ContentBasedRecommendationAlgorithm(content),
        collaborative_engine=CollaborativeRecommendationAlgorithm(collaborative),
        config=hybrid
    )


class RecommendationService:
    """
    Loads store data, runs the hybrid engine and wraps the outcome
    """

    def __init__(
        self,
        engine: HybridRecommendationEngine,
        data_loader: Optional[DataLoader] = None,
        max_recommendations: int = 50,
        timeout: Optional[float] = None,
        evaluation_limit: int = 10,
        evaluation_min_interactions: int = 5,
        evaluation_holdout: int = 1
    ):
        self.engine = engine
        self.data_loader = data_loader or DataLoader()
        self.max_recommendations = max_recommendations
        self.timeout = timeout
        self.evaluation_limit = evaluation_limit
        self.evaluation_min_interactions = evaluation_min_interactions
        self.evaluation_holdout = evaluation_holdout

    async def _load(self, db: Optional[AsyncSession]) -> StoreSnapshot:
        if db is not None:
            return await self.data_loader.load_from_db(db)
        if self.data_loader.snapshot is None:
            raise ValueError("No store data loaded. Provide a database session or load documents first")
        return self.data_loader.snapshot

    async def recommend(
        self,
        user_id: str,
        limit: Optional[int] = None,
        include_explanations: bool = True,
        db: Optional[AsyncSession] = None
    ) -> RecommendationResult:
        """
        Get hybrid recommendations for a user

        Args:
            user_id: Authenticated user identifier
            limit: Number of recommendations (engine default if None)
            include_explanations: Attach explanation and reasons
            db: Database session (uses the loaded snapshot if None)

        Returns:
            RecommendationResult, empty when the user has no profile

        Raises:
            RecommendationError: both engines produced nothing
            asyncio.TimeoutError: the blend exceeded the configured timeout
        """
        snapshot = await self._load(db)
        start_time = time.time()

        profile = snapshot.get_profile(user_id)
        if profile is None:
            logger.info("No profile for user %s, returning empty recommendations", user_id)
            return RecommendationResult(
                user_id=user_id,
                recommendations=[],
                weights=self.engine.weights.snapshot().to_dict(),
                metadata={"reason": "profile_not_found"}
            )

        if limit is not None:
            limit = max(1, min(limit, self.max_recommendations))
        options = RecommendOptions(limit=limit, include_explanations=include_explanations)

        call = partial(
            self.engine.recommend_detailed,
            user_id, profile, snapshot.products, snapshot.interactions, options, snapshot.profiles
        )
        # CPU-bound blend runs in a worker thread
        pending = asyncio.to_thread(call)
        if self.timeout:
            blend = await asyncio.wait_for(pending, timeout=self.timeout)
        else:
            blend = await pending

        engine_errors = {name: str(error) for name, error in blend.engine_errors.items()}
        if engine_errors:
            logger.warning("Partial recommendations for user %s: %s", user_id, engine_errors)

        return RecommendationResult(
            user_id=user_id,
            recommendations=blend.recommendations,
            weights=blend.weights.to_dict(),
            engine_errors=engine_errors,
            execution_time_ms=(time.time() - start_time) * 1000,
            metadata={
                "n_requested": limit,
                "n_returned": len(blend.recommendations),
                "include_explanations": include_explanations
            }
        )

    def get_weights(self) -> Dict[str, Any]:
        """Current blend weights and their bounds"""
        weights = self.engine.weights
        return {
            **weights.snapshot().to_dict(),
            "min_weight": weights.min_weight,
            "max_weight": weights.max_weight,
            "step": weights.step
        }

    def update_weights(self, content_precision: float, collaborative_precision: float) -> Dict[str, float]:
        """Apply one rebalancing step"""
        return self.engine.update_weights(content_precision, collaborative_precision).to_dict()

    async def evaluate(
        self,
        db: Optional[AsyncSession] = None,
        adjust_weights: bool = True
    ) -> EvaluationReport:
        """Run the offline evaluation over the stored data"""
        snapshot = await self._load(db)
        return await asyncio.to_thread(
            evaluate,
            self.engine,
            snapshot.profiles,
            snapshot.products,
            snapshot.interactions,
            self.evaluation_limit,
            self.evaluation_min_interactions,
            adjust_weights,
            self.evaluation_holdout
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get service statistics"""
        return {
            "engine": self.engine.get_info(),
            "data_loader": self.data_loader.get_stats()
        }


# Global service instance
_service_instance: Optional[RecommendationService] = None


def get_recommendation_service() -> RecommendationService:
    """Get or create the global service instance"""
    global _service_instance
    if _service_instance is None:
        _service_instance = RecommendationService(
            engine=build_engine(settings),
            data_loader=DataLoader(cache_ttl=settings.DATA_CACHE_TTL),
            max_recommendations=settings.ML_MAX_RECOMMENDATIONS,
            timeout=settings.RECOMMENDATION_TIMEOUT_SECONDS,
            evaluation_limit=settings.EVALUATION_LIMIT,
            evaluation_min_interactions=settings.EVALUATION_MIN_INTERACTIONS,
            evaluation_holdout=settings.EVALUATION_HOLDOUT
        )
    return _service_instance


async def run_weight_rebalancing():
    """Scheduled job: evaluate stored data and rebalance the blend weights"""
    from app.core.database import AsyncSessionLocal

    service = get_recommendation_service()
    async with AsyncSessionLocal() as db:
        report = await service.evaluate(db=db, adjust_weights=True)
    logger.info("Scheduled rebalancing finished: %s", report.to_dict())
    return report.to_dict()
