"""
Main recommendation engine
Blends content-based and collaborative results into one ranking
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from app.services.recommendations.algorithms import (
    CollaborativeRecommendationAlgorithm,
    ContentBasedRecommendationAlgorithm,
)
from app.services.recommendations.algorithms.collaborative import COLLABORATIVE_REASON
from app.services.recommendations.base import EngineResult, RecommendationError
from app.services.recommendations.models import (
    EngineWeights,
    InteractionEvent,
    Product,
    ProductId,
    ScoredRecommendation,
    UserProfile,
    WeightSnapshot,
)
from app.services.recommendations.settings import HybridSettings

logger = logging.getLogger(__name__)

CONTENT_REASON = "Content-based matching"


@dataclass(frozen=True)
class RecommendOptions:
    """Request-scoped options"""
    limit: Optional[int] = None
    include_explanations: bool = True

    def __post_init__(self):
        if self.limit is not None and self.limit < 1:
            raise ValueError(f"limit must be a positive integer, got {self.limit}")


@dataclass
class BlendCandidate:
    """Intermediate per-product state while blending"""
    product: Product
    content_score: float = 0.0
    collaborative_score: float = 0.0
    explanation: str = ""
    reasons: List[str] = field(default_factory=list)
    combined_score: float = 0.0
    confidence: float = 0.0
    diversity_score: float = 1.0
    popularity_score: float = 0.0
    final_score: float = 0.0


@dataclass
class BlendResult:
    """Ranked recommendations plus the engine outcomes that produced them"""
    recommendations: List[ScoredRecommendation]
    weights: WeightSnapshot
    engine_results: Dict[str, EngineResult] = field(default_factory=dict)

    @property
    def engine_errors(self) -> Dict[str, Exception]:
        return {
            name: result.error
            for name, result in self.engine_results.items()
            if result.error is not None
        }


class HybridRecommendationEngine:
    """
    Hybrid recommendation engine

    Runs both engines independently, merges their candidates with the
    current blend weights, penalises candidates too close to the user's
    history and adds a popularity boost.
    """

    def __init__(
        self,
        weights: Optional[EngineWeights] = None,
        content_engine: Optional[ContentBasedRecommendationAlgorithm] = None,
        collaborative_engine: Optional[CollaborativeRecommendationAlgorithm] = None,
        config: Optional[HybridSettings] = None
    ):
        """
        Initialize hybrid engine

        Args:
            weights: Blend weights owned by the caller
            content_engine: Content-based scorer
            collaborative_engine: Collaborative scorer
            config: Limits and diversity penalties
        """
        self.weights = weights or EngineWeights()
        self.content_engine = content_engine or ContentBasedRecommendationAlgorithm()
        self.collaborative_engine = collaborative_engine or CollaborativeRecommendationAlgorithm()
        self.config = config or HybridSettings()

    def recommend(
        self,
        user_id: str,
        profile: Optional[UserProfile],
        products: Sequence[Product],
        interactions: Sequence[InteractionEvent] = (),
        options: Optional[RecommendOptions] = None,
        users: Optional[Mapping[str, UserProfile]] = None
    ) -> List[ScoredRecommendation]:
        """
        Get blended recommendations for a user

        Raises:
            RecommendationError: if both engines return nothing
        """
        return self.recommend_detailed(
            user_id, profile, products, interactions, options, users
        ).recommendations

    def recommend_detailed(
        self,
        user_id: str,
        profile: Optional[UserProfile],
        products: Sequence[Product],
        interactions: Sequence[InteractionEvent] = (),
        options: Optional[RecommendOptions] = None,
        users: Optional[Mapping[str, UserProfile]] = None
    ) -> BlendResult:
        """
        Get blended recommendations together with per-engine outcomes

        Args:
            user_id: Target user
            profile: Target user's profile (None yields no recommendations)
            products: Catalog snapshot
            interactions: Full interaction log
            options: Limit and explanation flags
            users: Profiles of other users for the collaborative engine

        Returns:
            BlendResult with the ranked list and the weights used
        """
        options = options or RecommendOptions()
        weights = self.weights.snapshot()

        if profile is None or not products:
            return BlendResult(recommendations=[], weights=weights)

        limit = self.config.default_limit if options.limit is None else options.limit
        candidate_limit = limit * self.config.limit_multiplier

        catalog: Dict[ProductId, Product] = {}
        for product in products:
            catalog.setdefault(product.id, product)

        history = self.get_user_history(user_id, interactions, catalog)

        profiles = dict(users or {})
        profiles[user_id] = profile

        content = self.content_engine.safe_recommend(profile, products, history, candidate_limit)
        collaborative = self.collaborative_engine.safe_recommend(
            user_id, profiles, interactions, candidate_limit
        )
        engine_results = {content.algorithm: content, collaborative.algorithm: collaborative}

        if content.is_empty and collaborative.is_empty:
            causes = {name: r.error for name, r in engine_results.items() if r.error is not None}
            logger.error("Both engines returned no recommendations for user %s", user_id)
            raise RecommendationError("Failed to generate recommendations", causes=causes)

        combined = self.combine(content.recommendations, collaborative.recommendations, catalog, weights)
        diverse = self.apply_diversity(combined, history)
        boosted = self.add_popularity_boost(diverse, interactions, weights)

        ranked = sorted(boosted, key=lambda c: c.final_score, reverse=True)[:limit]

        recommendations = [
            ScoredRecommendation(
                product_id=c.product.id,
                product=c.product,
                score=c.final_score,
                algorithm="hybrid",
                confidence=c.confidence,
                explanation=c.explanation if options.include_explanations else None,
                reasons=list(c.reasons) if options.include_explanations else None,
                metadata={
                    "content_score": round(c.content_score, 4),
                    "collaborative_score": round(c.collaborative_score, 4),
                    "diversity_score": round(c.diversity_score, 4),
                    "popularity_score": round(c.popularity_score, 4)
                }
            )
            for c in ranked
        ]

        return BlendResult(recommendations=recommendations, weights=weights, engine_results=engine_results)

    @staticmethod
    def get_user_history(
        user_id: str,
        interactions: Sequence[InteractionEvent],
        catalog: Mapping[ProductId, Product]
    ) -> List[Product]:
        """Catalog products the user interacted with; unknown ids are dropped"""
        return [
            catalog[event.product_id]
            for event in interactions
            if event.user_id == user_id and event.product_id in catalog
        ]

    @staticmethod
    def calculate_confidence(content_score: float, collaborative_score: float) -> float:
        """Average of engine agreement and engine coverage"""
        agreement = min(content_score, collaborative_score)
        coverage = (0.5 if content_score > 0 else 0.0) + (0.5 if collaborative_score > 0 else 0.0)
        return (agreement + coverage) / 2

    def combine(
        self,
        content_recs: Sequence[ScoredRecommendation],
        collaborative_recs: Sequence[ScoredRecommendation],
        catalog: Mapping[ProductId, Product],
        weights: WeightSnapshot
    ) -> List[BlendCandidate]:
        """Union both engines' results keyed by product id"""
        combined: Dict[ProductId, BlendCandidate] = {}

        for rec in content_recs:
            product = rec.product or catalog.get(rec.product_id)
            if product is None:
                continue
            combined[rec.product_id] = BlendCandidate(
                product=product,
                content_score=rec.score,
                explanation=rec.explanation or "",
                reasons=[CONTENT_REASON]
            )

        for rec in collaborative_recs:
            candidate = combined.get(rec.product_id)
            if candidate is not None:
                candidate.collaborative_score = rec.score
                candidate.reasons.append(COLLABORATIVE_REASON)
                continue

            product = rec.product or catalog.get(rec.product_id)
            if product is None:
                continue
            combined[rec.product_id] = BlendCandidate(
                product=product,
                collaborative_score=rec.score,
                explanation=rec.explanation or "",
                reasons=[COLLABORATIVE_REASON]
            )

        for candidate in combined.values():
            candidate.combined_score = (
                candidate.content_score * weights.content
                + candidate.collaborative_score * weights.collaborative
            )
            candidate.confidence = self.calculate_confidence(
                candidate.content_score, candidate.collaborative_score
            )

        return list(combined.values())

    def apply_diversity(
        self,
        candidates: List[BlendCandidate],
        history: Sequence[Product]
    ) -> List[BlendCandidate]:
        """Penalise candidates sharing brand or most concerns with the history"""
        history_brands = {p.brand for p in history}
        history_concerns = set()
        for p in history:
            history_concerns |= p.skin_concerns

        for candidate in candidates:
            diversity = 1.0

            if candidate.product.brand in history_brands:
                diversity *= self.config.same_brand_penalty

            concerns = candidate.product.skin_concerns
            overlap_ratio = len(concerns & history_concerns) / max(len(concerns), 1)
            if overlap_ratio > self.config.high_overlap_threshold:
                diversity *= self.config.similar_concerns_penalty

            candidate.diversity_score = diversity
            candidate.final_score = candidate.combined_score * diversity

        return candidates

    @staticmethod
    def add_popularity_boost(
        candidates: List[BlendCandidate],
        interactions: Sequence[InteractionEvent],
        weights: WeightSnapshot
    ) -> List[BlendCandidate]:
        """Add popularity relative to the most interacted-with product"""
        counts = Counter(event.product_id for event in interactions)
        max_count = max(max(counts.values(), default=0), 1)

        for candidate in candidates:
            popularity = counts.get(candidate.product.id, 0) / max_count
            candidate.popularity_score = popularity
            candidate.final_score += popularity * weights.popularity

        return candidates

    def update_weights(self, content_precision: float, collaborative_precision: float) -> WeightSnapshot:
        """
        Shift blend weight towards the more precise engine

        Args:
            content_precision: Measured precision of content-based results
            collaborative_precision: Measured precision of collaborative results

        Returns:
            Weights after the adjustment
        """
        return self.weights.rebalance(content_precision, collaborative_precision)

    def get_info(self) -> Dict:
        """Get engine information"""
        weights = self.weights.snapshot()
        return {
            "weights": weights.to_dict(),
            "bounds": {
                "min_weight": self.weights.min_weight,
                "max_weight": self.weights.max_weight,
                "step": self.weights.step
            },
            "limits": {
                "default": self.config.default_limit,
                "multiplier": self.config.limit_multiplier
            },
            "algorithms": {
                self.content_engine.name: self.content_engine.get_info(),
                self.collaborative_engine.name: self.collaborative_engine.get_info()
            }
        }
