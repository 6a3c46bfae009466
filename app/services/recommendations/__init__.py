"""
Recommendations module
Provides content-based, collaborative and hybrid scoring
"""
from .base import RecommendationAlgorithm, EngineResult, RecommendationError
from .engine import HybridRecommendationEngine, RecommendOptions, BlendResult
from .models import (
    Product,
    UserProfile,
    InteractionEvent,
    ScoredRecommendation,
    RecommendationResult,
    EngineWeights,
    WeightSnapshot
)
from .algorithms import ContentBasedRecommendationAlgorithm, CollaborativeRecommendationAlgorithm

__all__ = [
    "RecommendationAlgorithm",
    "EngineResult",
    "RecommendationError",
    "HybridRecommendationEngine",
    "RecommendOptions",
    "BlendResult",
    "Product",
    "UserProfile",
    "InteractionEvent",
    "ScoredRecommendation",
    "RecommendationResult",
    "EngineWeights",
    "WeightSnapshot",
    "ContentBasedRecommendationAlgorithm",
    "CollaborativeRecommendationAlgorithm"
]
