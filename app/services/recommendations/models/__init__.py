"""
Models for recommendations
"""
from .enums import SkinType, SkinConcern, InteractionType
from .product import Product, ProductId, to_product_id
from .user_profile import UserProfile
from .interaction import InteractionEvent
from .recommendation import ScoredRecommendation, RecommendationResult
from .weights import EngineWeights, WeightSnapshot

__all__ = [
    "SkinType",
    "SkinConcern",
    "InteractionType",
    "Product",
    "ProductId",
    "to_product_id",
    "UserProfile",
    "InteractionEvent",
    "ScoredRecommendation",
    "RecommendationResult",
    "EngineWeights",
    "WeightSnapshot"
]
