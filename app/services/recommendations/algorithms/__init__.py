"""
Recommendation algorithms
"""
from .content_based import ContentBasedRecommendationAlgorithm
from .collaborative import CollaborativeRecommendationAlgorithm

__all__ = [
    "ContentBasedRecommendationAlgorithm",
    "CollaborativeRecommendationAlgorithm"
]
