"""
Base classes and interfaces for recommendation algorithms
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from app.services.recommendations.models import ScoredRecommendation

logger = logging.getLogger(__name__)


class RecommendationError(Exception):
    """Raised when no engine could produce any recommendation"""

    def __init__(self, message: str, causes: Optional[dict] = None):
        super().__init__(message)
        self.causes = causes or {}


@dataclass
class EngineResult:
    """
    Outcome of a single engine call

    Either a (possibly empty) list of recommendations, or the error the
    engine raised. A failed engine counts as an empty result.
    """
    algorithm: str
    recommendations: List[ScoredRecommendation] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def is_empty(self) -> bool:
        return not self.recommendations


class RecommendationAlgorithm(ABC):
    """
    Abstract base class for recommendation algorithms

    All recommendation algorithms must inherit from this class
    and implement the recommend method. Implementations are synchronous
    and operate on already-loaded data only.
    """

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def recommend(self, *args, **kwargs) -> List[ScoredRecommendation]:
        """
        Generate recommendations

        Returns:
            List of ScoredRecommendation objects sorted by score (descending)
        """

    def safe_recommend(self, *args, **kwargs) -> EngineResult:
        """
        Run recommend() and capture any failure in an EngineResult

        The error is logged with its traceback and handed back to the
        caller instead of being raised.
        """
        try:
            recommendations = self.recommend(*args, **kwargs)
        except Exception as e:
            logger.warning("Engine '%s' failed: %s", self.name, e, exc_info=True)
            return EngineResult(algorithm=self.name, error=e)
        return EngineResult(algorithm=self.name, recommendations=recommendations)

    @staticmethod
    def rank(
        recommendations: List[ScoredRecommendation],
        limit: int
    ) -> List[ScoredRecommendation]:
        """Sort by score descending (stable for ties) and keep the top `limit`"""
        ordered = sorted(recommendations, key=lambda rec: rec.score, reverse=True)
        return ordered[:max(limit, 0)]

    def get_info(self) -> dict:
        """Get information about the algorithm"""
        return {
            "name": self.name,
            "type": self.__class__.__name__
        }
