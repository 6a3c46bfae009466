"""
Data models for recommendations
"""
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field
from datetime import datetime

from app.services.recommendations.models.product import Product, ProductId


@dataclass
class ScoredRecommendation:
    """Single recommendation item"""
    product_id: ProductId
    score: float
    algorithm: str
    product: Optional[Product] = None
    confidence: Optional[float] = None
    explanation: Optional[str] = None
    reasons: Optional[List[str]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {
            "product_id": self.product_id,
            "product": self.product.to_dict() if self.product else None,
            "score": round(self.score, 4),
            "algorithm": self.algorithm,
            "confidence": round(self.confidence, 4) if self.confidence is not None else None,
        }
        if self.explanation is not None:
            data["explanation"] = self.explanation
        if self.reasons is not None:
            data["reasons"] = list(self.reasons)
        if self.metadata:
            data["metadata"] = self.metadata
        return data


@dataclass
class RecommendationResult:
    """Result with multiple recommendations"""
    user_id: str
    recommendations: List[ScoredRecommendation]
    weights: Dict[str, float] = field(default_factory=dict)
    engine_errors: Dict[str, str] = field(default_factory=dict)
    execution_time_ms: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def partial(self) -> bool:
        """True when one of the engines failed"""
        return bool(self.engine_errors)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "user_id": self.user_id,
            "recommendations": [rec.to_dict() for rec in self.recommendations],
            "weights": self.weights,
            "engine_errors": self.engine_errors,
            "partial": self.partial,
            "execution_time_ms": round(self.execution_time_ms, 2),
            "timestamp": self.timestamp.isoformat(),
            "count": len(self.recommendations),
            "metadata": self.metadata
        }
