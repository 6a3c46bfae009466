"""
Plain configuration objects for the scoring engines

Built from app.core.config.Settings at startup and injected into the
engines, so the scoring code never reads process-wide settings itself.
"""
from dataclasses import dataclass, field
from typing import Dict, Tuple

from app.services.recommendations.models.enums import SkinConcern, SkinType


@dataclass(frozen=True)
class ContentSettings:
    """Configuration for the content-based scorer"""
    ingredient_weights: Dict[str, float] = field(default_factory=lambda: {
        "hyaluronic acid": 0.9,
        "retinol": 0.8,
        "niacinamide": 0.7,
        "salicylic acid": 0.8,
        "glycolic acid": 0.7,
        "ceramides": 0.6,
    })
    skin_types: Tuple[str, ...] = tuple(t.value for t in SkinType)
    skin_concerns: Tuple[str, ...] = tuple(c.value for c in SkinConcern)
    price_tier_low: float = 20.0
    price_tier_medium: float = 40.0
    price_tier_high: float = 60.0
    default_average_price: float = 30.0
    default_average_rating: float = 4.0

    def __post_init__(self):
        if not self.price_tier_low <= self.price_tier_medium <= self.price_tier_high:
            raise ValueError("Price tiers must be ordered low <= medium <= high")
        for name, weight in self.ingredient_weights.items():
            if not 0.0 <= weight <= 1.0:
                raise ValueError(f"Ingredient weight for '{name}' must be in [0, 1]")
        # Enumerations must only name known tags
        for value in self.skin_types:
            SkinType(value)
        for value in self.skin_concerns:
            SkinConcern(value)


@dataclass(frozen=True)
class CollaborativeSettings:
    """Configuration for the collaborative scorer"""
    view_weight: float = 1.0
    time_threshold: float = 30.0
    time_weight: float = 1.0
    purchase_weight: float = 3.0
    favorite_weight: float = 2.0
    review_weight: float = 1.0
    max_rating: float = 5.0
    min_common_items: int = 2
    profile_weight: float = 0.4
    interaction_weight: float = 0.6


@dataclass(frozen=True)
class HybridSettings:
    """Configuration for the hybrid blender"""
    default_limit: int = 10
    limit_multiplier: int = 2
    same_brand_penalty: float = 0.8
    similar_concerns_penalty: float = 0.9
    high_overlap_threshold: float = 0.8

    def __post_init__(self):
        if self.default_limit < 1:
            raise ValueError("default_limit must be positive")
        if self.limit_multiplier < 1:
            raise ValueError("limit_multiplier must be at least 1")
