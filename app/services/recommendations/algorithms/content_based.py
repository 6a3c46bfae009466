"""
Content-based recommendation algorithm
Matches products to a user by comparing fixed-layout feature vectors
"""
import logging
from typing import List, Optional, Sequence

import numpy as np

from app.services.recommendations.base import RecommendationAlgorithm
from app.services.recommendations.models import Product, ScoredRecommendation, UserProfile
from app.services.recommendations.settings import ContentSettings
from app.services.recommendations.vector_math import cosine_similarity

logger = logging.getLogger(__name__)

EXPLANATION_SEPARATOR = " • "


class ContentBasedRecommendationAlgorithm(RecommendationAlgorithm):
    """
    Content-based scorer

    Product and user vectors share one field layout:
    [skin type flags] + [skin concern flags] + [price tier] + [rating / 5]
    + [sustainability] + [tracked ingredient weights]
    """

    def __init__(self, config: Optional[ContentSettings] = None):
        super().__init__(name="content_based")
        self.config = config or ContentSettings()
        self.ingredients = list(self.config.ingredient_weights.keys())

    @property
    def vector_length(self) -> int:
        return len(self.config.skin_types) + len(self.config.skin_concerns) + 3 + len(self.ingredients)

    def price_tier(self, price: float) -> float:
        """Map a price onto its stepped tier value"""
        if price < self.config.price_tier_low:
            return 0.2
        if price < self.config.price_tier_medium:
            return 0.5
        if price < self.config.price_tier_high:
            return 0.7
        return 1.0

    @staticmethod
    def _contains_ingredient(product: Product, ingredient: str) -> bool:
        needle = ingredient.lower()
        return any(needle in item.lower() for item in product.ingredients)

    def build_product_vector(self, product: Product) -> np.ndarray:
        """Feature vector describing a product"""
        skin_types = {t.value for t in product.skin_types}
        concerns = {c.value for c in product.skin_concerns}

        features: List[float] = []
        features.extend(1.0 if t in skin_types else 0.0 for t in self.config.skin_types)
        features.extend(1.0 if c in concerns else 0.0 for c in self.config.skin_concerns)
        features.append(self.price_tier(product.price))
        features.append(product.rating / 5.0)
        features.append(1.0 if product.is_sustainable else 0.0)
        for ingredient in self.ingredients:
            weight = self.config.ingredient_weights[ingredient]
            features.append(weight if self._contains_ingredient(product, ingredient) else 0.0)

        return np.array(features, dtype=float)

    def build_user_vector(
        self,
        profile: UserProfile,
        history: Sequence[Product] = ()
    ) -> np.ndarray:
        """
        Feature vector describing a user's preferences

        Price tier and rating come from the averages of the interaction
        history, falling back to configured defaults when it is empty.
        Ingredient features are the fraction of history items containing
        each tracked ingredient.
        """
        concerns = {c.value for c in profile.skin_concerns}

        if history:
            avg_price = sum(p.price for p in history) / len(history)
            avg_rating = sum(p.rating for p in history) / len(history)
        else:
            avg_price = self.config.default_average_price
            avg_rating = self.config.default_average_rating

        features: List[float] = []
        features.extend(1.0 if profile.skin_type.value == t else 0.0 for t in self.config.skin_types)
        features.extend(1.0 if c in concerns else 0.0 for c in self.config.skin_concerns)
        features.append(self.price_tier(avg_price))
        features.append(avg_rating / 5.0)
        features.append(1.0 if profile.sustainability_preference else 0.0)

        denominator = max(len(history), 1)
        for ingredient in self.ingredients:
            matches = sum(1 for p in history if self._contains_ingredient(p, ingredient))
            features.append(matches / denominator)

        return np.array(features, dtype=float)

    def explain(self, product: Product, profile: UserProfile) -> str:
        """Human-readable reasons a product suits the profile"""
        reasons = []

        if profile.skin_type in product.skin_types:
            reasons.append(f"Perfect for {profile.skin_type.value} skin")

        matching = [
            c for c in self.config.skin_concerns
            if any(pc.value == c for pc in product.skin_concerns)
            and any(uc.value == c for uc in profile.skin_concerns)
        ]
        if matching:
            reasons.append(f"Addresses your {', '.join(matching)} concerns")

        if product.is_sustainable and profile.sustainability_preference:
            reasons.append("Matches your sustainability preference")

        return EXPLANATION_SEPARATOR.join(reasons)

    def recommend(
        self,
        profile: UserProfile,
        products: Sequence[Product],
        history: Sequence[Product] = (),
        limit: int = 10
    ) -> List[ScoredRecommendation]:
        """
        Score every product against the user vector

        Args:
            profile: Target user's skin profile
            products: Catalog snapshot
            history: Products the user has interacted with
            limit: Number of recommendations to return

        Returns:
            Recommendations sorted by cosine similarity (descending)
        """
        user_vector = self.build_user_vector(profile, history)

        recommendations = []
        for product in products:
            score = cosine_similarity(user_vector, self.build_product_vector(product))
            recommendations.append(ScoredRecommendation(
                product_id=product.id,
                product=product,
                score=score,
                algorithm=self.name,
                explanation=self.explain(product, profile)
            ))

        logger.debug("Content-based scored %d products for user %s", len(recommendations), profile.user_id)
        return self.rank(recommendations, limit)

    def get_info(self) -> dict:
        """Get algorithm information"""
        info = super().get_info()
        info.update({
            "vector_length": self.vector_length,
            "tracked_ingredients": self.ingredients
        })
        return info
