"""
User-based collaborative filtering algorithm
Propagates positive ratings from the most similar users
"""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from app.services.recommendations.base import RecommendationAlgorithm
from app.services.recommendations.models import (
    InteractionEvent,
    InteractionType,
    ProductId,
    ScoredRecommendation,
    UserProfile,
)
from app.services.recommendations.settings import CollaborativeSettings
from app.services.recommendations.vector_math import pearson_correlation

logger = logging.getLogger(__name__)

# Structural constants of the neighbourhood heuristic
TOP_SIMILAR_USERS = 3
POSITIVE_RATING_THRESHOLD = 3  # an interaction is positive when rating > 3

COLLABORATIVE_REASON = "Similar user preferences"

# user_id -> product_id -> preference
PreferenceView = Dict[str, Dict[ProductId, float]]


def _jaccard(a: Iterable, b: Iterable) -> float:
    a, b = set(a), set(b)
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


class CollaborativeRecommendationAlgorithm(RecommendationAlgorithm):
    """
    Nearest-neighbour collaborative filtering

    Users are compared by profile overlap and by their preferences on
    commonly interacted products. Products liked by the top similar users
    and unseen by the target are scored by similarity * rating.
    """

    def __init__(self, config: Optional[CollaborativeSettings] = None):
        super().__init__(name="collaborative")
        self.config = config or CollaborativeSettings()

    def implicit_rating(self, events: Sequence[InteractionEvent]) -> float:
        """
        Behaviour-derived rating for one (user, product) pair

        Every event counts; the sum is capped at the maximum rating.
        """
        cfg = self.config
        rating = 0.0
        for event in events:
            if event.type in (InteractionType.VIEW, InteractionType.CLICK):
                rating += cfg.view_weight
            elif event.type == InteractionType.PURCHASE:
                rating += cfg.purchase_weight
            elif event.type == InteractionType.FAVORITE:
                rating += cfg.favorite_weight
            elif event.type == InteractionType.REVIEW:
                rating += cfg.review_weight
            if event.time_spent is not None and event.time_spent > cfg.time_threshold:
                rating += cfg.time_weight
        return min(rating, cfg.max_rating)

    def preferences(self, events: Sequence[InteractionEvent]) -> Dict[ProductId, float]:
        """
        Preference per product for a single user's events

        Explicit ratings win (averaged when there are several);
        otherwise the implicit rating of all events is used.
        """
        by_product: Dict[ProductId, List[InteractionEvent]] = defaultdict(list)
        for event in events:
            by_product[event.product_id].append(event)

        result = {}
        for product_id, product_events in by_product.items():
            explicit = [e.rating for e in product_events if e.has_rating]
            if explicit:
                result[product_id] = sum(explicit) / len(explicit)
            else:
                result[product_id] = self.implicit_rating(product_events)
        return result

    @staticmethod
    def partition(events: Iterable[InteractionEvent]) -> Dict[str, List[InteractionEvent]]:
        """Group the interaction log by owning user"""
        grouped: Dict[str, List[InteractionEvent]] = defaultdict(list)
        for event in events:
            grouped[event.user_id].append(event)
        return grouped

    def build_preference_view(self, events: Iterable[InteractionEvent]) -> PreferenceView:
        """Implicit user-item preference view of the whole log"""
        return {
            user_id: self.preferences(user_events)
            for user_id, user_events in self.partition(events).items()
        }

    @staticmethod
    def profile_overlap(profile_a: Optional[UserProfile], profile_b: Optional[UserProfile]) -> float:
        """Half shared skin type, half Jaccard overlap of concerns"""
        if profile_a is None or profile_b is None:
            return 0.0
        same_type = 1.0 if profile_a.skin_type == profile_b.skin_type else 0.0
        return 0.5 * same_type + 0.5 * _jaccard(profile_a.skin_concerns, profile_b.skin_concerns)

    def interaction_overlap(
        self,
        preferences_a: Mapping[ProductId, float],
        preferences_b: Mapping[ProductId, float]
    ) -> float:
        """
        Agreement between two users' preferences

        Pearson correlation over common products when enough are shared,
        otherwise the Jaccard overlap of the two product sets.
        """
        common = [pid for pid in preferences_a if pid in preferences_b]
        if len(common) >= self.config.min_common_items:
            return pearson_correlation(
                [preferences_a[pid] for pid in common],
                [preferences_b[pid] for pid in common]
            )
        return _jaccard(preferences_a.keys(), preferences_b.keys())

    def similarity(
        self,
        profile_a: Optional[UserProfile],
        profile_b: Optional[UserProfile],
        interactions_a: Sequence[InteractionEvent],
        interactions_b: Sequence[InteractionEvent]
    ) -> float:
        """
        Similarity between two users

        Weighted sum of profile overlap and interaction overlap; 0.0
        when either user has no interactions. May be negative when the
        two users rate common products in opposite directions.
        """
        if not interactions_a or not interactions_b:
            return 0.0
        return self._similarity(
            profile_a, profile_b,
            self.preferences(interactions_a), self.preferences(interactions_b)
        )

    def _similarity(
        self,
        profile_a: Optional[UserProfile],
        profile_b: Optional[UserProfile],
        preferences_a: Mapping[ProductId, float],
        preferences_b: Mapping[ProductId, float]
    ) -> float:
        if not preferences_a or not preferences_b:
            return 0.0
        return (
            self.config.profile_weight * self.profile_overlap(profile_a, profile_b)
            + self.config.interaction_weight * self.interaction_overlap(preferences_a, preferences_b)
        )

    def find_similar_users(
        self,
        target_user_id: str,
        users: Mapping[str, UserProfile],
        view: PreferenceView
    ) -> List[Tuple[str, float]]:
        """Top similar users with strictly positive similarity"""
        target_profile = users.get(target_user_id)
        target_preferences = view.get(target_user_id, {})

        candidates = (set(users) | set(view)) - {target_user_id}
        scored = []
        # Sorted so equal similarities resolve deterministically
        for user_id in sorted(candidates):
            score = self._similarity(target_profile, users.get(user_id), target_preferences, view.get(user_id, {}))
            if score > 0:
                scored.append((user_id, score))

        scored.sort(key=lambda item: item[1], reverse=True)
        return scored[:TOP_SIMILAR_USERS]

    def recommend(
        self,
        target_user_id: str,
        users: Mapping[str, UserProfile],
        interactions: Sequence[InteractionEvent],
        limit: int = 10
    ) -> List[ScoredRecommendation]:
        """
        Generate collaborative recommendations

        Args:
            target_user_id: User to recommend for
            users: Profiles by user id (must include the target)
            interactions: Full, unfiltered interaction log
            limit: Number of recommendations

        Returns:
            Unseen products sorted by accumulated similarity * rating
        """
        if target_user_id not in users or not interactions:
            return []
        if not (set(users) | {e.user_id for e in interactions}) - {target_user_id}:
            return []

        view = self.build_preference_view(interactions)
        similar_users = self.find_similar_users(target_user_id, users, view)
        if not similar_users:
            logger.debug("No similar users found for %s", target_user_id)
            return []

        seen = set(view.get(target_user_id, {}))
        scores: Dict[ProductId, float] = defaultdict(float)
        contributors: Dict[ProductId, int] = defaultdict(int)

        for user_id, similarity in similar_users:
            for product_id, rating in view.get(user_id, {}).items():
                if rating <= POSITIVE_RATING_THRESHOLD or product_id in seen:
                    continue
                scores[product_id] += similarity * rating
                contributors[product_id] += 1

        recommendations = [
            ScoredRecommendation(
                product_id=product_id,
                score=score,
                algorithm=self.name,
                explanation=f"Recommended by {contributors[product_id]} similar users",
                reasons=[COLLABORATIVE_REASON],
                metadata={"similar_users": contributors[product_id]}
            )
            for product_id, score in scores.items()
        ]

        logger.debug(
            "Collaborative found %d similar users and %d candidates for %s",
            len(similar_users), len(recommendations), target_user_id
        )
        return self.rank(recommendations, limit)

    def get_info(self) -> dict:
        """Get algorithm information"""
        info = super().get_info()
        info.update({
            "top_similar_users": TOP_SIMILAR_USERS,
            "positive_rating_threshold": POSITIVE_RATING_THRESHOLD,
            "min_common_items": self.config.min_common_items
        })
        return info
