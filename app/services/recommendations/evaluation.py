"""
Offline evaluation of the recommendation engines

Measures precision, recall and F1 of content-based, collaborative and
hybrid results on a per-user holdout: each user's most recently relevant
products are hidden from the engines and the recommendations are scored
against them. The content/collaborative precision is fed back into the
hybrid weights.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Sequence, Set, Tuple

import pandas as pd

from app.services.recommendations.base import RecommendationError
from app.services.recommendations.engine import HybridRecommendationEngine, RecommendOptions
from app.services.recommendations.models import (
    InteractionEvent,
    InteractionType,
    Product,
    ProductId,
    UserProfile,
)

logger = logging.getLogger(__name__)

RELEVANT_MIN_RATING = 4
ENGINES = ("content", "collaborative", "hybrid")


def precision(recommended: Sequence[ProductId], relevant: Set[ProductId]) -> float:
    """Share of recommended items that are relevant"""
    if not recommended:
        return 0.0
    return sum(1 for item in recommended if item in relevant) / len(recommended)


def recall(recommended: Sequence[ProductId], relevant: Set[ProductId]) -> float:
    """Share of relevant items that were recommended"""
    if not relevant:
        return 0.0
    return sum(1 for item in recommended if item in relevant) / len(relevant)


def f1_score(precision_value: float, recall_value: float) -> float:
    if precision_value + recall_value == 0:
        return 0.0
    return 2 * precision_value * recall_value / (precision_value + recall_value)


def _is_relevant(event: InteractionEvent) -> bool:
    return (
        event.type in (InteractionType.PURCHASE, InteractionType.FAVORITE)
        or (event.rating is not None and event.rating >= RELEVANT_MIN_RATING)
    )


def relevant_items(user_id: str, interactions: Sequence[InteractionEvent]) -> Set[ProductId]:
    """Products the user purchased, favorited or rated highly"""
    return {e.product_id for e in interactions if e.user_id == user_id and _is_relevant(e)}


def holdout_split(
    user_id: str,
    interactions: Sequence[InteractionEvent],
    holdout: int = 1
) -> Tuple[Set[ProductId], List[InteractionEvent]]:
    """
    Hide the user's most recently relevant products

    Returns the held-out product ids and the interaction log without any
    of the user's events on those products. Other users' events are kept.
    """
    latest: Dict[ProductId, datetime] = {}
    for e in interactions:
        if e.user_id == user_id and _is_relevant(e):
            if e.product_id not in latest or e.timestamp > latest[e.product_id]:
                latest[e.product_id] = e.timestamp

    ordered = sorted(latest, key=lambda pid: latest[pid], reverse=True)
    held_out = set(ordered[:max(holdout, 1)])
    remaining = [
        e for e in interactions
        if not (e.user_id == user_id and e.product_id in held_out)
    ]
    return held_out, remaining


@dataclass
class EvaluationReport:
    """Mean metrics per engine over the evaluated users"""
    evaluated_users: int
    metrics: Dict[str, Dict[str, float]] = field(default_factory=dict)
    final_weights: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "evaluated_users": self.evaluated_users,
            "metrics": self.metrics,
            "final_weights": self.final_weights
        }


def _scores(recommended: Sequence[ProductId], relevant: Set[ProductId]) -> Dict[str, float]:
    p = precision(recommended, relevant)
    r = recall(recommended, relevant)
    return {"precision": p, "recall": r, "f1": f1_score(p, r)}


def evaluate(
    engine: HybridRecommendationEngine,
    users: Mapping[str, UserProfile],
    products: Sequence[Product],
    interactions: Sequence[InteractionEvent],
    limit: int = 10,
    min_interactions: int = 5,
    adjust_weights: bool = True,
    holdout: int = 1
) -> EvaluationReport:
    """
    Evaluate every engine for each eligible user

    A user is eligible with a profile, at least `min_interactions` events
    and at least one relevant item. The user's `holdout` most recently
    relevant products are removed from the log the engines see and form
    the relevant set. When `adjust_weights` is set, the hybrid weights
    are rebalanced after each user.
    """
    catalog = {p.id: p for p in products}
    rows: List[Dict[str, Any]] = []

    for user_id, profile in users.items():
        user_events = [e for e in interactions if e.user_id == user_id]
        if len(user_events) < min_interactions:
            continue
        if not relevant_items(user_id, user_events):
            continue

        relevant, visible = holdout_split(user_id, interactions, holdout)

        history = engine.get_user_history(user_id, visible, catalog)
        content_ids = [
            rec.product_id
            for rec in engine.content_engine.safe_recommend(profile, products, history, limit).recommendations
        ]
        collaborative_ids = [
            rec.product_id
            for rec in engine.collaborative_engine.safe_recommend(
                user_id, users, visible, limit
            ).recommendations
        ]
        try:
            hybrid_ids = [
                rec.product_id
                for rec in engine.recommend(
                    user_id, profile, products, visible,
                    RecommendOptions(limit=limit, include_explanations=False), users
                )
            ]
        except RecommendationError:
            hybrid_ids = []

        row = {"user_id": user_id}
        for name, ids in zip(ENGINES, (content_ids, collaborative_ids, hybrid_ids)):
            for metric, value in _scores(ids, relevant).items():
                row[f"{name}_{metric}"] = value
        rows.append(row)

        if adjust_weights:
            engine.update_weights(row["content_precision"], row["collaborative_precision"])

    report = EvaluationReport(
        evaluated_users=len(rows),
        final_weights=engine.weights.snapshot().to_dict()
    )
    if not rows:
        logger.info("No users eligible for evaluation")
        return report

    means = pd.DataFrame(rows).drop(columns="user_id").mean()
    report.metrics = {
        name: {
            metric: round(float(means[f"{name}_{metric}"]), 4)
            for metric in ("precision", "recall", "f1")
        }
        for name in ENGINES
    }
    logger.info("Evaluated %d users: %s", report.evaluated_users, report.metrics)
    return report
