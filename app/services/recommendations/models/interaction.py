"""
Interaction event model
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from app.services.recommendations.models.enums import InteractionType
from app.services.recommendations.models.product import ProductId, to_product_id


@dataclass(frozen=True)
class InteractionEvent:
    """
    Single entry of the append-only interaction log

    Several events per (user, product) pair are legal and all of them
    count towards the implicit preference of that pair.
    """
    user_id: str
    product_id: ProductId
    type: InteractionType
    rating: Optional[int] = None
    time_spent: Optional[float] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if self.rating is not None and not 1 <= self.rating <= 5:
            raise ValueError("Interaction rating must be within 1-5")
        if self.time_spent is not None and self.time_spent < 0:
            raise ValueError("Interaction time spent must be non-negative")

    @property
    def has_rating(self) -> bool:
        return self.rating is not None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "InteractionEvent":
        """Build an event from an interaction-store document"""
        user_id = doc.get("userId", doc.get("user_id"))
        if user_id is None:
            raise ValueError("Interaction has no user")
        raw_type = doc.get("interactionType", doc.get("type"))
        rating = doc.get("rating")
        time_spent = doc.get("timeSpent", doc.get("time_spent"))
        timestamp = doc.get("createdAt", doc.get("timestamp"))
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        return cls(
            user_id=str(user_id),
            product_id=to_product_id(doc.get("productId", doc.get("product_id"))),
            type=InteractionType(raw_type),
            rating=int(rating) if rating is not None else None,
            time_spent=float(time_spent) if time_spent is not None else None,
            timestamp=timestamp or datetime.now(),
        )
