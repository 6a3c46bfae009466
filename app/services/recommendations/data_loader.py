"""
Data loader for recommendations with caching
Converts store records into validated core types at the boundary
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import models
from app.services.recommendations.models import InteractionEvent, Product, UserProfile

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class StoreSnapshot:
    """Already-materialized inputs for the scoring engines"""
    products: List[Product] = field(default_factory=list)
    profiles: Dict[str, UserProfile] = field(default_factory=dict)
    interactions: List[InteractionEvent] = field(default_factory=list)

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        return self.profiles.get(user_id)

    def get_stats(self) -> Dict[str, int]:
        return {
            "total_products": len(self.products),
            "total_profiles": len(self.profiles),
            "total_interactions": len(self.interactions)
        }


def _row_to_dict(row) -> Dict[str, Any]:
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}


def _convert(documents: Iterable[Mapping[str, Any]], factory: Callable[[Mapping[str, Any]], T], kind: str) -> List[T]:
    """Convert documents, skipping (and logging) the invalid ones"""
    converted = []
    skipped = 0
    for doc in documents:
        try:
            converted.append(factory(doc))
        except (ValueError, TypeError) as e:
            skipped += 1
            logger.warning("Skipping invalid %s record: %s", kind, e)
    if skipped:
        logger.warning("Skipped %d invalid %s records", skipped, kind)
    return converted


class DataLoader:
    """
    Loads catalog, profiles and interactions for recommendation requests
    Keeps the last snapshot for `cache_ttl` seconds
    """

    def __init__(self, cache_ttl: int = 60):
        self._snapshot: Optional[StoreSnapshot] = None
        self._last_load_time: Optional[datetime] = None
        self._cache_ttl = cache_ttl

    @property
    def is_cached(self) -> bool:
        """Check if data is cached and still valid"""
        if self._last_load_time is None or self._snapshot is None:
            return False
        age = (datetime.now() - self._last_load_time).total_seconds()
        return age < self._cache_ttl

    @property
    def snapshot(self) -> Optional[StoreSnapshot]:
        return self._snapshot

    async def load_from_db(
        self,
        db: AsyncSession,
        force_refresh: bool = False
    ) -> StoreSnapshot:
        """
        Load all store data from the database

        Args:
            db: Database session
            force_refresh: Force reload even if cached

        Returns:
            StoreSnapshot with validated records
        """
        if self.is_cached and not force_refresh:
            logger.debug("Using cached store snapshot")
            return self._snapshot

        logger.info("Loading store data from database...")

        products = (await db.execute(select(models.Product))).scalars().all()
        profiles = (await db.execute(select(models.Profile))).scalars().all()
        interactions = (await db.execute(
            select(models.Interaction).order_by(models.Interaction.createdAt)
        )).scalars().all()

        return self.load_from_documents(
            products=[_row_to_dict(row) for row in products],
            profiles=[_row_to_dict(row) for row in profiles],
            interactions=[_row_to_dict(row) for row in interactions]
        )

    def load_from_documents(
        self,
        products: Iterable[Mapping[str, Any]],
        profiles: Iterable[Mapping[str, Any]],
        interactions: Iterable[Mapping[str, Any]]
    ) -> StoreSnapshot:
        """
        Load store data from plain documents (seed data, tests)

        Returns:
            StoreSnapshot with validated records
        """
        snapshot = StoreSnapshot(
            products=_convert(products, Product.from_document, "product"),
            profiles={
                profile.user_id: profile
                for profile in _convert(profiles, UserProfile.from_document, "profile")
            },
            interactions=_convert(interactions, InteractionEvent.from_document, "interaction")
        )

        self._snapshot = snapshot
        self._last_load_time = datetime.now()
        logger.info(
            "Loaded %d products, %d profiles, %d interactions",
            len(snapshot.products), len(snapshot.profiles), len(snapshot.interactions)
        )
        return snapshot

    def get_stats(self) -> Dict:
        """Get statistics about loaded data"""
        stats = {
            "is_cached": self.is_cached,
            "last_load_time": self._last_load_time.isoformat() if self._last_load_time else None
        }
        if self._snapshot is not None:
            stats.update(self._snapshot.get_stats())
        return stats
