"""
Database configuration and session management
Backs the catalog, profile and interaction stores
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from app.core.config import settings

logger = logging.getLogger(__name__)

# Create async engine
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
    pool_size=10,
    max_overflow=20
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)

# Base class for store tables
Base = declarative_base()


async def init_db():
    """
    Create store tables if they don't exist
    """
    async with engine.begin() as conn:
        # Register tables on Base.metadata
        from app.models import models  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)
    logger.info("Store tables created/verified")


async def get_db() -> AsyncSession:
    """
    Dependency for getting database session
    Usage: db: AsyncSession = Depends(get_db)
    """
    async with AsyncSessionLocal() as session:
        yield session
