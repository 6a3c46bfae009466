"""
SQLAlchemy models for the catalog, profile and interaction stores
Mirrors the documents the recommendation engines read
"""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, JSON, String, Text, Index

from app.core.database import Base


class Product(Base):
    """
    Product model - catalog entry
    """
    __tablename__ = "Products"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    brand = Column(String, nullable=False, index=True)
    description = Column(Text)
    price = Column(Float, nullable=False)
    rating = Column(Float, default=0.0)
    skinTypes = Column(JSON, default=list)  # Array of skin type tags
    skinConcerns = Column(JSON, default=list)  # Array of skin concern tags
    ingredient_list = Column(JSON, default=list)
    isSustainable = Column(Boolean, default=False)
    imageUrl = Column(String)

    createdAt = Column(DateTime, default=datetime.now)


class Profile(Base):
    """
    Profile model - one skin profile per user
    """
    __tablename__ = "Profiles"

    user = Column(String, primary_key=True)
    skinType = Column(String, nullable=False)
    skinConcerns = Column(JSON, default=list)
    sustainabilityPreference = Column(Boolean, default=False)

    updatedAt = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class Interaction(Base):
    """
    Interaction model - append-only user behaviour log
    """
    __tablename__ = "Interactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    userId = Column(String, nullable=False)
    productId = Column(String, nullable=False)
    interactionType = Column(String, nullable=False)
    rating = Column(Integer)
    timeSpent = Column(Float, default=0.0)

    createdAt = Column(DateTime, default=datetime.now)

    __table_args__ = (
        Index("ix_interactions_user_product_type", "userId", "productId", "interactionType"),
        Index("ix_interactions_user_created", "userId", "createdAt"),
        Index("ix_interactions_product_created", "productId", "createdAt"),
    )
