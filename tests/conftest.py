"""
Shared fixtures for the recommendation tests
"""
from datetime import datetime, timedelta

import pytest

from app.services.recommendations.models import (
    EngineWeights,
    InteractionEvent,
    InteractionType,
    Product,
    SkinConcern,
    SkinType,
    UserProfile,
)

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def make_product():
    def _make(
        product_id,
        brand="acme",
        price=25.0,
        rating=4.0,
        ingredients=(),
        skin_types=(),
        concerns=(),
        sustainable=False
    ):
        return Product(
            id=str(product_id),
            brand=brand,
            price=price,
            rating=rating,
            ingredients=tuple(ingredients),
            skin_types=frozenset(SkinType(t) for t in skin_types),
            skin_concerns=frozenset(SkinConcern(c) for c in concerns),
            is_sustainable=sustainable
        )
    return _make


@pytest.fixture
def make_profile():
    def _make(user_id, skin_type="dry", concerns=(), sustainable=False):
        return UserProfile(
            user_id=user_id,
            skin_type=SkinType(skin_type),
            skin_concerns=frozenset(SkinConcern(c) for c in concerns),
            sustainability_preference=sustainable
        )
    return _make


@pytest.fixture
def make_event():
    counter = {"n": 0}

    def _make(user_id, product_id, type="view", rating=None, time_spent=None):
        counter["n"] += 1
        return InteractionEvent(
            user_id=user_id,
            product_id=str(product_id),
            type=InteractionType(type),
            rating=rating,
            time_spent=time_spent,
            timestamp=BASE_TIME + timedelta(minutes=counter["n"])
        )
    return _make


@pytest.fixture
def weights():
    return EngineWeights(
        content=0.6,
        collaborative=0.4,
        popularity=0.1,
        diversity=0.1,
        min_weight=0.2,
        max_weight=0.8,
        step=0.1
    )


@pytest.fixture
def catalog(make_product):
    """Small catalog: p1..p5"""
    return [
        make_product("p1", brand="cerave", price=24.99, rating=4.5,
                     ingredients=["water", "ceramides", "hyaluronic acid"],
                     skin_types=["dry", "sensitive"], concerns=["dryness", "sensitivity"], sustainable=True),
        make_product("p2", brand="the ordinary", price=29.99, rating=4.3,
                     ingredients=["niacinamide", "zinc oxide"],
                     skin_types=["oily", "combination"], concerns=["acne"], sustainable=True),
        make_product("p3", brand="neutrogena", price=34.99, rating=4.6,
                     ingredients=["retinol", "peptides"],
                     skin_types=["normal", "dry"], concerns=["aging"]),
        make_product("p4", brand="paula's choice", price=32.0, rating=4.7,
                     ingredients=["salicylic acid", "green tea extract"],
                     skin_types=["oily", "combination"], concerns=["acne"], sustainable=True),
        make_product("p5", brand="the inkey list", price=19.99, rating=4.4,
                     ingredients=["hyaluronic acid", "glycerin"],
                     skin_types=["dry", "sensitive"], concerns=["dryness"], sustainable=True),
    ]


@pytest.fixture
def neighbours(make_profile, make_event):
    """
    alice and bob share a profile and agree on p1/p2; bob also loves p3.
    carol has an unrelated profile and rates p1/p2 the opposite way.
    """
    profiles = {
        "alice": make_profile("alice", "dry", ["dryness"]),
        "bob": make_profile("bob", "dry", ["dryness"]),
        "carol": make_profile("carol", "oily", ["acne"]),
    }
    interactions = [
        make_event("alice", "p1", "review", rating=5),
        make_event("alice", "p2", "review", rating=2),
        make_event("bob", "p1", "review", rating=5),
        make_event("bob", "p2", "review", rating=1),
        make_event("bob", "p3", "review", rating=5),
        make_event("bob", "p4", "review", rating=2),
        make_event("carol", "p1", "review", rating=1),
        make_event("carol", "p2", "review", rating=5),
        make_event("carol", "p5", "review", rating=5),
    ]
    return profiles, interactions
