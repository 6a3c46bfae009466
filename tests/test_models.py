from datetime import datetime

import pytest

from app.services.recommendations.models import (
    InteractionEvent,
    InteractionType,
    Product,
    RecommendationResult,
    ScoredRecommendation,
    SkinConcern,
    SkinType,
    UserProfile,
    to_product_id,
)


def test_product_from_store_document():
    product = Product.from_document({
        "_id": 42,
        "name": "Hydrating Cleanser",
        "brand": "cerave",
        "price": "14.99",
        "rating": 4.5,
        "ingredient_list": ["water", "ceramides"],
        "skinTypes": ["dry", "normal"],
        "skinConcerns": ["dryness"],
        "isSustainable": True,
    })

    assert product.id == "42"
    assert product.price == 14.99
    assert product.ingredients == ("water", "ceramides")
    assert product.skin_types == {SkinType.DRY, SkinType.NORMAL}
    assert product.skin_concerns == {SkinConcern.DRYNESS}
    assert product.is_sustainable is True
    assert product.to_dict()["skinTypes"] == ["dry", "normal"]


def test_product_rejects_unknown_tags():
    with pytest.raises(ValueError):
        Product.from_document({"id": "x", "brand": "b", "price": 1, "rating": 1, "skinTypes": ["scaly"]})


@pytest.mark.parametrize("price, rating", [(-1.0, 3.0), (10.0, 5.5), (10.0, -0.1)])
def test_product_rejects_out_of_range_values(price, rating):
    with pytest.raises(ValueError):
        Product(id="x", brand="b", price=price, rating=rating)


def test_product_id_is_required():
    with pytest.raises(ValueError):
        to_product_id(None)


def test_profile_from_store_document():
    profile = UserProfile.from_document({
        "user": "u1",
        "skinType": "combination",
        "skinConcerns": ["acne", "redness"],
        "sustainabilityPreference": 1,
    })

    assert profile.skin_type is SkinType.COMBINATION
    assert profile.skin_concerns == {SkinConcern.ACNE, SkinConcern.REDNESS}
    assert profile.sustainability_preference is True


def test_profile_requires_skin_type():
    with pytest.raises(ValueError):
        UserProfile.from_document({"user": "u1"})


def test_interaction_from_store_document():
    event = InteractionEvent.from_document({
        "userId": "u1",
        "productId": 7,
        "interactionType": "review",
        "rating": 4,
        "timeSpent": 31,
        "createdAt": "2024-03-01T10:00:00",
    })

    assert event.product_id == "7"
    assert event.type is InteractionType.REVIEW
    assert event.has_rating
    assert event.time_spent == 31.0
    assert event.timestamp == datetime(2024, 3, 1, 10, 0, 0)


@pytest.mark.parametrize("rating, time_spent", [(0, None), (6, None), (None, -5)])
def test_interaction_rejects_out_of_range_values(rating, time_spent):
    with pytest.raises(ValueError):
        InteractionEvent(
            user_id="u", product_id="p", type=InteractionType.VIEW,
            rating=rating, time_spent=time_spent
        )


def test_result_serialisation_marks_partial_results():
    rec = ScoredRecommendation(product_id="p1", score=0.123456, algorithm="hybrid", confidence=0.5)
    result = RecommendationResult(
        user_id="u",
        recommendations=[rec],
        engine_errors={"content_based": "boom"}
    )

    data = result.to_dict()

    assert data["partial"] is True
    assert data["count"] == 1
    assert data["recommendations"][0]["score"] == 0.1235
    assert "explanation" not in data["recommendations"][0]
