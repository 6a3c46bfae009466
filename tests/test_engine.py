import pytest

from app.services.recommendations import (
    HybridRecommendationEngine,
    RecommendationAlgorithm,
    RecommendationError,
    RecommendOptions,
)
from app.services.recommendations.algorithms.collaborative import COLLABORATIVE_REASON
from app.services.recommendations.engine import CONTENT_REASON, BlendCandidate
from app.services.recommendations.models import ScoredRecommendation


class FailingAlgorithm(RecommendationAlgorithm):
    def recommend(self, *args, **kwargs):
        raise RuntimeError(f"{self.name} exploded")


class EmptyAlgorithm(RecommendationAlgorithm):
    def recommend(self, *args, **kwargs):
        return []


@pytest.fixture
def engine(weights):
    return HybridRecommendationEngine(weights=weights)


def test_blends_both_engines(engine, catalog, neighbours):
    profiles, interactions = neighbours

    result = engine.recommend_detailed("alice", profiles["alice"], catalog, interactions, users=profiles)
    by_id = {r.product_id: r for r in result.recommendations}

    assert result.engine_errors == {}
    assert set(by_id) == {"p1", "p2", "p3", "p4", "p5"}
    assert by_id["p3"].reasons == [CONTENT_REASON, COLLABORATIVE_REASON]
    assert by_id["p5"].reasons == [CONTENT_REASON]
    assert by_id["p3"].metadata["collaborative_score"] == pytest.approx(5.0)
    assert all(r.algorithm == "hybrid" for r in result.recommendations)
    assert all(r.product is not None for r in result.recommendations)
    scores = [r.score for r in result.recommendations]
    assert scores == sorted(scores, reverse=True)


def test_collaborative_results_survive_content_failure(weights, catalog, neighbours):
    profiles, interactions = neighbours
    engine = HybridRecommendationEngine(
        weights=weights,
        content_engine=FailingAlgorithm("content_based")
    )

    result = engine.recommend_detailed("alice", profiles["alice"], catalog, interactions, users=profiles)

    assert [r.product_id for r in result.recommendations] == ["p3"]
    assert set(result.engine_errors) == {"content_based"}
    assert isinstance(result.engine_errors["content_based"], RuntimeError)
    assert result.recommendations[0].reasons == [COLLABORATIVE_REASON]


def test_content_results_survive_collaborative_failure(weights, catalog, make_profile):
    engine = HybridRecommendationEngine(
        weights=weights,
        collaborative_engine=FailingAlgorithm("collaborative")
    )

    result = engine.recommend_detailed("u", make_profile("u", "dry", ["dryness"]), catalog)

    assert len(result.recommendations) == len(catalog)
    assert set(result.engine_errors) == {"collaborative"}


def test_total_failure_raises_with_causes(weights, catalog, make_profile):
    engine = HybridRecommendationEngine(
        weights=weights,
        content_engine=FailingAlgorithm("content_based"),
        collaborative_engine=FailingAlgorithm("collaborative")
    )

    with pytest.raises(RecommendationError) as excinfo:
        engine.recommend("u", make_profile("u"), catalog)

    assert set(excinfo.value.causes) == {"content_based", "collaborative"}


def test_two_empty_engines_raise(weights, catalog, make_profile):
    engine = HybridRecommendationEngine(
        weights=weights,
        content_engine=EmptyAlgorithm("content_based"),
        collaborative_engine=EmptyAlgorithm("collaborative")
    )

    with pytest.raises(RecommendationError) as excinfo:
        engine.recommend("u", make_profile("u"), catalog)

    assert excinfo.value.causes == {}


def test_missing_profile_or_catalog_yields_nothing(engine, catalog, make_profile):
    assert engine.recommend("u", None, catalog) == []
    assert engine.recommend("u", make_profile("u"), []) == []


def test_limit_truncates_after_sorting(engine, catalog, make_profile):
    recommendations = engine.recommend(
        "u", make_profile("u", "oily", ["acne"]), catalog,
        options=RecommendOptions(limit=2)
    )

    assert len(recommendations) == 2
    assert recommendations[0].score >= recommendations[1].score
    assert {r.product_id for r in recommendations} == {"p2", "p4"}


def test_explanations_can_be_omitted(engine, catalog, neighbours):
    profiles, interactions = neighbours

    recommendations = engine.recommend(
        "alice", profiles["alice"], catalog, interactions,
        RecommendOptions(include_explanations=False), profiles
    )

    assert recommendations
    assert all(r.explanation is None and r.reasons is None for r in recommendations)


def test_combine_merges_by_product(engine, catalog, weights):
    by_id = {p.id: p for p in catalog}
    content = [
        ScoredRecommendation(product_id="p1", score=0.9, algorithm="content_based", product=by_id["p1"]),
        ScoredRecommendation(product_id="p2", score=0.5, algorithm="content_based", product=by_id["p2"]),
    ]
    collaborative = [
        ScoredRecommendation(product_id="p1", score=4.0, algorithm="collaborative"),
        ScoredRecommendation(product_id="p3", score=2.0, algorithm="collaborative"),
        ScoredRecommendation(product_id="gone", score=9.0, algorithm="collaborative"),
    ]

    combined = {c.product.id: c for c in engine.combine(content, collaborative, by_id, weights.snapshot())}

    assert set(combined) == {"p1", "p2", "p3"}
    assert combined["p1"].combined_score == pytest.approx(0.9 * 0.6 + 4.0 * 0.4)
    assert combined["p1"].reasons == [CONTENT_REASON, COLLABORATIVE_REASON]
    assert combined["p1"].confidence == pytest.approx(0.95)
    assert combined["p2"].combined_score == pytest.approx(0.3)
    assert combined["p3"].combined_score == pytest.approx(0.8)
    assert combined["p3"].product is by_id["p3"]


def test_confidence():
    assert HybridRecommendationEngine.calculate_confidence(0.8, 0.0) == pytest.approx(0.25)
    assert HybridRecommendationEngine.calculate_confidence(0.6, 2.0) == pytest.approx(0.8)
    assert HybridRecommendationEngine.calculate_confidence(0.0, 0.0) == 0.0


def test_diversity_penalties(engine, make_product):
    history = [make_product("h", brand="cerave", concerns=["dryness"])]
    candidates = [
        BlendCandidate(product=make_product("brand", brand="cerave", concerns=["acne"]), combined_score=1.0),
        BlendCandidate(product=make_product("concern", brand="other", concerns=["dryness"]), combined_score=1.0),
        BlendCandidate(product=make_product("both", brand="cerave", concerns=["dryness"]), combined_score=1.0),
        BlendCandidate(product=make_product("half", brand="other", concerns=["dryness", "aging"]), combined_score=1.0),
        BlendCandidate(product=make_product("none", brand="other"), combined_score=1.0),
    ]

    scores = {c.product.id: c.final_score for c in engine.apply_diversity(candidates, history)}

    assert scores["brand"] == pytest.approx(0.8)
    assert scores["concern"] == pytest.approx(0.9)
    assert scores["both"] == pytest.approx(0.72)
    assert scores["half"] == pytest.approx(1.0)
    assert scores["none"] == pytest.approx(1.0)


def test_same_brand_candidate_ranks_lower(engine, make_product, make_profile, make_event):
    seen = make_product("seen", brand="cerave", skin_types=["dry"])
    same = make_product("same", brand="cerave", skin_types=["dry"])
    other = make_product("other", brand="vanicream", skin_types=["dry"])

    recommendations = engine.recommend(
        "u", make_profile("u"), [seen, same, other], [make_event("u", "seen", "view")]
    )
    by_id = {r.product_id: r for r in recommendations}

    assert by_id["same"].score < by_id["other"].score


def test_popularity_boost_is_relative_to_most_popular(catalog, make_event, weights):
    candidates = [BlendCandidate(product=p) for p in catalog[:3]]
    interactions = [
        make_event("a", "p1"),
        make_event("b", "p1"),
        make_event("a", "p2"),
    ]

    boosted = HybridRecommendationEngine.add_popularity_boost(candidates, interactions, weights.snapshot())

    assert [c.popularity_score for c in boosted] == [1.0, 0.5, 0.0]
    assert [c.final_score for c in boosted] == pytest.approx([0.1, 0.05, 0.0])


def test_user_history_drops_unknown_products(catalog, make_event):
    by_id = {p.id: p for p in catalog}
    interactions = [
        make_event("u", "p1"),
        make_event("u", "deleted"),
        make_event("other", "p2"),
    ]

    history = HybridRecommendationEngine.get_user_history("u", interactions, by_id)

    assert history == [by_id["p1"]]


def test_update_weights_moves_shared_weights(engine):
    snapshot = engine.update_weights(0.5, 0.1)

    assert snapshot.content == pytest.approx(0.7)
    assert snapshot.collaborative == pytest.approx(0.3)
    assert engine.get_info()["weights"]["content"] == pytest.approx(0.7)


@pytest.mark.parametrize("limit", [0, -1])
def test_non_positive_limit_is_rejected(limit):
    with pytest.raises(ValueError):
        RecommendOptions(limit=limit)


def test_explicit_limit_is_not_replaced_by_default(engine, catalog, make_profile):
    recommendations = engine.recommend("u", make_profile("u"), catalog, options=RecommendOptions(limit=1))

    assert len(recommendations) == 1
