import pytest

from app.services.recommendations import HybridRecommendationEngine
from app.services.recommendations.evaluation import (
    evaluate,
    f1_score,
    holdout_split,
    precision,
    recall,
    relevant_items,
)


def test_precision_and_recall():
    relevant = {"a", "b"}

    assert precision(["a", "c", "d", "b"], relevant) == 0.5
    assert recall(["a", "c"], relevant) == 0.5
    assert precision([], relevant) == 0.0
    assert recall(["a"], set()) == 0.0


def test_f1_score():
    assert f1_score(0.5, 0.5) == pytest.approx(0.5)
    assert f1_score(1.0, 0.5) == pytest.approx(2 / 3)
    assert f1_score(0.0, 0.0) == 0.0


def test_relevant_items(make_event):
    interactions = [
        make_event("u", "bought", "purchase"),
        make_event("u", "liked", "favorite"),
        make_event("u", "loved", "review", rating=4),
        make_event("u", "meh", "review", rating=3),
        make_event("u", "looked", "view"),
        make_event("other", "theirs", "purchase"),
    ]

    assert relevant_items("u", interactions) == {"bought", "liked", "loved"}


def test_evaluate_reports_mean_metrics(weights, catalog, neighbours):
    profiles, interactions = neighbours
    engine = HybridRecommendationEngine(weights=weights)

    report = evaluate(engine, profiles, catalog, interactions, limit=10, min_interactions=2)

    assert report.evaluated_users == 3
    assert set(report.metrics) == {"content", "collaborative", "hybrid"}
    # the content engine returns the whole catalog, one product is held out per user
    assert report.metrics["content"]["recall"] == 1.0
    assert report.metrics["content"]["precision"] == pytest.approx(0.2)
    for values in report.metrics.values():
        assert 0.0 <= values["precision"] <= 1.0
        assert 0.0 <= values["recall"] <= 1.0
    assert report.final_weights == weights.snapshot().to_dict()


def test_evaluate_skips_users_with_few_interactions(weights, catalog, neighbours):
    profiles, interactions = neighbours
    engine = HybridRecommendationEngine(weights=weights)

    report = evaluate(engine, profiles, catalog, interactions, min_interactions=4, adjust_weights=False)

    assert report.evaluated_users == 1  # only bob has four events
    assert report.final_weights["content"] == 0.6


def test_evaluate_without_eligible_users(weights, catalog, neighbours):
    profiles, interactions = neighbours
    engine = HybridRecommendationEngine(weights=weights)

    report = evaluate(engine, profiles, catalog, interactions, min_interactions=10)

    assert report.evaluated_users == 0
    assert report.metrics == {}
    assert report.to_dict()["final_weights"] == {
        "content": 0.6, "collaborative": 0.4, "popularity": 0.1, "diversity": 0.1
    }


def test_holdout_hides_most_recently_relevant_product(make_event):
    interactions = [
        make_event("u", "old", "purchase"),
        make_event("u", "seen", "view"),
        make_event("u", "new", "review", rating=5),
        make_event("u", "new", "view"),
        make_event("other", "new", "purchase"),
    ]

    held_out, visible = holdout_split("u", interactions)

    assert held_out == {"new"}
    assert [(e.user_id, e.product_id) for e in visible] == [
        ("u", "old"), ("u", "seen"), ("other", "new")
    ]


def test_holdout_size(make_event):
    interactions = [
        make_event("u", "a", "purchase"),
        make_event("u", "b", "favorite"),
        make_event("u", "c", "review", rating=4),
    ]

    held_out, visible = holdout_split("u", interactions, holdout=2)

    assert held_out == {"b", "c"}
    assert [e.product_id for e in visible] == ["a"]


def test_collaborative_hits_are_measured(weights, catalog, neighbours, make_event):
    profiles, interactions = neighbours
    # alice later buys p3, which bob's ratings point her to
    interactions = interactions + [make_event("alice", "p3", "purchase")]
    engine = HybridRecommendationEngine(weights=weights)

    report = evaluate(engine, profiles, catalog, interactions, min_interactions=2, adjust_weights=False)

    assert holdout_split("alice", interactions)[0] == {"p3"}
    assert report.evaluated_users == 3
    # alice is pointed to p3 by bob; bob and carol get no collaborative hits
    assert report.metrics["collaborative"]["precision"] == pytest.approx(1 / 3, abs=1e-4)
