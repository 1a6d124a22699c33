"""
Tests for the Child Insight Generator.

Covered:
  - reference scenario: 3 children, 5 records, strategies A/A/B/A/C
  - children with zero records never get an insight
  - total_logs equals the child's record count
  - mode context tie-break (earliest first seen)
  - strategy ranking: unrated uses excluded from the mean, tie-breaks, top-N
  - determinism
"""
from __future__ import annotations

import pytest

from app.services.child_insights import generate_child_insights, rank_strategies
from app.services.insight_policy import InsightPolicy
from app.services.records import prepare_behavior_records
from factories import make_behavior, make_child


def _scenario():
    children = [make_child(id=f"kid-{n}") for n in range(1, 4)]
    contexts = ["transition", "transition", "circle_time", "transition", "meal_time"]
    ratings = [8, 6, 7, 9, 5]
    strategies = ["A", "A", "B", "A", "C"]
    records = [
        make_behavior(child_id="kid-1", context=c, confidence_rating=r, selected_strategy=s)
        for c, r, s in zip(contexts, ratings, strategies)
    ]
    return children, records


class TestReferenceScenario:
    def test_only_children_with_records_appear(self):
        children, records = _scenario()
        insights = generate_child_insights(None, records, children)
        assert [i.child_id for i in insights] == ["kid-1"]

    def test_most_frequent_context(self):
        children, records = _scenario()
        (insight,) = generate_child_insights(None, records, children)
        assert insight.most_frequent_context == "transition"
        assert insight.total_logs == 5

    def test_strategy_ranking(self):
        children, records = _scenario()
        (insight,) = generate_child_insights(None, records, children)
        assert insight.effective_strategies == ["A", "B", "C"]
        top = insight.strategy_scores[0]
        assert top.label == "A"
        assert top.uses == 3
        assert top.mean_rating == pytest.approx(7.67, abs=0.01)
        assert [s.mean_rating for s in insight.strategy_scores[1:]] == [7.0, 5.0]

    def test_supplementary_fields(self):
        children, records = _scenario()
        (insight,) = generate_child_insights(None, records, children)
        assert insight.severity_distribution == {"low": 5, "medium": 0, "high": 0}
        assert insight.confidence_trend == 7.0
        assert [(t.name, t.frequency) for t in insight.triggers] == [
            ("transition", 3), ("circle_time", 1), ("meal_time", 1),
        ]
        assert insight.truncated is False


class TestExclusionInvariant:
    def test_total_logs_matches_record_count(self):
        children = [make_child(id="a"), make_child(id="b"), make_child(id="c")]
        records = (
            [make_behavior(child_id="a") for _ in range(4)]
            + [make_behavior(child_id="b") for _ in range(2)]
        )
        insights = {i.child_id: i for i in generate_child_insights(None, records, children)}
        assert set(insights) == {"a", "b"}
        assert insights["a"].total_logs == 4
        assert insights["b"].total_logs == 2

    def test_single_child_filter(self):
        children = [make_child(id="a"), make_child(id="b")]
        records = [make_behavior(child_id="a"), make_behavior(child_id="b")]
        insights = generate_child_insights("b", records, children)
        assert [i.child_id for i in insights] == ["b"]

    def test_single_child_without_records(self):
        children = [make_child(id="a"), make_child(id="b")]
        assert generate_child_insights("b", [make_behavior(child_id="a")], children) == []

    def test_no_records_at_all(self):
        assert generate_child_insights(None, [], [make_child()]) == []

    def test_records_for_unknown_child_skipped(self, caplog):
        insights = generate_child_insights(None, [make_behavior(child_id="ghost")], [make_child()])
        assert insights == []
        assert "ghost" in caplog.text

    def test_malformed_records_do_not_count(self):
        children = [make_child(id="a")]
        records = [make_behavior(child_id="a"), make_behavior(child_id="a", severity=None)]
        (insight,) = generate_child_insights(None, records, children)
        assert insight.total_logs == 1


class TestModeTieBreak:
    def test_earliest_first_seen_wins(self):
        children = [make_child(id="a")]
        records = [
            make_behavior(child_id="a", context="meal_time"),
            make_behavior(child_id="a", context="circle_time"),
            make_behavior(child_id="a", context="circle_time"),
            make_behavior(child_id="a", context="meal_time"),
        ]
        (insight,) = generate_child_insights(None, records, children)
        assert insight.most_frequent_context == "meal_time"

    def test_spellings_group_together(self):
        children = [make_child(id="a")]
        records = [
            make_behavior(child_id="a", context="meal_time"),
            make_behavior(child_id="a", context="Circle Time"),
            make_behavior(child_id="a", context="circle-time"),
        ]
        (insight,) = generate_child_insights(None, records, children)
        assert insight.most_frequent_context == "circle_time"


class TestStrategyRanking:
    def _rank(self, records, top_n=5):
        return rank_strategies(prepare_behavior_records(records, InsightPolicy()).items, top_n)

    def test_unrated_uses_excluded_from_mean(self):
        records = [
            make_behavior(selected_strategy="Visual timer", confidence_rating=8),
            make_behavior(selected_strategy="Visual timer"),
        ]
        (score,) = self._rank(records)
        assert score.mean_rating == 8.0
        assert score.uses == 2

    def test_tied_score_prefers_more_uses_then_label(self):
        records = [
            make_behavior(selected_strategy="Beta", confidence_rating=6),
            make_behavior(selected_strategy="Alpha", confidence_rating=6),
            make_behavior(selected_strategy="Gamma", confidence_rating=6),
            make_behavior(selected_strategy="Gamma", confidence_rating=6),
        ]
        assert [s.label for s in self._rank(records)] == ["Gamma", "Alpha", "Beta"]

    def test_unrated_strategy_ranks_last(self):
        records = [
            make_behavior(selected_strategy="Never rated"),
            make_behavior(selected_strategy="Never rated"),
            make_behavior(selected_strategy="Rated low", confidence_rating=1),
        ]
        ranked = self._rank(records)
        assert [s.label for s in ranked] == ["Rated low", "Never rated"]
        assert ranked[1].mean_rating is None

    def test_blank_strategy_ignored(self):
        records = [make_behavior(selected_strategy="  ", confidence_rating=9)]
        assert self._rank(records) == []

    def test_top_n_respected(self):
        records = [
            make_behavior(selected_strategy=label, confidence_rating=5)
            for label in ["a", "b", "c", "d", "e"]
        ]
        children = [make_child(id="child-1")]
        policy = InsightPolicy(top_strategies=2)
        (insight,) = generate_child_insights(None, records, children, policy)
        assert insight.effective_strategies == ["a", "b"]

    def test_no_strategy_or_rating_still_yields_insight(self):
        children = [make_child(id="a")]
        records = [make_behavior(child_id="a"), make_behavior(child_id="a")]
        (insight,) = generate_child_insights(None, records, children)
        assert insight.total_logs == 2
        assert insight.effective_strategies == []
        assert insight.confidence_trend is None


class TestDeterminism:
    def test_repeat_calls_identical(self):
        children, records = _scenario()
        first = generate_child_insights(None, records, children)
        second = generate_child_insights(None, records, children)
        assert first == second
        assert repr(first) == repr(second)

    def test_time_patterns_ranked(self):
        children = [make_child(id="a")]
        records = [
            make_behavior(child_id="a", time_of_day="Morning"),
            make_behavior(child_id="a", time_of_day="afternoon"),
            make_behavior(child_id="a", time_of_day="morning"),
            make_behavior(child_id="a"),
        ]
        (insight,) = generate_child_insights(None, records, children)
        assert [(t.name, t.frequency) for t in insight.time_patterns] == [
            ("morning", 2), ("afternoon", 1),
        ]
