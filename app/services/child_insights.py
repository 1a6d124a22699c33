"""
Child Insight Generator.

One ChildInsight per child with at least one valid behavior record:

  most_frequent_context : mode of the canonical context (first-seen tie-break)
  effective_strategies  : strategies ranked by mean confidence rating, then
                          usage count, then label; unrated strategies last
  severity_distribution : low / medium / high counts
  confidence_trend      : mean of the available ratings (1 decimal)
  triggers              : every context with its count, ranked
  time_patterns         : time-of-day counts, ranked

Children without records are skipped, never given an empty insight.

Public API
----------
generate_child_insights(child_id, behavior_records, children, policy) -> list[ChildInsight]
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from app.services.insight_policy import DEFAULT_POLICY, InsightPolicy
from app.services.ranking import mean, mode, rank_by_frequency, round_half_up
from app.services.records import (
    BehaviorRecord,
    Child,
    ClassifiedBehavior,
    Severity,
    prepare_behavior_records,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StrategyScore:
    label: str
    mean_rating: Optional[float]   # None when no use of it was rated
    uses: int


@dataclass(frozen=True)
class FrequencyCount:
    name: str
    frequency: int


@dataclass(frozen=True)
class ChildInsight:
    child_id: str
    child_name: str
    total_logs: int
    most_frequent_context: str
    effective_strategies: list[str]
    strategy_scores: list[StrategyScore]
    severity_distribution: dict[str, int]
    confidence_trend: Optional[float]
    triggers: list[FrequencyCount] = field(default_factory=list)
    time_patterns: list[FrequencyCount] = field(default_factory=list)
    truncated: bool = False


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def severity_counts(severities: Iterable[Severity]) -> dict[str, int]:
    counts = {s.value: 0 for s in Severity}
    for s in severities:
        counts[s.value] += 1
    return counts


def _strategy_sort_key(score: StrategyScore):
    rated = score.mean_rating is not None
    return (not rated, -(score.mean_rating or 0.0), -score.uses, score.label)


def rank_strategies(items: Iterable[ClassifiedBehavior], top_n: int) -> list[StrategyScore]:
    """
    Group by selected strategy, score by mean confidence. Records without a
    rating count as a use but stay out of the mean.
    """
    uses: dict[str, int] = {}
    ratings: dict[str, list[int]] = {}
    for item in items:
        label = (item.record.selected_strategy or "").strip()
        if not label:
            continue
        uses[label] = uses.get(label, 0) + 1
        bucket = ratings.setdefault(label, [])
        if item.confidence is not None:
            bucket.append(item.confidence)

    scores = [
        StrategyScore(label=label, mean_rating=mean(ratings[label]), uses=count)
        for label, count in uses.items()
    ]
    scores.sort(key=_strategy_sort_key)
    return scores[:top_n]


def _build_insight(
    child: Child,
    items: list[ClassifiedBehavior],
    policy: InsightPolicy,
    truncated: bool,
) -> ChildInsight:
    strategies = rank_strategies(items, policy.top_strategies)
    ratings = [i.confidence for i in items if i.confidence is not None]
    avg = mean(ratings)
    times = [
        i.record.time_of_day.strip().lower()
        for i in items if i.record.time_of_day and i.record.time_of_day.strip()
    ]
    return ChildInsight(
        child_id=child.id,
        child_name=child.name,
        total_logs=len(items),
        most_frequent_context=mode(i.category for i in items),
        effective_strategies=[s.label for s in strategies],
        strategy_scores=strategies,
        severity_distribution=severity_counts(i.severity for i in items),
        confidence_trend=float(round_half_up(avg, 1)) if avg is not None else None,
        triggers=[FrequencyCount(n, f) for n, f in rank_by_frequency(i.category for i in items)],
        time_patterns=[FrequencyCount(n, f) for n, f in rank_by_frequency(times)],
        truncated=truncated,
    )


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def generate_child_insights(
    child_id: Optional[str],
    behavior_records: Iterable[BehaviorRecord],
    children: Iterable[Child],
    policy: Optional[InsightPolicy] = None,
) -> list[ChildInsight]:
    """
    Build insights for one child (child_id) or every child (child_id=None).
    Output follows the order of `children`.
    """
    policy = policy or DEFAULT_POLICY
    children = list(children)
    prepared = prepare_behavior_records(behavior_records, policy)

    by_child: dict[str, list[ClassifiedBehavior]] = {}
    for item in prepared.items:
        if child_id is not None and item.child_id != child_id:
            continue
        by_child.setdefault(item.child_id, []).append(item)

    known = {c.id for c in children}
    orphaned = [cid for cid in by_child if cid not in known]
    if orphaned:
        logger.warning(
            "Skipping behavior records for %d child id(s) missing from the lookup: %s",
            len(orphaned), ", ".join(sorted(orphaned)),
        )

    insights: list[ChildInsight] = []
    for child in children:
        if child_id is not None and child.id != child_id:
            continue
        items = by_child.get(child.id)
        if not items:
            continue
        insights.append(_build_insight(child, items, policy, prepared.truncated))
    return insights
