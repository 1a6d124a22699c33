"""
Unified Insight Generator — patterns confirmed at both child and classroom level.

Algorithm
---------
  1. Two independent aggregates keyed by canonical context category:
       child level     (behavior records of children in the lookup)
         affected_children = distinct children with >= 1 record in the category
         frequency         = records in the category
       classroom level (classroom-challenge records)
         affected_classrooms = distinct classrooms with >= 1 record
         severity            = majority vote, ties resolve to the higher severity
         frequency           = records in the category
  2. Merge on categories present in both. A merged pattern is emitted only if
       affected_children >= policy.min_affected_children
       OR frequency     >= policy.min_pattern_frequency
  3. Severity of the insight = classroom-level severity.
  4. Recommendations come from the (category, severity) decision table.
  5. Sorted by frequency desc, affected_children desc, pattern asc.

Records are classified once per call (app.services.records) and the prepared
collections feed both aggregates. Every classroom in the snapshot counts.

Public API
----------
generate_unified_insights(behavior, challenges, children, classrooms, policy)
    -> list[UnifiedInsight]
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from app.services.insight_policy import DEFAULT_POLICY, InsightPolicy
from app.services.ranking import rank_by_frequency
from app.services.recommendations import recommend
from app.services.records import (
    BehaviorRecord,
    Child,
    Classroom,
    ClassroomChallengeRecord,
    ClassifiedBehavior,
    ClassifiedChallenge,
    Severity,
    prepare_behavior_records,
    prepare_classroom_records,
)

logger = logging.getLogger(__name__)

PATTERN_TYPE = "nested_pattern"


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ChildLevelFacet:
    affected_children: int
    frequency: int


@dataclass(frozen=True)
class ClassroomLevelFacet:
    affected_classrooms: int
    severity: Severity
    frequency: int
    stressor_rank: int     # 1 = most frequent classroom-level category


@dataclass(frozen=True)
class UnifiedInsight:
    pattern: str
    child_level: ChildLevelFacet
    classroom_level: ClassroomLevelFacet
    recommendations: list[str]
    type: str = PATTERN_TYPE
    truncated: bool = False


# ---------------------------------------------------------------------------
# Aggregation passes
# ---------------------------------------------------------------------------

@dataclass
class _ChildAggregate:
    children: set
    frequency: int = 0


@dataclass
class _ClassroomAggregate:
    classrooms: set
    severities: dict
    frequency: int = 0


def majority_severity(counts: dict[Severity, int]) -> Severity:
    """Most common severity; a tie goes to the more severe level."""
    return max(counts, key=lambda s: (counts[s], s.rank))


def aggregate_child_level(items: Iterable[ClassifiedBehavior]) -> dict[str, _ChildAggregate]:
    out: dict[str, _ChildAggregate] = {}
    for item in items:
        agg = out.setdefault(item.category, _ChildAggregate(children=set()))
        agg.children.add(item.child_id)
        agg.frequency += 1
    return out


def aggregate_classroom_level(
    items: Iterable[ClassifiedChallenge],
) -> dict[str, _ClassroomAggregate]:
    out: dict[str, _ClassroomAggregate] = {}
    for item in items:
        agg = out.setdefault(
            item.category, _ClassroomAggregate(classrooms=set(), severities={})
        )
        agg.classrooms.add(item.classroom_id)
        agg.severities[item.severity] = agg.severities.get(item.severity, 0) + 1
        agg.frequency += 1
    return out


def _is_significant(agg: _ChildAggregate, policy: InsightPolicy) -> bool:
    return (
        len(agg.children) >= policy.min_affected_children
        or agg.frequency >= policy.min_pattern_frequency
    )


def _sort_key(insight: UnifiedInsight):
    return (
        -insight.child_level.frequency,
        -insight.child_level.affected_children,
        insight.pattern,
    )


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def generate_unified_insights(
    behavior_records: Iterable[BehaviorRecord],
    classroom_records: Iterable[ClassroomChallengeRecord],
    children: Iterable[Child],
    classrooms: Iterable[Classroom],
    policy: Optional[InsightPolicy] = None,
) -> list[UnifiedInsight]:
    policy = policy or DEFAULT_POLICY
    behavior = prepare_behavior_records(behavior_records, policy)
    challenges = prepare_classroom_records(classroom_records, policy)
    truncated = behavior.truncated or challenges.truncated

    known_rooms = {c.id for c in classrooms}
    unknown = {i.classroom_id for i in challenges.items} - known_rooms
    if unknown:
        logger.warning(
            "Classroom records reference %d classroom id(s) missing from the lookup: %s",
            len(unknown), ", ".join(sorted(unknown)),
        )

    known_children = {c.id for c in children}
    orphaned = {i.child_id for i in behavior.items} - known_children
    if orphaned:
        logger.warning(
            "Skipping behavior records for %d child id(s) missing from the lookup: %s",
            len(orphaned), ", ".join(sorted(orphaned)),
        )

    child_level = aggregate_child_level(
        i for i in behavior.items if i.child_id in known_children
    )
    classroom_level = aggregate_classroom_level(challenges.items)
    classroom_rank = {
        category: position
        for position, (category, _) in enumerate(
            rank_by_frequency(i.category for i in challenges.items), start=1
        )
    }

    insights: list[UnifiedInsight] = []
    for category, child_agg in child_level.items():
        room_agg = classroom_level.get(category)
        if room_agg is None:
            continue
        if not _is_significant(child_agg, policy):
            logger.debug(
                "Pattern %s below significance threshold (%d children, %d records)",
                category, len(child_agg.children), child_agg.frequency,
            )
            continue
        severity = majority_severity(room_agg.severities)
        insights.append(UnifiedInsight(
            pattern=category,
            child_level=ChildLevelFacet(
                affected_children=len(child_agg.children),
                frequency=child_agg.frequency,
            ),
            classroom_level=ClassroomLevelFacet(
                affected_classrooms=len(room_agg.classrooms),
                severity=severity,
                frequency=room_agg.frequency,
                stressor_rank=classroom_rank[category],
            ),
            recommendations=recommend(category, severity),
            truncated=truncated,
        ))

    insights.sort(key=_sort_key)
    return insights
