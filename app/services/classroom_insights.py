"""
Classroom Insight Generator.

Attributable records for a classroom
------------------------------------
  * behavior records whose child belongs to the classroom (children lookup;
    falls back to the record's own classroom_id for children not in it)
  * classroom-challenge records filed against the classroom

Climate score
-------------
  score = 10 - (weight_high * high + weight_medium * medium) / total
  clamped to [0, 10], rounded half-up to one decimal.

With weight_high >= weight_medium >= 0 (enforced by InsightPolicy) raising any
record's severity can only lower the score.

Public API
----------
generate_classroom_insights(classroom_id, behavior, challenges, children, classroom, policy)
    -> ClassroomInsight | None
generate_all_classroom_insights(behavior, challenges, children, classrooms, policy)
    -> list[ClassroomInsight]
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional

from app.services.child_insights import severity_counts
from app.services.context_classifier import TRANSITION, categorize_behavior
from app.services.insight_policy import DEFAULT_POLICY, InsightPolicy
from app.services.ranking import percentage, round_half_up, top_k
from app.services.records import (
    BehaviorRecord,
    Child,
    ClassifiedBehavior,
    ClassifiedChallenge,
    Classroom,
    ClassroomChallengeRecord,
    Prepared,
    Severity,
    attributed_classroom,
    child_classroom_lookup,
    prepare_behavior_records,
    prepare_classroom_records,
    utc_timestamp,
)

MAX_SCORE = Decimal("10")
MIN_SCORE = Decimal("0")
TOP_BEHAVIORS = 5


@dataclass(frozen=True)
class ClassroomInsight:
    classroom_id: str
    classroom_name: str
    total_logs: int
    climate_score: float
    transition_challenges: int
    top_stressors: list[str]
    severity_mix: dict[str, int]
    common_stressors: list[str] = field(default_factory=list)
    frequent_behaviors: list[str] = field(default_factory=list)
    truncated: bool = False


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def climate_score(severity_mix: dict[str, int], policy: InsightPolicy) -> float:
    """Severity mix -> 0-10 climate score. Empty mix scores a clean 10."""
    total = sum(severity_mix.values())
    if total == 0:
        return float(MAX_SCORE)
    penalty = (
        Decimal(str(policy.weight_high)) * severity_mix[Severity.high.value]
        + Decimal(str(policy.weight_medium)) * severity_mix[Severity.medium.value]
    ) / Decimal(total)
    raw = min(MAX_SCORE, max(MIN_SCORE, MAX_SCORE - penalty))
    return float(round_half_up(raw, 1))


# ---------------------------------------------------------------------------
# Internal — one classroom from prepared records
# ---------------------------------------------------------------------------

def _build_insight(
    classroom: Classroom,
    behavior: list[ClassifiedBehavior],
    challenges: list[ClassifiedChallenge],
    policy: InsightPolicy,
    truncated: bool,
) -> Optional[ClassroomInsight]:
    total = len(behavior) + len(challenges)
    if total == 0:
        return None

    # Interleave by timestamp so first-seen tie-breaks span both collections.
    ordered = sorted(
        list(behavior) + list(challenges),
        key=lambda i: utc_timestamp(i.record.created_at),
    )
    mix = severity_counts(i.severity for i in ordered)
    transitions = sum(1 for i in ordered if i.category == TRANSITION)
    stressor_tags = [
        tag.strip() for i in ordered for tag in i.record.stressors if tag and tag.strip()
    ]

    return ClassroomInsight(
        classroom_id=classroom.id,
        classroom_name=classroom.name,
        total_logs=total,
        climate_score=climate_score(mix, policy),
        transition_challenges=percentage(transitions, total),
        top_stressors=top_k((i.category for i in ordered), policy.top_stressors),
        severity_mix=mix,
        common_stressors=top_k(stressor_tags, policy.top_stressors),
        frequent_behaviors=top_k(
            (categorize_behavior(i.record.description) for i in behavior), TOP_BEHAVIORS
        ),
        truncated=truncated,
    )


def _group(
    prepared_behavior: Prepared[ClassifiedBehavior],
    prepared_challenges: Prepared[ClassifiedChallenge],
    children: Iterable[Child],
) -> tuple[dict[str, list], dict[str, list]]:
    classroom_of = child_classroom_lookup(children)
    behavior_by_room: dict[str, list] = {}
    for item in prepared_behavior.items:
        room = attributed_classroom(item, classroom_of)
        if room:
            behavior_by_room.setdefault(room, []).append(item)
    challenges_by_room: dict[str, list] = {}
    for item in prepared_challenges.items:
        challenges_by_room.setdefault(item.classroom_id, []).append(item)
    return behavior_by_room, challenges_by_room


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def generate_classroom_insights(
    classroom_id: str,
    behavior_records: Iterable[BehaviorRecord],
    classroom_records: Iterable[ClassroomChallengeRecord],
    children: Iterable[Child],
    classroom: Classroom,
    policy: Optional[InsightPolicy] = None,
) -> Optional[ClassroomInsight]:
    """Insight for a single classroom, or None when nothing is attributable to it."""
    policy = policy or DEFAULT_POLICY
    behavior = prepare_behavior_records(behavior_records, policy)
    challenges = prepare_classroom_records(classroom_records, policy)
    behavior_by_room, challenges_by_room = _group(behavior, challenges, children)
    return _build_insight(
        classroom,
        behavior_by_room.get(classroom_id, []),
        challenges_by_room.get(classroom_id, []),
        policy,
        behavior.truncated or challenges.truncated,
    )


def generate_all_classroom_insights(
    behavior_records: Iterable[BehaviorRecord],
    classroom_records: Iterable[ClassroomChallengeRecord],
    children: Iterable[Child],
    classrooms: Iterable[Classroom],
    policy: Optional[InsightPolicy] = None,
) -> list[ClassroomInsight]:
    """One insight per classroom with at least one attributable record, in `classrooms` order."""
    policy = policy or DEFAULT_POLICY
    behavior = prepare_behavior_records(behavior_records, policy)
    challenges = prepare_classroom_records(classroom_records, policy)
    behavior_by_room, challenges_by_room = _group(behavior, challenges, children)
    truncated = behavior.truncated or challenges.truncated

    insights: list[ClassroomInsight] = []
    for classroom in classrooms:
        insight = _build_insight(
            classroom,
            behavior_by_room.get(classroom.id, []),
            challenges_by_room.get(classroom.id, []),
            policy,
            truncated,
        )
        if insight is not None:
            insights.append(insight)
    return insights
