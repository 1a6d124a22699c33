"""
Organization-wide rollup across every classroom in the snapshot.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from app.services.context_classifier import TRANSITION
from app.services.insight_policy import DEFAULT_POLICY, InsightPolicy
from app.services.ranking import mode, percentage, rank_by_frequency
from app.services.records import (
    BehaviorRecord,
    Child,
    Classroom,
    ClassroomChallengeRecord,
    Severity,
    prepare_behavior_records,
    prepare_classroom_records,
)

NO_DATA = "No data"
TOP_PREVALENCE = 5
UNKNOWN_GRADE = "unknown"


@dataclass(frozen=True)
class StressorPrevalence:
    stressor: str
    percentage: int


@dataclass(frozen=True)
class SeverityTrend:
    grade: str
    severity: Severity
    percentage: int


@dataclass(frozen=True)
class OrganizationInsight:
    total_educators: int
    total_children: int
    total_behavior_logs: int
    total_classroom_logs: int
    high_severity_transitions: int
    most_frequent_child_stressor: str
    classroom_stressor_prevalence: list[StressorPrevalence] = field(default_factory=list)
    severity_trends: list[SeverityTrend] = field(default_factory=list)
    truncated: bool = False


def _tags(stressors: Iterable[str]) -> list[str]:
    return [s.strip() for s in stressors if s and s.strip()]


def generate_organization_insight(
    behavior_records: Iterable[BehaviorRecord],
    classroom_records: Iterable[ClassroomChallengeRecord],
    children: Iterable[Child],
    classrooms: Iterable[Classroom],
    policy: Optional[InsightPolicy] = None,
) -> OrganizationInsight:
    policy = policy or DEFAULT_POLICY
    children = list(children)
    classrooms = list(classrooms)
    behavior = prepare_behavior_records(behavior_records, policy)
    challenges = prepare_classroom_records(classroom_records, policy)

    transitions = [
        i for i in (*behavior.items, *challenges.items) if i.category == TRANSITION
    ]
    high_transitions = sum(1 for i in transitions if i.severity is Severity.high)

    child_stressor = mode(
        tag for i in behavior.items for tag in _tags(i.record.stressors)
    )

    # Prevalence: share of classroom logs mentioning each tag at least once.
    per_log_tags = [
        tag for i in challenges.items for tag in dict.fromkeys(_tags(i.record.stressors))
    ]
    prevalence = [
        StressorPrevalence(stressor=tag, percentage=percentage(count, len(challenges.items)))
        for tag, count in rank_by_frequency(per_log_tags)[:TOP_PREVALENCE]
    ]

    grade_of = {c.id: (c.grade_band or UNKNOWN_GRADE) for c in children}
    by_grade: dict[str, dict[Severity, int]] = {}
    for item in behavior.items:
        grade = grade_of.get(item.child_id)
        if grade is None:
            continue
        counts = by_grade.setdefault(grade, {s: 0 for s in Severity})
        counts[item.severity] += 1
    trends = [
        SeverityTrend(grade=grade, severity=s, percentage=percentage(counts[s], sum(counts.values())))
        for grade, counts in by_grade.items()
        for s in Severity
    ]

    return OrganizationInsight(
        total_educators=len({c.educator_id for c in classrooms if c.educator_id}),
        total_children=len(children),
        total_behavior_logs=len(behavior.items),
        total_classroom_logs=len(challenges.items),
        high_severity_transitions=percentage(high_transitions, len(transitions)),
        most_frequent_child_stressor=child_stressor or NO_DATA,
        classroom_stressor_prevalence=prevalence,
        severity_trends=trends,
        truncated=behavior.truncated or challenges.truncated,
    )
