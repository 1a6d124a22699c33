"""
Analytics router — read-only insight views over the record store.

GET /analytics/children              — insights for every child with logs
GET /analytics/child/{child_id}      — insight for one child
GET /analytics/classrooms            — insights for every classroom with logs
GET /analytics/classroom/{id}        — insight for one classroom
GET /analytics/unified               — patterns shared by children and classrooms
GET /analytics/organization          — organization-wide rollup

Every endpoint accepts an optional `educator_id` that scopes the snapshot.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ChildNotFoundError, ClassroomNotFoundError
from app.db.base import get_db
from app.schemas.common import ErrorResponse
from app.schemas.insights import (
    ChildInsightListResponse,
    ChildInsightOut,
    ChildInsightResponse,
    ChildLevelOut,
    ClassroomInsightListResponse,
    ClassroomInsightOut,
    ClassroomInsightResponse,
    ClassroomLevelOut,
    FrequencyOut,
    OrganizationInsightResponse,
    SeverityTrendOut,
    StrategyScoreOut,
    StressorPrevalenceOut,
    UnifiedInsightListResponse,
    UnifiedInsightOut,
)
from app.services.child_insights import ChildInsight, generate_child_insights
from app.services.classroom_insights import (
    ClassroomInsight,
    generate_all_classroom_insights,
    generate_classroom_insights,
)
from app.services.insight_policy import InsightPolicy
from app.services.organization_insights import (
    OrganizationInsight,
    generate_organization_insight,
)
from app.services.record_store import load_snapshot
from app.services.unified_insights import UnifiedInsight, generate_unified_insights

router = APIRouter(prefix="/analytics", tags=["analytics"])

# Built at import so a bad INSIGHT_* environment fails at startup.
_policy = InsightPolicy.from_settings(settings)


def get_policy() -> InsightPolicy:
    return _policy


_EDUCATOR_QUERY = Query(
    default=None,
    max_length=64,
    description="Limit the snapshot to this educator's classrooms and logs.",
)


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _child_to_out(i: ChildInsight) -> ChildInsightOut:
    return ChildInsightOut(
        child_id=i.child_id,
        child_name=i.child_name,
        total_logs=i.total_logs,
        most_frequent_context=i.most_frequent_context,
        effective_strategies=i.effective_strategies,
        strategy_scores=[
            StrategyScoreOut(label=s.label, mean_rating=s.mean_rating, uses=s.uses)
            for s in i.strategy_scores
        ],
        severity_distribution=i.severity_distribution,
        confidence_trend=i.confidence_trend,
        triggers=[FrequencyOut(name=t.name, frequency=t.frequency) for t in i.triggers],
        time_patterns=[FrequencyOut(name=t.name, frequency=t.frequency) for t in i.time_patterns],
        truncated=i.truncated,
    )


def _classroom_to_out(i: ClassroomInsight) -> ClassroomInsightOut:
    return ClassroomInsightOut(
        classroom_id=i.classroom_id,
        classroom_name=i.classroom_name,
        total_logs=i.total_logs,
        climate_score=i.climate_score,
        transition_challenges=i.transition_challenges,
        top_stressors=i.top_stressors,
        severity_mix=i.severity_mix,
        common_stressors=i.common_stressors,
        frequent_behaviors=i.frequent_behaviors,
        truncated=i.truncated,
    )


def _unified_to_out(i: UnifiedInsight) -> UnifiedInsightOut:
    return UnifiedInsightOut(
        type=i.type,
        pattern=i.pattern,
        child_level=ChildLevelOut(
            affected_children=i.child_level.affected_children,
            frequency=i.child_level.frequency,
        ),
        classroom_level=ClassroomLevelOut(
            affected_classrooms=i.classroom_level.affected_classrooms,
            severity=i.classroom_level.severity.value,
            frequency=i.classroom_level.frequency,
            stressor_rank=i.classroom_level.stressor_rank,
        ),
        recommendations=i.recommendations,
        truncated=i.truncated,
    )


def _organization_to_out(o: OrganizationInsight) -> OrganizationInsightResponse:
    return OrganizationInsightResponse(
        total_educators=o.total_educators,
        total_children=o.total_children,
        total_behavior_logs=o.total_behavior_logs,
        total_classroom_logs=o.total_classroom_logs,
        high_severity_transitions=o.high_severity_transitions,
        most_frequent_child_stressor=o.most_frequent_child_stressor,
        classroom_stressor_prevalence=[
            StressorPrevalenceOut(stressor=p.stressor, percentage=p.percentage)
            for p in o.classroom_stressor_prevalence
        ],
        severity_trends=[
            SeverityTrendOut(grade=t.grade, severity=t.severity.value, percentage=t.percentage)
            for t in o.severity_trends
        ],
        truncated=o.truncated,
    )


# ---------------------------------------------------------------------------
# Children
# ---------------------------------------------------------------------------

@router.get(
    "/children",
    response_model=ChildInsightListResponse,
    summary="Insights for every child with behavior records",
)
def list_child_insights(
    educator_id: Optional[str] = _EDUCATOR_QUERY,
    db: Session = Depends(get_db),
    policy: InsightPolicy = Depends(get_policy),
):
    """Children without any behavior record are omitted, not returned empty."""
    snap = load_snapshot(db, educator_id)
    insights = generate_child_insights(None, snap.behavior_records, snap.children, policy)
    return ChildInsightListResponse(
        total=len(insights),
        items=[_child_to_out(i) for i in insights],
    )


@router.get(
    "/child/{child_id}",
    response_model=ChildInsightResponse,
    summary="Insight for a single child",
    responses={404: {"model": ErrorResponse, "description": "Unknown child."}},
)
def child_insight(
    child_id: str,
    educator_id: Optional[str] = _EDUCATOR_QUERY,
    db: Session = Depends(get_db),
    policy: InsightPolicy = Depends(get_policy),
):
    snap = load_snapshot(db, educator_id)
    if snap.child(child_id) is None:
        raise ChildNotFoundError(child_id)
    insights = generate_child_insights(child_id, snap.behavior_records, snap.children, policy)
    return ChildInsightResponse(
        child_insight=_child_to_out(insights[0]) if insights else None,
    )


# ---------------------------------------------------------------------------
# Classrooms
# ---------------------------------------------------------------------------

@router.get(
    "/classrooms",
    response_model=ClassroomInsightListResponse,
    summary="Insights for every classroom with at least one record",
)
def list_classroom_insights(
    educator_id: Optional[str] = _EDUCATOR_QUERY,
    db: Session = Depends(get_db),
    policy: InsightPolicy = Depends(get_policy),
):
    snap = load_snapshot(db, educator_id)
    insights = generate_all_classroom_insights(
        snap.behavior_records, snap.classroom_records, snap.children, snap.classrooms, policy
    )
    return ClassroomInsightListResponse(
        total=len(insights),
        items=[_classroom_to_out(i) for i in insights],
    )


@router.get(
    "/classroom/{classroom_id}",
    response_model=ClassroomInsightResponse,
    summary="Insight for a single classroom",
    responses={404: {"model": ErrorResponse, "description": "Unknown classroom."}},
)
def classroom_insight(
    classroom_id: str,
    educator_id: Optional[str] = _EDUCATOR_QUERY,
    db: Session = Depends(get_db),
    policy: InsightPolicy = Depends(get_policy),
):
    """
    ### Climate score
    `10 - (weight_high * high + weight_medium * medium) / total`, clamped to
    0-10. Defaults: weight_high = 6, weight_medium = 3.
    """
    snap = load_snapshot(db, educator_id)
    classroom = snap.classroom(classroom_id)
    if classroom is None:
        raise ClassroomNotFoundError(classroom_id)
    insight = generate_classroom_insights(
        classroom_id,
        snap.behavior_records,
        snap.classroom_records,
        snap.children,
        classroom,
        policy,
    )
    return ClassroomInsightResponse(
        classroom_insight=_classroom_to_out(insight) if insight else None,
    )


# ---------------------------------------------------------------------------
# Unified / organization
# ---------------------------------------------------------------------------

@router.get(
    "/unified",
    response_model=UnifiedInsightListResponse,
    summary="Patterns recurring at both child and classroom level",
)
def unified_insights(
    educator_id: Optional[str] = _EDUCATOR_QUERY,
    db: Session = Depends(get_db),
    policy: InsightPolicy = Depends(get_policy),
):
    """
    A context category becomes a unified insight when it appears in both
    behavior and classroom-challenge records and clears the significance
    threshold (>= 2 affected children OR >= 3 behavior records by default).
    """
    snap = load_snapshot(db, educator_id)
    insights = generate_unified_insights(
        snap.behavior_records, snap.classroom_records, snap.children, snap.classrooms, policy
    )
    return UnifiedInsightListResponse(
        total=len(insights),
        items=[_unified_to_out(i) for i in insights],
    )


@router.get(
    "/organization",
    response_model=OrganizationInsightResponse,
    summary="Organization-wide rollup",
)
def organization_insight(
    educator_id: Optional[str] = _EDUCATOR_QUERY,
    db: Session = Depends(get_db),
    policy: InsightPolicy = Depends(get_policy),
):
    snap = load_snapshot(db, educator_id)
    result = generate_organization_insight(
        snap.behavior_records, snap.classroom_records, snap.children, snap.classrooms, policy
    )
    return _organization_to_out(result)
