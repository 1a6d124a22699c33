"""
Record store adapter: ORM rows -> immutable engine snapshot.

The insight generators never touch the database. Routers call
load_snapshot() once per request and hand the resulting RecordSnapshot to
the pure functions in app/services/*_insights.py.

Scoping: with an educator_id the snapshot holds that educator's classrooms,
the children in them, and every log tied to either (or filed by the
educator). Without one it holds everything.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models import BehaviorLog, ClassroomLog
from app.models import Child as ChildRow
from app.models import Classroom as ClassroomRow
from app.services.records import (
    BehaviorRecord,
    Child,
    Classroom,
    ClassroomChallengeRecord,
)


@dataclass(frozen=True)
class RecordSnapshot:
    behavior_records: tuple[BehaviorRecord, ...]
    classroom_records: tuple[ClassroomChallengeRecord, ...]
    children: tuple[Child, ...]
    classrooms: tuple[Classroom, ...]

    def child(self, child_id: str) -> Optional[Child]:
        return next((c for c in self.children if c.id == child_id), None)

    def classroom(self, classroom_id: str) -> Optional[Classroom]:
        return next((c for c in self.classrooms if c.id == classroom_id), None)


# ---------------------------------------------------------------------------
# Row conversion
# ---------------------------------------------------------------------------

def _parse_tags(raw: Optional[str]) -> tuple[str, ...]:
    if not raw:
        return ()
    try:
        value = json.loads(raw)
    except (ValueError, TypeError):
        return ()
    if not isinstance(value, list):
        return ()
    return tuple(str(v) for v in value)


def _classroom(row: ClassroomRow) -> Classroom:
    return Classroom(
        id=row.id,
        name=row.name,
        educator_id=row.educator_id,
        grade_band=row.grade_band,
        stressors=_parse_tags(row.stressors),
    )


def _child(row: ChildRow) -> Child:
    return Child(
        id=row.id,
        name=row.name,
        classroom_id=row.classroom_id,
        grade_band=row.grade_band,
    )


def _behavior(row: BehaviorLog) -> BehaviorRecord:
    return BehaviorRecord(
        id=row.id,
        child_id=row.child_id,
        context=row.context,
        description=row.behavior_description,
        severity=row.severity,
        created_at=row.created_at,
        selected_strategy=row.selected_strategy,
        confidence_rating=row.confidence_rating,
        classroom_id=row.classroom_id,
        time_of_day=row.time_of_day,
        stressors=_parse_tags(row.stressors),
        educator_id=row.educator_id,
    )


def _challenge(row: ClassroomLog) -> ClassroomChallengeRecord:
    return ClassroomChallengeRecord(
        id=row.id,
        classroom_id=row.classroom_id,
        context=row.context,
        description=row.challenge_description,
        severity=row.severity,
        created_at=row.created_at,
        stressors=_parse_tags(row.stressors),
        selected_strategy=row.selected_strategy,
        educator_id=row.educator_id,
    )


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def load_snapshot(db: Session, educator_id: Optional[str] = None) -> RecordSnapshot:
    """Read classrooms, children and both log collections, oldest first."""
    rooms_q = db.query(ClassroomRow)
    if educator_id:
        rooms_q = rooms_q.filter(ClassroomRow.educator_id == educator_id)
    rooms = rooms_q.order_by(ClassroomRow.created_at, ClassroomRow.id).all()
    room_ids = [r.id for r in rooms]

    children_q = db.query(ChildRow)
    if educator_id:
        children_q = children_q.filter(ChildRow.classroom_id.in_(room_ids))
    kids = children_q.order_by(ChildRow.created_at, ChildRow.id).all()
    child_ids = [c.id for c in kids]

    behavior_q = db.query(BehaviorLog)
    challenge_q = db.query(ClassroomLog)
    if educator_id:
        behavior_q = behavior_q.filter(or_(
            BehaviorLog.educator_id == educator_id,
            BehaviorLog.child_id.in_(child_ids),
            BehaviorLog.classroom_id.in_(room_ids),
        ))
        challenge_q = challenge_q.filter(or_(
            ClassroomLog.educator_id == educator_id,
            ClassroomLog.classroom_id.in_(room_ids),
        ))
    behavior = behavior_q.order_by(BehaviorLog.created_at, BehaviorLog.id).all()
    challenges = challenge_q.order_by(ClassroomLog.created_at, ClassroomLog.id).all()

    return RecordSnapshot(
        behavior_records=tuple(_behavior(r) for r in behavior),
        classroom_records=tuple(_challenge(r) for r in challenges),
        children=tuple(_child(r) for r in kids),
        classrooms=tuple(_classroom(r) for r in rooms),
    )
