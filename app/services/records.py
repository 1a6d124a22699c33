"""
Engine-side record types and snapshot preparation.

The record store hands the engine plain, immutable collections. Before any
generator groups anything, the collections pass through `prepare_*` once per
call, which:

  * drops malformed records (missing reference, context or severity) with a
    warning instead of aborting the pass,
  * classifies each record's context exactly once,
  * applies the hard record cap from the policy, keeping the most recent
    records and flagging the result as truncated.

Zero I/O, no ORM. Everything here is safe to share between threads.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Generic, Iterable, Optional, Sequence, TypeVar

from app.services.context_classifier import classify
from app.services.insight_policy import InsightPolicy

logger = logging.getLogger(__name__)


class Severity(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, value) -> Optional["Severity"]:
        """Case-insensitive parse; returns None for missing or unknown values."""
        if isinstance(value, Severity):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


_SEVERITY_RANK = {Severity.low: 1, Severity.medium: 2, Severity.high: 3}

MIN_CONFIDENCE = 1
MAX_CONFIDENCE = 10


# ---------------------------------------------------------------------------
# Input types (owned by the record store; read-only here)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Child:
    id: str
    name: str
    classroom_id: Optional[str] = None
    grade_band: Optional[str] = None


@dataclass(frozen=True)
class Classroom:
    id: str
    name: str
    educator_id: Optional[str] = None
    grade_band: Optional[str] = None
    stressors: tuple[str, ...] = ()


@dataclass(frozen=True)
class BehaviorRecord:
    id: str
    child_id: Optional[str]
    context: Optional[str]
    description: str
    severity: Optional[str]
    created_at: datetime
    selected_strategy: Optional[str] = None
    confidence_rating: Optional[int] = None
    classroom_id: Optional[str] = None
    time_of_day: Optional[str] = None
    stressors: tuple[str, ...] = ()
    educator_id: Optional[str] = None


@dataclass(frozen=True)
class ClassroomChallengeRecord:
    id: str
    classroom_id: Optional[str]
    context: Optional[str]
    description: str
    severity: Optional[str]
    created_at: datetime
    stressors: tuple[str, ...] = ()
    selected_strategy: Optional[str] = None
    educator_id: Optional[str] = None


# ---------------------------------------------------------------------------
# Classified views (built once per call)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ClassifiedBehavior:
    record: BehaviorRecord
    child_id: str
    category: str
    severity: Severity
    confidence: Optional[int]


@dataclass(frozen=True)
class ClassifiedChallenge:
    record: ClassroomChallengeRecord
    classroom_id: str
    category: str
    severity: Severity


T = TypeVar("T", ClassifiedBehavior, ClassifiedChallenge)


@dataclass(frozen=True)
class Prepared(Generic[T]):
    """Classified records plus whether the hard cap cut the input."""
    items: tuple[T, ...] = field(default_factory=tuple)
    truncated: bool = False


# ---------------------------------------------------------------------------
# Preparation
# ---------------------------------------------------------------------------

def _cap(records: Sequence, policy: InsightPolicy, kind: str) -> tuple[Sequence, bool]:
    if len(records) <= policy.max_records:
        return records, False
    logger.warning(
        "%s snapshot has %d records, over the cap of %d; keeping the most recent",
        kind, len(records), policy.max_records,
    )
    return records[-policy.max_records:], True


def _valid_confidence(rec: BehaviorRecord) -> Optional[int]:
    rating = rec.confidence_rating
    if rating is None:
        return None
    if isinstance(rating, bool) or not isinstance(rating, int) or not (
        MIN_CONFIDENCE <= rating <= MAX_CONFIDENCE
    ):
        logger.warning(
            "Ignoring confidence rating %r on behavior record %s (expected %d-%d)",
            rating, rec.id, MIN_CONFIDENCE, MAX_CONFIDENCE,
        )
        return None
    return rating


def prepare_behavior_records(
    records: Iterable[BehaviorRecord],
    policy: InsightPolicy,
) -> Prepared[ClassifiedBehavior]:
    capped, truncated = _cap(list(records), policy, "Behavior")
    items: list[ClassifiedBehavior] = []
    for rec in capped:
        severity = Severity.parse(rec.severity)
        missing = [
            name for name, ok in (
                ("child_id", bool(rec.child_id)),
                ("context", bool(rec.context and rec.context.strip())),
                ("severity", severity is not None),
            ) if not ok
        ]
        if missing:
            logger.warning(
                "Skipping malformed behavior record %s: missing %s",
                rec.id, ", ".join(missing),
            )
            continue
        items.append(ClassifiedBehavior(
            record=rec,
            child_id=rec.child_id,
            category=classify(rec.context),
            severity=severity,
            confidence=_valid_confidence(rec),
        ))
    return Prepared(items=tuple(items), truncated=truncated)


def prepare_classroom_records(
    records: Iterable[ClassroomChallengeRecord],
    policy: InsightPolicy,
) -> Prepared[ClassifiedChallenge]:
    capped, truncated = _cap(list(records), policy, "Classroom challenge")
    items: list[ClassifiedChallenge] = []
    for rec in capped:
        severity = Severity.parse(rec.severity)
        missing = [
            name for name, ok in (
                ("classroom_id", bool(rec.classroom_id)),
                ("context", bool(rec.context and rec.context.strip())),
                ("severity", severity is not None),
            ) if not ok
        ]
        if missing:
            logger.warning(
                "Skipping malformed classroom record %s: missing %s",
                rec.id, ", ".join(missing),
            )
            continue
        items.append(ClassifiedChallenge(
            record=rec,
            classroom_id=rec.classroom_id,
            category=classify(rec.context),
            severity=severity,
        ))
    return Prepared(items=tuple(items), truncated=truncated)


def child_classroom_lookup(children: Iterable[Child]) -> dict[str, Optional[str]]:
    return {c.id: c.classroom_id for c in children}


def attributed_classroom(
    item: ClassifiedBehavior,
    classroom_of: dict[str, Optional[str]],
) -> Optional[str]:
    """Classroom a behavior record counts toward: the child's, else the record's own."""
    if item.child_id in classroom_of and classroom_of[item.child_id]:
        return classroom_of[item.child_id]
    return item.record.classroom_id


def utc_timestamp(value: datetime) -> datetime:
    """Comparable timestamp: naive values are read as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
