"""
Insight response schemas.

GET /analytics/children              → ChildInsightListResponse
GET /analytics/child/{id}            → ChildInsightResponse
GET /analytics/classrooms            → ClassroomInsightListResponse
GET /analytics/classroom/{id}        → ClassroomInsightResponse
GET /analytics/unified               → UnifiedInsightListResponse
GET /analytics/organization          → OrganizationInsightResponse
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Child
# ---------------------------------------------------------------------------

class StrategyScoreOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    label: str
    mean_rating: Optional[float] = Field(
        default=None,
        description="Mean confidence rating (1-10) of the uses that were rated.",
    )
    uses: int


class FrequencyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    frequency: int


class ChildInsightOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    child_id: str
    child_name: str
    total_logs: int = Field(description="Valid behavior records for this child.")
    most_frequent_context: str = Field(examples=["transition"])
    effective_strategies: list[str] = Field(
        description="Strategy labels, best first.",
    )
    strategy_scores: list[StrategyScoreOut]
    severity_distribution: dict[str, int] = Field(
        examples=[{"low": 2, "medium": 1, "high": 0}],
    )
    confidence_trend: Optional[float] = None
    triggers: list[FrequencyOut] = Field(default_factory=list)
    time_patterns: list[FrequencyOut] = Field(default_factory=list)
    truncated: bool = Field(
        default=False,
        description="True when the record cap cut the snapshot.",
    )


class ChildInsightListResponse(BaseModel):
    total: int
    items: list[ChildInsightOut]


class ChildInsightResponse(BaseModel):
    child_insight: Optional[ChildInsightOut] = Field(
        default=None,
        description="Null when the child has no behavior records.",
    )


# ---------------------------------------------------------------------------
# Classroom
# ---------------------------------------------------------------------------

class ClassroomInsightOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    classroom_id: str
    classroom_name: str
    total_logs: int
    climate_score: float = Field(description="0-10, higher is calmer.", examples=[7.9])
    transition_challenges: int = Field(
        description="Percentage (0-100) of records in a transition context.",
    )
    top_stressors: list[str] = Field(description="Context categories, most frequent first.")
    severity_mix: dict[str, int]
    common_stressors: list[str] = Field(default_factory=list)
    frequent_behaviors: list[str] = Field(default_factory=list)
    truncated: bool = False


class ClassroomInsightListResponse(BaseModel):
    total: int
    items: list[ClassroomInsightOut]


class ClassroomInsightResponse(BaseModel):
    classroom_insight: Optional[ClassroomInsightOut] = Field(
        default=None,
        description="Null when no record is attributable to the classroom.",
    )


# ---------------------------------------------------------------------------
# Unified
# ---------------------------------------------------------------------------

class ChildLevelOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    affected_children: int
    frequency: int


class ClassroomLevelOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    affected_classrooms: int
    severity: str = Field(description='"low" | "medium" | "high"')
    frequency: int
    stressor_rank: int


class UnifiedInsightOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: str = "nested_pattern"
    pattern: str
    child_level: ChildLevelOut
    classroom_level: ClassroomLevelOut
    recommendations: list[str] = Field(min_length=1)
    truncated: bool = False


class UnifiedInsightListResponse(BaseModel):
    total: int
    items: list[UnifiedInsightOut]


# ---------------------------------------------------------------------------
# Organization
# ---------------------------------------------------------------------------

class StressorPrevalenceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    stressor: str
    percentage: int


class SeverityTrendOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    grade: str
    severity: str
    percentage: int


class OrganizationInsightResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_educators: int
    total_children: int
    total_behavior_logs: int
    total_classroom_logs: int
    high_severity_transitions: int = Field(
        description="Percentage of transition-context records rated high.",
    )
    most_frequent_child_stressor: str
    classroom_stressor_prevalence: list[StressorPrevalenceOut]
    severity_trends: list[SeverityTrendOut]
    truncated: bool = False
