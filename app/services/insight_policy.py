"""
Tunable constants for the insight generators.

Every generator takes an optional `InsightPolicy`; omitting it uses
DEFAULT_POLICY. Bad values are programmer errors, so they fail at
construction rather than surfacing mid-aggregation.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, fields

from app.core.errors import InvalidInsightPolicyError


@dataclass(frozen=True)
class InsightPolicy:
    top_strategies: int = 3
    top_stressors: int = 3
    min_affected_children: int = 2
    min_pattern_frequency: int = 3
    weight_high: float = 6.0
    weight_medium: float = 3.0
    max_records: int = 50_000

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidInsightPolicyError(f.name, value, "must be a number")
            if not math.isfinite(value):
                raise InvalidInsightPolicyError(f.name, value, "must be finite")

        for name in ("top_strategies", "top_stressors", "min_affected_children",
                     "min_pattern_frequency", "max_records"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise InvalidInsightPolicyError(name, value, "must be a positive integer")

        if self.weight_medium < 0:
            raise InvalidInsightPolicyError("weight_medium", self.weight_medium, "must be >= 0")
        # Climate score stays monotonic only while high outweighs medium.
        if self.weight_high < self.weight_medium:
            raise InvalidInsightPolicyError(
                "weight_high", self.weight_high, "must be >= weight_medium"
            )

    @classmethod
    def from_settings(cls, settings) -> "InsightPolicy":
        return cls(
            top_strategies=settings.INSIGHT_TOP_STRATEGIES,
            top_stressors=settings.INSIGHT_TOP_STRESSORS,
            min_affected_children=settings.INSIGHT_MIN_AFFECTED_CHILDREN,
            min_pattern_frequency=settings.INSIGHT_MIN_PATTERN_FREQUENCY,
            weight_high=settings.INSIGHT_WEIGHT_HIGH,
            weight_medium=settings.INSIGHT_WEIGHT_MEDIUM,
            max_records=settings.INSIGHT_MAX_RECORDS,
        )


DEFAULT_POLICY = InsightPolicy()
