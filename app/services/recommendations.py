"""
Recommendation decision table for unified insights.

Keyed by (canonical context category, classroom-level severity). Lookups that
miss the table fall back to GENERIC_RECOMMENDATION, so an emitted insight
always carries at least one recommendation.
"""
from __future__ import annotations

from app.services.records import Severity

GENERIC_RECOMMENDATION = (
    "Review this pattern with your team and agree on one consistent response to try next week"
)

_TRANSITION_BASE = [
    "Implement visual transition cues",
    "Create predictable transition routines",
    "Use countdown timers for preparation",
]
_PEER_CONFLICT_BASE = [
    "Implement peer mediation strategies",
    "Create sharing protocols for high-demand materials",
    "Develop social-emotional learning activities",
]

RECOMMENDATION_TABLE: dict[tuple[str, Severity], list[str]] = {
    ("transition", Severity.low): _TRANSITION_BASE[:2],
    ("transition", Severity.medium): _TRANSITION_BASE,
    ("transition", Severity.high): _TRANSITION_BASE + [
        "Assign an adult to shadow children who struggle most during transitions",
    ],
    ("peer_conflict", Severity.low): _PEER_CONFLICT_BASE[2:],
    ("peer_conflict", Severity.medium): _PEER_CONFLICT_BASE,
    ("peer_conflict", Severity.high): _PEER_CONFLICT_BASE + [
        "Reduce group sizes during high-conflict activities",
    ],
    ("circle_time", Severity.medium): [
        "Shorten circle time to match attention spans",
        "Offer movement breaks and fidget options during circle time",
    ],
    ("circle_time", Severity.high): [
        "Shorten circle time to match attention spans",
        "Offer movement breaks and fidget options during circle time",
        "Provide an alternative quiet activity for children who cannot join",
    ],
    ("meal_time", Severity.medium): [
        "Establish a calm, predictable mealtime routine",
        "Seat children with known conflicts apart during meals",
    ],
    ("meal_time", Severity.high): [
        "Establish a calm, predictable mealtime routine",
        "Seat children with known conflicts apart during meals",
        "Check for sensory or hunger-related triggers with families",
    ],
    ("free_play", Severity.medium): [
        "Duplicate high-demand toys and materials",
        "Define play areas with clear limits on group size",
    ],
    ("free_play", Severity.high): [
        "Duplicate high-demand toys and materials",
        "Define play areas with clear limits on group size",
        "Station an adult in the busiest play area",
    ],
    ("arrival_drop_off", Severity.medium): [
        "Create a consistent goodbye ritual with families",
        "Offer a predictable first activity on arrival",
    ],
    ("arrival_drop_off", Severity.high): [
        "Create a consistent goodbye ritual with families",
        "Offer a predictable first activity on arrival",
        "Plan a staggered arrival for children with separation challenges",
    ],
    ("rest_nap_time", Severity.medium): [
        "Dim lights and use calming sounds before rest time",
        "Offer quiet alternatives for children who do not sleep",
    ],
    ("cleanup", Severity.medium): [
        "Use a cleanup song and visual checklist",
        "Give a five-minute warning before cleanup",
    ],
    ("group_activity", Severity.medium): [
        "Break group activities into smaller groups",
        "Give each child a defined role in the activity",
    ],
    ("outdoor_play", Severity.medium): [
        "Review outdoor supervision zones",
        "Introduce structured games at the start of outdoor time",
    ],
}


def recommend(category: str, severity: Severity) -> list[str]:
    """Canned recommendations for a pattern; never empty."""
    found = RECOMMENDATION_TABLE.get((category, severity))
    if found:
        return list(found)
    return [GENERIC_RECOMMENDATION]
