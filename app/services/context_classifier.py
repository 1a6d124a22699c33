"""
Context classifier: raw context tag -> canonical category.

Tags arrive from several upstream forms ("Circle Time", "circle-time",
"circle_time", "Arrival/Drop-off") and must compare equal as grouping keys.
Unknown tags map to UNCATEGORIZED; classify() never raises.
"""
from __future__ import annotations

import re
from typing import Optional

UNCATEGORIZED = "uncategorized"
TRANSITION = "transition"
PEER_CONFLICT = "peer_conflict"

CANONICAL_CATEGORIES = (
    "arrival_drop_off",
    "circle_time",
    "free_play",
    "meal_time",
    TRANSITION,
    "group_activity",
    "outdoor_play",
    "rest_nap_time",
    "cleanup",
    "departure_pick_up",
    PEER_CONFLICT,
    "other",
)

# Normalized spelling -> canonical category
_ALIASES = {
    "transitions": TRANSITION,
    "transitioning": TRANSITION,
    "circle": "circle_time",
    "circletime": "circle_time",
    "free_time": "free_play",
    "play_time": "free_play",
    "meal": "meal_time",
    "mealtime": "meal_time",
    "meals": "meal_time",
    "lunch": "meal_time",
    "snack": "meal_time",
    "snack_time": "meal_time",
    "arrival": "arrival_drop_off",
    "drop_off": "arrival_drop_off",
    "dropoff": "arrival_drop_off",
    "departure": "departure_pick_up",
    "pick_up": "departure_pick_up",
    "pickup": "departure_pick_up",
    "outdoor": "outdoor_play",
    "outdoors": "outdoor_play",
    "playground": "outdoor_play",
    "rest": "rest_nap_time",
    "nap": "rest_nap_time",
    "nap_time": "rest_nap_time",
    "naptime": "rest_nap_time",
    "rest_time": "rest_nap_time",
    "clean_up": "cleanup",
    "group": "group_activity",
    "group_time": "group_activity",
    "conflict": PEER_CONFLICT,
    "peer_conflicts": PEER_CONFLICT,
    "peer_interaction_conflict": PEER_CONFLICT,
    "peer_interaction": PEER_CONFLICT,
}

_SEPARATORS = re.compile(r"[\s_\-/]+")


def normalize(raw: Optional[str]) -> str:
    """Lower-case and fold whitespace, hyphens, slashes, underscores into '_'."""
    if not raw:
        return ""
    return _SEPARATORS.sub("_", raw.strip().lower()).strip("_")


def classify(raw_context: Optional[str]) -> str:
    token = normalize(raw_context)
    if token in CANONICAL_CATEGORIES:
        return token
    return _ALIASES.get(token, UNCATEGORIZED)


# ---------------------------------------------------------------------------
# Behavior description categories
# ---------------------------------------------------------------------------

OTHER_BEHAVIORS = "Other Behaviors"

# First match wins, so order matters ("sharing" before "transition").
_BEHAVIOR_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Physical Aggression", ("hit", "push", "kick")),
    ("Biting", ("bite", "biting")),
    ("Crying/Emotional Expression", ("cry", "crying", "tears")),
    ("Tantrums/Meltdowns", ("tantrum", "meltdown")),
    ("Running Away", ("run", "running", "flee")),
    ("Withdrawal/Hiding", ("hide", "hiding", "withdraw")),
    ("Sharing Difficulties", ("share", "sharing", "turn")),
    ("Transition Challenges", ("transition", "change")),
)


def categorize_behavior(description: Optional[str]) -> str:
    """Bucket a free-text behavior description by keyword."""
    text = (description or "").lower()
    for category, keywords in _BEHAVIOR_KEYWORDS:
        if any(k in text for k in keywords):
            return category
    return OTHER_BEHAVIORS
