"""
Counting and ranking primitives shared by every insight generator.

Tie-break rule for frequency rankings: equal counts keep first-seen order,
so identical input always ranks identically.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Hashable, Iterable, Optional, TypeVar

K = TypeVar("K", bound=Hashable)


def rank_by_frequency(keys: Iterable[K]) -> list[tuple[K, int]]:
    """Return (key, count) pairs, most frequent first, ties by first appearance."""
    counts: dict[K, int] = {}
    for key in keys:
        counts[key] = counts.get(key, 0) + 1
    # dict preserves insertion order and sorted() is stable
    return sorted(counts.items(), key=lambda kv: -kv[1])


def top_k(keys: Iterable[K], k: int) -> list[K]:
    return [key for key, _ in rank_by_frequency(keys)[:k]]


def mode(keys: Iterable[K]) -> Optional[K]:
    ranked = rank_by_frequency(keys)
    return ranked[0][0] if ranked else None


def round_half_up(value: Decimal | float, places: int = 0) -> Decimal:
    exp = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exp, rounding=ROUND_HALF_UP)


def percentage(part: int, whole: int) -> int:
    """Integer percentage in [0, 100]; 0 when whole is 0."""
    if whole <= 0:
        return 0
    raw = Decimal(part) * Decimal(100) / Decimal(whole)
    return int(raw.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def mean(values: Iterable[float]) -> Optional[float]:
    values = list(values)
    if not values:
        return None
    return sum(values) / len(values)
