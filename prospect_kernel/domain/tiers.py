"""Subscription tiers and the visibility tier set carried by every record."""

from __future__ import annotations

from enum import Enum
from typing import Iterable


class SubscriptionTier(str, Enum):
    """Subscription tier allowed to see a record."""

    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


VisibilityTierSet = frozenset[SubscriptionTier]

DEFAULT_VISIBILITY: VisibilityTierSet = frozenset({SubscriptionTier.FREE})


def tiers_to_json(tiers: Iterable[SubscriptionTier]) -> list[str]:
    """Stable, JSON-safe representation (ordered free -> enterprise)."""
    order = list(SubscriptionTier)
    return [t.value for t in sorted(set(tiers), key=order.index)]


def tiers_from_json(values: Iterable[str] | None) -> VisibilityTierSet:
    if not values:
        return frozenset()
    return frozenset(SubscriptionTier(v) for v in values)
