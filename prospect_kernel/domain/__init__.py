"""Pure kernel domain values: clock and subscription tiers. ZERO I/O."""

from prospect_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from prospect_kernel.domain.tiers import (
    DEFAULT_VISIBILITY,
    SubscriptionTier,
    VisibilityTierSet,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "DEFAULT_VISIBILITY",
    "SubscriptionTier",
    "VisibilityTierSet",
]
