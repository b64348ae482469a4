"""
Visibility tagger.

Every record leaving the pipeline, auto-created parents included, carries a
non-empty visibility tier set: the configured default ({free}) unless the
caller overrides it for the run.
"""

from __future__ import annotations

from typing import Iterable, TypeVar

from prospect_kernel.domain.tiers import DEFAULT_VISIBILITY, SubscriptionTier, VisibilityTierSet
from prospect_kernel.exceptions import InvalidTierError

from prospect_ingestion.domain.types import CompanyDraft, ContactDraft

DraftT = TypeVar("DraftT", CompanyDraft, ContactDraft)


def parse_tiers(values: str | Iterable[str | SubscriptionTier]) -> VisibilityTierSet:
    """
    Parse a tier override. A string is split on commas ("free,pro").

    Raises:
        InvalidTierError: unknown tier name, or no tiers at all.
    """
    items = values.split(",") if isinstance(values, str) else list(values)
    tiers: set[SubscriptionTier] = set()
    for item in items:
        if isinstance(item, SubscriptionTier):
            tiers.add(item)
            continue
        name = str(item).strip().lower()
        if not name:
            continue
        try:
            tiers.add(SubscriptionTier(name))
        except ValueError:
            raise InvalidTierError(item) from None
    if not tiers:
        raise InvalidTierError(values)
    return frozenset(tiers)


def tag_visibility(
    draft: DraftT,
    override: VisibilityTierSet | None = None,
    default: VisibilityTierSet = DEFAULT_VISIBILITY,
) -> DraftT:
    """Copy of draft with visible_to_tiers set to the override, else the default."""
    tiers = override if override else default
    return draft.with_tiers(tiers)
