"""
Entity resolver: link dependent rows to their parent by natural key.

Contract:
    resolve(draft, context) returns the draft with its parent id set.
    The parent is looked up by exact key match; when absent it is created
    with minimal fields (the key, carried fields from the dependent row,
    configured defaults) and the run's visibility.

Guarantees:
    - One lookup or creation per distinct key per run (ImportRunContext memo).
      Two rows naming the same unseen parent create exactly one parent.
    - A key whose lookup or creation failed is not retried within the run.
    - Created parents are committed eagerly by the store, one at a time,
      independently of the dependent batch committed later.

Failure modes:
    - ResolutionError wraps any store failure (and a blank key). The service
      turns it into a failed row; the run continues.
"""

from __future__ import annotations

from typing import Any, Mapping
from uuid import UUID

from prospect_config.schema import ParentResolutionDef
from prospect_kernel.domain.tiers import DEFAULT_VISIBILITY, VisibilityTierSet
from prospect_kernel.exceptions import ResolutionError, StoreError, describe_error
from prospect_kernel.logging_config import get_logger

from prospect_ingestion.domain.types import CompanyDraft, ContactDraft, EntityKind, FieldRule
from prospect_ingestion.domain.validators import build_draft, fill_blanks
from prospect_ingestion.resolver.context import ImportRunContext
from prospect_ingestion.store.base import RecordStore
from prospect_ingestion.tagging import tag_visibility

logger = get_logger("ingestion.resolver")


class EntityResolver:
    """Find-or-create parent companies for contact drafts."""

    def __init__(
        self,
        store: RecordStore,
        parent_resolution: ParentResolutionDef,
        parent_rules: Mapping[str, FieldRule],
        default_tiers: VisibilityTierSet = DEFAULT_VISIBILITY,
    ):
        self._store = store
        self._parent = parent_resolution
        self._parent_rules = dict(parent_rules)
        self._default_tiers = default_tiers

    def resolve(self, draft: ContactDraft, context: ImportRunContext) -> ContactDraft:
        key = getattr(draft, self._parent.key_field, None)
        parent_id = self.resolve_parent(key, draft, context)
        return draft.with_company(parent_id)

    def resolve_parent(self, key: str | None, draft: ContactDraft, context: ImportRunContext) -> UUID:
        """
        Id of the parent named key, creating it if needed.

        Raises:
            ResolutionError: blank key, or the store failed (now or earlier in the run).
        """
        if key is None or not str(key).strip():
            raise ResolutionError(str(key or ""), f"{self._parent.key_field} is empty")
        if key in context.resolved:
            return context.resolved[key]
        if key in context.failures:
            raise ResolutionError(key, context.failures[key])

        try:
            existing = self._store.find_company_id_by_name(key)
            if existing is not None:
                context.remember(key, existing)
                logger.info(
                    "parent_company_resolved",
                    extra={"company_name": key, "company_id": str(existing), "row_index": draft.row_index},
                )
                return existing
            parent = self.build_parent(key, draft, context)
            created = self._store.create_company(parent, context.actor_id)
        except StoreError as exc:
            context.remember_failure(key, exc.reason)
            raise ResolutionError(key, exc.reason) from exc
        except Exception as exc:
            # Caller-supplied stores may raise their own errors
            reason = describe_error(exc)
            context.remember_failure(key, reason)
            raise ResolutionError(key, reason) from exc

        context.remember(key, created, created=True)
        logger.info(
            "parent_company_created",
            extra={"company_name": key, "company_id": str(created), "row_index": draft.row_index},
        )
        return created

    def build_parent(self, key: str, draft: ContactDraft, context: ImportRunContext) -> CompanyDraft:
        """Minimal parent draft: key, carried fields, parent fallbacks and defaults."""
        values: dict[str, Any] = {self._parent.key_field: key}
        for name in self._parent.carried_fields:
            value = getattr(draft, name, None)
            if value not in (None, "", ()):
                values[name] = value
        values = fill_blanks(values, self._parent_rules, self._parent.defaults)
        parent = build_draft(EntityKind(self._parent.parent_kind), draft.row_index, values)
        return tag_visibility(parent, context.visibility_override, self._default_tiers)
