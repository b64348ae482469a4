"""
RecordStore protocol: the pipeline's only persistence seam.

Contract:
    find_company_id_by_name() -> exact natural-key lookup, oldest match wins.
    create_company()          -> persist one company, durable on return.
    create_batch()            -> persist all drafts or none.

Every store-specific failure surfaces as StoreError. Callers never see
driver or ORM exceptions.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable
from uuid import UUID

from prospect_ingestion.domain.types import CompanyDraft, EntityDraft, EntityKind


@runtime_checkable
class RecordStore(Protocol):
    """Storage backend for companies and contacts."""

    def find_company_id_by_name(self, company_name: str) -> UUID | None:
        """Id of the company whose name equals company_name exactly, else None."""
        ...

    def create_company(self, draft: CompanyDraft, actor_id: UUID) -> UUID:
        """Insert one company and make it durable. Returns the new id."""
        ...

    def create_batch(
        self,
        entity_kind: EntityKind,
        drafts: Sequence[EntityDraft],
        actor_id: UUID,
    ) -> list[UUID]:
        """Insert every draft atomically. Returns ids in draft order."""
        ...
