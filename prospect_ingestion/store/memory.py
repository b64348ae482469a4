"""In-memory RecordStore for tests and dry runs."""

from __future__ import annotations

from typing import Any, Sequence
from uuid import UUID, uuid4

from prospect_kernel.exceptions import StoreError

from prospect_ingestion.domain.types import CompanyDraft, EntityDraft, EntityKind


class InMemoryRecordStore:
    """
    Dict-backed store with the same guarantees as the SQL store.

    Companies keep insertion order, so the first company with a given name
    is the one lookups return. Contacts must reference a stored company.
    """

    def __init__(self) -> None:
        self.companies: dict[UUID, dict[str, Any]] = {}
        self.contacts: dict[UUID, dict[str, Any]] = {}

    def find_company_id_by_name(self, company_name: str) -> UUID | None:
        for company_id, record in self.companies.items():
            if record["company_name"] == company_name:
                return company_id
        return None

    def create_company(self, draft: CompanyDraft, actor_id: UUID) -> UUID:
        company_id = uuid4()
        self.companies[company_id] = {**draft.to_record(), "created_by_id": actor_id}
        return company_id

    def create_batch(
        self,
        entity_kind: EntityKind,
        drafts: Sequence[EntityDraft],
        actor_id: UUID,
    ) -> list[UUID]:
        kind = EntityKind(entity_kind)
        staged: list[tuple[UUID, dict[str, Any]]] = []
        for draft in drafts:
            try:
                record = draft.to_record()
            except ValueError as exc:
                raise StoreError("create_batch", str(exc)) from exc
            if kind == EntityKind.CONTACT and record["company_id"] not in self.companies:
                raise StoreError("create_batch", f"unknown company_id {record['company_id']}")
            staged.append((uuid4(), {**record, "created_by_id": actor_id}))

        target = self.companies if kind == EntityKind.COMPANY else self.contacts
        target.update(staged)
        return [record_id for record_id, _ in staged]

    def companies_named(self, company_name: str) -> list[dict[str, Any]]:
        return [r for r in self.companies.values() if r["company_name"] == company_name]
