"""
SQLAlchemy-backed RecordStore.

Writes run inside a SAVEPOINT (session.begin_nested()). A failed write rolls
back to the savepoint, so earlier work in the same session survives, and is
re-raised as StoreError. With commit_each_write=True (the default) every
successful write is followed by session.commit(): parent companies created
by the resolver are durable before the contact batch is attempted.
"""

from __future__ import annotations

from typing import NoReturn, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from prospect_kernel.exceptions import StoreError
from prospect_kernel.logging_config import get_logger
from prospect_kernel.models import Company, Contact

from prospect_ingestion.domain.types import CompanyDraft, EntityDraft, EntityKind

logger = get_logger("ingestion.store")

_MODELS = {
    EntityKind.COMPANY: Company,
    EntityKind.CONTACT: Contact,
}


class SqlAlchemyRecordStore:
    """RecordStore over a caller-owned Session."""

    def __init__(self, session: Session, commit_each_write: bool = True):
        self._session = session
        self._commit = commit_each_write

    def find_company_id_by_name(self, company_name: str) -> UUID | None:
        stmt = (
            select(Company.id)
            .where(Company.company_name == company_name)
            .order_by(Company.created_at, Company.id)
            .limit(1)
        )
        try:
            return self._session.scalars(stmt).first()
        except SQLAlchemyError as exc:
            raise StoreError("find_company_id_by_name", _describe(exc)) from exc

    def create_company(self, draft: CompanyDraft, actor_id: UUID) -> UUID:
        company = Company(created_by_id=actor_id, **draft.to_record())
        self._write("create_company", [company])
        return company.id

    def create_batch(
        self,
        entity_kind: EntityKind,
        drafts: Sequence[EntityDraft],
        actor_id: UUID,
    ) -> list[UUID]:
        if not drafts:
            return []
        model = _MODELS[EntityKind(entity_kind)]
        try:
            rows = [model(created_by_id=actor_id, **draft.to_record()) for draft in drafts]
        except ValueError as exc:
            raise StoreError("create_batch", str(exc)) from exc
        self._write("create_batch", rows)
        return [row.id for row in rows]

    def _write(self, operation: str, rows: list) -> None:
        savepoint = self._session.begin_nested()
        try:
            self._session.add_all(rows)
            self._session.flush()
        except SQLAlchemyError as exc:
            # A failed flush leaves the savepoint deactivated; rollback closes it
            savepoint.rollback()
            self._fail(operation, rows, exc)
        savepoint.commit()
        if self._commit:
            try:
                self._session.commit()
            except SQLAlchemyError as exc:
                self._session.rollback()
                self._fail(operation, rows, exc)

    def _fail(self, operation: str, rows: list, exc: SQLAlchemyError) -> NoReturn:
        logger.warning(
            "store_write_failed",
            extra={"operation": operation, "rows": len(rows), "error_type": type(exc).__name__},
        )
        raise StoreError(operation, _describe(exc)) from exc


def _describe(exc: SQLAlchemyError) -> str:
    # Driver messages carry the SQL and parameters; keep only the first line.
    orig = getattr(exc, "orig", None)
    text = str(orig if orig is not None else exc)
    return text.splitlines()[0] if text else type(exc).__name__
