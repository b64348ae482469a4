"""
Batch committer: persist every resolved, tagged draft of a run in one call.

The store's batch is all-or-nothing. On failure (a StoreError, or any
other exception raised by a caller-supplied store) no draft of the batch is
persisted and each one is reported with a store-level error.

Parent companies created by the resolver are not part of this batch; they
were committed one at a time earlier in the run and stay committed when the
batch fails.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence
from uuid import UUID

from prospect_kernel.exceptions import StoreError, describe_error
from prospect_kernel.logging_config import get_logger

from prospect_ingestion.domain.types import EntityDraft, EntityKind, ValidationError
from prospect_ingestion.resolver.context import ImportRunContext
from prospect_ingestion.store.base import RecordStore

logger = get_logger("ingestion.committer")

STORE_ERROR_FIELD = "database"


@dataclass(frozen=True)
class CommitResult:
    """Outcome of one batch: ids on success, one error per draft on failure."""

    drafts: tuple[EntityDraft, ...]
    record_ids: tuple[UUID, ...] = ()
    errors: tuple[ValidationError, ...] = ()

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def committed(self) -> int:
        return len(self.record_ids)


def store_error_for(row_index: int, exc: StoreError) -> ValidationError:
    return ValidationError(
        row_index=row_index,
        field_name=STORE_ERROR_FIELD,
        raw_value="",
        message=str(exc),
        code=StoreError.code,
    )


class BatchCommitter:
    """Commits a run's drafts through a RecordStore."""

    def __init__(self, store: RecordStore):
        self._store = store

    def commit(
        self,
        entity_kind: EntityKind,
        drafts: Sequence[EntityDraft],
        context: ImportRunContext,
    ) -> CommitResult:
        batch = tuple(drafts)
        if not batch:
            return CommitResult(drafts=())
        try:
            ids = self._store.create_batch(entity_kind, batch, context.actor_id)
        except Exception as exc:
            error = exc if isinstance(exc, StoreError) else StoreError("create_batch", describe_error(exc))
            logger.error(
                "batch_commit_failed",
                extra={"rows": len(batch), "operation": error.operation, "reason": error.reason},
            )
            return CommitResult(
                drafts=batch,
                errors=tuple(store_error_for(d.row_index, error) for d in batch),
            )
        logger.info("batch_committed", extra={"rows": len(ids)})
        return CommitResult(drafts=batch, record_ids=tuple(ids))
