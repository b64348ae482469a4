"""Result aggregator: folds per-row outcomes of a run into an ImportReport."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence
from uuid import UUID

from prospect_ingestion.domain.types import (
    EntityKind,
    FailedRow,
    FieldMapping,
    ImportReport,
    RawRow,
    RowState,
    ValidationError,
)

# Rows without a parent to resolve go straight from VALIDATED to the commit states.
_TRANSITIONS: dict[RowState, frozenset[RowState]] = {
    RowState.PARSED: frozenset({RowState.VALIDATED, RowState.VALIDATION_FAILED}),
    RowState.VALIDATED: frozenset(
        {RowState.RESOLVED, RowState.RESOLUTION_FAILED, RowState.COMMITTED, RowState.COMMIT_FAILED}
    ),
    RowState.RESOLVED: frozenset({RowState.COMMITTED, RowState.COMMIT_FAILED}),
}


class ReportAggregator:
    """
    Tracks the state of every row of one run and builds the report.

    Rows are identified by row_index (0-based over non-blank data rows) and
    start out PARSED. Each row ends in exactly one terminal state:
    COMMITTED or one of the failure states.
    """

    def __init__(self, rows: Sequence[RawRow], source_lines: Sequence[int] = ()):
        self._rows = tuple(rows)
        self._source_lines = tuple(source_lines)
        self._states = [RowState.PARSED] * len(self._rows)
        self._failed: dict[int, FailedRow] = {}

    @property
    def total_rows(self) -> int:
        return len(self._rows)

    def state_of(self, row_index: int) -> RowState:
        return self._states[row_index]

    def advance(self, row_index: int, state: RowState) -> None:
        current = self._states[row_index]
        assert state in _TRANSITIONS.get(current, ()), (
            f"row {row_index}: illegal transition {current.value} -> {state.value}"
        )
        self._states[row_index] = state

    def record_failure(self, row_index: int, state: RowState, errors: Iterable[ValidationError]) -> None:
        assert state.is_failure, f"{state} is not a failure state"
        self.advance(row_index, state)
        self._failed[row_index] = FailedRow(
            row_index=row_index,
            raw_cells=self._rows[row_index],
            errors=tuple(errors),
            state=state,
            source_line=self._source_lines[row_index] if row_index < len(self._source_lines) else None,
        )

    def record_committed(self, row_indexes: Iterable[int]) -> None:
        for row_index in row_indexes:
            self.advance(row_index, RowState.COMMITTED)

    def build(
        self,
        run_id: UUID,
        entity_kind: EntityKind,
        mapping: FieldMapping,
        created_parents: Sequence[UUID],
        started_at: datetime,
        finished_at: datetime,
    ) -> ImportReport:
        failed_rows = tuple(self._failed[i] for i in sorted(self._failed))
        added = self._states.count(RowState.COMMITTED)
        updated = 0
        assert self.total_rows == added + updated + len(failed_rows), (
            f"row accounting mismatch: total={self.total_rows} added={added} "
            f"updated={updated} failed={len(failed_rows)}"
        )
        return ImportReport(
            run_id=run_id,
            entity_kind=EntityKind(entity_kind),
            total_rows=self.total_rows,
            added=added,
            updated=updated,
            failed=len(failed_rows),
            errors=tuple(e for row in failed_rows for e in row.errors),
            failed_rows=failed_rows,
            created_parents=tuple(created_parents),
            mapping=mapping,
            elapsed_time=max((finished_at - started_at).total_seconds(), 0.0),
        )
