"""Tests for the batch committer and the report aggregator."""

from uuid import uuid4

import pytest

from prospect_kernel.exceptions import StoreError
from prospect_ingestion.domain.types import (
    CompanyDraft,
    EntityKind,
    FieldMapping,
    RowState,
    ValidationError,
)
from prospect_ingestion.resolver import ImportRunContext
from prospect_ingestion.services import BatchCommitter, ReportAggregator
from prospect_ingestion.store import InMemoryRecordStore


class RejectingStore(InMemoryRecordStore):
    def create_batch(self, entity_kind, drafts, actor_id):
        raise StoreError("create_batch", "connection reset")


class CrashingStore(InMemoryRecordStore):
    def create_batch(self, entity_kind, drafts, actor_id):
        raise RuntimeError("pool exhausted")


@pytest.fixture
def context(test_actor_id):
    return ImportRunContext(entity_kind=EntityKind.COMPANY, actor_id=test_actor_id)


class TestBatchCommitter:
    def test_commits_all_drafts(self, memory_store, context, captured_logs):
        drafts = [CompanyDraft(row_index=i, company_name=f"Co {i}") for i in range(3)]
        result = BatchCommitter(memory_store).commit(EntityKind.COMPANY, drafts, context)
        assert result.success
        assert result.committed == 3
        assert len(memory_store.companies) == 3
        assert any(r["message"] == "batch_committed" and r["rows"] == 3 for r in captured_logs())

    def test_empty_batch_does_not_touch_store(self, context):
        result = BatchCommitter(RejectingStore()).commit(EntityKind.COMPANY, [], context)
        assert result.success and result.committed == 0

    def test_failure_marks_every_draft(self, context, captured_logs):
        drafts = [CompanyDraft(row_index=i, company_name="X") for i in (0, 2)]
        result = BatchCommitter(RejectingStore()).commit(EntityKind.COMPANY, drafts, context)
        assert not result.success
        assert result.committed == 0
        assert [e.row_index for e in result.errors] == [0, 2]
        assert all(e.field_name == "database" and e.code == "STORE_ERROR" for e in result.errors)
        assert "connection reset" in result.errors[0].message
        assert any(r["message"] == "batch_commit_failed" for r in captured_logs())

    def test_foreign_exception_is_wrapped(self, context, captured_logs):
        drafts = [CompanyDraft(row_index=0, company_name="X")]
        result = BatchCommitter(CrashingStore()).commit(EntityKind.COMPANY, drafts, context)
        [error] = result.errors
        assert error.code == "STORE_ERROR"
        assert error.message == "Store create_batch failed: RuntimeError: pool exhausted"
        failed = next(r for r in captured_logs() if r["message"] == "batch_commit_failed")
        assert failed["operation"] == "create_batch"


class TestReportAggregator:
    ROWS = (("a",), ("b",), ("c",), ("d",))

    def _build(self, aggregator, deterministic_clock, seconds=2.5):
        start = deterministic_clock.now()
        deterministic_clock.advance(seconds)
        return aggregator.build(
            run_id=uuid4(),
            entity_kind=EntityKind.CONTACT,
            mapping=FieldMapping({"name": 0}),
            created_parents=(),
            started_at=start,
            finished_at=deterministic_clock.now(),
        )

    @staticmethod
    def _validated(aggregator, *row_indexes):
        for index in row_indexes:
            aggregator.advance(index, RowState.VALIDATED)

    def test_counts_and_details(self, deterministic_clock):
        aggregator = ReportAggregator(self.ROWS, source_lines=(2, 3, 5, 6))
        missing = ValidationError(1, "job_title", "", "Required field is empty", "MISSING_REQUIRED_FIELD")
        aggregator.record_failure(1, RowState.VALIDATION_FAILED, [missing])
        self._validated(aggregator, 0, 2, 3)
        aggregator.record_committed([0, 2, 3])
        report = self._build(aggregator, deterministic_clock)
        assert (report.total_rows, report.added, report.updated, report.failed) == (4, 3, 0, 1)
        assert report.errors == (missing,)
        [failed] = report.failed_rows
        assert failed.raw_cells == ("b",)
        assert failed.source_line == 3
        assert failed.state == RowState.VALIDATION_FAILED
        assert report.elapsed_time == pytest.approx(2.5)

    def test_failed_rows_sorted_by_row_index(self, deterministic_clock):
        aggregator = ReportAggregator(self.ROWS)
        self._validated(aggregator, 0, 1, 2, 3)
        for index in (3, 0):
            err = ValidationError(index, "database", "", "boom", "STORE_ERROR")
            aggregator.record_failure(index, RowState.COMMIT_FAILED, [err])
        aggregator.record_committed([1, 2])
        report = self._build(aggregator, deterministic_clock)
        assert [r.row_index for r in report.failed_rows] == [0, 3]
        assert report.failed_rows[0].source_line is None

    def test_accounting_mismatch_is_an_assertion(self, deterministic_clock):
        aggregator = ReportAggregator(self.ROWS)
        self._validated(aggregator, 0)
        aggregator.record_committed([0])
        with pytest.raises(AssertionError, match="row accounting mismatch"):
            self._build(aggregator, deterministic_clock)

    def test_non_failure_state_rejected(self):
        with pytest.raises(AssertionError):
            ReportAggregator(self.ROWS).record_failure(0, RowState.COMMITTED, [])

    def test_row_states_follow_the_pipeline(self):
        aggregator = ReportAggregator(self.ROWS)
        assert aggregator.state_of(0) == RowState.PARSED
        aggregator.advance(0, RowState.VALIDATED)
        aggregator.advance(0, RowState.RESOLVED)
        aggregator.record_committed([0])
        assert aggregator.state_of(0) == RowState.COMMITTED

    @pytest.mark.parametrize(
        "steps",
        [
            (RowState.COMMITTED,),
            (RowState.RESOLVED,),
            (RowState.VALIDATED, RowState.RESOLVED, RowState.RESOLUTION_FAILED),
            (RowState.VALIDATION_FAILED, RowState.VALIDATED),
        ],
    )
    def test_illegal_transition_is_an_assertion(self, steps):
        aggregator = ReportAggregator(self.ROWS)
        *legal, last = steps
        for state in legal:
            aggregator.advance(0, state)
        with pytest.raises(AssertionError, match="illegal transition"):
            aggregator.advance(0, last)

    def test_row_cannot_be_counted_twice(self):
        aggregator = ReportAggregator(self.ROWS)
        self._validated(aggregator, 0)
        aggregator.record_committed([0])
        with pytest.raises(AssertionError):
            aggregator.record_failure(0, RowState.COMMIT_FAILED, [])

    def test_report_to_dict(self, deterministic_clock):
        aggregator = ReportAggregator((("a",),))
        self._validated(aggregator, 0)
        aggregator.record_committed([0])
        data = self._build(aggregator, deterministic_clock, seconds=0).to_dict()
        assert data["entity_kind"] == "contact"
        assert data["mapping"] == {"name": 0}
        assert data["elapsed_time"] == 0.0
        assert data["failed_rows"] == []
