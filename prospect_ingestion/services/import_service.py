"""
Import service: read -> map -> validate -> resolve -> tag -> commit -> report.

Single synchronous entrypoint for bulk company and contact imports. Uses
structured logging (LogContext bound to the run id, get_logger("ingestion.*")).

Contract:
    preview()  -> parse and infer the mapping; no writes.
    submit()   -> run the pipeline once and return an ImportReport.
    template() -> header line (optionally a sample row) for a kind.

Failure modes:
    Only caller errors and unreadable input are raised, always before any
    row is processed: ParseError, MappingOverrideError,
    UnknownEntityKindError, InvalidTierError. Everything else (missing
    fields, unresolvable parents, a rejected batch) lands in the report.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping
from uuid import UUID

from prospect_config import ImportConfig, get_import_config
from prospect_kernel.domain.clock import Clock, SystemClock
from prospect_kernel.domain.tiers import SubscriptionTier, VisibilityTierSet
from prospect_kernel.exceptions import ResolutionError, UnknownEntityKindError
from prospect_kernel.logging_config import LogContext, get_logger

from prospect_ingestion.adapters.base import ParsedTable, SourceProbe
from prospect_ingestion.adapters.delimited import DelimitedTextReader
from prospect_ingestion.domain.types import (
    EntityDraft,
    EntityKind,
    FieldMapping,
    ImportReport,
    MappingProposal,
    RowState,
    ValidationError,
)
from prospect_ingestion.domain.validators import RowValidator, compile_rules
from prospect_ingestion.mapping.engine import infer_mapping, render_template, validate_overrides
from prospect_ingestion.resolver.context import ImportRunContext
from prospect_ingestion.resolver.resolver import EntityResolver
from prospect_ingestion.services.aggregator import ReportAggregator
from prospect_ingestion.services.committer import BatchCommitter
from prospect_ingestion.store.base import RecordStore
from prospect_ingestion.tagging import parse_tiers, tag_visibility

logger = get_logger("ingestion.import_service")

# Actor recorded on rows when the caller does not name one.
SYSTEM_ACTOR_ID = UUID("00000000-0000-0000-0000-000000000000")


@dataclass(frozen=True)
class ImportPreview:
    """What submit() would see: source snapshot plus the inferred mapping."""

    entity_kind: EntityKind
    probe: SourceProbe
    proposal: MappingProposal


class ImportService:
    """Runs import pipelines against one RecordStore."""

    def __init__(
        self,
        store: RecordStore,
        config: ImportConfig | None = None,
        clock: Clock | None = None,
    ):
        self._store = store
        self._config = config or get_import_config()
        self._clock = clock or SystemClock()
        settings = self._config.settings
        self._reader = DelimitedTextReader(settings.delimiter, settings.empty_tokens)
        self._default_tiers: VisibilityTierSet = frozenset(
            SubscriptionTier(t) for t in settings.default_tiers
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _kind(self, entity_kind: EntityKind | str) -> EntityKind:
        value = entity_kind.value if isinstance(entity_kind, EntityKind) else str(entity_kind)
        self._config.catalog(value)
        try:
            return EntityKind(value)
        except ValueError:
            raise UnknownEntityKindError(value, self._config.entity_kinds) from None

    def _propose(self, header: tuple[str, ...], kind: EntityKind) -> MappingProposal:
        catalog = self._config.catalog(kind.value)
        return infer_mapping(header, catalog.field_names, self._config.aliases_for(kind.value))

    def _resolver(self) -> EntityResolver:
        parent = self._config.parent_resolution
        return EntityResolver(
            self._store,
            parent,
            compile_rules(self._config.catalog(parent.parent_kind)),
            self._default_tiers,
        )

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def template(self, entity_kind: EntityKind | str, include_sample: bool = False) -> str:
        """Header line listing the kind's fields in catalog order."""
        kind = self._kind(entity_kind)
        return render_template(
            self._config.catalog(kind.value),
            delimiter=self._config.settings.delimiter,
            include_sample=include_sample,
        )

    def preview(self, file_content: str | bytes, entity_kind: EntityKind | str) -> ImportPreview:
        """Parse content and infer the mapping without touching the store."""
        kind = self._kind(entity_kind)
        probe = self._reader.probe(file_content)
        return ImportPreview(entity_kind=kind, probe=probe, proposal=self._propose(probe.columns, kind))

    def submit(
        self,
        file_content: str | bytes,
        entity_kind: EntityKind | str,
        field_mapping_override: Mapping[str, int | str | None] | None = None,
        visibility_override: str | Iterable[str] | None = None,
        actor_id: UUID | None = None,
    ) -> ImportReport:
        """
        Run one import and return its report.

        Args:
            file_content: delimited text (str, or UTF-8 bytes).
            entity_kind: "company" or "contact".
            field_mapping_override: {field: column index or None}; applied on
                top of the inferred mapping. None unmaps a field.
            visibility_override: tiers for every record of the run, including
                auto-created parents. Defaults to the configured tiers.
            actor_id: recorded as created_by_id on every row.

        Raises:
            ParseError, MappingOverrideError, UnknownEntityKindError,
            InvalidTierError. All before any row is processed.
        """
        kind = self._kind(entity_kind)
        tiers = parse_tiers(visibility_override) if visibility_override is not None else None
        catalog = self._config.catalog(kind.value)

        table = self._reader.read(file_content)
        proposal = self._propose(table.header, kind)
        mapping = proposal.mapping
        if field_mapping_override:
            mapping = mapping.with_overrides(
                validate_overrides(field_mapping_override, len(table.header), catalog.field_names)
            )

        context = ImportRunContext(
            entity_kind=kind,
            actor_id=actor_id or SYSTEM_ACTOR_ID,
            visibility_override=tiers,
            started_at=self._clock.now(),
        )
        with LogContext.bind(
            correlation_id=str(context.run_id),
            producer="ingestion",
            actor_id=str(context.actor_id),
            entity_kind=kind.value,
        ):
            return self._run(table, kind, mapping, proposal, context)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _run(
        self,
        table: ParsedTable,
        kind: EntityKind,
        mapping: FieldMapping,
        proposal: MappingProposal,
        context: ImportRunContext,
    ) -> ImportReport:
        settings = self._config.settings
        logger.info(
            "import_run_started",
            extra={
                "total_rows": len(table.rows),
                "mapping": mapping.to_dict(),
                "ambiguities": len(proposal.ambiguities),
                "blank_rows_dropped": table.blank_rows_dropped,
            },
        )

        validator = RowValidator(
            kind,
            compile_rules(self._config.catalog(kind.value)),
            settings.list_delimiter,
            settings.empty_tokens,
        )
        aggregator = ReportAggregator(table.rows, table.source_lines)
        resolves_parent = kind.value == self._config.parent_resolution.dependent_kind
        resolver = self._resolver() if resolves_parent else None

        ready: list[EntityDraft] = []
        for row_index, row in enumerate(table.rows):
            outcome = validator.validate(row, row_index, mapping)
            if not outcome.success:
                aggregator.record_failure(row_index, RowState.VALIDATION_FAILED, outcome.errors)
                logger.info(
                    "row_validated",
                    extra={"row_index": row_index, "valid": False, "errors": len(outcome.errors)},
                )
                continue
            aggregator.advance(row_index, RowState.VALIDATED)
            logger.debug("row_validated", extra={"row_index": row_index, "valid": True})

            draft = outcome.draft
            if resolver is not None:
                try:
                    draft = resolver.resolve(draft, context)
                except ResolutionError as exc:
                    aggregator.record_failure(
                        row_index,
                        RowState.RESOLUTION_FAILED,
                        [
                            ValidationError(
                                row_index=row_index,
                                field_name=self._config.parent_resolution.key_field,
                                raw_value=exc.company_name,
                                message=str(exc),
                                code=exc.code,
                            )
                        ],
                    )
                    logger.warning(
                        "row_resolution_failed",
                        extra={"row_index": row_index, "company_name": exc.company_name, "reason": exc.reason},
                    )
                    continue
                aggregator.advance(row_index, RowState.RESOLVED)
            ready.append(tag_visibility(draft, context.visibility_override, self._default_tiers))

        result = BatchCommitter(self._store).commit(kind, ready, context)
        if result.success:
            aggregator.record_committed(d.row_index for d in result.drafts)
        else:
            for draft, error in zip(result.drafts, result.errors):
                aggregator.record_failure(draft.row_index, RowState.COMMIT_FAILED, [error])

        report = aggregator.build(
            run_id=context.run_id,
            entity_kind=kind,
            mapping=mapping,
            created_parents=context.created_parents,
            started_at=context.started_at,
            finished_at=self._clock.now(),
        )
        logger.info(
            "import_run_completed",
            extra={
                "total_rows": report.total_rows,
                "added": report.added,
                "updated": report.updated,
                "failed": report.failed,
                "created_parents": len(report.created_parents),
                "elapsed_time": report.elapsed_time,
            },
        )
        return report
