"""
prospect_ingestion.domain.types -- Pure frozen dataclasses for the import pipeline.

ZERO I/O. Imports only from prospect_kernel/domain and prospect_config.schema.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Mapping, Union
from uuid import UUID

from prospect_config.schema import FieldType
from prospect_kernel.domain.tiers import DEFAULT_VISIBILITY, VisibilityTierSet, tiers_to_json

RawRow = tuple[str, ...]


class EntityKind(str, Enum):
    """Entity kinds the pipeline can import."""

    COMPANY = "company"
    CONTACT = "contact"


# =============================================================================
# Row lifecycle (Parsed -> Validated -> Resolved -> Committed, or a failure)
# =============================================================================


class RowState(str, Enum):
    """Per-row state. Terminal: VALIDATION_FAILED, RESOLUTION_FAILED, COMMIT_FAILED, COMMITTED."""

    PARSED = "parsed"
    VALIDATED = "validated"
    VALIDATION_FAILED = "validation_failed"
    RESOLVED = "resolved"
    RESOLUTION_FAILED = "resolution_failed"
    COMMITTED = "committed"
    COMMIT_FAILED = "commit_failed"

    @property
    def is_failure(self) -> bool:
        return self in (RowState.VALIDATION_FAILED, RowState.RESOLUTION_FAILED, RowState.COMMIT_FAILED)


# =============================================================================
# Field mapping (target field -> source column index)
# =============================================================================


@dataclass(frozen=True)
class FieldMapping:
    """Partial mapping of target field name -> 0-based source column index."""

    columns: Mapping[str, int] = field(default_factory=dict)

    def column_for(self, field_name: str) -> int | None:
        return self.columns.get(field_name)

    def with_overrides(self, overrides: Mapping[str, int | None]) -> FieldMapping:
        """Return a new mapping; an override of None unmaps the field."""
        merged = dict(self.columns)
        for name, index in overrides.items():
            if index is None:
                merged.pop(name, None)
            else:
                merged[name] = index
        return FieldMapping(columns=merged)

    def to_dict(self) -> dict[str, int]:
        return dict(sorted(self.columns.items(), key=lambda kv: kv[1]))


@dataclass(frozen=True)
class MappingAmbiguity:
    """Informational: a header the mapper could not map with certainty."""

    column_index: int
    header: str
    candidates: tuple[str, ...] = ()
    chosen: str | None = None
    reason: str = ""


@dataclass(frozen=True)
class MappingProposal:
    """Mapper output. The caller may inspect and override before submitting."""

    mapping: FieldMapping
    ambiguities: tuple[MappingAmbiguity, ...] = ()
    unmapped_columns: tuple[int, ...] = ()


# =============================================================================
# Validation rules and errors
# =============================================================================


@dataclass(frozen=True)
class FieldRule:
    """Per-field rule compiled from the catalog: required flag and parser type."""

    name: str
    field_type: FieldType = FieldType.STRING
    required: bool = False
    default: Any = None
    fallback: str | None = None


@dataclass(frozen=True)
class ValidationError:
    """One problem with one row. row_index is 0-based over non-blank data rows."""

    row_index: int
    field_name: str
    raw_value: str
    message: str
    code: str = "VALIDATION_ERROR"

    def to_dict(self) -> dict[str, Any]:
        return {
            "row_index": self.row_index,
            "field_name": self.field_name,
            "raw_value": self.raw_value,
            "message": self.message,
            "code": self.code,
        }


# =============================================================================
# Entity drafts
# =============================================================================


@dataclass(frozen=True)
class CompanyDraft:
    """Normalized, not-yet-persisted company row."""

    row_index: int
    company_name: str
    company_type: str | None = None
    industry: str | None = None
    website: str | None = None
    linkedin_url: str | None = None
    hq_location: str | None = None
    location_city: str | None = None
    location_state: str | None = None
    location_region: str | None = None
    size_range: str | None = None
    headcount: int | None = None
    revenue: str | None = None
    phone_number: str | None = None
    company_keywords: tuple[str, ...] = ()
    industry_keywords: tuple[str, ...] = ()
    technologies_used: tuple[str, ...] = ()
    visible_to_tiers: VisibilityTierSet = DEFAULT_VISIBILITY

    entity_kind = EntityKind.COMPANY

    def with_tiers(self, tiers: VisibilityTierSet) -> CompanyDraft:
        return replace(self, visible_to_tiers=frozenset(tiers))

    def to_record(self) -> dict[str, Any]:
        """Column values for the companies table."""
        return {
            "company_name": self.company_name,
            "company_type": self.company_type or "",
            "industry": self.industry or "",
            "website": self.website,
            "linkedin_url": self.linkedin_url,
            "hq_location": self.hq_location or "",
            "location_city": self.location_city or "",
            "location_state": self.location_state or "",
            "location_region": self.location_region or "",
            "size_range": self.size_range or "",
            "headcount": self.headcount,
            "revenue": self.revenue,
            "phone_number": self.phone_number,
            "company_keywords": list(self.company_keywords),
            "industry_keywords": list(self.industry_keywords),
            "technologies_used": list(self.technologies_used),
            "visible_to_tiers": tiers_to_json(self.visible_to_tiers),
        }


@dataclass(frozen=True)
class ContactDraft:
    """Normalized, not-yet-persisted contact row. company_id is set by the resolver."""

    row_index: int
    name: str
    job_title: str
    company_name: str
    company_id: UUID | None = None
    linkedin_url: str | None = None
    start_date: date | None = None
    email: str | None = None
    email_score: float | None = None
    phone_number: str | None = None
    location_city: str | None = None
    location_state: str | None = None
    location_region: str | None = None
    visible_to_tiers: VisibilityTierSet = DEFAULT_VISIBILITY

    entity_kind = EntityKind.CONTACT

    def with_tiers(self, tiers: VisibilityTierSet) -> ContactDraft:
        return replace(self, visible_to_tiers=frozenset(tiers))

    def with_company(self, company_id: UUID) -> ContactDraft:
        return replace(self, company_id=company_id)

    def to_record(self) -> dict[str, Any]:
        """Column values for the contacts table. Requires a resolved company_id."""
        if self.company_id is None:
            raise ValueError(f"Contact row {self.row_index} has no resolved company_id")
        return {
            "name": self.name,
            "linkedin_url": self.linkedin_url,
            "job_title": self.job_title,
            "company_id": self.company_id,
            "start_date": self.start_date,
            "email": self.email,
            "email_score": self.email_score,
            "phone_number": self.phone_number,
            "location_city": self.location_city or "",
            "location_state": self.location_state or "",
            "location_region": self.location_region or "",
            "visible_to_tiers": tiers_to_json(self.visible_to_tiers),
        }


EntityDraft = Union[CompanyDraft, ContactDraft]


@dataclass(frozen=True)
class RowOutcome:
    """Validator result: a draft on success, the collected errors on failure."""

    row_index: int
    draft: EntityDraft | None = None
    errors: tuple[ValidationError, ...] = ()

    @property
    def success(self) -> bool:
        return self.draft is not None and not self.errors

    @classmethod
    def ok(cls, draft: EntityDraft) -> RowOutcome:
        return cls(row_index=draft.row_index, draft=draft)

    @classmethod
    def failed(cls, row_index: int, errors: list[ValidationError]) -> RowOutcome:
        return cls(row_index=row_index, errors=tuple(errors))


# =============================================================================
# Report
# =============================================================================


@dataclass(frozen=True)
class FailedRow:
    """Per-row failure detail for caller display."""

    row_index: int
    raw_cells: RawRow
    errors: tuple[ValidationError, ...]
    state: RowState
    source_line: int | None = None  # 1-based line in the source text

    def to_dict(self) -> dict[str, Any]:
        return {
            "row_index": self.row_index,
            "source_line": self.source_line,
            "raw_cells": list(self.raw_cells),
            "state": self.state.value,
            "errors": [e.to_dict() for e in self.errors],
        }


@dataclass(frozen=True)
class ImportReport:
    """Result of one import run. Invariant: total_rows == added + updated + failed."""

    run_id: UUID
    entity_kind: EntityKind
    total_rows: int
    added: int
    updated: int
    failed: int
    errors: tuple[ValidationError, ...] = ()
    failed_rows: tuple[FailedRow, ...] = ()
    created_parents: tuple[UUID, ...] = ()
    mapping: FieldMapping = field(default_factory=FieldMapping)
    elapsed_time: float = 0.0  # seconds

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": str(self.run_id),
            "entity_kind": self.entity_kind.value,
            "total_rows": self.total_rows,
            "added": self.added,
            "updated": self.updated,
            "failed": self.failed,
            "errors": [e.to_dict() for e in self.errors],
            "failed_rows": [r.to_dict() for r in self.failed_rows],
            "created_parents": [str(p) for p in self.created_parents],
            "mapping": self.mapping.to_dict(),
            "elapsed_time": self.elapsed_time,
        }
