"""
prospect_ingestion.domain -- Pure types and row validation.

ZERO I/O. Imports only from prospect_kernel/domain and prospect_config.schema.
"""

from prospect_ingestion.domain.types import (
    CompanyDraft,
    ContactDraft,
    EntityDraft,
    EntityKind,
    FailedRow,
    FieldMapping,
    FieldRule,
    ImportReport,
    MappingAmbiguity,
    MappingProposal,
    RawRow,
    RowOutcome,
    RowState,
    ValidationError,
)
from prospect_ingestion.domain.validators import RowValidator, compile_rules

__all__ = [
    "CompanyDraft",
    "ContactDraft",
    "EntityDraft",
    "EntityKind",
    "FailedRow",
    "FieldMapping",
    "FieldRule",
    "ImportReport",
    "MappingAmbiguity",
    "MappingProposal",
    "RawRow",
    "RowOutcome",
    "RowState",
    "RowValidator",
    "ValidationError",
    "compile_rules",
]
