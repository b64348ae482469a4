"""
Typed exception hierarchy for the prospect directory.

Every error has a TYPED class (catch by type, not message) and a CODE class
attribute (machine-readable, safe to return to callers). Exceptions carry
their context as attributes so they survive logging and serialization.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ProspectKernelError (base)
    |
    +-- ConfigError
    |
    +-- IngestionError
    |   +-- ParseError
    |   +-- UnknownEntityKindError
    |   +-- MappingOverrideError
    |   +-- InvalidTierError
    |   +-- ResolutionError
    |
    +-- StoreError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                      | When Raised
-----------|---------------------------|-------------------------------------------
Config     | CONFIG_INVALID            | Catalog YAML missing keys or malformed
-----------|---------------------------|-------------------------------------------
Ingestion  | PARSE_ERROR               | Source unreadable (run-fatal)
           | UNKNOWN_ENTITY_KIND       | Kind is not company/contact
           | MAPPING_OVERRIDE_INVALID  | Override names unknown field or column
           | INVALID_TIER              | Visibility override not a known tier
           | RESOLUTION_FAILED         | Parent company lookup/creation failed
-----------|---------------------------|-------------------------------------------
Store      | STORE_ERROR               | Record store call failed (wrapped)

===============================================================================
HANDLING PATTERNS
===============================================================================

Only ParseError, MappingOverrideError, UnknownEntityKindError and
InvalidTierError escape ImportService.submit(). ResolutionError and
StoreError are caught per row / per batch and folded into the ImportReport:

    try:
        company_id = resolver.resolve(draft.company_name, context)
    except ResolutionError as e:
        aggregator.record_failure(row, e.code, e.company_name, str(e))
"""

from typing import Any, Sequence


class ProspectKernelError(Exception):
    """
    Base exception for all prospect directory errors.

    All subclasses must have a `code` class attribute.
    """

    code: str = "PROSPECT_KERNEL_ERROR"


class ConfigError(ProspectKernelError):
    """Import configuration could not be parsed."""

    code: str = "CONFIG_INVALID"

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        prefix = f"{source}: " if source else ""
        super().__init__(f"{prefix}{message}")


# Ingestion exceptions


class IngestionError(ProspectKernelError):
    """Base exception for import pipeline errors."""

    code: str = "INGESTION_ERROR"


class ParseError(IngestionError):
    """Source content could not be read into rows. Aborts the run."""

    code: str = "PARSE_ERROR"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Unreadable import source: {reason}")


class UnknownEntityKindError(IngestionError):
    """Entity kind has no field catalog."""

    code: str = "UNKNOWN_ENTITY_KIND"

    def __init__(self, entity_kind: Any, known: Sequence[str] = ()):
        self.entity_kind = str(entity_kind)
        self.known = tuple(known)
        super().__init__(
            f"Unknown entity kind {self.entity_kind!r}; expected one of {list(self.known)}"
        )


class MappingOverrideError(IngestionError):
    """Caller-supplied mapping override does not fit the header or catalog."""

    code: str = "MAPPING_OVERRIDE_INVALID"

    def __init__(self, field_name: str, column_index: int | None, reason: str):
        self.field_name = field_name
        self.column_index = column_index
        self.reason = reason
        super().__init__(
            f"Invalid mapping override {field_name!r} -> {column_index!r}: {reason}"
        )


class InvalidTierError(IngestionError):
    """Visibility override contains an unknown tier or is empty."""

    code: str = "INVALID_TIER"

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Invalid visibility tier set: {value!r}")


class ResolutionError(IngestionError):
    """Parent company could not be found or created for a dependent row."""

    code: str = "RESOLUTION_FAILED"

    def __init__(self, company_name: str, reason: str):
        self.company_name = company_name
        self.reason = reason
        super().__init__(f"Could not find or create company {company_name!r}: {reason}")


# Store exceptions


class StoreError(ProspectKernelError):
    """A record store operation failed. Wraps the store-specific error."""

    code: str = "STORE_ERROR"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Store {operation} failed: {reason}")


def describe_error(exc: BaseException) -> str:
    """Short, single-line description of a foreign exception."""
    text = str(exc).strip()
    first = text.splitlines()[0] if text else ""
    return f"{type(exc).__name__}: {first}" if first else type(exc).__name__
