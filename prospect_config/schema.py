"""
Configuration schema -- frozen dataclasses parsed from the import catalog YAML.

Every object here is immutable once loaded. The loader builds them; the
ingestion pipeline compiles them into field rules and mapper catalogs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from prospect_kernel.exceptions import UnknownEntityKindError


class FieldType(str, Enum):
    """Declared type of a catalog field; selects the tolerant parser."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    LIST = "list"
    DATE = "date"


@dataclass(frozen=True)
class FieldDef:
    """One target field of an entity catalog."""

    name: str
    field_type: FieldType = FieldType.STRING
    required: bool = False
    default: Any = None  # Used when the mapped cell is empty
    fallback: str | None = None  # Other field whose value is used when empty


@dataclass(frozen=True)
class EntityCatalogDef:
    """Ordered field catalog for one entity kind. Order drives mapper tie-breaks."""

    entity_kind: str
    fields: tuple[FieldDef, ...]
    sample_row: tuple[str, ...] = ()

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    @property
    def required_fields(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields if f.required)

    def get(self, name: str) -> FieldDef | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None


@dataclass(frozen=True)
class ImportSettingsDef:
    """Reader and tagging settings shared by every entity kind."""

    delimiter: str = ","
    list_delimiter: str = ";"
    empty_tokens: tuple[str, ...] = ("-",)
    default_tiers: tuple[str, ...] = ("free",)


@dataclass(frozen=True)
class ParentResolutionDef:
    """How a dependent row creates its parent when the parent is unknown."""

    dependent_kind: str = "contact"
    parent_kind: str = "company"
    key_field: str = "company_name"
    carried_fields: tuple[str, ...] = ()  # Copied from the dependent row
    defaults: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ImportConfig:
    """Compiled import configuration (the only runtime config artifact)."""

    settings: ImportSettingsDef
    catalogs: dict[str, EntityCatalogDef]
    aliases: dict[str, str] = field(default_factory=dict)
    parent_resolution: ParentResolutionDef = field(default_factory=ParentResolutionDef)
    checksum: str = ""

    @property
    def entity_kinds(self) -> tuple[str, ...]:
        return tuple(self.catalogs)

    def catalog(self, entity_kind: str) -> EntityCatalogDef:
        """Return the catalog for a kind. Raises UnknownEntityKindError."""
        cat = self.catalogs.get(str(entity_kind))
        if cat is None:
            raise UnknownEntityKindError(entity_kind, self.entity_kinds)
        return cat

    def aliases_for(self, entity_kind: str) -> dict[str, str]:
        """Aliases whose target field exists in the kind's catalog."""
        names = set(self.catalog(entity_kind).field_names)
        return {alias: target for alias, target in self.aliases.items() if target in names}
