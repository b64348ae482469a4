"""
Row validator: required-field checks and draft construction.

Every required field of a row is checked, and all violations are collected
(no short-circuit). Only a row with no violations is turned into an
EntityDraft: strings copied verbatim, numbers and dates parsed tolerantly
(None on failure), lists split on the secondary delimiter.

Architecture: prospect_ingestion/domain. ZERO I/O.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Mapping

from prospect_config.schema import EntityCatalogDef, FieldType

from prospect_ingestion.domain.types import (
    CompanyDraft,
    ContactDraft,
    EntityDraft,
    EntityKind,
    FieldMapping,
    FieldRule,
    RawRow,
    RowOutcome,
    ValidationError,
)
from prospect_ingestion.mapping.coercion import coerce_cell, is_empty

MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"

_DRAFT_TYPES: dict[EntityKind, type] = {
    EntityKind.COMPANY: CompanyDraft,
    EntityKind.CONTACT: ContactDraft,
}


def compile_rules(catalog: EntityCatalogDef) -> dict[str, FieldRule]:
    """Build the ordered rule set {field: FieldRule} from a config catalog."""
    return {
        f.name: FieldRule(
            name=f.name,
            field_type=f.field_type,
            required=f.required,
            default=f.default,
            fallback=f.fallback,
        )
        for f in catalog.fields
    }


def cell_value(row: RawRow, mapping: FieldMapping, field_name: str) -> str:
    """Cell feeding field_name; unmapped or out-of-range columns read as empty."""
    index = mapping.column_for(field_name)
    if index is None or index >= len(row):
        return ""
    return row[index]


def validate_required_fields(
    row: RawRow,
    row_index: int,
    mapping: FieldMapping,
    rules: Mapping[str, FieldRule],
    empty_tokens: tuple[str, ...] = ("-",),
) -> list[ValidationError]:
    """One ValidationError per empty required field, in rule order."""
    errors: list[ValidationError] = []
    for rule in rules.values():
        if not rule.required:
            continue
        raw = cell_value(row, mapping, rule.name)
        if not is_empty(raw, empty_tokens):
            continue
        if mapping.column_for(rule.name) is None:
            message = "Required field is not mapped to any column"
        else:
            message = "Required field is empty"
        errors.append(
            ValidationError(
                row_index=row_index,
                field_name=rule.name,
                raw_value=raw,
                message=message,
                code=MISSING_REQUIRED_FIELD,
            )
        )
    return errors


def _is_blank_value(value: Any) -> bool:
    return value is None or value == "" or value == ()


def fill_blanks(
    values: Mapping[str, Any],
    rules: Mapping[str, FieldRule],
    defaults: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Fill blank values: first from the rule's fallback field, then from the
    default (defaults overrides the rule's own default when given).
    Fallbacks read the values as passed in, never a filled-in value.
    """
    filled = dict(values)
    for rule in rules.values():
        if not _is_blank_value(filled.get(rule.name)):
            continue
        default = (defaults or {}).get(rule.name, rule.default)
        if rule.fallback is not None and not _is_blank_value(values.get(rule.fallback)):
            filled[rule.name] = values[rule.fallback]
        elif default is not None:
            filled[rule.name] = default
    return filled


def build_values(
    row: RawRow,
    mapping: FieldMapping,
    rules: Mapping[str, FieldRule],
    list_delimiter: str = ";",
    empty_tokens: tuple[str, ...] = ("-",),
) -> dict[str, Any]:
    """Parse every mapped cell, then apply fallbacks and defaults to blanks."""
    parsed: dict[str, Any] = {}
    for rule in rules.values():
        raw = cell_value(row, mapping, rule.name)
        if is_empty(raw, empty_tokens):
            parsed[rule.name] = () if rule.field_type == FieldType.LIST else None
        else:
            parsed[rule.name] = coerce_cell(raw, rule.field_type, list_delimiter, empty_tokens)
    return fill_blanks(parsed, rules)


def build_draft(entity_kind: EntityKind, row_index: int, values: Mapping[str, Any]) -> EntityDraft:
    """Construct the draft; catalog fields the draft type does not carry are ignored."""
    draft_type = _DRAFT_TYPES[entity_kind]
    accepted = {f.name for f in dataclasses.fields(draft_type)} - {"row_index", "visible_to_tiers", "company_id"}
    kwargs = {name: value for name, value in values.items() if name in accepted}
    return draft_type(row_index=row_index, **kwargs)


class RowValidator:
    """Validates data rows of one entity kind against its compiled rules."""

    def __init__(
        self,
        entity_kind: EntityKind,
        rules: Mapping[str, FieldRule],
        list_delimiter: str = ";",
        empty_tokens: tuple[str, ...] = ("-",),
    ):
        self.entity_kind = EntityKind(entity_kind)
        self.rules = dict(rules)
        self.list_delimiter = list_delimiter
        self.empty_tokens = tuple(empty_tokens)

    def validate(self, row: RawRow, row_index: int, mapping: FieldMapping) -> RowOutcome:
        errors = validate_required_fields(row, row_index, mapping, self.rules, self.empty_tokens)
        if errors:
            return RowOutcome.failed(row_index, errors)
        values = build_values(row, mapping, self.rules, self.list_delimiter, self.empty_tokens)
        return RowOutcome.ok(build_draft(self.entity_kind, row_index, values))
