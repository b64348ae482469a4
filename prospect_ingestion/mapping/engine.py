"""
Schema mapper: infer which source column feeds which target field.

The inference is a heuristic. Its output is a MappingProposal the caller can
inspect and correct (with_overrides / validate_overrides) before any row is
validated. ZERO I/O.

Per header cell, in column order:
    1. exact match of the normalized header against a catalog field;
    2. configured alias (e.g. "organization" -> company_name);
    3. substring match in either direction; first match wins, ties broken
       by catalog order.
Exact matches are claimed in a first pass so that "company_name" is never
taken by the substring rule for "name". A field is fed by one column only.
"""

from __future__ import annotations

import re
from typing import Mapping, Sequence

from prospect_config.schema import EntityCatalogDef
from prospect_kernel.exceptions import MappingOverrideError

from prospect_ingestion.domain.types import FieldMapping, MappingAmbiguity, MappingProposal

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_header(value: str) -> str:
    """Lowercase and strip every non-alphanumeric character."""
    return _NON_ALNUM.sub("", (value or "").lower())


def infer_mapping(
    header: Sequence[str],
    field_names: Sequence[str],
    aliases: Mapping[str, str] | None = None,
) -> MappingProposal:
    """Infer a FieldMapping for a header row against an ordered field catalog."""
    normalized_fields = [(name, normalize_header(name)) for name in field_names]
    known = {name for name, _ in normalized_fields}
    alias_table = {
        normalize_header(alias): target
        for alias, target in (aliases or {}).items()
        if target in known
    }

    claimed: dict[str, int] = {}
    ambiguities: list[MappingAmbiguity] = []
    unmapped: list[int] = []
    pending: list[tuple[int, str, str]] = []

    for index, cell in enumerate(header):
        norm = normalize_header(cell)
        if not norm:
            unmapped.append(index)
            ambiguities.append(MappingAmbiguity(index, cell, reason="empty header"))
            continue
        exact = next((name for name, n in normalized_fields if n == norm), None)
        if exact is None:
            pending.append((index, cell, norm))
        elif exact in claimed:
            unmapped.append(index)
            ambiguities.append(
                MappingAmbiguity(index, cell, candidates=(exact,), reason="field already mapped by an earlier column")
            )
        else:
            claimed[exact] = index

    for index, cell, norm in pending:
        alias_target = alias_table.get(norm)
        if alias_target is not None and alias_target not in claimed:
            claimed[alias_target] = index
            continue
        candidates = tuple(
            name for name, n in normalized_fields
            if name not in claimed and n and (n in norm or norm in n)
        )
        if not candidates:
            unmapped.append(index)
            ambiguities.append(MappingAmbiguity(index, cell, reason="no matching field"))
            continue
        chosen = candidates[0]
        claimed[chosen] = index
        if len(candidates) > 1:
            ambiguities.append(
                MappingAmbiguity(index, cell, candidates=candidates, chosen=chosen, reason="multiple partial matches")
            )

    return MappingProposal(
        mapping=FieldMapping(columns=claimed),
        ambiguities=tuple(ambiguities),
        unmapped_columns=tuple(unmapped),
    )


def validate_overrides(
    overrides: Mapping[str, int | str | None],
    header_width: int,
    field_names: Sequence[str],
) -> dict[str, int | None]:
    """
    Check and normalize a caller override mapping.

    Column indexes may be ints or digit strings; None unmaps the field.

    Raises:
        MappingOverrideError: unknown field or column outside the header.
    """
    known = set(field_names)
    result: dict[str, int | None] = {}
    for name, raw in overrides.items():
        if name not in known:
            raise MappingOverrideError(name, None, "unknown field")
        if raw is None:
            result[name] = None
            continue
        if isinstance(raw, bool):
            raise MappingOverrideError(name, None, f"column must be an index, got {raw!r}")
        try:
            index = int(raw)
        except (TypeError, ValueError):
            raise MappingOverrideError(name, None, f"column must be an index, got {raw!r}") from None
        if not 0 <= index < header_width:
            raise MappingOverrideError(name, index, f"header has {header_width} columns")
        result[name] = index
    return result


def render_template(
    catalog: EntityCatalogDef,
    delimiter: str = ",",
    include_sample: bool = False,
) -> str:
    """Header-only text listing the catalog's fields, optionally with a sample row."""
    lines = [delimiter.join(catalog.field_names)]
    if include_sample and catalog.sample_row:
        lines.append(delimiter.join(catalog.sample_row))
    return "\n".join(lines) + "\n"
