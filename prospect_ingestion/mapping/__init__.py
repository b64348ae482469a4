"""Schema mapping and tolerant cell parsing."""

from prospect_ingestion.mapping.coercion import coerce_cell, parse_date, parse_integer, parse_list, parse_number
from prospect_ingestion.mapping.engine import (
    infer_mapping,
    normalize_header,
    render_template,
    validate_overrides,
)

__all__ = [
    "coerce_cell",
    "infer_mapping",
    "normalize_header",
    "parse_date",
    "parse_integer",
    "parse_list",
    "parse_number",
    "render_template",
    "validate_overrides",
]
