"""Source adapters for imports (in-memory content only, no DB)."""

from prospect_ingestion.adapters.base import ParsedTable, SourceAdapter, SourceProbe
from prospect_ingestion.adapters.delimited import DelimitedTextReader, decode_content

__all__ = [
    "DelimitedTextReader",
    "ParsedTable",
    "SourceAdapter",
    "SourceProbe",
    "decode_content",
]
