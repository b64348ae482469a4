"""
Source adapter protocol and probe DTO.

Contract:
    SourceAdapter.read() turns raw content into a ParsedTable (header + data
    rows, blank rows dropped) or raises ParseError.
    SourceAdapter.probe() returns a quick snapshot: row count, columns, sample rows.

Architecture: prospect_ingestion/adapters. In-memory content only, no DB.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from prospect_ingestion.domain.types import RawRow


@dataclass(frozen=True)
class ParsedTable:
    """Header plus non-blank data rows, with the source line of each data row."""

    header: RawRow
    rows: tuple[RawRow, ...]
    source_lines: tuple[int, ...]  # 1-based, parallel to rows
    blank_rows_dropped: int = 0

    @property
    def raw_rows(self) -> list[RawRow]:
        """Header first: index i > 0 is data row i - 1."""
        return [self.header, *self.rows]

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class SourceProbe:
    """Result of probing source content (row count, columns, first N rows)."""

    row_count: int
    columns: tuple[str, ...]
    sample_rows: tuple[RawRow, ...]  # First 5 data rows
    detected_delimiter: str | None = None
    blank_rows_dropped: int = 0


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for reading tabular source content into rows."""

    def read(self, content: str | bytes) -> ParsedTable:
        ...

    def probe(self, content: str | bytes) -> SourceProbe:
        ...
