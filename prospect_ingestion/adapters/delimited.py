"""
Delimited text adapter (the ingestion reader).

Splits text into lines and each line on a fixed delimiter, trims cells,
drops one leading and one trailing double quote, and replaces sentinel empty
tokens ("-") with "". Data rows whose cells are all empty are dropped; the
header row is always kept.

Known limitation: delimiters inside quoted cells are NOT honoured. A cell
such as "Acme, Inc." splits into two cells. The naive split is kept on
purpose; switching to a quoting-aware parser changes how existing files
map and must be done as a deliberate format change.
"""

from __future__ import annotations

from prospect_kernel.exceptions import ParseError
from prospect_kernel.logging_config import get_logger

from prospect_ingestion.adapters.base import ParsedTable, SourceProbe
from prospect_ingestion.domain.types import RawRow

logger = get_logger("ingestion.reader")

_SAMPLE_SIZE = 5


def decode_content(content: str | bytes) -> str:
    """Return text; bytes are decoded as UTF-8 with any BOM stripped."""
    if isinstance(content, str):
        return content[1:] if content.startswith("\ufeff") else content
    if isinstance(content, (bytes, bytearray)):
        try:
            return bytes(content).decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseError(f"content is not valid UTF-8 ({exc.reason} at byte {exc.start})") from exc
    raise ParseError(f"expected text or bytes, got {type(content).__name__}")


def _clean_cell(cell: str, empty_tokens: tuple[str, ...]) -> str:
    s = cell.strip()
    # Leading and trailing quotes are dropped independently: '"Acme' -> 'Acme'
    if s.startswith('"'):
        s = s[1:]
    if s.endswith('"'):
        s = s[:-1]
    s = s.strip()
    return "" if s in empty_tokens else s


class DelimitedTextReader:
    """Read delimited text into a ParsedTable. Holds no per-run state."""

    def __init__(self, delimiter: str = ",", empty_tokens: tuple[str, ...] = ("-",)):
        if not delimiter:
            raise ValueError("delimiter must be non-empty")
        self.delimiter = delimiter
        self.empty_tokens = tuple(empty_tokens)

    def split_line(self, line: str) -> RawRow:
        return tuple(_clean_cell(cell, self.empty_tokens) for cell in line.split(self.delimiter))

    def read(self, content: str | bytes) -> ParsedTable:
        """
        Parse content into header + non-blank data rows.

        Raises:
            ParseError: content is not text, cannot be decoded, or has no header line.
        """
        text = decode_content(content)
        # Only \n ends a line; a trailing \r is trimmed with the cells
        lines = text.split("\n")
        if lines and not lines[-1]:
            lines.pop()
        # Leading blank lines are skipped; the first non-blank line is the header
        start = next((i for i, line in enumerate(lines) if line.strip()), None)
        if start is None:
            raise ParseError("no header row")

        header = self.split_line(lines[start])
        rows: list[RawRow] = []
        source_lines: list[int] = []
        dropped = 0
        for line_no, line in enumerate(lines[start + 1:], start=start + 2):
            row = self.split_line(line)
            if not any(row):
                dropped += 1
                continue
            rows.append(row)
            source_lines.append(line_no)

        logger.debug(
            "source_parsed",
            extra={"columns": len(header), "data_rows": len(rows), "blank_rows_dropped": dropped},
        )
        return ParsedTable(
            header=header,
            rows=tuple(rows),
            source_lines=tuple(source_lines),
            blank_rows_dropped=dropped,
        )

    def read_rows(self, content: str | bytes) -> list[RawRow]:
        """RawRow list, header first (index i > 0 is data row i - 1)."""
        return self.read(content).raw_rows

    def probe(self, content: str | bytes) -> SourceProbe:
        table = self.read(content)
        return SourceProbe(
            row_count=len(table.rows),
            columns=table.header,
            sample_rows=table.rows[:_SAMPLE_SIZE],
            detected_delimiter=self.delimiter,
            blank_rows_dropped=table.blank_rows_dropped,
        )
