"""CSV text to ordered records.

Quoting follows RFC 4180: commas inside a double-quoted span do not split,
and a doubled quote inside a span is a literal quote. Comma is the only
delimiter. Line breaks always end a row, so quoted fields cannot span lines.
"""

from __future__ import annotations

import re
from types import MappingProxyType

from dashfeed.core.models import DatasetRecord


_LINE_BREAK = re.compile(r"\r?\n")


def split_row(row: str) -> list[str]:
    """Split one CSV line into trimmed cells."""
    cells: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    length = len(row)

    while i < length:
        char = row[i]
        if char == '"':
            if in_quotes and i + 1 < length and row[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            cells.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    cells.append("".join(current))
    return [cell.strip() for cell in cells]


def parse_records(text: str | None) -> list[DatasetRecord]:
    """Parse CSV text into records keyed by the header row.

    Blank lines are skipped. Rows shorter than the header are padded with
    empty strings; cells beyond the header are dropped.

    Args:
        text: Raw CSV payload. None and "" are accepted.

    Returns:
        One read-only mapping per data row, in file order.

    Example:
        >>> [dict(r) for r in parse_records('a,b\\n1,"x,y"\\n')]
        [{'a': '1', 'b': 'x,y'}]
    """
    if not text:
        return []

    lines = [line.strip() for line in _LINE_BREAK.split(text)]
    lines = [line for line in lines if line]
    if not lines:
        return []

    headers = split_row(lines[0])
    records: list[DatasetRecord] = []
    for line in lines[1:]:
        cells = split_row(line)
        row = {
            header: cells[index] if index < len(cells) else ""
            for index, header in enumerate(headers)
        }
        records.append(MappingProxyType(row))
    return records
