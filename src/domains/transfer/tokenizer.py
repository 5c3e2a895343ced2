"""Quoted delimited-text tokenizer and the matching field escaper.

Reading rules:
- a double quote toggles quoted mode; inside quoted mode a doubled quote
  emits one literal quote
- outside quotes, a comma ends a field and a newline ends a row
- carriage returns outside quotes are dropped
- blank lines produce no row

The tokenizer is lenient by contract: it never raises. Unbalanced quotes just
run to the end of the input, and ``tokenize`` silently drops rows that have
fewer than ``min_fields`` fields so that truncated trailing lines do not
reach the importers.
"""
from collections.abc import Iterable, Iterator
from datetime import date, datetime

QUOTE = '"'
DELIMITER = ","


def iter_rows(text: str, keep_blank: bool = False) -> Iterator[list[str]]:
    """Yield every row of ``text`` without any field-count filtering.

    With ``keep_blank`` an empty line yields an empty row instead of nothing.
    """
    row: list[str] = []
    field: list[str] = []
    in_quotes = False
    i = 0
    length = len(text)

    while i < length:
        char = text[i]

        if char == QUOTE:
            if in_quotes and i + 1 < length and text[i + 1] == QUOTE:
                field.append(QUOTE)
                i += 2
                continue
            in_quotes = not in_quotes
            i += 1
            continue

        if not in_quotes:
            if char == DELIMITER:
                row.append("".join(field))
                field = []
                i += 1
                continue
            if char == "\r":
                i += 1
                continue
            if char == "\n":
                if field or row:
                    row.append("".join(field))
                    yield row
                elif keep_blank:
                    yield []
                row = []
                field = []
                i += 1
                continue

        field.append(char)
        i += 1

    if field or row:
        row.append("".join(field))
        yield row


def tokenize(text: str, min_fields: int = 1) -> list[list[str]]:
    """Split ``text`` into rows of fields, keeping rows with >= ``min_fields``."""
    return [row for row in iter_rows(text) if len(row) >= min_fields]


def escape_field(value: str) -> str:
    """Quote a text value, doubling embedded quotes."""
    return QUOTE + value.replace(QUOTE, QUOTE * 2) + QUOTE


def format_value(value: object) -> str:
    """Render one cell: text is always quoted, scalars are written bare."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return escape_field(str(value))


def format_row(values: Iterable[object]) -> str:
    return DELIMITER.join(format_value(v) for v in values)
