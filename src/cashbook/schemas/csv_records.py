"""
Transaction records from comma-delimited text.

Record layout (header row first, always skipped):

    title, type, value, category

Fields are trimmed. A record is either a ParsedRecord (kept) or a
SkippedRecord (dropped with a reason). Skips never raise: a malformed row
costs that row only, never the batch.
"""

import csv
from collections.abc import Iterator
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TextIO

from .ledger import TransactionType, parse_value

RECORD_FIELDS = ("title", "type", "value", "category")


class SkipReason(str, Enum):
    """Why a record was dropped."""

    BLANK = "BLANK"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_VALUE = "INVALID_VALUE"
    INVALID_TYPE = "INVALID_TYPE"


@dataclass(frozen=True)
class ParsedRecord:
    """A valid record, category not yet resolved."""

    line_number: int
    title: str
    type: TransactionType
    value: Decimal
    category: str


@dataclass(frozen=True)
class SkippedRecord:
    """A dropped record."""

    line_number: int
    reason: SkipReason
    detail: str = ""


def iter_records(stream: TextIO, delimiter: str = ",") -> Iterator[tuple[int, list[str]]]:
    """Yield ``(line_number, trimmed_fields)`` for every record after the header.

    Records are pulled from the stream one at a time; nothing is read ahead.
    """
    reader = csv.reader(stream, delimiter=delimiter)
    header_seen = False
    for row in reader:
        if not header_seen:
            header_seen = True
            continue
        yield reader.line_num, [cell.strip() for cell in row]


def parse_record(line_number: int, fields: list[str]) -> ParsedRecord | SkippedRecord:
    """Classify one record as kept or skipped."""
    if not any(fields):
        return SkippedRecord(line_number, SkipReason.BLANK)

    padded = list(fields[: len(RECORD_FIELDS)]) + [""] * (len(RECORD_FIELDS) - len(fields))
    title, type_, value, category = padded

    # Category is not required: only title/type/value gate a record
    if not title or not type_ or not value:
        missing = [
            name for name, cell in zip(RECORD_FIELDS[:3], (title, type_, value)) if not cell
        ]
        return SkippedRecord(line_number, SkipReason.MISSING_FIELD, ", ".join(missing))

    try:
        parsed_type = TransactionType.parse(type_)
    except ValueError:
        return SkippedRecord(line_number, SkipReason.INVALID_TYPE, type_)

    try:
        parsed_value = parse_value(value)
    except ValueError as e:
        return SkippedRecord(line_number, SkipReason.INVALID_VALUE, str(e))

    return ParsedRecord(
        line_number=line_number,
        title=title,
        type=parsed_type,
        value=parsed_value,
        category=category,
    )
