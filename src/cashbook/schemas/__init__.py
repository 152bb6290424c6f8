"""
Canonical ledger schemas.

Every module in the package uses these types; no module defines its own
near-duplicate transaction or category model.
"""

from .csv_records import (
    RECORD_FIELDS,
    ParsedRecord,
    SkippedRecord,
    SkipReason,
    iter_records,
    parse_record,
)
from .ledger import (
    VALUE_PRECISION,
    Balance,
    Category,
    Transaction,
    TransactionDraft,
    TransactionType,
    parse_value,
)

__all__ = [
    # Ledger
    "VALUE_PRECISION",
    "Balance",
    "Category",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "parse_value",
    # CSV records
    "RECORD_FIELDS",
    "ParsedRecord",
    "SkippedRecord",
    "SkipReason",
    "iter_records",
    "parse_record",
]
