"""
Exception hierarchy for the ledger core.

Per-record CSV problems are not exceptions: the importer skips those rows
(see ``schemas.csv_records.SkipReason``). Everything defined here propagates
to the caller.
"""

from decimal import Decimal


class CashbookError(Exception):
    """Base exception for all ledger errors."""

    pass


class ValidationError(CashbookError):
    """Input to a single-transaction operation is invalid."""

    pass


class InsufficientBalance(CashbookError):
    """An outcome would exceed the available balance."""

    def __init__(self, total: Decimal, value: Decimal):
        self.total = total
        self.value = value
        super().__init__(
            f"You do not have enough balance (available {total}, requested {value})"
        )


class StorageError(CashbookError):
    """A persistence operation failed. Nothing from that operation was committed."""

    pass


class CategoryConflictError(StorageError):
    """One or more category titles already exist in the store."""

    def __init__(self, titles: list[str], message: str | None = None):
        self.titles = titles
        super().__init__(message or f"Category titles already exist: {', '.join(titles)}")


class ConsistencyViolation(CashbookError):
    """Internal invariant breach. Indicates a bug, never retried."""

    pass


class SourceError(CashbookError):
    """An import source could not be opened or read."""

    pass
