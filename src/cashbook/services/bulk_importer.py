"""Bulk transaction import.

Pipeline for one import invocation:

    OPEN -> STREAMING -> DRAINED -> RECONCILING -> PERSISTING -> CLEANUP -> DONE

or FAILED from any state. The source is released exactly once on every exit
path. Transactions are committed in a single batch, so a failed import
commits none of them; categories created during RECONCILING may remain,
which is safe because a retried import reuses them.

Imports do not apply the balance-sufficiency rule of single transaction
creation: an import is a trusted reconciliation of an external statement.
"""

from __future__ import annotations

import csv
import io
import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from cashbook.config import ImportConfig
from cashbook.errors import SourceError
from cashbook.schemas.csv_records import (
    ParsedRecord,
    SkippedRecord,
    SkipReason,
    iter_records,
    parse_record,
)
from cashbook.schemas.ledger import TransactionDraft
from cashbook.services.category_resolver import CategoryResolver
from cashbook.sources import FileImportSource, ImportSource

if TYPE_CHECKING:
    from cashbook.ledger_store import LedgerStore
    from cashbook.schemas.ledger import Transaction

logger = logging.getLogger(__name__)


class ImportState(str, Enum):
    """States of an import run."""

    OPEN = "OPEN"
    STREAMING = "STREAMING"
    DRAINED = "DRAINED"
    RECONCILING = "RECONCILING"
    PERSISTING = "PERSISTING"
    CLEANUP = "CLEANUP"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass
class ImportStats:
    """Counters for one import run."""

    records_read: int = 0
    records_kept: int = 0
    skipped: Counter = field(default_factory=Counter)
    categories_referenced: int = 0
    transactions_saved: int = 0
    duration_ms: int = 0

    @property
    def records_skipped(self) -> int:
        return sum(self.skipped.values())


class ImportTransactionsService:
    """Imports transactions from a comma-delimited source.

    Usage:
        service = ImportTransactionsService(store)
        transactions = service.execute("/tmp/upload.csv")
    """

    def __init__(
        self,
        store: LedgerStore,
        config: ImportConfig | None = None,
        category_resolver: CategoryResolver | None = None,
    ) -> None:
        """Initialize the import service.

        Args:
            store: Ledger store receiving categories and transactions.
            config: Import settings (delimiter, encoding, source deletion).
            category_resolver: Resolver to use; built from ``store`` if omitted.
        """
        self.store = store
        self.config = config or ImportConfig()
        self.category_resolver = category_resolver or CategoryResolver(
            store, conflict_retries=self.config.category_conflict_retries
        )

        self.last_state: ImportState | None = None
        self.last_stats: ImportStats | None = None

    def execute(self, source: ImportSource | Path | str) -> list[Transaction]:
        """Run the import.

        Args:
            source: An ImportSource, or a path wrapped in FileImportSource
                (deleted afterwards unless ``config.delete_source`` is False).

        Returns:
            Persisted transactions in the order their records appeared.

        Raises:
            Any error from reading, reconciling or persisting. The source is
            released before the error reaches the caller.
        """
        if isinstance(source, (str, Path)):
            source = FileImportSource(source, delete_on_release=self.config.delete_source)

        start_time = time.time()
        stats = ImportStats()
        self.last_stats = stats
        self._transition(ImportState.OPEN, source)

        try:
            with source as raw:
                text = io.TextIOWrapper(raw, encoding=self.config.encoding, newline="")
                try:
                    records, categories = self._stream(text, stats)
                except (UnicodeDecodeError, csv.Error, *source.read_errors) as e:
                    raise SourceError(
                        f"Failed reading {source.name} after {stats.records_read} records: {e}"
                    ) from e
                finally:
                    # The source owns the byte stream; don't let the wrapper close it
                    if not text.closed:
                        text.detach()

                self._transition(ImportState.DRAINED, source)

                if records:
                    self._transition(ImportState.RECONCILING, source)
                    mapping = self.category_resolver.resolve(categories)
                    stats.categories_referenced = len(mapping)

                    self._transition(ImportState.PERSISTING, source)
                    drafts = [
                        TransactionDraft(
                            title=record.title,
                            value=record.value,
                            type=record.type,
                            category=mapping[record.category],
                        )
                        for record in records
                    ]
                    saved = self.store.save_transactions(drafts)
                else:
                    logger.info("No valid records in %s; nothing to persist", source.name)
                    saved = []

                stats.transactions_saved = len(saved)
                self._transition(ImportState.CLEANUP, source)
        except Exception as e:
            self.last_state = ImportState.FAILED
            stats.duration_ms = int((time.time() - start_time) * 1000)
            logger.error("Import from %s failed: %s", source.name, e)
            raise

        self._transition(ImportState.DONE, source)
        stats.duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "Import complete: read=%d, imported=%d, skipped=%d, categories=%d (%dms)",
            stats.records_read,
            stats.transactions_saved,
            stats.records_skipped,
            stats.categories_referenced,
            stats.duration_ms,
        )
        return saved

    def _stream(
        self, text: TextIO, stats: ImportStats
    ) -> tuple[list[ParsedRecord], list[str]]:
        """Pull every record from the stream; returns only once it is drained.

        Returns:
            Valid records in arrival order and their category titles
            (duplicates kept, same order).
        """
        self.last_state = ImportState.STREAMING
        records: list[ParsedRecord] = []
        categories: list[str] = []

        for line_number, fields in iter_records(text, delimiter=self.config.delimiter):
            stats.records_read += 1
            outcome = parse_record(line_number, fields)

            if isinstance(outcome, SkippedRecord):
                self._skip(outcome, stats)
                continue

            records.append(outcome)
            categories.append(outcome.category)

        stats.records_kept = len(records)

        uncategorized = categories.count("")
        if uncategorized:
            logger.info(
                "%d records have no category; filing them under the empty-titled category",
                uncategorized,
            )
        return records, categories

    def _skip(self, record: SkippedRecord, stats: ImportStats) -> None:
        """Drop a malformed record. Skips are counted, never raised."""
        stats.skipped[record.reason] += 1
        if record.reason != SkipReason.BLANK:
            logger.debug(
                "Skipping line %d: %s %s", record.line_number, record.reason.value, record.detail
            )

    def _transition(self, state: ImportState, source: ImportSource) -> None:
        self.last_state = state
        logger.debug("Import %s -> %s", source.name, state.value)
