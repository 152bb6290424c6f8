"""Ledger services: category reconciliation, transaction creation and bulk import."""

from cashbook.services.bulk_importer import ImportState, ImportStats, ImportTransactionsService
from cashbook.services.category_resolver import CategoryResolver
from cashbook.services.transaction_writer import CreateTransactionService

__all__ = [
    "CategoryResolver",
    "CreateTransactionService",
    "ImportState",
    "ImportStats",
    "ImportTransactionsService",
]
