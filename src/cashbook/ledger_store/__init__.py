"""
Ledger Store.

Persistence for categories and transactions plus the derived balance.

Enforces unique category titles and all-or-nothing batch writes.
"""

from .base import LedgerStore
from .sqlite_store import SQLiteLedgerStore

__all__ = [
    "LedgerStore",
    "SQLiteLedgerStore",
]
