"""
cashbook: income/outcome ledger with CSV bulk import.

Transactions are recorded against user-defined categories. Bulk imports
stream a comma-delimited source, reconcile the referenced categories against
the ledger (creating missing ones exactly once) and persist all resulting
transactions in one atomic batch.
"""

__version__ = "0.1.0"
