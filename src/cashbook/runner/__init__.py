"""
CLI runner module.

Provides commands:
- init-config: Write a default config file
- import: Bulk import from a CSV file or URL
- add: Create a single transaction
- balance: Show income/outcome/total
- list: List transactions or categories
- status: Ledger statistics
"""

from .main import create_cli, main

__all__ = [
    "create_cli",
    "main",
]
