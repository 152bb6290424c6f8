"""
CLI main entry point.
"""

import argparse
import logging
import sys
from pathlib import Path

from ..config import Config, create_default_config, load_config
from ..errors import CashbookError, InsufficientBalance, ValidationError
from ..ledger_store import SQLiteLedgerStore
from ..schemas.ledger import TransactionType
from ..services import CreateTransactionService, ImportTransactionsService
from ..sources import FileImportSource, HttpImportSource, ImportSource

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_cli() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="cashbook",
        description="Record income/outcome transactions and bulk import them from CSV",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # init-config command
    init_parser = subparsers.add_parser("init-config", help="Write a default config file")
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing config file",
    )

    # import command
    import_parser = subparsers.add_parser(
        "import", help="Import transactions from a CSV file or URL"
    )
    import_parser.add_argument(
        "source",
        type=str,
        help="Path to a CSV file, or an http(s) URL",
    )
    import_parser.add_argument(
        "--keep-source",
        action="store_true",
        help="Do not delete the CSV file after importing",
    )

    # add command
    add_parser = subparsers.add_parser("add", help="Create a single transaction")
    add_parser.add_argument("title", type=str, help="Transaction title")
    add_parser.add_argument("value", type=str, help="Amount (non-negative)")
    add_parser.add_argument(
        "type",
        choices=[t.value for t in TransactionType],
        help="Transaction type",
    )
    add_parser.add_argument("category", type=str, help="Category title (created if new)")

    # balance command
    subparsers.add_parser("balance", help="Show income, outcome and total")

    # list command
    list_parser = subparsers.add_parser("list", help="List transactions")
    list_parser.add_argument(
        "--categories",
        action="store_true",
        help="List categories instead of transactions",
    )

    # status command
    subparsers.add_parser("status", help="Show ledger statistics")

    return parser


def build_source(config: Config, source: str, keep_source: bool) -> ImportSource:
    """Pick the import source for a CLI argument."""
    if source.startswith(("http://", "https://")):
        return HttpImportSource(
            source,
            token=config.http.token or None,
            timeout=config.http.timeout_seconds,
            max_retries=config.http.max_retries,
            backoff_factor=config.http.backoff_factor,
        )
    return FileImportSource(
        source,
        delete_on_release=config.imports.delete_source and not keep_source,
    )


def cmd_init_config(config_path: Path, force: bool) -> int:
    """Write the default config file."""
    if config_path.exists() and not force:
        print(f"❌ {config_path} already exists (use --force to overwrite)")
        return 1
    create_default_config(config_path)
    print(f"✓ Wrote default config to {config_path}")
    return 0


def cmd_import(config: Config, source: str, keep_source: bool) -> int:
    """Bulk import transactions."""
    store = SQLiteLedgerStore(config.ledger.db_path)
    service = ImportTransactionsService(store, config=config.imports)

    print(f"📥 Importing transactions from {source}...")
    try:
        transactions = service.execute(build_source(config, source, keep_source))
    except CashbookError as e:
        print(f"❌ Import failed: {e}")
        return 1

    stats = service.last_stats
    print(f"\n✓ Imported: {len(transactions)}")
    if stats is not None:
        print(f"  Skipped rows:       {stats.records_skipped}")
        print(f"  Categories used:    {stats.categories_referenced}")
    return 0


def cmd_add(config: Config, title: str, value: str, type_: str, category: str) -> int:
    """Create a single transaction."""
    store = SQLiteLedgerStore(config.ledger.db_path)
    service = CreateTransactionService(store)

    try:
        transaction = service.execute(title=title, value=value, type=type_, category=category)
    except (InsufficientBalance, ValidationError) as e:
        print(f"❌ {e}")
        return 1

    print(
        f"✓ Created {transaction.type.value} #{transaction.id}: "
        f"{transaction.title} {transaction.value} [{transaction.category.title}]"
    )
    return 0


def cmd_balance(config: Config) -> int:
    """Show the balance."""
    store = SQLiteLedgerStore(config.ledger.db_path)
    balance = store.get_balance()

    print("\n💰 Balance")
    print("=" * 40)
    print(f"  Income:   {balance.income}")
    print(f"  Outcome:  {balance.outcome}")
    print(f"  Total:    {balance.total}")
    print()
    return 0


def cmd_list(config: Config, categories: bool) -> int:
    """List transactions or categories."""
    store = SQLiteLedgerStore(config.ledger.db_path)

    if categories:
        for category in store.list_categories():
            print(f"  {category.id:>5}  {category.title}")
        return 0

    for transaction in store.list_transactions():
        print(
            f"  {transaction.id:>5}  {transaction.type.value:<8} {transaction.value:>12}  "
            f"{transaction.title} [{transaction.category.title}]"
        )
    return 0


def cmd_status(config: Config) -> int:
    """Show ledger statistics."""
    store = SQLiteLedgerStore(config.ledger.db_path)
    stats = store.get_stats()

    print("\n📊 Ledger Status")
    print("=" * 40)
    print(f"  Database:              {config.ledger.db_path}")
    print(f"  Categories:            {stats['categories']}")
    print(f"  Transactions total:    {stats['transactions_total']}")
    print(f"  Income transactions:   {stats['transactions_income']}")
    print(f"  Outcome transactions:  {stats['transactions_outcome']}")
    print()
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_cli()
    parsed = parser.parse_args(args)

    setup_logging(parsed.verbose)

    if not parsed.command:
        parser.print_help()
        return 1

    if parsed.command == "init-config":
        return cmd_init_config(parsed.config, parsed.force)

    # Load config
    try:
        config = load_config(parsed.config)
    except Exception as e:
        print(f"❌ Failed to load config: {e}")
        return 1

    # Route to command
    try:
        if parsed.command == "import":
            return cmd_import(config, parsed.source, parsed.keep_source)
        elif parsed.command == "add":
            return cmd_add(config, parsed.title, parsed.value, parsed.type, parsed.category)
        elif parsed.command == "balance":
            return cmd_balance(config)
        elif parsed.command == "list":
            return cmd_list(config, parsed.categories)
        elif parsed.command == "status":
            return cmd_status(config)
        else:
            parser.print_help()
            return 1
    except CashbookError as e:
        logger.error(f"{parsed.command} failed: {e}")
        print(f"❌ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
