"""
SQLite-based ledger store implementation.

Tables:
- categories: Unique, case-sensitive titles
- transactions: Income/outcome rows referencing a category

Values are stored as decimal TEXT and summed with Decimal arithmetic, so
balances are exact.
"""

import logging
import sqlite3
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any

from ..errors import CategoryConflictError, StorageError
from ..schemas.ledger import (
    Balance,
    Category,
    Transaction,
    TransactionDraft,
    TransactionType,
)
from .base import LedgerStore

logger = logging.getLogger(__name__)

# Stay well below SQLITE_MAX_VARIABLE_NUMBER on older builds
_IN_CLAUSE_CHUNK = 500


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class SQLiteLedgerStore(LedgerStore):
    """
    SQLite ledger.

    Each public method runs in its own connection and transaction, so one
    store instance can be shared by every service.
    """

    SCHEMA_VERSION = 1

    def __init__(self, db_path: Path | str):
        """
        Initialize ledger store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with row factory."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database transactions.

        sqlite errors are re-raised as StorageError after rollback.
        """
        try:
            conn = self._get_connection()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open ledger database {self.db_path}: {e}") from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(f"Ledger storage operation failed: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """
            )

            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS categories (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL UNIQUE,
                    created_at TEXT NOT NULL
                )
            """
            )

            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS transactions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    value TEXT NOT NULL,  -- Decimal as text
                    type TEXT NOT NULL CHECK (type IN ('income', 'outcome')),
                    category_id INTEGER NOT NULL,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (category_id) REFERENCES categories(id)
                )
            """
            )

            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_transactions_category_id "
                "ON transactions(category_id)"
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_transactions_type ON transactions(type)")

            conn.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)", (self.SCHEMA_VERSION,)
            )

    # Balance

    def get_balance(self) -> Balance:
        """Sum income and outcome over all committed transactions."""
        income = Decimal("0.00")
        outcome = Decimal("0.00")
        with self._transaction() as conn:
            for row in conn.execute("SELECT type, value FROM transactions"):
                if row["type"] == TransactionType.INCOME.value:
                    income += Decimal(row["value"])
                else:
                    outcome += Decimal(row["value"])
        return Balance(income=income, outcome=outcome)

    # Category methods

    def find_categories_by_titles(self, titles: Iterable[str]) -> list[Category]:
        """Return existing categories whose title is in ``titles``."""
        wanted = list(dict.fromkeys(titles))
        if not wanted:
            return []

        found: list[Category] = []
        with self._transaction() as conn:
            for start in range(0, len(wanted), _IN_CLAUSE_CHUNK):
                chunk = wanted[start : start + _IN_CLAUSE_CHUNK]
                placeholders = ", ".join("?" for _ in chunk)
                rows = conn.execute(
                    f"SELECT * FROM categories WHERE title IN ({placeholders})", chunk
                ).fetchall()
                found.extend(Category.from_row(row) for row in rows)
        return found

    def create_categories(self, titles: list[str]) -> list[Category]:
        """Insert one category per title in a single transaction."""
        if not titles:
            return []

        now = _utc_now()
        created: list[Category] = []
        with self._transaction() as conn:
            for title in titles:
                try:
                    cursor = conn.execute(
                        "INSERT INTO categories (title, created_at) VALUES (?, ?)",
                        (title, now),
                    )
                except sqlite3.IntegrityError as e:
                    raise CategoryConflictError([title]) from e
                created.append(Category(id=cursor.lastrowid or 0, title=title, created_at=now))

        logger.debug(f"Created {len(created)} categories")
        return created

    def list_categories(self) -> list[Category]:
        with self._transaction() as conn:
            rows = conn.execute("SELECT * FROM categories ORDER BY title").fetchall()
            return [Category.from_row(row) for row in rows]

    # Transaction methods

    def save_transactions(self, drafts: list[TransactionDraft]) -> list[Transaction]:
        """Insert all drafts in one transaction; any failure commits nothing."""
        if not drafts:
            return []

        now = _utc_now()
        saved: list[Transaction] = []
        with self._transaction() as conn:
            for draft in drafts:
                saved.append(self._insert_transaction(conn, draft, now))

        logger.debug(f"Saved batch of {len(saved)} transactions")
        return saved

    def save_transaction(self, draft: TransactionDraft) -> Transaction:
        with self._transaction() as conn:
            return self._insert_transaction(conn, draft, _utc_now())

    def _insert_transaction(
        self, conn: sqlite3.Connection, draft: TransactionDraft, created_at: str
    ) -> Transaction:
        cursor = conn.execute(
            """
            INSERT INTO transactions (title, value, type, category_id, created_at)
            VALUES (?, ?, ?, ?, ?)
        """,
            (draft.title, str(draft.value), draft.type.value, draft.category.id, created_at),
        )
        return Transaction.from_draft(draft, id=cursor.lastrowid or 0, created_at=created_at)

    def list_transactions(self) -> list[Transaction]:
        """All transactions with their categories, in insertion order."""
        with self._transaction() as conn:
            rows = conn.execute(
                """
                SELECT t.id, t.title, t.value, t.type, t.created_at,
                       c.id AS category_id, c.title AS category_title,
                       c.created_at AS category_created_at
                FROM transactions t
                JOIN categories c ON c.id = t.category_id
                ORDER BY t.id
            """
            ).fetchall()

        return [
            Transaction(
                id=row["id"],
                title=row["title"],
                value=Decimal(row["value"]),
                type=TransactionType(row["type"]),
                category=Category(
                    id=row["category_id"],
                    title=row["category_title"],
                    created_at=row["category_created_at"],
                ),
                created_at=row["created_at"],
            )
            for row in rows
        ]

    # Statistics

    def get_stats(self) -> dict[str, Any]:
        """Row counts for status output."""
        with self._transaction() as conn:
            categories = conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0]
            counts = {
                row["type"]: row["n"]
                for row in conn.execute(
                    "SELECT type, COUNT(*) AS n FROM transactions GROUP BY type"
                ).fetchall()
            }

        return {
            "categories": categories,
            "transactions_total": sum(counts.values()),
            "transactions_income": counts.get(TransactionType.INCOME.value, 0),
            "transactions_outcome": counts.get(TransactionType.OUTCOME.value, 0),
        }
