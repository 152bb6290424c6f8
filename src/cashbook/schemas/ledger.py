"""
Ledger domain types.

Category and Transaction are the persisted entities; TransactionDraft is a
transaction awaiting persistence; Balance is derived on demand and never
stored.

Amount convention:
- Values are always non-negative Decimals quantized to cents
- The transaction type (income/outcome) determines direction
"""

import sqlite3
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

VALUE_PRECISION = Decimal("0.01")


class TransactionType(str, Enum):
    """Direction of a transaction."""

    INCOME = "income"
    OUTCOME = "outcome"

    @classmethod
    def parse(cls, raw: "str | TransactionType") -> "TransactionType":
        """Parse a type from user input (exact, lowercase values only).

        Raises:
            ValueError: If the value is not a known type.
        """
        if isinstance(raw, cls):
            return raw
        return cls(raw)


def parse_value(raw: Decimal | float | int | str) -> Decimal:
    """Coerce a transaction value to a non-negative Decimal.

    Args:
        raw: Value as text (CSV/CLI input) or a number

    Returns:
        Decimal quantized to VALUE_PRECISION

    Raises:
        ValueError: If the value is not a finite, non-negative number

    Examples:
        >>> parse_value(" 50 ")
        Decimal('50.00')
        >>> parse_value("abc")  # Raises ValueError
    """
    try:
        if isinstance(raw, str):
            value = Decimal(raw.strip())
        elif isinstance(raw, float):
            value = Decimal(str(raw))
        elif isinstance(raw, Decimal):
            value = raw
        else:
            value = Decimal(raw)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValueError(f"Invalid value format: {raw!r}") from e

    if not value.is_finite():
        raise ValueError(f"Value must be a finite number, got {raw!r}")

    try:
        value = value.quantize(VALUE_PRECISION, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"Value out of range: {raw!r}") from e

    if value < 0:
        raise ValueError(
            f"Value must not be negative, got {value}. "
            f"Use the transaction type (income/outcome) to indicate direction."
        )
    return value


@dataclass(frozen=True)
class Category:
    """A persisted category. Titles are unique and case-sensitive."""

    id: int
    title: str
    created_at: str = ""

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Category":
        """Create from database row."""
        return cls(id=row["id"], title=row["title"], created_at=row["created_at"])


@dataclass(frozen=True)
class TransactionDraft:
    """In-memory transaction with a resolved category, not yet persisted."""

    title: str
    value: Decimal
    type: TransactionType
    category: Category


@dataclass(frozen=True)
class Transaction:
    """A persisted transaction."""

    id: int
    title: str
    value: Decimal
    type: TransactionType
    category: Category
    created_at: str = ""

    @classmethod
    def from_draft(cls, draft: TransactionDraft, id: int, created_at: str) -> "Transaction":
        return cls(
            id=id,
            title=draft.title,
            value=draft.value,
            type=draft.type,
            category=draft.category,
            created_at=created_at,
        )

    def to_dict(self) -> dict:
        """Serialize for display/JSON output."""
        return {
            "id": self.id,
            "title": self.title,
            "value": str(self.value),
            "type": self.type.value,
            "category": {"id": self.category.id, "title": self.category.title},
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class Balance:
    """Aggregate over all committed transactions."""

    income: Decimal = field(default=Decimal("0.00"))
    outcome: Decimal = field(default=Decimal("0.00"))

    @property
    def total(self) -> Decimal:
        return self.income - self.outcome

    def to_dict(self) -> dict:
        return {
            "income": str(self.income),
            "outcome": str(self.outcome),
            "total": str(self.total),
        }
