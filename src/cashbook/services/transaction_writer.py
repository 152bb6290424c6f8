"""Single transaction creation with the balance-sufficiency rule."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from cashbook.errors import InsufficientBalance, ValidationError
from cashbook.schemas.ledger import TransactionDraft, TransactionType, parse_value
from cashbook.services.category_resolver import CategoryResolver

if TYPE_CHECKING:
    from cashbook.ledger_store import LedgerStore
    from cashbook.schemas.ledger import Transaction

logger = logging.getLogger(__name__)


class CreateTransactionService:
    """Validates and persists one transaction.

    An outcome is rejected when the balance before it is smaller than its
    value; an outcome equal to the balance is allowed and leaves zero.
    A rejected outcome creates nothing, not even its category.
    """

    def __init__(
        self,
        store: LedgerStore,
        category_resolver: CategoryResolver | None = None,
    ) -> None:
        self.store = store
        self.category_resolver = category_resolver or CategoryResolver(store)

    def execute(
        self,
        title: str,
        value: Decimal | float | int | str,
        type: TransactionType | str,
        category: str,
    ) -> Transaction:
        """Create a transaction.

        Args:
            title: Transaction title.
            value: Non-negative amount.
            type: ``income`` or ``outcome``.
            category: Category title; created if it does not exist yet.

        Returns:
            The persisted transaction.

        Raises:
            ValidationError: Invalid title, value, type or category.
            InsufficientBalance: Outcome exceeds the current balance.
            StorageError: Persistence failed.
        """
        title = (title or "").strip()
        category = (category or "").strip()
        if not title:
            raise ValidationError("Transaction title cannot be empty")
        if not category:
            raise ValidationError("Category cannot be empty")

        try:
            transaction_type = TransactionType.parse(type)
        except ValueError as e:
            raise ValidationError(
                f"Invalid transaction type {type!r}; expected 'income' or 'outcome'"
            ) from e

        try:
            amount = parse_value(value)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        balance = self.store.get_balance()
        if transaction_type == TransactionType.OUTCOME and balance.total < amount:
            logger.info(
                "Rejected outcome %r of %s: balance is %s", title, amount, balance.total
            )
            raise InsufficientBalance(total=balance.total, value=amount)

        category_record = self.category_resolver.resolve_one(category)

        transaction = self.store.save_transaction(
            TransactionDraft(
                title=title,
                value=amount,
                type=transaction_type,
                category=category_record,
            )
        )
        logger.info(
            "Created %s transaction %d (%s, %s)",
            transaction.type.value,
            transaction.id,
            transaction.value,
            category_record.title,
        )
        return transaction
