"""
Ledger store interface.

Services depend on this interface only; the storage engine is injected.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from ..schemas.ledger import Balance, Category, Transaction, TransactionDraft


class LedgerStore(ABC):
    """
    Persistence for categories and transactions.

    Implementations must guarantee:
    - Category titles are unique (conflicts raise CategoryConflictError)
    - save_transactions is all-or-nothing
    - Every saved transaction references an existing category
    - Failures surface as StorageError
    """

    @abstractmethod
    def get_balance(self) -> Balance:
        """Aggregate income, outcome and total over all committed transactions."""
        pass

    @abstractmethod
    def find_categories_by_titles(self, titles: Iterable[str]) -> list[Category]:
        """Return existing categories whose title is in ``titles`` (order irrelevant)."""
        pass

    @abstractmethod
    def create_categories(self, titles: list[str]) -> list[Category]:
        """Persist one category per title, in one storage transaction.

        Callers pass distinct titles not yet in the store. If any title
        already exists, nothing is committed and CategoryConflictError is
        raised.
        """
        pass

    @abstractmethod
    def save_transactions(self, drafts: list[TransactionDraft]) -> list[Transaction]:
        """Persist all drafts atomically; returns them in input order with ids."""
        pass

    @abstractmethod
    def save_transaction(self, draft: TransactionDraft) -> Transaction:
        """Persist one transaction."""
        pass

    @abstractmethod
    def list_transactions(self) -> list[Transaction]:
        """All transactions in insertion order."""
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """All categories ordered by title."""
        pass
