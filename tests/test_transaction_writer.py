"""Tests for single transaction creation and the balance rule."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from cashbook.errors import InsufficientBalance, StorageError, ValidationError
from cashbook.schemas import TransactionType
from cashbook.services import CategoryResolver, CreateTransactionService


@pytest.fixture
def service(store) -> CreateTransactionService:
    return CreateTransactionService(store)


@pytest.fixture
def funded(service) -> CreateTransactionService:
    """Service whose ledger holds a balance of exactly 100."""
    service.execute("Salary", "100", "income", "Work")
    return service


class TestCreateTransaction:
    """Tests for the happy path."""

    def test_creates_income(self, service, store):
        transaction = service.execute("Salary", "1000", "income", "Work")

        assert transaction.id > 0
        assert transaction.type is TransactionType.INCOME
        assert transaction.value == Decimal("1000.00")
        assert transaction.category.title == "Work"
        assert store.get_balance().total == Decimal("1000.00")

    def test_accepts_enum_and_numeric_value(self, service):
        transaction = service.execute("Bonus", 12.5, TransactionType.INCOME, "Work")

        assert transaction.value == Decimal("12.50")

    def test_creates_category_once(self, service, store):
        service.execute("Salary", "10", "income", "Work")
        service.execute("Bonus", "5", "income", "Work")

        assert [c.title for c in store.list_categories()] == ["Work"]

    def test_reuses_existing_category(self, service, store):
        [work] = store.create_categories(["Work"])

        transaction = service.execute("Salary", "10", "income", "Work")

        assert transaction.category == work

    def test_strips_title_and_category(self, service):
        transaction = service.execute("  Salary ", "10", "income", " Work ")

        assert transaction.title == "Salary"
        assert transaction.category.title == "Work"

    def test_income_ignores_balance(self, service):
        """The balance rule only gates outcomes."""
        transaction = service.execute("Gift", "5", "income", "Misc")
        assert transaction.type is TransactionType.INCOME

    def test_injected_resolver_is_used(self, store):
        resolver = MagicMock(wraps=CategoryResolver(store))
        service = CreateTransactionService(store, category_resolver=resolver)

        service.execute("Salary", "10", "income", "Work")

        resolver.resolve_one.assert_called_once_with("Work")


class TestBalanceRule:
    """An outcome may not exceed the balance before it."""

    def test_outcome_equal_to_balance_succeeds(self, funded, store):
        transaction = funded.execute("Rent", "100", "outcome", "Housing")

        assert transaction.value == Decimal("100.00")
        assert store.get_balance().total == Decimal("0.00")

    def test_outcome_above_balance_fails(self, funded, store):
        with pytest.raises(InsufficientBalance) as exc_info:
            funded.execute("Rent", "101", "outcome", "Housing")

        assert exc_info.value.total == Decimal("100.00")
        assert exc_info.value.value == Decimal("101.00")
        assert store.get_balance().total == Decimal("100.00")

    def test_rejected_outcome_creates_nothing(self, funded, store):
        with pytest.raises(InsufficientBalance):
            funded.execute("Rent", "101", "outcome", "Housing")

        assert len(store.list_transactions()) == 1
        assert [c.title for c in store.list_categories()] == ["Work"]

    def test_outcome_on_empty_ledger(self, service):
        with pytest.raises(InsufficientBalance):
            service.execute("Coffee", "0.01", "outcome", "Food")

    def test_zero_outcome_on_empty_ledger(self, service):
        transaction = service.execute("Free sample", "0", "outcome", "Food")
        assert transaction.value == Decimal("0.00")

    def test_message(self, service):
        with pytest.raises(InsufficientBalance, match="enough balance"):
            service.execute("Coffee", "1", "outcome", "Food")


class TestValidation:
    """Tests for rejected input."""

    @pytest.mark.parametrize(
        "title, value, type_, category",
        [
            ("", "10", "income", "Work"),
            ("   ", "10", "income", "Work"),
            ("Salary", "10", "income", ""),
            ("Salary", "ten", "income", "Work"),
            ("Salary", "-10", "income", "Work"),
            ("Salary", "10", "transfer", "Work"),
        ],
    )
    def test_invalid_input(self, service, store, title, value, type_, category):
        with pytest.raises(ValidationError):
            service.execute(title, value, type_, category)

        assert store.list_transactions() == []
        assert store.list_categories() == []


class TestStorageFailure:
    """Persistence failures propagate without partial effects."""

    def test_save_failure_propagates(self):
        store = MagicMock()
        store.get_balance.return_value.total = Decimal("0")
        store.find_categories_by_titles.return_value = []
        store.create_categories.side_effect = lambda titles: [
            MagicMock(title=t, id=1) for t in titles
        ]
        store.save_transaction.side_effect = StorageError("disk full")
        service = CreateTransactionService(store)

        with pytest.raises(StorageError, match="disk full"):
            service.execute("Salary", "10", "income", "Work")
