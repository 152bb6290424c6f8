"""Test fixtures and utilities."""

import io
from pathlib import Path
from typing import BinaryIO

import pytest

from cashbook.ledger_store import SQLiteLedgerStore
from cashbook.sources import ImportSource

# Sample import file (header + 3 records)
SAMPLE_CSV = """title, type, value, category
Groceries, outcome, 50, Food
Salary, income, 1000, Work
Rent, outcome, 9999, Housing
"""


class InMemorySource(ImportSource):
    """Import source over a bytes buffer that records how often it is released."""

    def __init__(self, content: str | bytes, name: str = "memory.csv"):
        super().__init__()
        self._content = content.encode("utf-8") if isinstance(content, str) else content
        self._name = name
        self.release_count = 0
        self.stream: io.BytesIO | None = None

    @property
    def name(self) -> str:
        return self._name

    def _open(self) -> BinaryIO:
        self.stream = io.BytesIO(self._content)
        return self.stream

    def _release(self) -> None:
        self.release_count += 1
        if self.stream is not None:
            self.stream.close()


@pytest.fixture
def temp_db(tmp_path) -> Path:
    """Temporary database path for testing."""
    return tmp_path / "test_ledger.db"


@pytest.fixture
def store(temp_db) -> SQLiteLedgerStore:
    """Fresh ledger store."""
    return SQLiteLedgerStore(temp_db)


@pytest.fixture
def write_csv(tmp_path):
    """Write CSV content to a file and return its path."""

    def _write(content: str, name: str = "import.csv") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def memory_source():
    """Factory for in-memory import sources."""
    return InMemorySource


@pytest.fixture
def sample_csv() -> str:
    """Header plus Groceries/Salary/Rent records."""
    return SAMPLE_CSV
