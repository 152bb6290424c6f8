"""
Configuration management.

This module defines ALL configuration for cashbook.
No other module should invent config keys or defaults.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .errors import CashbookError


class ConfigValidationError(CashbookError):
    """Raised when configuration validation fails."""

    pass


@dataclass
class LedgerConfig:
    """Ledger database settings."""

    db_path: Path = field(default_factory=lambda: Path("data/ledger.db"))


@dataclass
class ImportConfig:
    """Bulk import settings."""

    # Field delimiter for import files
    delimiter: str = ","
    # utf-8-sig tolerates a leading BOM from spreadsheet exports
    encoding: str = "utf-8-sig"
    # Delete the source file once the import has finished (success or failure)
    delete_source: bool = True
    # Re-fetch/retry rounds when another writer creates the same category concurrently
    category_conflict_retries: int = 3


@dataclass
class HttpSourceConfig:
    """Settings for importing from a URL."""

    timeout_seconds: int = 30
    max_retries: int = 3
    backoff_factor: float = 0.5
    # Bearer token sent with every download (empty = anonymous)
    token: str = ""


@dataclass
class Config:
    """Application configuration."""

    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    imports: ImportConfig = field(default_factory=ImportConfig)
    http: HttpSourceConfig = field(default_factory=HttpSourceConfig)

    def validate(self) -> list[str]:
        """Validate configuration completeness and consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors: list[str] = []

        if not str(self.ledger.db_path):
            errors.append("ledger.db_path is required")

        if len(self.imports.delimiter) != 1:
            errors.append("imports.delimiter must be a single character")
        if self.imports.category_conflict_retries < 0:
            errors.append("imports.category_conflict_retries must be >= 0")

        if self.http.timeout_seconds <= 0:
            errors.append("http.timeout_seconds must be > 0")
        if self.http.max_retries < 0:
            errors.append("http.max_retries must be >= 0")

        return errors


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").lower()
    if raw == "true":
        return True
    if raw == "false":
        return False
    return default


def load_config(config_path: Path) -> Config:
    """
    Load configuration from YAML file.

    A missing file yields the defaults. Environment variables override
    file values:
    - CASHBOOK_DB_PATH
    - CASHBOOK_DELETE_SOURCE (true/false)
    - CASHBOOK_HTTP_TIMEOUT (seconds)
    - CASHBOOK_HTTP_TOKEN

    Raises:
        ConfigValidationError: If the resulting configuration is invalid
    """
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    else:
        data = {}

    ledger_data = data.get("ledger", {})
    ledger = LedgerConfig(
        db_path=Path(
            os.environ.get("CASHBOOK_DB_PATH", ledger_data.get("db_path", "data/ledger.db"))
        ),
    )

    import_data = data.get("imports", {})
    imports = ImportConfig(
        delimiter=import_data.get("delimiter", ","),
        encoding=import_data.get("encoding", "utf-8-sig"),
        delete_source=_env_bool(
            "CASHBOOK_DELETE_SOURCE", import_data.get("delete_source", True)
        ),
        category_conflict_retries=import_data.get("category_conflict_retries", 3),
    )

    http_data = data.get("http", {})
    timeout = http_data.get("timeout_seconds", 30)
    timeout_env = os.environ.get("CASHBOOK_HTTP_TIMEOUT", "")
    if timeout_env:
        try:
            timeout = int(timeout_env)
        except ValueError:
            pass  # Keep file/default value

    http = HttpSourceConfig(
        timeout_seconds=timeout,
        max_retries=http_data.get("max_retries", 3),
        backoff_factor=http_data.get("backoff_factor", 0.5),
        token=os.environ.get("CASHBOOK_HTTP_TOKEN", http_data.get("token", "")),
    )

    config = Config(ledger=ledger, imports=imports, http=http)

    errors = config.validate()
    if errors:
        raise ConfigValidationError("; ".join(errors))

    return config


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file."""
    default_config = """# cashbook configuration

ledger:
  db_path: "data/ledger.db"        # SQLite ledger database

# Bulk import (title,type,value,category; first line is a header)
imports:
  delimiter: ","
  encoding: "utf-8-sig"            # Tolerates a BOM from spreadsheet exports
  delete_source: true              # Remove the imported file afterwards
  category_conflict_retries: 3     # Retries when a concurrent import creates the same category

# Importing from a URL
http:
  timeout_seconds: 30
  max_retries: 3
  backoff_factor: 0.5
  token: ""                        # Bearer token for protected URLs (or CASHBOOK_HTTP_TOKEN)
"""

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        f.write(default_config)
