"""
Storage Backend Module

Provides the abstract storage interface for the ordered account list and
implementations for in-memory (testing), CSV (default) and SQLite
persistence. Balances are stored as integer minor units; records are loaded
and saved wholesale, in ledger order.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Union
from pathlib import Path
import csv
import json
import sqlite3
import threading

from .accounts import Account
from .config import BankingConfig
from .errors import StorageError
from .ledger import Ledger


CSV_FIELDS = ["name", "balance"]


class StorageInterface(ABC):
    """Abstract interface for account storage backends"""

    @abstractmethod
    def load_records(self) -> List[Dict[str, Any]]:
        """Load all account records in stored order"""
        pass

    @abstractmethod
    def save_records(self, records: List[Dict[str, Any]]) -> None:
        """Replace all stored records with the given ones"""
        pass

    def close(self) -> None:
        """Close storage connection (default no-op)"""
        pass

    def load_accounts(self) -> List[Account]:
        return [Account.from_dict(record) for record in self.load_records()]

    def save_accounts(self, accounts: List[Account]) -> None:
        self.save_records([account.to_dict() for account in accounts])

    def load_ledger(self) -> Ledger:
        """
        Load the ledger, failing fast on invalid contents

        Raises:
            StorageError: If a record is malformed
            EmptyAccountName: If a stored account has no name
            DuplicateAccountName: If two stored accounts share a name
        """
        return Ledger(self.load_accounts())

    def save_ledger(self, ledger: Ledger) -> None:
        self.save_accounts(ledger.accounts())


class InMemoryStorage(StorageInterface):
    """In-memory storage implementation for testing"""

    def __init__(self):
        self._records: List[Dict[str, Any]] = []
        self._lock = threading.RLock()

    def load_records(self) -> List[Dict[str, Any]]:
        with self._lock:
            # Deep copy to prevent external mutation
            return json.loads(json.dumps(self._records))

    def save_records(self, records: List[Dict[str, Any]]) -> None:
        with self._lock:
            self._records = json.loads(json.dumps(records))


class CSVStorage(StorageInterface):
    """CSV file storage, one ``name,balance`` row per account"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load_records(self) -> List[Dict[str, Any]]:
        """Read all rows; a missing file is created empty"""
        if not self.path.exists():
            self.path.touch()
            return []

        try:
            with self.path.open(newline="", encoding="utf-8") as f:
                reader = csv.DictReader(f)
                if reader.fieldnames is None:
                    return []
                if reader.fieldnames != CSV_FIELDS:
                    raise StorageError(
                        f"{self.path}: expected header {','.join(CSV_FIELDS)}, "
                        f"got {','.join(reader.fieldnames)}"
                    )
                records = []
                for row in reader:
                    if None in row or None in row.values():
                        raise StorageError(f"{self.path}:{reader.line_num}: wrong number of fields")
                    records.append({"name": row["name"], "balance": row["balance"]})
                return records
        except csv.Error as e:
            raise StorageError(f"{self.path}: {e}") from e

    def save_records(self, records: List[Dict[str, Any]]) -> None:
        try:
            with self.path.open("w", newline="", encoding="utf-8") as f:
                writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
                writer.writeheader()
                for record in records:
                    writer.writerow({"name": record["name"], "balance": record["balance"]})
        except OSError as e:
            raise StorageError(f"{self.path}: {e}") from e


class SQLiteStorage(StorageInterface):
    """SQLite storage implementation for persistence"""

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self.db_path = str(db_path)
        self._connection = sqlite3.connect(self.db_path, check_same_thread=False)
        self._connection.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._ensure_table()

    def _ensure_table(self) -> None:
        # Balance is TEXT: SQLite integers are signed 64-bit and cannot hold every balance
        with self._lock:
            self._connection.execute("""
                CREATE TABLE IF NOT EXISTS accounts (
                    position INTEGER PRIMARY KEY,
                    name TEXT NOT NULL,
                    balance TEXT NOT NULL
                )
            """)
            self._connection.commit()

    def load_records(self) -> List[Dict[str, Any]]:
        with self._lock:
            cursor = self._connection.execute(
                "SELECT name, balance FROM accounts ORDER BY position"
            )
            return [{"name": row["name"], "balance": row["balance"]} for row in cursor.fetchall()]

    def save_records(self, records: List[Dict[str, Any]]) -> None:
        """Replace the whole table in a single transaction"""
        with self._lock:
            try:
                with self._connection:
                    self._connection.execute("DELETE FROM accounts")
                    self._connection.executemany(
                        "INSERT INTO accounts (position, name, balance) VALUES (?, ?, ?)",
                        [
                            (position, record["name"], str(record["balance"]))
                            for position, record in enumerate(records)
                        ]
                    )
            except sqlite3.Error as e:
                raise StorageError(f"{self.db_path}: {e}") from e

    def close(self) -> None:
        """Close SQLite connection"""
        with self._lock:
            if self._connection:
                self._connection.close()
                self._connection = None


def create_storage(config: BankingConfig) -> StorageInterface:
    """Select the storage backend named in configuration"""
    backend = config.storage_backend.lower()
    if backend == "csv":
        return CSVStorage(config.data_file)
    if backend == "sqlite":
        return SQLiteStorage(config.database_path)
    if backend == "memory":
        return InMemoryStorage()
    raise StorageError(f"Unknown storage backend: {config.storage_backend}")
