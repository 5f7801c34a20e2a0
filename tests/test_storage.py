"""
Tests for account storage backends
"""

import pytest

from mini_banking.accounts import Account
from mini_banking.config import BankingConfig
from mini_banking.currency import Cents, MAX_CENTS
from mini_banking.errors import DuplicateAccountName, EmptyAccountName, StorageError
from mini_banking.ledger import Ledger
from mini_banking.storage import (
    CSVStorage, InMemoryStorage, SQLiteStorage, create_storage
)


def sample_ledger() -> Ledger:
    return Ledger([
        Account("zed", Cents(5)),
        Account("alice", Cents(MAX_CENTS)),
        Account("bob", Cents(0)),
    ])


@pytest.fixture(params=["memory", "csv", "sqlite"])
def storage(request, tmp_path):
    if request.param == "memory":
        backend = InMemoryStorage()
    elif request.param == "csv":
        backend = CSVStorage(tmp_path / "accounts.csv")
    else:
        backend = SQLiteStorage(tmp_path / "accounts.db")
    yield backend
    backend.close()


class TestStorageBackends:
    """Behaviour shared by every backend"""

    def test_empty_storage_loads_empty_ledger(self, storage):
        assert len(storage.load_ledger()) == 0

    def test_round_trip_preserves_order_and_balances(self, storage):
        ledger = sample_ledger()
        storage.save_ledger(ledger)

        loaded = storage.load_ledger()
        assert loaded.accounts() == ledger.accounts()

    def test_save_replaces_previous_contents(self, storage):
        storage.save_ledger(sample_ledger())
        storage.save_ledger(Ledger([Account("only", Cents(42))]))

        assert storage.load_accounts() == [Account("only", Cents(42))]

    def test_loading_duplicates_fails_fast(self, storage):
        storage.save_records([
            {"name": "a", "balance": 1},
            {"name": "a", "balance": 2},
        ])
        with pytest.raises(DuplicateAccountName):
            storage.load_ledger()

    def test_loading_empty_name_fails_fast(self, storage):
        storage.save_records([{"name": "", "balance": 1}])
        with pytest.raises(EmptyAccountName):
            storage.load_ledger()


class TestInMemoryStorage:

    def test_records_are_copied(self):
        storage = InMemoryStorage()
        records = [{"name": "a", "balance": 1}]
        storage.save_records(records)
        records[0]["balance"] = 99

        assert storage.load_records() == [{"name": "a", "balance": 1}]


class TestCSVStorage:
    """CSV file format"""

    def test_missing_file_is_created(self, tmp_path):
        path = tmp_path / "banking_system.csv"
        storage = CSVStorage(path)

        assert storage.load_accounts() == []
        assert path.exists()

    def test_file_format(self, tmp_path):
        path = tmp_path / "accounts.csv"
        CSVStorage(path).save_ledger(Ledger([Account("alice", Cents(4000)), Account("bob", Cents(7))]))

        assert path.read_text().splitlines() == ["name,balance", "alice,4000", "bob,7"]

    def test_names_with_commas_survive(self, tmp_path):
        storage = CSVStorage(tmp_path / "accounts.csv")
        storage.save_ledger(Ledger([Account("Doe, Jane", Cents(1))]))

        assert storage.load_accounts() == [Account("Doe, Jane", Cents(1))]

    @pytest.mark.parametrize("content", [
        "id,amount\nalice,1\n",
        "name,balance\nalice\n",
        "name,balance\nalice,1,extra\n",
        "name,balance\nalice,lots\n",
        "name,balance\nalice,-1\n",
        "name,balance\nalice,+5\n",
        "name,balance\nalice,1_000\n",
    ])
    def test_malformed_file(self, tmp_path, content):
        path = tmp_path / "accounts.csv"
        path.write_text(content)

        with pytest.raises(StorageError):
            CSVStorage(path).load_ledger()

    def test_write_failure_is_storage_error(self, tmp_path):
        """A path that cannot be written is reported, not raised as OSError"""
        storage = CSVStorage(tmp_path)

        with pytest.raises(StorageError):
            storage.save_ledger(sample_ledger())


class TestSQLiteStorage:

    def test_balances_beyond_signed_range(self, tmp_path):
        """Balances above 2**63 - 1 survive a round trip"""
        storage = SQLiteStorage(tmp_path / "accounts.db")
        storage.save_ledger(Ledger([Account("rich", Cents(MAX_CENTS))]))
        storage.close()

        reopened = SQLiteStorage(tmp_path / "accounts.db")
        assert reopened.load_ledger().balance("rich") == Cents(MAX_CENTS)
        reopened.close()


class TestCreateStorage:

    def test_backend_selection(self, tmp_path):
        csv_config = BankingConfig(storage_backend="csv", data_file=str(tmp_path / "a.csv"))
        sqlite_config = BankingConfig(storage_backend="sqlite", database_path=str(tmp_path / "a.db"))

        assert isinstance(create_storage(csv_config), CSVStorage)
        sqlite_storage = create_storage(sqlite_config)
        assert isinstance(sqlite_storage, SQLiteStorage)
        sqlite_storage.close()
        assert isinstance(create_storage(BankingConfig(storage_backend="memory")), InMemoryStorage)

    def test_unknown_backend(self):
        with pytest.raises(StorageError, match="Unknown storage backend"):
            create_storage(BankingConfig(storage_backend="tape"))
