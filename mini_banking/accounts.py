"""
Account Module

A named balance held in Cents. Deposits and withdrawals are checked against
overflow and overdraft; a failed operation leaves the balance untouched.
"""

from dataclasses import dataclass, field
import re
from typing import Any, Dict

from .currency import Cents
from .errors import EmptyAccountName, StorageError

_MINOR_UNITS = re.compile(r"[0-9]+")


def _minor_units(raw: Any) -> int:
    """Read a stored balance: a plain int or a string of ASCII digits only"""
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and _MINOR_UNITS.fullmatch(raw):
        return int(raw)
    raise ValueError(f"balance must be whole minor units, got {raw!r}")


@dataclass
class Account:
    """
    Bank account identified by a unique, non-empty name
    """
    name: str
    balance: Cents = field(default_factory=Cents.zero)

    def __post_init__(self):
        if len(self.name) < 1:
            raise EmptyAccountName()
        if not isinstance(self.balance, Cents):
            raise TypeError("Account balance must be Cents")

    def deposit(self, amount: Cents) -> Cents:
        """
        Add amount to the balance

        Returns:
            The new balance

        Raises:
            BalanceOverflow: If the balance would exceed the maximum
        """
        self.balance = self.balance.add(amount, name=self.name)
        return self.balance

    def withdraw(self, amount: Cents) -> Cents:
        """
        Remove amount from the balance

        Returns:
            The new balance

        Raises:
            AccountOverdraft: If the balance would go negative
        """
        self.balance = self.balance.subtract(amount, name=self.name)
        return self.balance

    def copy(self) -> 'Account':
        return Account(self.name, self.balance)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a storage record, balance as integer minor units"""
        return {"name": self.name, "balance": self.balance.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Account':
        """Create instance from a storage record"""
        name = data.get("name")
        if not isinstance(name, str):
            raise StorageError(f"Account record has no name: {data!r}")
        try:
            balance = Cents(_minor_units(data["balance"]))
        except KeyError as e:
            raise StorageError(f"Account record missing field {e}") from e
        except (TypeError, ValueError) as e:
            raise StorageError(f"Invalid balance in account record {data!r}: {e}") from e
        return cls(name=name, balance=balance)

    def __str__(self) -> str:
        return f"name: {self.name}\tbalance: {self.balance.display()}"
