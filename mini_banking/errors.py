"""
Banking Error Taxonomy

Domain-specific errors raised by currency parsing, accounts and the ledger.
Every error carries the contextual fields needed to render a precise message,
and compares equal to another error of the same kind with the same fields.
"""

from typing import Any, Tuple


class BankingError(Exception):
    """Base class for all user-facing banking errors"""

    def _fields(self) -> Tuple[Any, ...]:
        return ()

    def __eq__(self, other) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self._fields() == other._fields()

    def __hash__(self) -> int:
        return hash((type(self).__name__,) + self._fields())

    def __repr__(self) -> str:
        args = ", ".join(repr(value) for value in self._fields())
        return f"{type(self).__name__}({args})"


class InvalidAmount(BankingError):
    """Amount text does not match the decimal grammar"""

    def __init__(self, text: str):
        self.text = text
        super().__init__(
            f"invalid amount {text!r}, must be a non-negative number only "
            f"containing digits up to two decimal places"
        )

    def _fields(self):
        return (self.text,)


class AmountOverflow(BankingError):
    """Amount text is well formed but exceeds the representable range"""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"amount {text} would overflow")

    def _fields(self):
        return (self.text,)


class EmptyAccountName(BankingError):
    """Account name has zero length"""

    def __init__(self):
        super().__init__("account name cannot be empty")


class DuplicateAccountName(BankingError):
    """An account with the same name already exists"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"account with name {name} already exists")

    def _fields(self):
        return (self.name,)


class AccountNotFound(BankingError):
    """No account with the given name exists"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"account with name {name} not found")

    def _fields(self):
        return (self.name,)


class BalanceOverflow(BankingError):
    """
    Deposit would push a balance past the representable maximum.

    Raised without a name by raw currency arithmetic; the account layer
    re-raises it with the account name filled in.
    """

    def __init__(self, name: str, deposit_amount):
        self.name = name
        self.deposit_amount = deposit_amount
        super().__init__(
            f"account {name} would have balance overflow if "
            f"{deposit_amount} was deposited"
        )

    def _fields(self):
        return (self.name, self.deposit_amount)


class AccountOverdraft(BankingError):
    """Withdrawal would take a balance below zero"""

    def __init__(self, name: str, balance, withdraw_amount):
        self.name = name
        self.balance = balance
        self.withdraw_amount = withdraw_amount
        super().__init__(
            f"account {name} would overdraft if {withdraw_amount} "
            f"was withdrawn from balance {balance}"
        )

    def _fields(self):
        return (self.name, self.balance, self.withdraw_amount)


class LedgerConsistencyError(RuntimeError):
    """Internal invariant violated while committing a transfer"""


class StorageError(Exception):
    """Persisted account records could not be read or written"""
