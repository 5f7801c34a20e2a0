"""
Ledger Engine

Owns the ordered collection of uniquely-named accounts and applies create,
deposit, withdraw and transfer operations against it. Every operation either
completes or raises a BankingError with the ledger left exactly as it was.

Transfers touch two accounts. The withdrawal is first trial-applied to a
snapshot of the source account, then the deposit is applied for real, and
only once both legs are known to succeed is the withdrawal committed.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional

from .accounts import Account
from .currency import Cents
from .errors import (
    AccountNotFound, AccountOverdraft, BankingError, DuplicateAccountName,
    EmptyAccountName, LedgerConsistencyError
)
from .logging_config import get_logger, log_action


@dataclass(frozen=True)
class TransferResult:
    """Balances of both accounts after a completed transfer"""
    from_name: str
    from_balance: Cents
    to_name: str
    to_balance: Cents
    amount: Cents


class Ledger:
    """
    Ordered, uniquely-named set of accounts with transactional operations

    Callers own the ledger and must serialize access to it; no operation
    yields part way through.
    """

    def __init__(self, accounts: Optional[Iterable[Account]] = None):
        """
        Build a ledger from existing accounts, preserving their order.

        Raises:
            EmptyAccountName: If any account has an empty name
            DuplicateAccountName: If two accounts share a name
        """
        self._accounts: List[Account] = []
        self.logger = get_logger("mini_banking.ledger")

        for account in accounts or []:
            if len(account.name) < 1:
                raise EmptyAccountName()
            if self.account_exists(account.name):
                raise DuplicateAccountName(account.name)
            self._accounts.append(account.copy())

    @contextmanager
    def _operation(self, action: str, resource: str):
        """Log and re-raise any banking error raised by the wrapped operation"""
        try:
            yield
        except BankingError as e:
            log_action(
                self.logger, "warning", f"{action} rejected: {e}",
                action=action, resource=resource,
                extra={"error": type(e).__name__}
            )
            raise

    def _find(self, name: str) -> Optional[Account]:
        for account in self._accounts:
            if account.name == name:
                return account
        return None

    def _get_account(self, name: str) -> Account:
        account = self._find(name)
        if account is None:
            raise AccountNotFound(name)
        return account

    def account_exists(self, name: str) -> bool:
        return self._find(name) is not None

    def get_account(self, name: str) -> Account:
        """
        Get a copy of an account

        Raises:
            AccountNotFound: If no account has this name
        """
        return self._get_account(name).copy()

    def balance(self, name: str) -> Cents:
        return self._get_account(name).balance

    def accounts(self) -> List[Account]:
        """Copies of all accounts in insertion order"""
        return [account.copy() for account in self._accounts]

    def total_balance(self) -> int:
        """Sum of all balances in minor units (may exceed a single balance's range)"""
        return sum(account.balance.value for account in self._accounts)

    def create(self, name: str, amount_text: str) -> Account:
        """
        Create a new account at the end of the ledger

        Args:
            name: Unique, non-empty account name
            amount_text: Initial balance as decimal text

        Returns:
            Copy of the created account

        Raises:
            EmptyAccountName: If name is empty
            DuplicateAccountName: If name is taken (checked before the amount)
            InvalidAmount: If amount_text is malformed
            AmountOverflow: If amount_text is out of range
        """
        with self._operation("create", name):
            if len(name) < 1:
                raise EmptyAccountName()
            if self.account_exists(name):
                raise DuplicateAccountName(name)

            account = Account(name, Cents.parse(amount_text))
            self._accounts.append(account)

        log_action(
            self.logger, "info",
            f"Account created with name {account.name} and balance {account.balance}",
            action="create", resource=account.name,
            extra={"balance": account.balance.value}
        )
        return account.copy()

    def deposit(self, name: str, amount_text: str) -> Cents:
        """
        Deposit into an existing account

        Returns:
            The new balance

        Raises:
            AccountNotFound: If the account does not exist
            InvalidAmount: If amount_text is malformed
            AmountOverflow: If amount_text is out of range
            BalanceOverflow: If the balance would exceed the maximum
        """
        with self._operation("deposit", name):
            account = self._get_account(name)
            new_balance = account.deposit(Cents.parse(amount_text))

        log_action(
            self.logger, "info", f"Account balance is now {new_balance}",
            action="deposit", resource=name,
            extra={"balance": new_balance.value}
        )
        return new_balance

    def withdraw(self, name: str, amount_text: str) -> Cents:
        """
        Withdraw from an existing account

        Returns:
            The new balance

        Raises:
            AccountNotFound: If the account does not exist
            InvalidAmount: If amount_text is malformed
            AmountOverflow: If amount_text is out of range
            AccountOverdraft: If the balance would go negative
        """
        with self._operation("withdraw", name):
            account = self._get_account(name)
            new_balance = account.withdraw(Cents.parse(amount_text))

        log_action(
            self.logger, "info", f"Account balance is now {new_balance}",
            action="withdraw", resource=name,
            extra={"balance": new_balance.value}
        )
        return new_balance

    def transfer(self, from_name: str, to_name: str, amount_text: str) -> TransferResult:
        """
        Move an amount from one account to another as a single unit

        Args:
            from_name: Account to withdraw from (checked first)
            to_name: Account to deposit into
            amount_text: Amount as decimal text, applied to both legs

        Returns:
            Both balances after the transfer

        Raises:
            AccountNotFound: If either account does not exist
            InvalidAmount: If amount_text is malformed
            AmountOverflow: If amount_text is out of range
            AccountOverdraft: If the source cannot cover the amount
            BalanceOverflow: If the destination would exceed the maximum
        """
        with self._operation("transfer", from_name):
            from_account = self._get_account(from_name)
            to_account = self._get_account(to_name)
            amount = Cents.parse(amount_text)

            # Trial withdrawal against a snapshot, nothing is mutated yet
            from_account.copy().withdraw(amount)

            # Real deposit; on overflow the destination is left unchanged
            to_account.deposit(amount)

        try:
            from_account.withdraw(amount)
        except AccountOverdraft as e:
            self.logger.critical(
                "Transfer commit failed after successful trial withdrawal from %s",
                from_name
            )
            raise LedgerConsistencyError(
                f"transfer withdrawal from {from_name} failed after trial succeeded"
            ) from e

        result = TransferResult(
            from_name=from_account.name,
            from_balance=from_account.balance,
            to_name=to_account.name,
            to_balance=to_account.balance,
            amount=amount,
        )
        log_action(
            self.logger, "info",
            f"{from_name} balance is now {result.from_balance}, "
            f"{to_name} balance is now {result.to_balance}",
            action="transfer", resource=from_name,
            extra={"to": to_name, "amount": amount.value}
        )
        return result

    def __len__(self) -> int:
        return len(self._accounts)

    def __iter__(self) -> Iterator[Account]:
        return iter(self.accounts())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.account_exists(name)
