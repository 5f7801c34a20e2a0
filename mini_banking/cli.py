"""
Command line interface for the ledger.

Every invocation loads the ledger from storage, runs exactly one command and
writes the ledger back only when the command succeeded.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

import typer
from typing_extensions import Annotated

from . import __version__
from .config import BankingConfig, get_config
from .errors import BankingError, StorageError
from .ledger import Ledger
from .logging_config import setup_logging
from .storage import create_storage

app = typer.Typer(no_args_is_help=True, help="Manage named accounts and move money between them.")

NameOption = Annotated[str, typer.Option("--name", "-n", help="Account name")]
AmountOption = Annotated[str, typer.Option("--amount", "-a", help="Amount, e.g. 20 or 12.50")]


def version_callback(value: bool):
    if value:
        typer.echo(f"mini-banking {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version information", callback=version_callback, is_eager=True),
    ] = False,
    data_file: Annotated[
        Optional[str], typer.Option("--data-file", help="CSV file holding the accounts")
    ] = None,
):
    """
    Mini banking CLI
    """
    config = get_config()
    if data_file:
        config = config.model_copy(update={"data_file": data_file, "storage_backend": "csv"})
    setup_logging(config.log_level, fmt=config.log_format)
    ctx.obj = config


def _fail(exc: Exception):
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


@contextmanager
def _ledger_session(config: BankingConfig, save: bool = True) -> Iterator[Ledger]:
    try:
        storage = create_storage(config)
    except StorageError as exc:
        _fail(exc)
    try:
        ledger = storage.load_ledger()
        yield ledger
        if save:
            storage.save_ledger(ledger)
    except (BankingError, StorageError) as exc:
        _fail(exc)
    finally:
        storage.close()


@app.command()
def show(ctx: typer.Context):
    """Show all accounts"""
    config: BankingConfig = ctx.obj
    with _ledger_session(config, save=False) as ledger:
        for account in ledger.accounts():
            typer.echo(f"name: {account.name}\tbalance: {account.balance.display(config.currency_symbol)}")


@app.command()
def create(ctx: typer.Context, name: NameOption, amount: AmountOption):
    """Create account"""
    config: BankingConfig = ctx.obj
    with _ledger_session(config) as ledger:
        account = ledger.create(name, amount)
        typer.echo(
            f"Account created with name {account.name} and balance "
            f"{account.balance.display(config.currency_symbol)}"
        )


@app.command()
def deposit(ctx: typer.Context, name: NameOption, amount: AmountOption):
    """Deposit amount to account"""
    config: BankingConfig = ctx.obj
    with _ledger_session(config) as ledger:
        balance = ledger.deposit(name, amount)
        typer.echo(f"Account balance is now {balance.display(config.currency_symbol)}")


@app.command()
def withdraw(ctx: typer.Context, name: NameOption, amount: AmountOption):
    """Withdraw amount from account"""
    config: BankingConfig = ctx.obj
    with _ledger_session(config) as ledger:
        balance = ledger.withdraw(name, amount)
        typer.echo(f"Account balance is now {balance.display(config.currency_symbol)}")


@app.command()
def transfer(
    ctx: typer.Context,
    from_name: Annotated[str, typer.Option("--from", "-f", help="Account to withdraw from")],
    to_name: Annotated[str, typer.Option("--to", "-t", help="Account to deposit into")],
    amount: AmountOption,
):
    """Transfer amount between accounts"""
    config: BankingConfig = ctx.obj
    symbol = config.currency_symbol
    with _ledger_session(config) as ledger:
        result = ledger.transfer(from_name, to_name, amount)
        typer.echo(
            f"{result.from_name} balance is now {result.from_balance.display(symbol)}, "
            f"{result.to_name} balance is now {result.to_balance.display(symbol)}"
        )


if __name__ == "__main__":
    app()
