"""
FastAPI REST API Module

Exposes the ledger operations over HTTP. Amounts are always sent as decimal
text; balances come back both as text and as integer minor units. Each
successful mutation is written through to the configured storage.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional
import threading

from fastapi import FastAPI, HTTPException, Depends, status
from pydantic import BaseModel, Field
import uvicorn

from . import __version__
from .accounts import Account
from .config import get_config
from .currency import Cents
from .errors import (
    AccountNotFound, AccountOverdraft, AmountOverflow, BalanceOverflow,
    BankingError, DuplicateAccountName, EmptyAccountName, InvalidAmount,
    StorageError
)
from .ledger import Ledger
from .logging_config import get_logger
from .storage import StorageInterface, create_storage


# Pydantic models for API requests/responses
class AmountRequest(BaseModel):
    amount: str = Field(..., description="Decimal amount as string, e.g. \"12.50\"")


class CreateAccountRequest(BaseModel):
    name: str
    amount: str = Field(..., description="Initial balance as decimal string")


class TransferRequest(BaseModel):
    from_account: str
    to_account: str
    amount: str = Field(..., description="Decimal amount as string")


class AccountModel(BaseModel):
    name: str
    balance: str = Field(..., description="Balance as decimal string")
    balance_cents: int = Field(..., description="Balance in minor units")

    @classmethod
    def from_account(cls, account: Account) -> 'AccountModel':
        return cls.from_balance(account.name, account.balance)

    @classmethod
    def from_balance(cls, name: str, balance: Cents) -> 'AccountModel':
        return cls(name=name, balance=balance.format(), balance_cents=balance.value)


class TransferResponse(BaseModel):
    from_account: AccountModel
    to_account: AccountModel
    amount: str


ERROR_STATUS: Dict[type, int] = {
    InvalidAmount: status.HTTP_400_BAD_REQUEST,
    AmountOverflow: status.HTTP_400_BAD_REQUEST,
    EmptyAccountName: status.HTTP_400_BAD_REQUEST,
    AccountNotFound: status.HTTP_404_NOT_FOUND,
    DuplicateAccountName: status.HTTP_409_CONFLICT,
    AccountOverdraft: 422,
    BalanceOverflow: 422,
}


def to_http_error(error: BankingError) -> HTTPException:
    """Map a banking error onto an HTTP status with a structured body"""
    return HTTPException(
        status_code=ERROR_STATUS.get(type(error), status.HTTP_400_BAD_REQUEST),
        detail={"error": type(error).__name__, "message": str(error)}
    )


class BankingService:
    """One ledger shared by all requests, persisted after every change"""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.ledger: Ledger = storage.load_ledger()
        self._lock = threading.RLock()
        self.logger = get_logger("mini_banking.api")

    @contextmanager
    def read(self) -> Iterator[Ledger]:
        with self._lock:
            yield self.ledger

    @contextmanager
    def mutate(self) -> Iterator[Ledger]:
        """
        Run one operation under the lock and save only if it succeeded.

        If the save fails the in-memory ledger is put back to its state
        before the operation, so it keeps matching what storage holds.
        """
        with self._lock:
            snapshot = self.ledger.accounts()
            try:
                yield self.ledger
            except BankingError as e:
                raise to_http_error(e) from e
            try:
                self.storage.save_ledger(self.ledger)
            except StorageError as e:
                self.logger.error("Ledger save failed, operation rolled back: %s", e)
                self.ledger = Ledger(snapshot)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail={"error": type(e).__name__, "message": str(e)}
                ) from e
            self.logger.debug("Ledger saved with %d accounts", len(self.ledger))


# Global banking service, created on first use
banking_service: Optional[BankingService] = None


def get_banking_service() -> BankingService:
    global banking_service
    if banking_service is None:
        banking_service = BankingService(create_storage(get_config()))
    return banking_service


app = FastAPI(
    title="Mini Banking API",
    description="Named accounts with exact cent arithmetic and atomic transfers",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/accounts", response_model=List[AccountModel])
async def list_accounts(service: BankingService = Depends(get_banking_service)):
    """List all accounts in creation order"""
    with service.read() as ledger:
        return [AccountModel.from_account(account) for account in ledger.accounts()]


@app.get("/accounts/{name}", response_model=AccountModel)
async def get_account(name: str, service: BankingService = Depends(get_banking_service)):
    """Get a single account"""
    with service.read() as ledger:
        try:
            account = ledger.get_account(name)
        except AccountNotFound as e:
            raise to_http_error(e) from e
    return AccountModel.from_account(account)


@app.post("/accounts", status_code=status.HTTP_201_CREATED, response_model=AccountModel)
async def create_account(
    request: CreateAccountRequest,
    service: BankingService = Depends(get_banking_service)
):
    """Create a new account"""
    with service.mutate() as ledger:
        account = ledger.create(request.name, request.amount)
    return AccountModel.from_account(account)


@app.post("/accounts/{name}/deposit", response_model=AccountModel)
async def deposit(
    name: str,
    request: AmountRequest,
    service: BankingService = Depends(get_banking_service)
):
    """Deposit into an account"""
    with service.mutate() as ledger:
        balance = ledger.deposit(name, request.amount)
    return AccountModel.from_balance(name, balance)


@app.post("/accounts/{name}/withdraw", response_model=AccountModel)
async def withdraw(
    name: str,
    request: AmountRequest,
    service: BankingService = Depends(get_banking_service)
):
    """Withdraw from an account"""
    with service.mutate() as ledger:
        balance = ledger.withdraw(name, request.amount)
    return AccountModel.from_balance(name, balance)


@app.post("/transfers", response_model=TransferResponse)
async def transfer(
    request: TransferRequest,
    service: BankingService = Depends(get_banking_service)
):
    """Transfer between two accounts; either both legs apply or neither does"""
    with service.mutate() as ledger:
        result = ledger.transfer(request.from_account, request.to_account, request.amount)
    return TransferResponse(
        from_account=AccountModel.from_balance(result.from_name, result.from_balance),
        to_account=AccountModel.from_balance(result.to_name, result.to_balance),
        amount=result.amount.format()
    )


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """Run the FastAPI server"""
    config = get_config()
    uvicorn.run(
        "mini_banking.api:app",
        host=host or config.api_host,
        port=port or config.api_port,
        reload=debug,
        log_level="info"
    )
