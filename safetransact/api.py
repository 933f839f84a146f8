"""
SafeTransact HTTP API

Thin FastAPI surface over the registry and transfer orchestrator. It adds no
ledger semantics: every route calls one core operation and maps its error
kind to an HTTP status.
"""

from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Depends, Request

from .accounts import AccountKind
from .errors import BankingError, ErrorKind, UnsupportedOperation
from .registry import BankRegistry
from .transfers import TransferOrchestrator
from .seed import build_demo_registry
from .schemas import (
    LoginRequest, AmountRequest, TransferRequest, CustomerResponse,
    AccountResponse, LedgerResponse, TransferResponse
)
from .config import get_config
from .logging_config import setup_logging
from . import __version__


ERROR_STATUS = {
    ErrorKind.INVALID_AMOUNT: 400,
    ErrorKind.INVALID_TRANSFER: 400,
    ErrorKind.INSUFFICIENT_FUNDS: 422,
    ErrorKind.OVERDRAFT_EXCEEDED: 422,
    ErrorKind.UNSUPPORTED_OPERATION: 409,
    ErrorKind.ACCOUNT_NOT_FOUND: 404,
    ErrorKind.AUTHENTICATION_FAILURE: 401,
    ErrorKind.DUPLICATE_ACCOUNT: 409,
}


def to_http_error(error: BankingError) -> HTTPException:
    return HTTPException(
        status_code=ERROR_STATUS[error.kind],
        detail={"error": error.kind.value, "message": error.message}
    )


def get_registry(request: Request) -> BankRegistry:
    return request.app.state.registry


def get_orchestrator(request: Request) -> TransferOrchestrator:
    return request.app.state.orchestrator


def create_app(registry: Optional[BankRegistry] = None) -> FastAPI:
    """Create the API application around a registry (the demo bank by default)"""
    app = FastAPI(
        title="SafeTransact Ledger API",
        description="Accounts, ledgers and transfers for the SafeTransact bank",
        version=__version__
    )
    app.state.registry = registry or build_demo_registry()
    app.state.orchestrator = TransferOrchestrator(app.state.registry)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": "safetransact", "version": __version__}

    @app.post("/auth/login", response_model=CustomerResponse)
    def login(request: LoginRequest, registry: BankRegistry = Depends(get_registry)):
        """Authenticate a customer"""
        try:
            customer = registry.authenticate(request.username, request.password)
        except BankingError as e:
            raise to_http_error(e)
        return customer.to_dict()

    @app.get("/accounts/{account_number}", response_model=AccountResponse)
    def get_account(account_number: str, registry: BankRegistry = Depends(get_registry)):
        """Get account summary"""
        try:
            return registry.get_account(account_number).to_dict()
        except BankingError as e:
            raise to_http_error(e)

    @app.get("/accounts/{account_number}/ledger", response_model=LedgerResponse)
    def get_ledger(account_number: str, registry: BankRegistry = Depends(get_registry)):
        """Get ledger history in chronological order"""
        try:
            account = registry.get_account(account_number)
        except BankingError as e:
            raise to_http_error(e)
        return {
            "account_number": account.account_number,
            "entries": [entry.to_dict() for entry in account.ledger_history()]
        }

    @app.post("/accounts/{account_number}/deposit", response_model=AccountResponse)
    def deposit(account_number: str, request: AmountRequest,
                registry: BankRegistry = Depends(get_registry)):
        """Deposit into an account (repayment for loans)"""
        try:
            account = registry.get_account(account_number)
            account.deposit(request.amount)
        except BankingError as e:
            raise to_http_error(e)
        return account.to_dict()

    @app.post("/accounts/{account_number}/withdraw", response_model=AccountResponse)
    def withdraw(account_number: str, request: AmountRequest,
                 registry: BankRegistry = Depends(get_registry)):
        """Withdraw under the account kind's policy"""
        try:
            account = registry.get_account(account_number)
            account.withdraw(request.amount)
        except BankingError as e:
            raise to_http_error(e)
        return account.to_dict()

    @app.post("/accounts/{account_number}/interest", response_model=AccountResponse)
    def apply_interest(account_number: str, registry: BankRegistry = Depends(get_registry)):
        """Apply flat-rate interest to a savings account"""
        try:
            account = registry.get_account(account_number)
            if account.kind is not AccountKind.SAVINGS:
                raise UnsupportedOperation("Interest applies to savings accounts only.")
            account.apply_interest()
        except BankingError as e:
            raise to_http_error(e)
        return account.to_dict()

    @app.post("/accounts/{account_number}/loan-payment", response_model=AccountResponse)
    def process_loan_payment(account_number: str, registry: BankRegistry = Depends(get_registry)):
        """Accrue interest and charge the monthly payment on a loan"""
        try:
            account = registry.get_account(account_number)
            if account.kind is not AccountKind.LOAN:
                raise UnsupportedOperation("Monthly payments apply to loan accounts only.")
            account.process_monthly_payment()
        except BankingError as e:
            raise to_http_error(e)
        return account.to_dict()

    @app.post("/transfers", response_model=TransferResponse)
    def transfer(request: TransferRequest,
                 orchestrator: TransferOrchestrator = Depends(get_orchestrator)):
        """Transfer funds between two accounts"""
        try:
            result = orchestrator.transfer(request.from_account, request.to_account, request.amount)
        except BankingError as e:
            raise to_http_error(e)
        return result.to_dict()

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None):
    """Run the API server with the demo bank"""
    config = get_config()
    setup_logging(config.log_level, fmt=config.log_format)
    uvicorn.run(
        create_app(),
        host=host or config.api_host,
        port=port or config.api_port,
        log_level=config.log_level.lower()
    )


if __name__ == "__main__":
    run_server()
