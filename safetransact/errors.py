"""
Banking error taxonomy.

Every account, registry and transfer operation fails with one of these
specific errors so callers can react by kind (retry with a smaller amount,
ask for another account number, re-prompt for credentials). All of them are
recoverable.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Kinds of banking failures"""
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    OVERDRAFT_EXCEEDED = "overdraft_exceeded"
    UNSUPPORTED_OPERATION = "unsupported_operation"
    ACCOUNT_NOT_FOUND = "account_not_found"
    AUTHENTICATION_FAILURE = "authentication_failure"
    INVALID_TRANSFER = "invalid_transfer"
    DUPLICATE_ACCOUNT = "duplicate_account"


class BankingError(Exception):
    """Base class for all ledger failures"""
    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidAmount(BankingError):
    """Non-positive amount supplied to deposit, withdraw or transfer"""
    kind = ErrorKind.INVALID_AMOUNT


class InsufficientFunds(BankingError):
    """Savings withdrawal exceeds the balance"""
    kind = ErrorKind.INSUFFICIENT_FUNDS


class OverdraftExceeded(BankingError):
    """Checking withdrawal exceeds balance plus overdraft limit"""
    kind = ErrorKind.OVERDRAFT_EXCEEDED


class UnsupportedOperation(BankingError):
    """Operation not offered by this account kind"""
    kind = ErrorKind.UNSUPPORTED_OPERATION


class AccountNotFound(BankingError):
    kind = ErrorKind.ACCOUNT_NOT_FOUND

    def __init__(self, account_number: str, message: Optional[str] = None):
        super().__init__(message or f"Account {account_number} not found")
        self.account_number = account_number


class AuthenticationFailure(BankingError):
    kind = ErrorKind.AUTHENTICATION_FAILURE


class InvalidTransfer(BankingError):
    """Transfer request that can never succeed, e.g. source equals destination"""
    kind = ErrorKind.INVALID_TRANSFER


class DuplicateAccount(BankingError):
    kind = ErrorKind.DUPLICATE_ACCOUNT

    def __init__(self, account_number: str):
        super().__init__(f"Account number {account_number} is already registered")
        self.account_number = account_number
