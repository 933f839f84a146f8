"""
SafeTransact Core Ledger

Savings, checking and loan accounts with append-only ledgers, a bank registry
and atomic two-account transfers. All amounts are Decimal.
"""

__version__ = "1.0.0"

from .accounts import (
    Account, AccountKind, SavingsAccount, CheckingAccount, LoanAccount
)
from .customers import Customer, Credential
from .errors import (
    BankingError, ErrorKind, InvalidAmount, InsufficientFunds,
    OverdraftExceeded, UnsupportedOperation, AccountNotFound,
    AuthenticationFailure, InvalidTransfer, DuplicateAccount
)
from .ledger import Ledger, LedgerEntry, LedgerEntryKind
from .registry import BankRegistry
from .transfers import TransferOrchestrator, TransferResult
