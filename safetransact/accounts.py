"""
Account Module

Savings, checking and loan accounts. Each account owns its balance and its
ledger; every successful mutation appends exactly one ledger entry, so the
balance always equals the opening balance plus the signed ledger total.

Withdrawal policy is looked up per account kind in WITHDRAWAL_POLICIES rather
than computed by one shared formula.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Type
from enum import Enum
import threading

from .money import AmountLike, ZERO, to_amount, to_rate, format_amount
from .errors import (
    BankingError, InvalidAmount, InsufficientFunds, OverdraftExceeded,
    UnsupportedOperation
)
from .ledger import Clock, Ledger, LedgerEntry, LedgerEntryKind
from .config import get_config
from .logging_config import get_logger, log_action


logger = get_logger("safetransact.accounts")


class AccountKind(Enum):
    """Closed set of account kinds"""
    SAVINGS = "savings"
    CHECKING = "checking"
    LOAN = "loan"


@dataclass(frozen=True)
class WithdrawalPolicy:
    """
    Lowest balance a withdrawal may leave behind, and the error raised
    when a withdrawal would go below it
    """
    floor: Callable[['Account'], Decimal]
    error: Type[BankingError]
    reason: str


# None marks a kind that accepts no withdrawals at all
WITHDRAWAL_POLICIES: Dict[AccountKind, Optional[WithdrawalPolicy]] = {
    AccountKind.SAVINGS: WithdrawalPolicy(
        floor=lambda account: ZERO,
        error=InsufficientFunds,
        reason="Insufficient funds"
    ),
    AccountKind.CHECKING: WithdrawalPolicy(
        floor=lambda account: -account.overdraft_limit,
        error=OverdraftExceeded,
        reason="Overdraft limit exceeded"
    ),
    AccountKind.LOAN: None,
}

DEPOSIT_DESCRIPTIONS: Dict[AccountKind, str] = {
    AccountKind.SAVINGS: "Deposit",
    AccountKind.CHECKING: "Deposit",
    AccountKind.LOAN: "Loan Repayment",
}

_CREDIT_KINDS = (LedgerEntryKind.DEPOSIT, LedgerEntryKind.TRANSFER_IN)
_DEBIT_KINDS = (LedgerEntryKind.WITHDRAWAL, LedgerEntryKind.TRANSFER_OUT)


def validate_amount(amount: AmountLike, operation: str) -> Decimal:
    """
    Coerce an amount and require it to be positive

    Raises:
        InvalidAmount: If the amount is not numeric or not positive after
            rounding to cents
    """
    try:
        value = to_amount(amount)
    except ValueError:
        raise InvalidAmount(f"{operation} amount must be numeric, got {amount!r}")

    if value <= ZERO:
        raise InvalidAmount(f"{operation} amount must be positive.")

    return value


class Account(ABC):
    """
    Balance holder with an append-only ledger
    """

    kind: AccountKind

    def __init__(
        self,
        account_number: str,
        holder: str,
        opening_balance: AmountLike = ZERO,
        clock: Optional[Clock] = None
    ):
        if not account_number:
            raise ValueError("Account number is required")

        self.account_number = account_number
        self.holder = holder
        self.opening_balance = to_amount(opening_balance)
        self.balance = self.opening_balance
        self.ledger = Ledger(clock)
        # Guards the balance + ledger pair
        self._lock = threading.RLock()

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def current_balance(self) -> Decimal:
        return self.balance

    def ledger_history(self) -> Tuple[LedgerEntry, ...]:
        """Entries in chronological (append) order"""
        return self.ledger.entries()

    def deposit(
        self,
        amount: AmountLike,
        *,
        entry_kind: LedgerEntryKind = LedgerEntryKind.DEPOSIT,
        description: Optional[str] = None
    ) -> LedgerEntry:
        """
        Credit the account

        Args:
            amount: Positive amount to credit
            entry_kind: DEPOSIT, or TRANSFER_IN for the destination leg of a transfer
            description: Ledger description (defaults per account kind)

        Returns:
            The appended ledger entry

        Raises:
            InvalidAmount: If amount <= 0
        """
        if entry_kind not in _CREDIT_KINDS:
            raise ValueError(f"{entry_kind.value} is not a credit entry kind")

        value = validate_amount(amount, "Deposit")

        with self._lock:
            self.balance += value
            self._on_credit(value)
            entry = self.ledger.record(
                entry_kind, value, description or DEPOSIT_DESCRIPTIONS[self.kind]
            )

        self._log_mutation("deposit", entry)
        return entry

    def withdraw(
        self,
        amount: AmountLike,
        *,
        entry_kind: LedgerEntryKind = LedgerEntryKind.WITHDRAWAL,
        description: Optional[str] = None
    ) -> LedgerEntry:
        """
        Debit the account under its kind's withdrawal policy

        Args:
            amount: Positive amount to debit
            entry_kind: WITHDRAWAL, or TRANSFER_OUT for the source leg of a transfer
            description: Ledger description

        Returns:
            The appended ledger entry

        Raises:
            UnsupportedOperation: If the account kind accepts no withdrawals
            InvalidAmount: If amount <= 0
            InsufficientFunds: Savings withdrawal above the balance
            OverdraftExceeded: Checking withdrawal above balance + overdraft limit
        """
        if entry_kind not in _DEBIT_KINDS:
            raise ValueError(f"{entry_kind.value} is not a debit entry kind")

        policy = WITHDRAWAL_POLICIES[self.kind]
        if policy is None:
            raise UnsupportedOperation(
                f"Withdrawals are not allowed from a {self.kind.value} account."
            )

        value = validate_amount(amount, "Withdrawal")

        with self._lock:
            floor = policy.floor(self)
            if self.balance - value < floor:
                raise policy.error(
                    f"{policy.reason}: available {format_amount(self.balance - floor)}, "
                    f"requested {format_amount(value)}"
                )

            self.balance -= value
            entry = self.ledger.record(entry_kind, value, description or "Withdrawal")

        self._log_mutation("withdraw", entry)
        return entry

    def available_to_withdraw(self) -> Decimal:
        """Largest amount a withdrawal could take right now"""
        policy = WITHDRAWAL_POLICIES[self.kind]
        if policy is None:
            return ZERO
        return max(self.balance - policy.floor(self), ZERO)

    def to_dict(self) -> Dict[str, Any]:
        """Summary for API responses"""
        result = {
            "account_number": self.account_number,
            "holder": self.holder,
            "kind": self.kind.value,
            "balance": str(self.balance),
            "entries": len(self.ledger),
        }
        result.update(self._kind_fields())
        return result

    def _on_credit(self, amount: Decimal) -> None:
        """Kind-specific side effect of a credit, called under the lock"""

    @abstractmethod
    def _kind_fields(self) -> Dict[str, Any]:
        """Kind-specific fields for to_dict"""

    def _log_mutation(self, action: str, entry: LedgerEntry) -> None:
        log_action(
            logger, "debug", f"{entry.description}: {format_amount(entry.amount)}",
            action=action, resource=f"account:{self.account_number}",
            extra={
                "entry_kind": entry.kind.value,
                "amount": str(entry.amount),
                "balance": str(self.balance)
            }
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.account_number} balance={self.balance}>"


class SavingsAccount(Account):
    """
    Savings account: withdrawals capped at the balance, flat-rate interest
    """

    kind = AccountKind.SAVINGS

    def __init__(
        self,
        account_number: str,
        holder: str,
        opening_balance: AmountLike = ZERO,
        interest_rate: AmountLike = ZERO,
        clock: Optional[Clock] = None
    ):
        super().__init__(account_number, holder, opening_balance, clock)
        self.interest_rate = to_rate(interest_rate)

        if self.interest_rate < 0:
            raise ValueError("Interest rate cannot be negative")
        if self.opening_balance < ZERO:
            raise ValueError("Savings opening balance cannot be negative")

    def apply_interest(self) -> Decimal:
        """
        Credit one flat-rate interest payment on the current balance

        Returns:
            Interest credited (zero when it rounds below one cent, in which
            case no ledger entry is appended)
        """
        with self._lock:
            interest = to_amount(self.balance * self.interest_rate)
            if interest <= ZERO:
                return ZERO

            self.balance += interest
            entry = self.ledger.record(
                LedgerEntryKind.DEPOSIT, interest, "Interest Applied"
            )

        self._log_mutation("apply_interest", entry)
        return interest

    def _kind_fields(self) -> Dict[str, Any]:
        return {"interest_rate": str(self.interest_rate)}


class CheckingAccount(Account):
    """Checking account: balance may go as low as -overdraft_limit"""

    kind = AccountKind.CHECKING

    def __init__(
        self,
        account_number: str,
        holder: str,
        opening_balance: AmountLike = ZERO,
        overdraft_limit: AmountLike = ZERO,
        clock: Optional[Clock] = None
    ):
        super().__init__(account_number, holder, opening_balance, clock)
        self.overdraft_limit = to_amount(overdraft_limit)

        if self.overdraft_limit < ZERO:
            raise ValueError("Overdraft limit cannot be negative")
        if self.opening_balance < -self.overdraft_limit:
            raise ValueError("Opening balance is below the overdraft limit")

    def _kind_fields(self) -> Dict[str, Any]:
        return {"overdraft_limit": str(self.overdraft_limit)}


class LoanAccount(Account):
    """
    Loan account

    ``principal`` is the amount owed. ``balance`` is accumulated credit:
    repayments raise it, monthly payments lower it. It is not spendable and
    the account accepts no withdrawals.
    """

    kind = AccountKind.LOAN

    def __init__(
        self,
        account_number: str,
        holder: str,
        principal: AmountLike,
        interest_rate: AmountLike,
        payment_rate: Optional[AmountLike] = None,
        clock: Optional[Clock] = None
    ):
        super().__init__(account_number, holder, ZERO, clock)
        self.principal = to_amount(principal)
        self.interest_rate = to_rate(interest_rate)
        self.payment_rate = to_rate(
            payment_rate if payment_rate is not None else get_config().loan_payment_rate
        )
        self.last_computed_payment = ZERO

        if self.principal < ZERO:
            raise ValueError("Loan principal cannot be negative")
        if self.interest_rate < 0 or self.payment_rate < 0:
            raise ValueError("Loan rates cannot be negative")

    def _on_credit(self, amount: Decimal) -> None:
        # Repayment; principal may go below zero on overpayment
        self.principal -= amount

    def process_monthly_payment(self) -> Decimal:
        """
        Accrue one period of interest on the principal, then charge the
        monthly payment (payment_rate of the updated principal)

        Returns:
            Payment charged. Nothing accrues or is charged once the principal
            is fully repaid.
        """
        with self._lock:
            if self.principal <= ZERO:
                self.last_computed_payment = ZERO
                return ZERO

            self.principal += to_amount(self.principal * self.interest_rate)
            payment = to_amount(self.principal * self.payment_rate)
            self.last_computed_payment = payment
            if payment <= ZERO:
                return ZERO

            self.balance -= payment
            entry = self.ledger.record(
                LedgerEntryKind.LOAN_PAYMENT, payment, "Monthly Loan Payment"
            )

        self._log_mutation("process_monthly_payment", entry)
        return payment

    def _kind_fields(self) -> Dict[str, Any]:
        return {
            "principal": str(self.principal),
            "interest_rate": str(self.interest_rate),
            "last_computed_payment": str(self.last_computed_payment),
        }
