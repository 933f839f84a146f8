"""
Account Ledger Module

Append-only record of the balance-affecting events of a single account.
Entries are immutable; ordering is append order. The sum of signed entry
amounts always equals the account's balance change since opening.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple
from enum import Enum

from .money import ZERO


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default timestamp supplier"""
    return datetime.now(timezone.utc)


class LedgerEntryKind(Enum):
    """Kinds of balance-affecting events"""
    DEPOSIT = "deposit"              # Direct deposit, interest credit, loan repayment
    WITHDRAWAL = "withdrawal"        # Direct withdrawal
    TRANSFER_OUT = "transfer_out"    # Source leg of a transfer
    TRANSFER_IN = "transfer_in"      # Destination leg of a transfer
    LOAN_PAYMENT = "loan_payment"    # Monthly payment charged to a loan

    @property
    def sign(self) -> int:
        """Direction of the balance change: +1 credit, -1 debit"""
        return 1 if self in _CREDIT_KINDS else -1

    @property
    def is_transfer(self) -> bool:
        return self in (LedgerEntryKind.TRANSFER_OUT, LedgerEntryKind.TRANSFER_IN)


_CREDIT_KINDS = frozenset({LedgerEntryKind.DEPOSIT, LedgerEntryKind.TRANSFER_IN})


@dataclass(frozen=True)
class LedgerEntry:
    """
    Immutable record of one balance-affecting event
    """
    kind: LedgerEntryKind
    amount: Decimal          # Always a positive magnitude
    timestamp: datetime
    description: str

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))

        if self.amount <= Decimal('0'):
            raise ValueError("Ledger entry amount must be positive")

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the direction of its balance effect"""
        return self.amount if self.kind.sign > 0 else -self.amount

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "amount": str(self.amount),
            "timestamp": self.timestamp.isoformat(),
            "description": self.description,
        }


class Ledger:
    """
    Ordered, append-only sequence of ledger entries for one account
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._entries: List[LedgerEntry] = []
        self._clock = clock or utc_now

    def record(self, kind: LedgerEntryKind, amount: Decimal, description: str) -> LedgerEntry:
        """Create, timestamp and append an entry"""
        entry = LedgerEntry(
            kind=kind,
            amount=amount,
            timestamp=self._clock(),
            description=description
        )
        self._entries.append(entry)
        return entry

    def entries(self) -> Tuple[LedgerEntry, ...]:
        """Snapshot of all entries in append order"""
        return tuple(self._entries)

    def entries_of_kind(self, *kinds: LedgerEntryKind) -> Tuple[LedgerEntry, ...]:
        return tuple(entry for entry in self._entries if entry.kind in kinds)

    def net_change(self) -> Decimal:
        """Sum of signed entry amounts"""
        return sum((entry.signed_amount for entry in self._entries), ZERO)

    def latest(self) -> Optional[LedgerEntry]:
        return self._entries[-1] if self._entries else None

    def __iter__(self) -> Iterator[LedgerEntry]:
        return iter(self.entries())

    def __len__(self) -> int:
        return len(self._entries)
