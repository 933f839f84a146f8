"""
Transfer Orchestration Module

Moves funds between two registered accounts as one atomic unit: a single
TRANSFER_OUT entry on the source and a single TRANSFER_IN entry on the
destination. A failed transfer leaves both balances and ledgers as they were.
"""

from contextlib import ExitStack
from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass
from typing import Any, Dict

from .accounts import Account, validate_amount
from .money import AmountLike, format_amount
from .errors import BankingError, InvalidTransfer
from .ledger import LedgerEntryKind, utc_now
from .registry import BankRegistry
from .audit import AuditEventType
from .logging_config import get_logger, log_action


@dataclass(frozen=True)
class TransferResult:
    """Confirmation of a completed transfer"""
    amount: Decimal
    from_account_number: str
    to_account_number: str
    from_balance: Decimal
    to_balance: Decimal
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount": str(self.amount),
            "from_account": self.from_account_number,
            "to_account": self.to_account_number,
            "from_balance": str(self.from_balance),
            "to_balance": str(self.to_balance),
            "timestamp": self.timestamp.isoformat(),
        }


class TransferOrchestrator:
    """
    Composes one withdrawal and one deposit across two accounts
    resolved through the registry
    """

    def __init__(self, registry: BankRegistry):
        self.registry = registry
        self.audit_trail = registry.audit_trail
        self._clock = registry.clock or utc_now
        self.logger = get_logger("safetransact.transfers")

    def transfer(self, from_account_number: str, to_account_number: str,
                 amount: AmountLike) -> TransferResult:
        """
        Transfer funds between two accounts

        Args:
            from_account_number: Source account number
            to_account_number: Destination account number
            amount: Positive amount to move

        Returns:
            TransferResult with the amount moved and both updated balances

        Raises:
            AccountNotFound: If either account number is unknown
            InvalidTransfer: If source and destination are the same account
            InvalidAmount: If amount <= 0
            InsufficientFunds, OverdraftExceeded, UnsupportedOperation: the
                source account's withdrawal error, unchanged
        """
        try:
            source = self.registry.get_account(from_account_number)
            destination = self.registry.get_account(to_account_number)

            if source is destination:
                raise InvalidTransfer("Source and destination must be different accounts.")

            value = validate_amount(amount, "Transfer")

            with self._lock_pair(source, destination):
                self._move(source, destination, value)
                result = TransferResult(
                    amount=value,
                    from_account_number=source.account_number,
                    to_account_number=destination.account_number,
                    from_balance=source.current_balance(),
                    to_balance=destination.current_balance(),
                    timestamp=self._clock()
                )

        except BankingError as e:
            self._record_failure(from_account_number, to_account_number, amount, e)
            raise

        log_action(
            self.logger, "info",
            f"Transferred {format_amount(value)} from {from_account_number} to {to_account_number}",
            action="transfer", resource=f"account:{from_account_number}",
            extra=result.to_dict()
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.TRANSFER_COMPLETED,
            entity_type="transfer",
            entity_id=f"{from_account_number}->{to_account_number}",
            metadata=result.to_dict()
        )
        return result

    def _move(self, source: Account, destination: Account, amount: Decimal) -> None:
        """Run both legs; credit the source back if the destination leg fails"""
        # Validates before mutating, so a failure here leaves nothing to undo
        source.withdraw(
            amount,
            entry_kind=LedgerEntryKind.TRANSFER_OUT,
            description=f"Transfer to {destination.account_number}"
        )

        try:
            destination.deposit(
                amount,
                entry_kind=LedgerEntryKind.TRANSFER_IN,
                description=f"Transfer from {source.account_number}"
            )
        except Exception:
            source.deposit(
                amount,
                entry_kind=LedgerEntryKind.TRANSFER_IN,
                description=f"Transfer reversal from {destination.account_number}"
            )
            log_action(
                self.logger, "error",
                f"Destination leg failed; credited {format_amount(amount)} back to {source.account_number}",
                action="compensate_transfer", resource=f"account:{source.account_number}"
            )
            self.audit_trail.log_event(
                event_type=AuditEventType.TRANSFER_COMPENSATED,
                entity_type="transfer",
                entity_id=f"{source.account_number}->{destination.account_number}",
                metadata={"amount": amount}
            )
            raise

    @staticmethod
    def _lock_pair(first: Account, second: Account) -> ExitStack:
        """Hold both account locks, acquired in account-number order"""
        stack = ExitStack()
        for account in sorted((first, second), key=lambda a: a.account_number):
            stack.enter_context(account.lock)
        return stack

    def _record_failure(self, from_account_number: str, to_account_number: str,
                        amount: AmountLike, error: BankingError) -> None:
        log_action(
            self.logger, "warning", f"Transfer failed: {error.message}",
            action="transfer", resource=f"account:{from_account_number}",
            extra={
                "to_account": to_account_number,
                "amount": str(amount),
                "error": error.kind.value
            }
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.TRANSFER_FAILED,
            entity_type="transfer",
            entity_id=f"{from_account_number}->{to_account_number}",
            metadata={"amount": str(amount), "error": error.kind.value}
        )
