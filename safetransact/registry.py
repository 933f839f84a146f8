"""
Bank Registry Module

Explicitly constructed owner of all customers. It is the only path from an
account number to an Account, and the authority for account-number
uniqueness. Lookups are linear scans over customers x accounts, so
find_account costs O(customers * accounts).
"""

from decimal import Decimal
from typing import Dict, List, Optional, Tuple
import threading

from .accounts import Account, AccountKind
from .customers import Customer
from .audit import AuditTrail, AuditEventType
from .errors import AccountNotFound, AuthenticationFailure, DuplicateAccount
from .ledger import Clock
from .config import get_config
from .logging_config import get_logger, log_action


class BankRegistry:
    """
    Owns customers and resolves account numbers
    """

    def __init__(self, audit_trail: Optional[AuditTrail] = None, clock: Optional[Clock] = None):
        self._customers: List[Customer] = []
        # Read-mostly after setup; one coarse lock for registrations
        self._lock = threading.RLock()
        self.clock = clock
        self.audit_trail = audit_trail or AuditTrail(
            clock=clock, enabled=get_config().enable_audit_logging
        )
        self.logger = get_logger("safetransact.registry")

    def add_customer(self, customer: Customer) -> Customer:
        """
        Register a customer together with the accounts they already hold

        Raises:
            DuplicateAccount: If one of the customer's account numbers is
                already registered, or repeated within the customer
        """
        with self._lock:
            seen = set()
            for account in customer.accounts():
                number = account.account_number
                if number in seen or self.find_account(number) is not None:
                    raise DuplicateAccount(number)
                seen.add(number)

            self._customers.append(customer)

        log_action(
            self.logger, "info", f"Customer added: {customer.username}",
            action="add_customer", resource=f"customer:{customer.username}",
            extra={"accounts": sorted(seen)}
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.CUSTOMER_ADDED,
            entity_type="customer",
            entity_id=customer.username,
            metadata={"name": customer.name, "accounts": sorted(seen)}
        )
        return customer

    def open_account(self, customer: Customer, account: Account) -> Account:
        """
        Attach a new account to a registered customer

        Raises:
            ValueError: If the customer is not registered here
            DuplicateAccount: If the account number is already registered
        """
        with self._lock:
            if not any(c is customer for c in self._customers):
                raise ValueError(f"Customer {customer.username} is not registered")

            if self.find_account(account.account_number) is not None:
                raise DuplicateAccount(account.account_number)

            customer.add_account(account)

        log_action(
            self.logger, "info", f"Account opened: {account.account_number}",
            action="open_account", resource=f"account:{account.account_number}",
            extra={"customer": customer.username, "kind": account.kind.value}
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.ACCOUNT_OPENED,
            entity_type="account",
            entity_id=account.account_number,
            metadata={
                "customer": customer.username,
                "kind": account.kind,
                "opening_balance": account.opening_balance
            }
        )
        return account

    def authenticate(self, username: str, secret: str) -> Customer:
        """
        Return the first customer matching the credentials

        Raises:
            AuthenticationFailure: If no customer matches
        """
        for customer in self.customers():
            if customer.authenticate(username, secret):
                self.audit_trail.log_event(
                    event_type=AuditEventType.LOGIN_SUCCEEDED,
                    entity_type="customer",
                    entity_id=customer.username
                )
                return customer

        log_action(
            self.logger, "warning", "Authentication failed",
            action="authenticate", resource=f"customer:{username}"
        )
        self.audit_trail.log_event(
            event_type=AuditEventType.LOGIN_FAILED,
            entity_type="customer",
            entity_id=username
        )
        raise AuthenticationFailure("Authentication failed.")

    def find_account(self, account_number: str) -> Optional[Account]:
        """Linear scan over every customer's accounts; None when absent"""
        for customer in self.customers():
            for account in customer.accounts():
                if account.account_number == account_number:
                    return account
        return None

    def get_account(self, account_number: str) -> Account:
        """
        Resolve an account number

        Raises:
            AccountNotFound: If no registered account has this number
        """
        account = self.find_account(account_number)
        if account is None:
            raise AccountNotFound(account_number)
        return account

    def find_owner(self, account_number: str) -> Optional[Customer]:
        for customer in self.customers():
            if customer.find_account(account_number) is not None:
                return customer
        return None

    def customers(self) -> Tuple[Customer, ...]:
        with self._lock:
            return tuple(self._customers)

    def accounts(self) -> Tuple[Account, ...]:
        """Every registered account, customer by customer in insertion order"""
        return tuple(
            account
            for customer in self.customers()
            for account in customer.accounts()
        )

    def apply_interest_for(self, customer: Customer) -> Dict[str, Decimal]:
        """
        Apply interest to each of a customer's savings accounts

        Returns:
            Interest credited per account number
        """
        credited = {}
        for account in customer.accounts():
            if account.kind is AccountKind.SAVINGS:
                credited[account.account_number] = account.apply_interest()
        return credited
