"""Sample SafeTransact bank

Builds the demo registry used by the HTTP adapter and the tests:
- alice: savings SA1001 (5000.00 @ 3%), checking CA1001 (2000.00, 500.00 overdraft)
- bob: savings SA2001 (3000.00 @ 2%), loan LA2001 (10000.00 @ 5%)
"""

from decimal import Decimal
from typing import Optional

from .accounts import SavingsAccount, CheckingAccount, LoanAccount
from .customers import Customer
from .ledger import Clock
from .registry import BankRegistry


def build_demo_registry(clock: Optional[Clock] = None) -> BankRegistry:
    """Create a registry holding the two demo customers"""
    registry = BankRegistry(clock=clock)

    alice = Customer.create("alice", "password123", "Alice Smith", "alice@example.com")
    alice.add_account(SavingsAccount(
        "SA1001", alice.name, Decimal("5000.00"), interest_rate=Decimal("0.03"), clock=clock
    ))
    alice.add_account(CheckingAccount(
        "CA1001", alice.name, Decimal("2000.00"), overdraft_limit=Decimal("500.00"), clock=clock
    ))

    bob = Customer.create("bob", "securepwd", "Bob Johnson", "bob@example.com")
    bob.add_account(SavingsAccount(
        "SA2001", bob.name, Decimal("3000.00"), interest_rate=Decimal("0.02"), clock=clock
    ))
    bob.add_account(LoanAccount(
        "LA2001", bob.name, principal=Decimal("10000.00"), interest_rate=Decimal("0.05"), clock=clock
    ))

    registry.add_customer(alice)
    registry.add_customer(bob)
    return registry
