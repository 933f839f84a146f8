"""
Test suite for accounts module

Tests the per-kind deposit and withdrawal policies, interest, loan payments,
and that every balance change is paired with exactly one ledger entry.
"""

import pytest
from decimal import Decimal

from safetransact.accounts import (
    Account, AccountKind, SavingsAccount, CheckingAccount, LoanAccount,
    WITHDRAWAL_POLICIES
)
from safetransact.errors import (
    InvalidAmount, InsufficientFunds, OverdraftExceeded, UnsupportedOperation
)
from safetransact.ledger import LedgerEntryKind


# Strings that are not plain decimal amounts
MALFORMED_AMOUNTS = ["1e3", "12abc", "(100)", "\u2212100", "1,2,3", "$-5"]


def assert_ledger_consistent(account):
    """Balance must equal opening balance plus signed ledger total"""
    assert account.current_balance() == account.opening_balance + account.ledger.net_change()


def make_accounts():
    return [
        SavingsAccount("SA1001", "Alice Smith", Decimal('5000.00'), interest_rate=Decimal('0.03')),
        CheckingAccount("CA1001", "Alice Smith", Decimal('2000.00'), overdraft_limit=Decimal('500.00')),
        LoanAccount("LA2001", "Bob Johnson", principal=Decimal('10000.00'), interest_rate=Decimal('0.05')),
    ]


class TestAccountConstruction:
    """Test construction-time validation"""

    def test_base_account_is_abstract(self):
        with pytest.raises(TypeError):
            Account("X1", "Nobody")

    def test_kinds(self):
        savings, checking, loan = make_accounts()

        assert savings.kind == AccountKind.SAVINGS
        assert checking.kind == AccountKind.CHECKING
        assert loan.kind == AccountKind.LOAN

    def test_every_kind_has_a_withdrawal_rule(self):
        assert set(WITHDRAWAL_POLICIES) == set(AccountKind)

    def test_account_number_required(self):
        with pytest.raises(ValueError, match="Account number is required"):
            SavingsAccount("", "Alice Smith")

    def test_negative_interest_rate_rejected(self):
        with pytest.raises(ValueError, match="Interest rate cannot be negative"):
            SavingsAccount("SA1", "Alice", Decimal('100'), interest_rate=Decimal('-0.01'))

    def test_non_numeric_rates_rejected(self):
        for rate in ["abc", Decimal('NaN'), "NaN"]:
            with pytest.raises(ValueError):
                SavingsAccount("SA1", "Alice", Decimal('100'), interest_rate=rate)
            with pytest.raises(ValueError):
                LoanAccount("LA1", "Bob", principal=Decimal('100'), interest_rate=rate)
            with pytest.raises(ValueError):
                LoanAccount("LA1", "Bob", principal=Decimal('100'), interest_rate=Decimal('0.05'),
                            payment_rate=rate)

    def test_negative_savings_opening_balance_rejected(self):
        with pytest.raises(ValueError, match="cannot be negative"):
            SavingsAccount("SA1", "Alice", Decimal('-1'))

    def test_negative_overdraft_limit_rejected(self):
        with pytest.raises(ValueError, match="Overdraft limit cannot be negative"):
            CheckingAccount("CA1", "Alice", Decimal('0'), overdraft_limit=Decimal('-50'))

    def test_checking_may_open_within_overdraft(self):
        account = CheckingAccount("CA1", "Alice", Decimal('-100'), overdraft_limit=Decimal('500'))
        assert account.current_balance() == Decimal('-100.00')

        with pytest.raises(ValueError, match="below the overdraft limit"):
            CheckingAccount("CA2", "Alice", Decimal('-600'), overdraft_limit=Decimal('500'))

    def test_loan_starts_with_zero_balance(self):
        loan = LoanAccount("LA1", "Bob", principal=Decimal('10000'), interest_rate=Decimal('0.05'))

        assert loan.current_balance() == Decimal('0.00')
        assert loan.principal == Decimal('10000.00')
        assert loan.last_computed_payment == Decimal('0.00')
        assert loan.payment_rate == Decimal('0.01')

    def test_negative_loan_principal_rejected(self):
        with pytest.raises(ValueError, match="principal cannot be negative"):
            LoanAccount("LA1", "Bob", principal=Decimal('-1'), interest_rate=Decimal('0.05'))

    def test_new_accounts_have_empty_ledgers(self):
        for account in make_accounts():
            assert account.ledger_history() == ()


class TestDeposit:
    """Test deposits across all account kinds"""

    def test_deposit_increases_balance(self):
        savings, checking, _ = make_accounts()

        entry = savings.deposit(Decimal('250.00'))
        checking.deposit("99.99")

        assert savings.current_balance() == Decimal('5250.00')
        assert checking.current_balance() == Decimal('2099.99')
        assert entry.kind == LedgerEntryKind.DEPOSIT
        assert entry.amount == Decimal('250.00')
        assert entry.description == "Deposit"

    def test_non_positive_deposit_rejected_for_every_kind(self):
        """Test that zero or negative deposits fail and change nothing"""
        for account in make_accounts():
            for amount in [Decimal('0'), Decimal('-10.00'), Decimal('0.001')]:
                before = account.current_balance()
                with pytest.raises(InvalidAmount):
                    account.deposit(amount)
                assert account.current_balance() == before
                assert account.ledger_history() == ()

    def test_non_numeric_deposit_rejected(self):
        savings, _, _ = make_accounts()

        with pytest.raises(InvalidAmount, match="numeric"):
            savings.deposit("lots")

    def test_malformed_amount_strings_rejected(self):
        """Test that stray characters are refused rather than stripped"""
        for account in make_accounts():
            for amount in MALFORMED_AMOUNTS:
                with pytest.raises(InvalidAmount, match="numeric"):
                    account.deposit(amount)
            assert account.current_balance() == account.opening_balance
            assert account.ledger_history() == ()

    def test_loan_deposit_is_repayment(self):
        """Test that a loan deposit reduces principal and raises the credit balance"""
        _, _, loan = make_accounts()

        entry = loan.deposit(Decimal('1500.00'))

        assert loan.principal == Decimal('8500.00')
        assert loan.current_balance() == Decimal('1500.00')
        assert entry.kind == LedgerEntryKind.DEPOSIT
        assert entry.description == "Loan Repayment"

    def test_loan_overpayment_drives_principal_below_zero(self):
        loan = LoanAccount("LA1", "Bob", principal=Decimal('100'), interest_rate=Decimal('0.05'))

        loan.deposit(Decimal('150'))

        assert loan.principal == Decimal('-50.00')
        assert loan.current_balance() == Decimal('150.00')

    def test_deposit_rejects_debit_entry_kind(self):
        savings, _, _ = make_accounts()

        with pytest.raises(ValueError, match="not a credit entry kind"):
            savings.deposit(Decimal('10'), entry_kind=LedgerEntryKind.WITHDRAWAL)


class TestSavingsWithdrawal:

    def setup_method(self):
        self.account = SavingsAccount("SA1001", "Alice Smith", Decimal('5000.00'), interest_rate=Decimal('0.03'))

    def test_withdraw_within_balance(self):
        entry = self.account.withdraw(Decimal('1200.00'))

        assert self.account.current_balance() == Decimal('3800.00')
        assert entry.kind == LedgerEntryKind.WITHDRAWAL
        assert entry.amount == Decimal('1200.00')

    def test_withdraw_entire_balance(self):
        self.account.withdraw(Decimal('5000.00'))
        assert self.account.current_balance() == Decimal('0.00')

    def test_withdraw_above_balance_fails(self):
        with pytest.raises(InsufficientFunds, match="Insufficient funds"):
            self.account.withdraw(Decimal('5000.01'))

        assert self.account.current_balance() == Decimal('5000.00')
        assert self.account.ledger_history() == ()

    def test_non_positive_withdrawal_rejected(self):
        for amount in [0, -1, "-0.50"]:
            with pytest.raises(InvalidAmount):
                self.account.withdraw(amount)
        assert self.account.ledger_history() == ()

    def test_malformed_withdrawal_rejected(self):
        for amount in MALFORMED_AMOUNTS:
            with pytest.raises(InvalidAmount):
                self.account.withdraw(amount)

        assert self.account.current_balance() == Decimal('5000.00')
        assert self.account.ledger_history() == ()

    def test_available_to_withdraw(self):
        assert self.account.available_to_withdraw() == Decimal('5000.00')


class TestCheckingWithdrawal:

    def setup_method(self):
        self.account = CheckingAccount("CA1001", "Alice Smith", Decimal('2000.00'), overdraft_limit=Decimal('500.00'))

    def test_withdraw_into_overdraft(self):
        """Test the 2000.00 / 500.00 example: 2400.00 succeeds leaving -400.00"""
        self.account.withdraw(Decimal('2400.00'))

        assert self.account.current_balance() == Decimal('-400.00')
        assert self.account.available_to_withdraw() == Decimal('100.00')

    def test_withdraw_beyond_overdraft_fails(self):
        """Test the 2000.00 / 500.00 example: 2600.00 fails"""
        with pytest.raises(OverdraftExceeded, match="Overdraft limit exceeded"):
            self.account.withdraw(Decimal('2600.00'))

        assert self.account.current_balance() == Decimal('2000.00')
        assert self.account.ledger_history() == ()

    def test_withdraw_exactly_to_floor(self):
        self.account.withdraw(Decimal('2500.00'))

        assert self.account.current_balance() == Decimal('-500.00')
        with pytest.raises(OverdraftExceeded):
            self.account.withdraw(Decimal('0.01'))

    def test_zero_overdraft_behaves_like_floor_at_zero(self):
        account = CheckingAccount("CA2", "Bob", Decimal('10.00'))

        with pytest.raises(OverdraftExceeded):
            account.withdraw(Decimal('10.01'))
        account.withdraw(Decimal('10.00'))
        assert account.current_balance() == Decimal('0.00')


class TestLoanWithdrawal:

    def test_withdraw_always_unsupported(self):
        """Test that loans refuse withdrawals whatever the amount or state"""
        loan = LoanAccount("LA2001", "Bob Johnson", principal=Decimal('10000.00'), interest_rate=Decimal('0.05'))
        loan.deposit(Decimal('5000.00'))

        for amount in [Decimal('1.00'), Decimal('0'), Decimal('-5'), Decimal('999999')]:
            with pytest.raises(UnsupportedOperation, match="not allowed"):
                loan.withdraw(amount)

        assert loan.current_balance() == Decimal('5000.00')
        assert len(loan.ledger_history()) == 1
        assert loan.available_to_withdraw() == Decimal('0')


class TestSavingsInterest:

    def test_apply_interest_example(self):
        """Test 5000.00 at 3% yields 5150.00 and one interest entry of 150.00"""
        account = SavingsAccount("SA1001", "Alice Smith", Decimal('5000.00'), interest_rate=Decimal('0.03'))

        interest = account.apply_interest()

        assert interest == Decimal('150.00')
        assert account.current_balance() == Decimal('5150.00')
        history = account.ledger_history()
        assert len(history) == 1
        assert history[0].kind == LedgerEntryKind.DEPOSIT
        assert history[0].amount == Decimal('150.00')
        assert history[0].description == "Interest Applied"

    def test_interest_rounded_to_cents(self):
        account = SavingsAccount("SA1", "Alice", Decimal('333.33'), interest_rate=Decimal('0.02'))

        assert account.apply_interest() == Decimal('6.67')
        assert account.current_balance() == Decimal('340.00')

    def test_zero_interest_records_nothing(self):
        account = SavingsAccount("SA1", "Alice", Decimal('0'), interest_rate=Decimal('0.03'))

        assert account.apply_interest() == Decimal('0.00')
        assert account.ledger_history() == ()


class TestLoanMonthlyPayment:

    def test_process_monthly_payment(self):
        """Test interest accrual on principal followed by a 1% payment"""
        loan = LoanAccount("LA2001", "Bob Johnson", principal=Decimal('10000.00'), interest_rate=Decimal('0.05'))

        payment = loan.process_monthly_payment()

        assert loan.principal == Decimal('10500.00')
        assert payment == Decimal('105.00')
        assert loan.last_computed_payment == Decimal('105.00')
        assert loan.current_balance() == Decimal('-105.00')
        entry = loan.ledger_history()[-1]
        assert entry.kind == LedgerEntryKind.LOAN_PAYMENT
        assert entry.amount == Decimal('105.00')

    def test_custom_payment_rate(self):
        loan = LoanAccount(
            "LA1", "Bob", principal=Decimal('1000.00'),
            interest_rate=Decimal('0'), payment_rate=Decimal('0.10')
        )

        assert loan.process_monthly_payment() == Decimal('100.00')
        assert loan.principal == Decimal('1000.00')

    def test_repaid_loan_charges_nothing(self):
        loan = LoanAccount("LA1", "Bob", principal=Decimal('100.00'), interest_rate=Decimal('0.05'))
        loan.deposit(Decimal('100.00'))

        assert loan.process_monthly_payment() == Decimal('0.00')
        assert loan.principal == Decimal('0.00')
        assert len(loan.ledger_history()) == 1


class TestLedgerConsistency:
    """Balance always equals opening balance plus signed ledger entries"""

    def test_mixed_sequence(self):
        savings, checking, loan = make_accounts()

        savings.deposit(Decimal('100'))
        savings.withdraw(Decimal('2000'))
        savings.apply_interest()
        checking.withdraw(Decimal('2300'))
        checking.deposit(Decimal('50.25'))
        loan.deposit(Decimal('300'))
        loan.process_monthly_payment()
        loan.process_monthly_payment()

        for account in (savings, checking, loan):
            assert_ledger_consistent(account)

    def test_failed_operations_do_not_break_consistency(self):
        savings, checking, loan = make_accounts()

        for call in (
            lambda: savings.withdraw(Decimal('999999')),
            lambda: checking.withdraw(Decimal('999999')),
            lambda: loan.withdraw(Decimal('1')),
            lambda: savings.deposit(Decimal('-1')),
        ):
            with pytest.raises(Exception):
                call()

        for account in (savings, checking, loan):
            assert account.ledger_history() == ()
            assert_ledger_consistent(account)


class TestAccountSummary:

    def test_to_dict_includes_kind_fields(self):
        savings, checking, loan = make_accounts()

        assert savings.to_dict() == {
            "account_number": "SA1001",
            "holder": "Alice Smith",
            "kind": "savings",
            "balance": "5000.00",
            "entries": 0,
            "interest_rate": "0.03",
        }
        assert checking.to_dict()["overdraft_limit"] == "500.00"
        assert loan.to_dict()["principal"] == "10000.00"
        assert loan.to_dict()["last_computed_payment"] == "0.00"
