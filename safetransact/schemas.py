"""
Pydantic schemas for API requests and responses
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str
    password: str


class AmountRequest(BaseModel):
    amount: str = Field(..., description="Decimal amount as string")


class TransferRequest(BaseModel):
    from_account: str
    to_account: str
    amount: str = Field(..., description="Decimal amount as string")


class CustomerResponse(BaseModel):
    username: str
    name: str
    email: str
    accounts: List[str]


class AccountResponse(BaseModel):
    account_number: str
    holder: str
    kind: str
    balance: str
    entries: int
    interest_rate: Optional[str] = None
    overdraft_limit: Optional[str] = None
    principal: Optional[str] = None
    last_computed_payment: Optional[str] = None


class LedgerEntryModel(BaseModel):
    kind: str
    amount: str
    timestamp: str
    description: str


class LedgerResponse(BaseModel):
    account_number: str
    entries: List[LedgerEntryModel]


class TransferResponse(BaseModel):
    amount: str
    from_account: str
    to_account: str
    from_balance: str
    to_balance: str
    timestamp: str
