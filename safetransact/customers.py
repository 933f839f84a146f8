"""
Customer Module

Customers own an ordered collection of accounts and carry identity and a
hashed credential. The plain secret is never stored or compared directly.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Any, Dict
import hashlib
import hmac
import secrets

from .accounts import Account


def generate_salt() -> str:
    """Generate random salt for secret hashing"""
    return secrets.token_hex(16)


def hash_secret(secret: str, salt: str) -> str:
    """Hash secret with salt using scrypt"""
    return hashlib.scrypt(
        secret.encode(),
        salt=salt.encode(),
        n=16384, r=8, p=1
    ).hex()


@dataclass(frozen=True)
class Credential:
    """Salted scrypt hash of a customer's secret"""
    salt: str
    secret_hash: str

    @classmethod
    def from_secret(cls, secret: str, salt: Optional[str] = None) -> 'Credential':
        salt = salt or generate_salt()
        return cls(salt=salt, secret_hash=hash_secret(secret, salt))

    def verify(self, secret: str) -> bool:
        """Constant-time comparison against the stored hash"""
        candidate = hash_secret(secret, self.salt)
        return hmac.compare_digest(candidate, self.secret_hash)


@dataclass(eq=False)
class Customer:
    """
    Account holder
    """
    username: str
    name: str
    email: str
    credential: Credential = field(repr=False)
    _accounts: List[Account] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        if not self.username:
            raise ValueError("Username is required")

    @classmethod
    def create(cls, username: str, secret: str, name: str, email: str) -> 'Customer':
        """Create a customer, hashing the secret"""
        return cls(
            username=username,
            name=name,
            email=email,
            credential=Credential.from_secret(secret)
        )

    def authenticate(self, username: str, secret: str) -> bool:
        """Check a username/secret pair against this customer"""
        if not hmac.compare_digest(username.encode(), self.username.encode()):
            return False
        return self.credential.verify(secret)

    def add_account(self, account: Account) -> None:
        """Append an account; number uniqueness is the registry's concern"""
        self._accounts.append(account)

    def accounts(self) -> Tuple[Account, ...]:
        return tuple(self._accounts)

    def find_account(self, account_number: str) -> Optional[Account]:
        for account in self._accounts:
            if account.account_number == account_number:
                return account
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "name": self.name,
            "email": self.email,
            "accounts": [account.account_number for account in self._accounts],
        }
