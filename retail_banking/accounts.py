"""
Account Module

Bank account entity and its repository. Accounts are keyed by their
customer-facing account number; the balance is only ever changed through
AccountLedger.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass
from typing import Dict, List, Optional
from enum import Enum

from .currency import Money, Currency
from .storage import StorageInterface


SORT_CODE = "10-10-10"


class AccountType(Enum):
    """Banking product types"""
    PERSONAL = "personal"


@dataclass
class Account:
    """Bank account owned by a single user"""
    account_number: str
    name: str
    account_type: AccountType
    balance: Money
    user_id: str  # customer-facing usr- id of the owner
    created_at: datetime
    updated_at: datetime
    currency: Currency = Currency.GBP
    sort_code: str = SORT_CODE

    def __post_init__(self):
        if self.balance.currency != self.currency:
            raise ValueError("Balance currency must match account currency")

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id


class AccountRepository:
    """Persists accounts as JSON documents keyed by account number"""

    def __init__(self, storage: StorageInterface, table: str = "accounts"):
        self.storage = storage
        self.table = table

    def exists(self, account_number: str) -> bool:
        return self.storage.exists(self.table, account_number)

    def get(self, account_number: str) -> Optional[Account]:
        data = self.storage.load(self.table, account_number)
        if data:
            return self._from_dict(data)
        return None

    def insert(self, account: Account) -> None:
        self.storage.insert(self.table, account.account_number, self._to_dict(account))

    def update(self, account: Account) -> None:
        self.storage.save(self.table, account.account_number, self._to_dict(account))

    def list_for_user(self, user_id: str) -> List[Account]:
        """All accounts of a user, newest first"""
        accounts = [self._from_dict(data) for data in self.storage.find(self.table, {"user_id": user_id})]
        # Stable ascending sort then reverse: equal timestamps list the later insert first
        accounts.sort(key=lambda account: account.created_at)
        accounts.reverse()
        return accounts

    def _to_dict(self, account: Account) -> Dict:
        """Convert Account to dictionary for storage"""
        return {
            "account_number": account.account_number,
            "sort_code": account.sort_code,
            "name": account.name,
            "account_type": account.account_type.value,
            "balance": account.balance.to_storage(),
            "currency": account.currency.code,
            "user_id": account.user_id,
            "created_at": account.created_at.isoformat(),
            "updated_at": account.updated_at.isoformat(),
        }

    def _from_dict(self, data: Dict) -> Account:
        """Convert dictionary to Account"""
        currency = Currency.from_code(data["currency"])
        return Account(
            account_number=data["account_number"],
            sort_code=data["sort_code"],
            name=data["name"],
            account_type=AccountType(data["account_type"]),
            balance=Money(Decimal(data["balance"]), currency),
            currency=currency,
            user_id=data["user_id"],
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )
