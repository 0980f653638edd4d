"""
Transaction Module

Immutable record of a deposit or withdrawal. A Transaction is created
exactly once, as the durable side effect of a successful
AccountLedger.apply_transaction call, and is never updated or deleted.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass
from typing import Dict, List, Optional
from enum import Enum

from .currency import Money, Currency
from .errors import ValidationError
from .storage import StorageInterface


MAX_REFERENCE_LENGTH = 255


class TransactionType(Enum):
    """Types of banking transactions"""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


def normalize_reference(reference: Optional[str]) -> Optional[str]:
    """
    Treat an empty reference as absent

    Raises:
        ValidationError: If the reference is longer than 255 characters
    """
    if reference is None or reference == "":
        return None
    if len(reference) > MAX_REFERENCE_LENGTH:
        raise ValidationError(f"Reference must be at most {MAX_REFERENCE_LENGTH} characters")
    return reference


@dataclass(frozen=True)
class Transaction:
    """Banking transaction against a single account"""
    transaction_id: str
    amount: Money
    transaction_type: TransactionType
    user_id: str  # customer-facing usr- id of the requester
    account_number: str
    created_at: datetime
    reference: Optional[str] = None
    currency: Currency = Currency.GBP

    def __post_init__(self):
        object.__setattr__(self, "reference", normalize_reference(self.reference))

        if not self.amount.is_positive():
            raise ValueError("Transaction amount must be positive")

        if self.amount.currency != self.currency:
            raise ValueError("Transaction amount currency must match transaction currency")

    @property
    def is_deposit(self) -> bool:
        return self.transaction_type == TransactionType.DEPOSIT

    @property
    def is_withdrawal(self) -> bool:
        return self.transaction_type == TransactionType.WITHDRAWAL


class TransactionRepository:
    """Insert-only store of transactions keyed by transaction id"""

    def __init__(self, storage: StorageInterface, table: str = "transactions"):
        self.storage = storage
        self.table = table

    def insert(self, transaction: Transaction) -> None:
        self.storage.insert(self.table, transaction.transaction_id, self._to_dict(transaction))

    def get(self, transaction_id: str) -> Optional[Transaction]:
        data = self.storage.load(self.table, transaction_id)
        if data:
            return self._from_dict(data)
        return None

    def list_for_account(self, account_number: str) -> List[Transaction]:
        """All transactions of an account, newest first"""
        found = self.storage.find(self.table, {"account_number": account_number})
        transactions = [self._from_dict(data) for data in found]
        transactions.sort(key=lambda transaction: transaction.created_at)
        transactions.reverse()
        return transactions

    def count_for_account(self, account_number: str) -> int:
        return len(self.storage.find(self.table, {"account_number": account_number}))

    def _to_dict(self, transaction: Transaction) -> Dict:
        """Convert Transaction to dictionary for storage"""
        result = {
            "transaction_id": transaction.transaction_id,
            "amount": transaction.amount.to_storage(),
            "currency": transaction.currency.code,
            "transaction_type": transaction.transaction_type.value,
            "user_id": transaction.user_id,
            "account_number": transaction.account_number,
            "created_at": transaction.created_at.isoformat(),
        }
        if transaction.reference is not None:
            result["reference"] = transaction.reference
        return result

    def _from_dict(self, data: Dict) -> Transaction:
        """Convert dictionary to Transaction"""
        currency = Currency.from_code(data["currency"])
        return Transaction(
            transaction_id=data["transaction_id"],
            amount=Money(Decimal(data["amount"]), currency),
            currency=currency,
            transaction_type=TransactionType(data["transaction_type"]),
            reference=data.get("reference"),
            user_id=data["user_id"],
            account_number=data["account_number"],
            created_at=datetime.fromisoformat(data["created_at"]),
        )
