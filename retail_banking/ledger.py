"""
Account Ledger Module

The single authority for account creation and money movement, and the only
component permitted to change an account balance.

apply_transaction runs its whole load / authorize / compute / write sequence
inside one storage unit of work while holding the account's record lock:

    Started -> AccountLoaded -> Authorized -> BalanceComputed -> Committed

Any gate before Committed can end the operation in NotFound, Forbidden,
InsufficientFunds or InvalidAmount, in which case the unit of work is rolled
back and neither the balance nor the transaction record is written.
"""

from datetime import datetime, timezone
from typing import Callable, List, Optional

from .accounts import Account, AccountRepository, AccountType, SORT_CODE
from .currency import Money, Currency, MAX_TRANSACTION_AMOUNT, validate_transaction_amount
from .errors import DuplicateRecordError, ForbiddenError, InsufficientFundsError, NotFoundError
from .identifiers import (
    AttemptRecorder, MAX_ACCOUNT_NUMBER_ATTEMPTS,
    allocate_account_number, generate_transaction_id
)
from .storage import StorageInterface
from .transactions import Transaction, TransactionRepository, TransactionType, normalize_reference


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AccountLedger:
    """
    Creates accounts and applies deposits and withdrawals atomically.

    Every read and write operation takes the authenticated customer-facing
    user id of the caller and checks existence before ownership, so a
    missing account is always NotFound and someone else's account is always
    Forbidden.
    """

    def __init__(
        self,
        storage: StorageInterface,
        accounts: Optional[AccountRepository] = None,
        transactions: Optional[TransactionRepository] = None,
        attempt_recorder: Optional[AttemptRecorder] = None,
        clock: Optional[Callable[[], datetime]] = None,
        max_transaction_amount: Money = MAX_TRANSACTION_AMOUNT,
        max_account_number_attempts: int = MAX_ACCOUNT_NUMBER_ATTEMPTS
    ):
        self.storage = storage
        self.accounts = accounts or AccountRepository(storage)
        self.transactions = transactions or TransactionRepository(storage)
        self.attempt_recorder = attempt_recorder
        self.clock = clock or utc_now
        self.max_transaction_amount = max_transaction_amount
        self.max_account_number_attempts = max_account_number_attempts

    def create_account(
        self,
        user_id: str,
        name: str,
        account_type: AccountType = AccountType.PERSONAL
    ) -> Account:
        """
        Open a new account with a zero balance

        Args:
            user_id: Customer-facing id of the owner
            name: Account name
            account_type: Product type

        Returns:
            Created Account

        Raises:
            ConflictError: If no free account number was found
        """
        now = self.clock()
        created = []

        def taken(account_number: str) -> bool:
            # A number that passed the existence check can still lose an
            # insert race; that counts as a collision against the same budget
            if self.accounts.exists(account_number):
                return True
            account = Account(
                account_number=account_number,
                sort_code=SORT_CODE,
                name=name,
                account_type=account_type,
                balance=Money.zero(Currency.GBP),
                currency=Currency.GBP,
                user_id=user_id,
                created_at=now,
                updated_at=now,
            )
            try:
                self.accounts.insert(account)
            except DuplicateRecordError:
                return True
            created.append(account)
            return False

        allocate_account_number(
            taken,
            recorder=self.attempt_recorder,
            max_attempts=self.max_account_number_attempts
        )
        return created[0]

    def apply_transaction(
        self,
        account_number: str,
        user_id: str,
        amount: Money,
        transaction_type: TransactionType,
        reference: Optional[str] = None
    ) -> Transaction:
        """
        Move money into or out of an account

        Args:
            account_number: Target account
            user_id: Customer-facing id of the requester
            amount: Amount in (0.00, 10000.00]
            transaction_type: DEPOSIT or WITHDRAWAL
            reference: Optional free-text reference; empty means absent

        Returns:
            The committed Transaction

        Raises:
            InvalidAmountError: If the amount is out of range
            NotFoundError: If the account does not exist
            ForbiddenError: If the account belongs to another user
            InsufficientFundsError: If a withdrawal would make the balance negative
        """
        validate_transaction_amount(amount, self.max_transaction_amount)
        reference = normalize_reference(reference)

        with self.storage.lock(self.accounts.table, account_number):
            with self.storage.atomic():
                account = self._load_owned_account(account_number, user_id)

                if amount.currency != account.currency:
                    raise ValueError(
                        f"Cannot apply {amount.currency.code} to a {account.currency.code} account"
                    )

                if transaction_type == TransactionType.DEPOSIT:
                    new_balance = account.balance + amount
                elif transaction_type == TransactionType.WITHDRAWAL:
                    new_balance = account.balance - amount
                    if new_balance.is_negative():
                        raise InsufficientFundsError(
                            f"Insufficient funds. Current balance: {account.balance.to_string()}, "
                            f"Withdrawal amount: {amount.to_string()}"
                        )
                else:
                    raise ValueError(f"Unsupported transaction type: {transaction_type}")

                now = self.clock()
                account.balance = new_balance
                account.updated_at = now
                self.accounts.update(account)

                transaction = Transaction(
                    transaction_id=generate_transaction_id(),
                    amount=amount,
                    currency=account.currency,
                    transaction_type=transaction_type,
                    reference=reference,
                    user_id=user_id,
                    account_number=account.account_number,
                    created_at=now,
                )
                self.transactions.insert(transaction)

        return transaction

    def deposit(
        self,
        account_number: str,
        user_id: str,
        amount: Money,
        reference: Optional[str] = None
    ) -> Transaction:
        """Make a deposit"""
        return self.apply_transaction(account_number, user_id, amount, TransactionType.DEPOSIT, reference)

    def withdraw(
        self,
        account_number: str,
        user_id: str,
        amount: Money,
        reference: Optional[str] = None
    ) -> Transaction:
        """Make a withdrawal"""
        return self.apply_transaction(account_number, user_id, amount, TransactionType.WITHDRAWAL, reference)

    def update_account_metadata(
        self,
        account_number: str,
        user_id: str,
        name: Optional[str] = None,
        account_type: Optional[AccountType] = None
    ) -> Account:
        """
        Change an account's name and/or type

        Fields left as None are not touched. When no supplied field differs
        from the stored value nothing is written and updated_at is kept.
        """
        with self.storage.lock(self.accounts.table, account_number):
            with self.storage.atomic():
                account = self._load_owned_account(account_number, user_id)

                changed = False
                if name is not None and name != account.name:
                    account.name = name
                    changed = True
                if account_type is not None and account_type != account.account_type:
                    account.account_type = account_type
                    changed = True

                if not changed:
                    return account

                account.updated_at = self.clock()
                self.accounts.update(account)

        return account

    def get_account(self, account_number: str, user_id: str) -> Account:
        """Get an account owned by the requester"""
        return self._load_owned_account(account_number, user_id)

    def list_accounts_for_user(self, user_id: str) -> List[Account]:
        """All accounts of a user, newest first"""
        return self.accounts.list_for_user(user_id)

    def list_transactions_for_account(self, account_number: str, user_id: str) -> List[Transaction]:
        """All transactions of an owned account, newest first"""
        self._load_owned_account(account_number, user_id)
        return self.transactions.list_for_account(account_number)

    def get_transaction(self, account_number: str, transaction_id: str, user_id: str) -> Transaction:
        """Get one transaction of an owned account"""
        self._load_owned_account(account_number, user_id)

        transaction = self.transactions.get(transaction_id)
        if not transaction or transaction.account_number != account_number:
            raise NotFoundError("Transaction not found")
        return transaction

    def _load_owned_account(self, account_number: str, user_id: str) -> Account:
        account = self.accounts.get(account_number)
        if not account:
            raise NotFoundError("Bank account not found")
        if not account.is_owned_by(user_id):
            raise ForbiddenError("Not authorized to access this account")
        return account
