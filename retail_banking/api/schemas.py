"""
Pydantic schemas for API requests and responses
"""

import re
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, field_validator
from pydantic.alias_generators import to_camel

from ..accounts import Account, AccountType
from ..currency import Currency, Money, MAX_TRANSACTION_AMOUNT
from ..errors import InvalidAmountError, ValidationError
from ..identifiers import (
    is_valid_account_number, is_valid_phone_number,
    is_valid_transaction_id, is_valid_user_id
)
from ..transactions import MAX_REFERENCE_LENGTH, Transaction, TransactionType
from ..users import Address, User


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,64}$")
MAX_NAME_LENGTH = 100


class RequestModel(BaseModel):
    """
    Base for request bodies: camelCase on the wire, unknown fields rejected.

    The shared field checks apply to whichever of name, email and
    phone_number a subclass declares.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    @field_validator("name", check_fields=False)
    @classmethod
    def check_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if not value.strip():
            raise ValueError("Name cannot be empty or contain only whitespace")
        if len(value) > MAX_NAME_LENGTH:
            raise ValueError(f"Name must be at most {MAX_NAME_LENGTH} characters")
        return value

    @field_validator("email", check_fields=False)
    @classmethod
    def check_email(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not EMAIL_PATTERN.match(value):
            raise ValueError("Invalid email format")
        return value

    @field_validator("phone_number", check_fields=False)
    @classmethod
    def check_phone_number(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_valid_phone_number(value):
            raise ValueError("Phone number must be in international format (+1234567890)")
        return value


# User schemas
class AddressModel(RequestModel):
    line1: str
    line2: Optional[str] = None
    line3: Optional[str] = None
    town: str
    county: str
    postcode: str

    @field_validator("line1", "town", "county", "postcode")
    @classmethod
    def required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Field is required")
        return value

    def to_address(self) -> Address:
        return Address(
            line1=self.line1,
            line2=self.line2,
            line3=self.line3,
            town=self.town,
            county=self.county,
            postcode=self.postcode,
        )


class CreateUserRequest(RequestModel):
    name: str
    email: str
    phone_number: str
    password: str
    address: AddressModel

    @field_validator("password")
    @classmethod
    def password_policy(cls, value: str) -> str:
        if not PASSWORD_PATTERN.match(value):
            raise ValueError(
                "Password must be 8-64 characters and contain at least one lowercase letter, "
                "one uppercase letter, one digit, and one special character (@$!%*?&)"
            )
        return value


class UpdateUserRequest(RequestModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[AddressModel] = None


class LoginRequest(RequestModel):
    email: str
    password: str

    @field_validator("password")
    @classmethod
    def password_required(cls, value: str) -> str:
        if not value:
            raise ValueError("Password is required")
        return value


# Account schemas
class CreateAccountRequest(RequestModel):
    name: str
    account_type: AccountType


class UpdateAccountRequest(RequestModel):
    name: Optional[str] = None
    account_type: Optional[AccountType] = None


# Transaction schemas
class CreateTransactionRequest(RequestModel):
    amount: Union[StrictInt, StrictFloat]
    currency: str
    type: TransactionType
    reference: Optional[str] = None

    @field_validator("currency", mode="before")
    @classmethod
    def currency_code(cls, value: Any) -> str:
        if not isinstance(value, str) or value not in {currency.code for currency in Currency}:
            raise ValueError('Currency must be "GBP"')
        return value

    @field_validator("amount")
    @classmethod
    def amount_in_range(cls, value: Union[int, float]) -> Union[int, float]:
        try:
            Money.parse(value, allow_zero=False, maximum=MAX_TRANSACTION_AMOUNT)
        except InvalidAmountError as e:
            raise ValueError(e.message)
        return value

    @field_validator("reference")
    @classmethod
    def reference_length(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and len(value) > MAX_REFERENCE_LENGTH:
            raise ValueError(f"Reference must be at most {MAX_REFERENCE_LENGTH} characters")
        return value or None

    def to_money(self) -> Money:
        return Money.parse(self.amount, Currency.from_code(self.currency))


# Path parameter checks
def check_account_number(account_number: str) -> str:
    if not is_valid_account_number(account_number):
        raise ValidationError("Invalid account number format")
    return account_number


def check_transaction_id(transaction_id: str) -> str:
    if not is_valid_transaction_id(transaction_id):
        raise ValidationError("Invalid transaction id format")
    return transaction_id


def check_user_id(user_id: str) -> str:
    if not is_valid_user_id(user_id):
        raise ValidationError("Invalid user id format")
    return user_id


# Response mappers
def _timestamp(value) -> str:
    return value.isoformat()


def account_to_response(account: Account) -> Dict[str, Any]:
    return {
        "accountNumber": account.account_number,
        "sortCode": account.sort_code,
        "name": account.name,
        "accountType": account.account_type.value,
        "balance": account.balance.to_api_number(),
        "currency": account.currency.code,
        "createdTimestamp": _timestamp(account.created_at),
        "updatedTimestamp": _timestamp(account.updated_at),
    }


def transaction_to_response(transaction: Transaction) -> Dict[str, Any]:
    response = {
        "id": transaction.transaction_id,
        "amount": transaction.amount.to_api_number(),
        "currency": transaction.currency.code,
        "type": transaction.transaction_type.value,
        "userId": transaction.user_id,
        "createdTimestamp": _timestamp(transaction.created_at),
    }
    if transaction.reference is not None:
        response["reference"] = transaction.reference
    return response


def user_to_response(user: User) -> Dict[str, Any]:
    return {
        "id": user.user_id,
        "name": user.name,
        "address": user.address.to_dict(),
        "phoneNumber": user.phone_number,
        "email": user.email,
        "createdTimestamp": _timestamp(user.created_at),
        "updatedTimestamp": _timestamp(user.updated_at),
    }
