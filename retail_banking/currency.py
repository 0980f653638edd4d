"""
Money Module

Exact currency amounts at a fixed 2-decimal-place scale. NEVER uses float
for monetary values; floats appear only when rendering a JSON number at the
API boundary.

No global decimal context is configured here. Every value is quantized
explicitly to its currency's precision.
"""

from decimal import Decimal, InvalidOperation
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .errors import InvalidAmountError


class Currency(Enum):
    """ISO 4217 Currency Codes with precision info"""
    GBP = ("GBP", 2)  # British Pound, 2 decimal places

    def __init__(self, code: str, precision: int):
        self.code = code
        self.precision = precision

    @property
    def quantum(self) -> Decimal:
        return Decimal(1).scaleb(-self.precision)

    @property
    def symbol(self) -> str:
        return "£"

    @classmethod
    def from_code(cls, code: str) -> "Currency":
        for currency in cls:
            if currency.code == code:
                return currency
        raise ValueError(f"Unsupported currency: {code}")


AmountInput = Union[str, int, Decimal]


def _to_decimal(value: AmountInput) -> Decimal:
    if isinstance(value, bool):
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    if isinstance(value, float):
        # JSON numbers arrive as float; their shortest repr is the intended value
        value = repr(value)
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    if not result.is_finite():
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    return result


@dataclass(frozen=True)
class Money:
    """
    Immutable money representation with currency and exact precision.

    Construction rejects (rather than rounds) any amount carrying more
    significant fractional digits than the currency allows, so every value
    held by a Money has at most 2 fractional digits.
    """
    amount: Decimal
    currency: Currency = Currency.GBP

    def __post_init__(self):
        amount = _to_decimal(self.amount)
        try:
            quantized = amount.quantize(self.currency.quantum)
        except InvalidOperation:
            # Too many digits for the default 28-digit context
            raise InvalidAmountError(f"Invalid amount: {self.amount!r}")
        if quantized != amount:
            raise InvalidAmountError(
                f"Amount {amount} has more than {self.currency.precision} decimal places"
            )
        object.__setattr__(self, 'amount', quantized)

    @classmethod
    def parse(
        cls,
        value: AmountInput,
        currency: Currency = Currency.GBP,
        allow_zero: bool = True,
        maximum: Optional["Money"] = None
    ) -> "Money":
        """
        Parse an amount, enforcing the caller's bounds

        Args:
            value: Decimal string, int or Decimal
            currency: Currency of the amount
            allow_zero: If False the amount must be strictly positive
            maximum: Inclusive upper bound

        Returns:
            Money value at the currency's scale

        Raises:
            InvalidAmountError: If the value is not a valid amount for these bounds
        """
        money = cls(_to_decimal(value), currency)
        if money.is_negative():
            raise InvalidAmountError("Amount must not be negative")
        if not allow_zero and money.is_zero():
            raise InvalidAmountError("Amount must be greater than 0.00")
        if maximum is not None and money > maximum:
            raise InvalidAmountError(f"Amount must not exceed {maximum.amount}")
        return money

    @classmethod
    def zero(cls, currency: Currency = Currency.GBP) -> "Money":
        return cls(Decimal(0), currency)

    def _check_currency(self, other: "Money", operation: str) -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Cannot {operation} Money and {type(other).__name__}")
        if self.currency != other.currency:
            raise ValueError(f"Cannot {operation} {self.currency.code} and {other.currency.code}")

    def __add__(self, other: "Money") -> "Money":
        self._check_currency(other, "add")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._check_currency(other, "subtract")
        return Money(self.amount - other.amount, self.currency)

    def __neg__(self) -> "Money":
        return Money(-self.amount, self.currency)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Money):
            return False
        return self.amount == other.amount and self.currency == other.currency

    def __hash__(self) -> int:
        return hash((self.amount, self.currency))

    def __lt__(self, other: "Money") -> bool:
        return self.compare(other) < 0

    def __le__(self, other: "Money") -> bool:
        return self.compare(other) <= 0

    def __gt__(self, other: "Money") -> bool:
        return self.compare(other) > 0

    def __ge__(self, other: "Money") -> bool:
        return self.compare(other) >= 0

    def compare(self, other: "Money") -> int:
        """Return -1, 0 or 1 as self is less than, equal to or greater than other"""
        self._check_currency(other, "compare")
        if self.amount < other.amount:
            return -1
        if self.amount > other.amount:
            return 1
        return 0

    def is_zero(self) -> bool:
        """Check if amount is exactly zero"""
        return self.amount == Decimal('0')

    def is_positive(self) -> bool:
        """Check if amount is positive"""
        return self.amount > Decimal('0')

    def is_negative(self) -> bool:
        """Check if amount is negative"""
        return self.amount < Decimal('0')

    def to_api_number(self) -> float:
        """Render as a plain JSON number with 2 decimal places"""
        return float(self.amount)

    def to_storage(self) -> str:
        """Exact string form used for persistence"""
        return str(self.amount)

    def to_string(self) -> str:
        """Format for display"""
        return f"{self.currency.symbol}{self.amount:,.{self.currency.precision}f}"

    def __str__(self) -> str:
        return self.to_string()


MAX_TRANSACTION_AMOUNT = Money(Decimal("10000.00"))


def validate_transaction_amount(
    amount: Money,
    maximum: Money = MAX_TRANSACTION_AMOUNT
) -> Money:
    """
    Validate a single transaction amount is in (0.00, maximum]

    Raises:
        InvalidAmountError: If the amount is out of range
    """
    if not isinstance(amount, Money):
        raise InvalidAmountError(f"Invalid amount: {amount!r}")
    if not amount.is_positive():
        raise InvalidAmountError("Amount must be greater than 0.00")
    if amount > maximum:
        raise InvalidAmountError(f"Amount must not exceed {maximum.amount}")
    return amount
