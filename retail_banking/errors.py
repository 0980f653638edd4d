"""
Banking Error Taxonomy

Domain-specific exceptions raised by the core and mapped to stable HTTP
status classifications by the API layer. Callers can tell "try again with
different money" apart from "you don't own this" and "this doesn't exist".
"""


class BankingError(Exception):
    """Base class for all expected banking failures"""
    code = "banking_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BankingError):
    """Malformed input that should have been caught upstream"""
    code = "validation_failed"
    status_code = 400


class InvalidAmountError(ValidationError):
    """
    Raised when a money amount is invalid:
    - not a number, negative, or zero where a positive value is required
    - more than 2 fractional digits
    - above the single-transaction maximum
    """
    code = "invalid_amount"


class UnauthorizedError(BankingError):
    code = "unauthorized"
    status_code = 401


class ForbiddenError(BankingError):
    """Entity exists but the caller does not own it"""
    code = "forbidden"
    status_code = 403


class NotFoundError(BankingError):
    code = "not_found"
    status_code = 404


class ConflictError(BankingError):
    """Uniqueness violation, e.g. exhausted account-number retries"""
    code = "conflict"
    status_code = 409


class DuplicateRecordError(ConflictError):
    """Raised by storage when inserting a key that already exists"""

    def __init__(self, table: str, record_id: str):
        super().__init__(f"Record {record_id} already exists in {table}")
        self.table = table
        self.record_id = record_id


class InsufficientFundsError(BankingError):
    """Withdrawal would drive the balance negative"""
    code = "insufficient_funds"
    status_code = 422
