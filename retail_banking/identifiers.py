"""
Identifier Generation Module

Produces the customer-facing identifier families:

- user ids:        usr-<16 hex chars>
- transaction ids: tan-<16 hex chars>
- account numbers: 01 followed by 6 digits (a namespace of only 10^6 values)

The account-number namespace is small enough that account creation must
retry on collision. The retry is bounded and every collision is reported to
an injected AttemptRecorder.
"""

import logging
import re
import secrets
from typing import Callable, Optional, Protocol

from .errors import ConflictError
from .logging_config import get_logger, log_action


USER_ID_PREFIX = "usr-"
TRANSACTION_ID_PREFIX = "tan-"
ACCOUNT_NUMBER_PREFIX = "01"
ACCOUNT_NUMBER_DIGITS = 6
MAX_ACCOUNT_NUMBER_ATTEMPTS = 20

_USER_ID_PATTERN = re.compile(r"^usr-[A-Za-z0-9]+$")
_TRANSACTION_ID_PATTERN = re.compile(r"^tan-[A-Za-z0-9]+$")
_ACCOUNT_NUMBER_PATTERN = re.compile(r"^01\d{6}$")
_PHONE_NUMBER_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")


def generate_user_id() -> str:
    """Generate a customer-facing user id (uniqueness enforced by storage)"""
    return f"{USER_ID_PREFIX}{secrets.token_hex(8)}"


def generate_transaction_id() -> str:
    """Generate a transaction id; 64 random bits, no collision retry"""
    return f"{TRANSACTION_ID_PREFIX}{secrets.token_hex(8)}"


def generate_account_number() -> str:
    """Generate a candidate account number between 01000000 and 01999999"""
    suffix = secrets.randbelow(10 ** ACCOUNT_NUMBER_DIGITS)
    return f"{ACCOUNT_NUMBER_PREFIX}{suffix:0{ACCOUNT_NUMBER_DIGITS}d}"


def is_valid_user_id(value: str) -> bool:
    return isinstance(value, str) and _USER_ID_PATTERN.match(value) is not None


def is_valid_transaction_id(value: str) -> bool:
    return isinstance(value, str) and _TRANSACTION_ID_PATTERN.match(value) is not None


def is_valid_account_number(value: str) -> bool:
    return isinstance(value, str) and _ACCOUNT_NUMBER_PATTERN.match(value) is not None


def is_valid_phone_number(value: str) -> bool:
    """International format: + then 2-15 digits, no leading zero"""
    return isinstance(value, str) and _PHONE_NUMBER_PATTERN.match(value) is not None


class AttemptRecorder(Protocol):
    """Observability collaborator notified of each account-number collision"""

    def record_attempt(self, attempt_number: int, max_attempts: int) -> None:
        ...


class NullAttemptRecorder:
    """Recorder that discards collision signals"""

    def record_attempt(self, attempt_number: int, max_attempts: int) -> None:
        pass


class LoggingAttemptRecorder:
    """Recorder that emits a structured warning per collision"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger("retail_banking.identifiers")

    def record_attempt(self, attempt_number: int, max_attempts: int) -> None:
        log_action(
            self.logger, "warning",
            f"Account number collision on attempt {attempt_number}/{max_attempts}",
            action="allocate_account_number", resource="account",
            extra={"attempt": attempt_number, "max_attempts": max_attempts}
        )


def allocate_account_number(
    exists: Callable[[str], bool],
    recorder: Optional[AttemptRecorder] = None,
    generator: Callable[[], str] = generate_account_number,
    max_attempts: int = MAX_ACCOUNT_NUMBER_ATTEMPTS
) -> str:
    """
    Find an account number that is not yet taken

    Args:
        exists: Existence check against the account store
        recorder: Receives (attempt_number, max_attempts) for every collision
        generator: Candidate source
        max_attempts: Maximum number of candidates to try

    Returns:
        A free account number

    Raises:
        ConflictError: If every one of max_attempts candidates was taken
    """
    recorder = recorder or NullAttemptRecorder()

    for attempt in range(1, max_attempts + 1):
        candidate = generator()
        if not exists(candidate):
            return candidate
        recorder.record_attempt(attempt, max_attempts)

    raise ConflictError(
        f"Unable to allocate a unique account number after {max_attempts} attempts"
    )
