"""
Tests for identifier generation and bounded account-number allocation
"""

import logging
import re

import pytest

from retail_banking.errors import ConflictError
from retail_banking.identifiers import (
    MAX_ACCOUNT_NUMBER_ATTEMPTS, LoggingAttemptRecorder, NullAttemptRecorder,
    allocate_account_number, generate_account_number, generate_transaction_id,
    generate_user_id, is_valid_account_number, is_valid_phone_number,
    is_valid_transaction_id, is_valid_user_id
)


class RecordingAttemptRecorder:
    def __init__(self):
        self.attempts = []

    def record_attempt(self, attempt_number, max_attempts):
        self.attempts.append((attempt_number, max_attempts))


class TestGenerators:
    """Test identifier formats"""

    def test_user_id_format(self):
        """Test user ids are usr- plus 16 hex characters"""
        for _ in range(50):
            user_id = generate_user_id()
            assert re.fullmatch(r"usr-[0-9a-f]{16}", user_id)
            assert is_valid_user_id(user_id)

    def test_transaction_id_format(self):
        """Test transaction ids are tan- plus 16 hex characters"""
        for _ in range(50):
            transaction_id = generate_transaction_id()
            assert re.fullmatch(r"tan-[0-9a-f]{16}", transaction_id)
            assert is_valid_transaction_id(transaction_id)

    def test_account_number_format(self):
        """Test account numbers are 01 followed by six digits"""
        for _ in range(200):
            account_number = generate_account_number()
            assert re.fullmatch(r"01\d{6}", account_number)
            assert "01000000" <= account_number <= "01999999"

    def test_generated_ids_are_distinct(self):
        """Test a batch of ids contains no duplicates"""
        ids = {generate_transaction_id() for _ in range(1000)}
        assert len(ids) == 1000


class TestPredicates:
    """Test identifier validation predicates"""

    def test_account_number_predicate(self):
        """Test account number validation"""
        assert is_valid_account_number("01234567")
        for bad in ["0123456", "012345678", "02345678", "01abcdef", "", None]:
            assert not is_valid_account_number(bad)

    def test_prefixed_id_predicates(self):
        """Test user and transaction id validation"""
        assert is_valid_user_id("usr-abc123")
        assert not is_valid_user_id("usr-")
        assert not is_valid_user_id("tan-abc123")
        assert not is_valid_user_id("usr-abc_123")

        assert is_valid_transaction_id("tan-XYZ789")
        assert not is_valid_transaction_id("usr-XYZ789")
        assert not is_valid_transaction_id("tan-")

    def test_phone_number_predicate(self):
        """Test international phone number format"""
        assert is_valid_phone_number("+447700900123")
        assert is_valid_phone_number("+12")
        for bad in ["447700900123", "+0123456", "+1", "+1234567890123456", "+44 7700"]:
            assert not is_valid_phone_number(bad)


class TestAllocateAccountNumber:
    """Test bounded collision retry"""

    def test_first_free_candidate_is_returned(self):
        """Test allocation returns the first candidate not taken"""
        candidates = iter(["01000001", "01000002", "01000003"])
        taken = {"01000001", "01000002"}
        recorder = RecordingAttemptRecorder()

        result = allocate_account_number(
            lambda number: number in taken,
            recorder=recorder,
            generator=lambda: next(candidates)
        )

        assert result == "01000003"
        assert recorder.attempts == [(1, 20), (2, 20)]

    def test_no_collision_records_nothing(self):
        """Test the recorder is not called when the first candidate is free"""
        recorder = RecordingAttemptRecorder()
        result = allocate_account_number(lambda number: False, recorder=recorder)

        assert is_valid_account_number(result)
        assert recorder.attempts == []

    def test_exhaustion_raises_conflict(self):
        """Test exactly max_attempts existence checks before ConflictError"""
        calls = []
        recorder = RecordingAttemptRecorder()

        def exists(number):
            calls.append(number)
            return True

        with pytest.raises(ConflictError):
            allocate_account_number(exists, recorder=recorder)

        assert MAX_ACCOUNT_NUMBER_ATTEMPTS == 20
        assert len(calls) == 20
        assert [attempt for attempt, _ in recorder.attempts] == list(range(1, 21))
        assert all(maximum == 20 for _, maximum in recorder.attempts)

    def test_custom_attempt_limit(self):
        """Test a configured attempt limit is honored"""
        calls = []

        def exists(number):
            calls.append(number)
            return True

        with pytest.raises(ConflictError):
            allocate_account_number(exists, recorder=NullAttemptRecorder(), max_attempts=3)

        assert len(calls) == 3

    def test_logging_recorder_emits_warning(self, caplog):
        """Test the logging recorder writes one warning per collision"""
        logger = logging.getLogger("tests.identifiers")
        recorder = LoggingAttemptRecorder(logger)

        with caplog.at_level(logging.WARNING, logger="tests.identifiers"):
            recorder.record_attempt(3, 20)

        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.levelname == "WARNING"
        assert "3/20" in record.getMessage()
        assert record.extra == {"attempt": 3, "max_attempts": 20}
