"""
Unit Tests for Input Validation.
"""

import pytest
from psup.config import MAX_PROBLEM_ID_LENGTH
from psup.errors import ValidationError
from psup.validation import (
    validate_problem_id,
    validate_days,
    validate_chat_messages,
    sanitize_problem_id,
    require_problem_id,
    require_days,
)


class TestProblemIdValidation:
    """Tests for problem id validation."""

    def test_valid_ids(self):
        """Test various valid identifier formats."""
        valid_ids = ["1000", "31403", "A", "abc_1", "x-2"]

        for problem_id in valid_ids:
            is_valid, error = validate_problem_id(problem_id)
            assert is_valid, f"Id '{problem_id}' should be valid, got error: {error}"

    def test_empty_id(self):
        """Empty id should be invalid."""
        is_valid, error = validate_problem_id("")
        assert not is_valid
        assert "empty" in error.lower()

    def test_whitespace_id(self):
        """Whitespace-only id should be invalid."""
        is_valid, error = validate_problem_id("   ")
        assert not is_valid

    def test_id_too_long(self):
        """Id longer than 32 chars should be invalid."""
        is_valid, error = validate_problem_id("1" * 33)
        assert not is_valid
        assert "32" in error

    def test_id_at_length_limit(self):
        """Exactly 32 chars is still valid."""
        assert validate_problem_id("1" * MAX_PROBLEM_ID_LENGTH) == (True, None)

    def test_long_id_with_bad_chars_reports_length(self):
        """The length limit is checked before the character set."""
        is_valid, error = validate_problem_id("a/" * 20)
        assert not is_valid
        assert "at most" in error

    def test_unsafe_characters(self):
        """Ids that would change the URL path are rejected."""
        invalid_ids = ["10/00", "1000?x=1", "1000#a", "../1000", "10 00"]

        for problem_id in invalid_ids:
            is_valid, error = validate_problem_id(problem_id)
            assert not is_valid, f"Id '{problem_id}' should be invalid"


class TestDaysValidation:
    """Tests for activity window validation."""

    def test_valid_days(self):
        for days in [1, 7, 365, 3660]:
            is_valid, error = validate_days(days)
            assert is_valid, f"Days {days} should be valid"

    def test_zero_and_negative(self):
        assert not validate_days(0)[0]
        assert not validate_days(-5)[0]

    def test_too_large(self):
        is_valid, error = validate_days(3661)
        assert not is_valid

    def test_non_integer(self):
        assert not validate_days("7")[0]
        assert not validate_days(True)[0]


class TestChatMessageValidation:
    """Tests for chat transcript validation."""

    def test_valid_transcript(self):
        messages = [
            {"role": "user", "content": "How do I start?"},
            {"role": "assistant", "content": "Read the input."},
        ]
        assert validate_chat_messages(messages) == (True, None)

    def test_empty_transcript(self):
        assert not validate_chat_messages([])[0]

    def test_unknown_role(self):
        is_valid, error = validate_chat_messages([{"role": "system", "content": "x"}])
        assert not is_valid
        assert "role" in error


class TestSanitization:
    """Tests for input sanitization and raising helpers."""

    def test_sanitize_strips_whitespace(self):
        assert sanitize_problem_id("  1000  ") == "1000"
        assert sanitize_problem_id("1000\n") == "1000"

    def test_sanitize_handles_none(self):
        assert sanitize_problem_id(None) == ""

    def test_require_problem_id_returns_clean_id(self):
        assert require_problem_id(" 1000 ") == "1000"

    def test_require_problem_id_raises(self):
        with pytest.raises(ValidationError):
            require_problem_id("a/b")

    def test_require_days_raises(self):
        with pytest.raises(ValidationError):
            require_days(0)
        assert require_days(30) == 30
