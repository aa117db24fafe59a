"""
Input Validation Utilities for psup.

Provides validation functions for user input with consistent error handling.
"""

import re
from typing import List, Optional, Tuple

from .config import PROBLEM_ID_PATTERN, MAX_PROBLEM_ID_LENGTH, MAX_ACTIVITY_DAYS
from .errors import ValidationError

VALID_CHAT_ROLES = ("user", "assistant")


def validate_problem_id(problem_id: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a problem identifier.

    Args:
        problem_id: The identifier to validate

    Returns:
        Tuple of (is_valid, error_message)
        If valid, returns (True, None)
        If invalid, returns (False, "error description")
    """
    if not problem_id:
        return False, "Problem id cannot be empty"

    problem_id = problem_id.strip()

    if not problem_id:
        return False, "Problem id cannot be empty"

    if len(problem_id) > MAX_PROBLEM_ID_LENGTH:
        return False, f"Problem id must be at most {MAX_PROBLEM_ID_LENGTH} characters"

    if not re.match(PROBLEM_ID_PATTERN, problem_id):
        return False, "Problem id can only contain letters, numbers, underscores, and hyphens"

    return True, None


def validate_days(days: int) -> Tuple[bool, Optional[str]]:
    """
    Validate the size of an activity window.

    Args:
        days: Number of days to look back

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(days, int) or isinstance(days, bool):
        return False, "Days must be an integer"

    if days < 1:
        return False, "Days must be at least 1"

    if days > MAX_ACTIVITY_DAYS:
        return False, f"Days must be at most {MAX_ACTIVITY_DAYS}"

    return True, None


def validate_chat_messages(messages: List[dict]) -> Tuple[bool, Optional[str]]:
    """
    Validate a chat transcript before it is forwarded or stored.

    Args:
        messages: List of {"role", "content"} dicts

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not messages:
        return False, "Messages cannot be empty"

    for i, message in enumerate(messages):
        role = message.get("role")
        if role not in VALID_CHAT_ROLES:
            return False, f"Message {i} has invalid role: {role!r}"
        if not isinstance(message.get("content"), str):
            return False, f"Message {i} content must be a string"

    return True, None


def sanitize_problem_id(problem_id: str) -> str:
    """
    Sanitize a problem id by stripping whitespace.

    Args:
        problem_id: Raw identifier input

    Returns:
        Sanitized identifier
    """
    return problem_id.strip() if problem_id else ""


def require_problem_id(problem_id: str) -> str:
    """Sanitize and validate a problem id, raising ValidationError when invalid."""
    problem_id = sanitize_problem_id(problem_id)
    is_valid, error = validate_problem_id(problem_id)
    if not is_valid:
        raise ValidationError(error, detail=f"Got: {problem_id!r}")
    return problem_id


def require_days(days: int) -> int:
    """Validate an activity window, raising ValidationError when invalid."""
    is_valid, error = validate_days(days)
    if not is_valid:
        raise ValidationError(error)
    return days
