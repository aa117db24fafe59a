"""
Unit Tests for Configuration Helpers.
"""

import pytest
from psup.config import get_activity_level, PROBLEM_URL_TEMPLATE


class TestActivityLevel:
    """Tests for heatmap level bucketing."""

    def test_zero_count(self):
        """No solves means level 0."""
        assert get_activity_level(0) == 0

    def test_level_one(self):
        """1-2 solves."""
        assert get_activity_level(1) == 1
        assert get_activity_level(2) == 1

    def test_level_two(self):
        """3-5 solves."""
        assert get_activity_level(3) == 2
        assert get_activity_level(5) == 2

    def test_level_three(self):
        """6-10 solves."""
        assert get_activity_level(6) == 3
        assert get_activity_level(10) == 3

    def test_level_four(self):
        """11 or more solves."""
        assert get_activity_level(11) == 4
        assert get_activity_level(250) == 4

    def test_negative_count(self):
        assert get_activity_level(-1) == 0


class TestProblemUrl:

    def test_template_has_placeholder(self):
        assert "{problem_id}" in PROBLEM_URL_TEMPLATE
