"""
Unit tests for call tracking.
"""

import pytest

from mockkit.errors import BoundViolationError, ConfigurationError, SourceLocation
from mockkit.tracking.tracker import DEFAULT_VERIFY_MESSAGE, CallCounter, CallTracker


@pytest.fixture
def tracker():
    return CallTracker("Account")


class TestCallCounter:
    """Test bound checks on a single counter."""

    def test_within_bounds(self):
        assert CallCounter(minimum=1, maximum=2, actual=1).violation() is None

    def test_below_minimum(self):
        assert CallCounter(minimum=1, actual=0).violation() == "minimum"

    def test_above_maximum(self):
        assert CallCounter(maximum=1, actual=2).violation() == "maximum"

    def test_unbounded_maximum(self):
        assert CallCounter(actual=1000).violation() is None


class TestCallTracker:
    """Test per-instance tracking."""

    def test_untracked_calls_are_ignored(self, tracker):
        tracker.record("int:balance()")

        assert tracker.count("int:balance()") == 0
        assert "int:balance()" not in tracker.counters

    def test_record_counts_tracked_calls(self, tracker):
        tracker.bind("int:balance()", 0, None)
        tracker.record("int:balance()")
        tracker.record("int:balance()")

        assert tracker.count("int:balance()") == 2

    def test_rebind_resets_count(self, tracker):
        tracker.bind("int:balance()")
        tracker.record("int:balance()")
        tracker.bind("int:balance()", 1, 1)

        assert tracker.count("int:balance()") == 0
        assert tracker.counters["int:balance()"].minimum == 1

    @pytest.mark.parametrize("minimum,maximum", [(-1, None), (2, 1)])
    def test_invalid_bounds(self, tracker, minimum, maximum):
        with pytest.raises(ConfigurationError, match="Invalid call count bounds"):
            tracker.bind("int:balance()", minimum, maximum)

    def test_verify_passes_within_bounds(self, tracker):
        tracker.bind("int:balance()", 1, 1)
        tracker.record("int:balance()")

        tracker.verify()

    def test_verify_reports_maximum_violation(self, tracker):
        location = SourceLocation("test.py", 12)
        tracker.bind("int:balance()", 1, 1)
        tracker.record("int:balance()")
        tracker.record("int:balance()")

        with pytest.raises(BoundViolationError) as exc_info:
            tracker.verify(DEFAULT_VERIFY_MESSAGE, location)

        error = exc_info.value
        assert error.message == DEFAULT_VERIFY_MESSAGE
        assert error.location == location
        assert error.bound == "maximum"
        assert error.expected == 1
        assert error.actual == 2
        assert error.log == [
            "ℹ Method: Account.int:balance()",
            "✓ Maximum allowed calls: 1",
            "✗ Actual calls: 2",
        ]

    def test_verify_reports_first_violation_in_bind_order(self, tracker):
        tracker.bind("int:balance()", 1, None)
        tracker.bind("None:deposit(int)", 1, None)

        with pytest.raises(BoundViolationError) as exc_info:
            tracker.verify("custom message")

        assert exc_info.value.signature == "int:balance()"
        assert exc_info.value.bound == "minimum"
        assert exc_info.value.message == "custom message"
