import pytest

from services.invoice_status import (
    InvalidStatusTransition,
    assert_transition,
    can_toggle,
    can_transition,
    initial_status,
    toggled_status,
)


class TestInitialStatus:
    def test_active_records_start_scheduled(self):
        assert initial_status(active=True) == "Scheduled"

    def test_one_time_records_start_pending(self):
        assert initial_status(active=False) == "Pending"


class TestTransitions:
    @pytest.mark.parametrize("current,target", [
        ("Scheduled", "Pending"),
        ("Pending", "Paid"),
        ("Paid", "Pending"),
    ])
    def test_allowed(self, current, target):
        assert can_transition(current, target)
        assert_transition(current, target)

    @pytest.mark.parametrize("current,target", [
        ("Scheduled", "Paid"),
        ("Pending", "Scheduled"),
        ("Paid", "Scheduled"),
        ("Pending", "Pending"),
        ("Unknown", "Paid"),
    ])
    def test_rejected(self, current, target):
        assert not can_transition(current, target)
        with pytest.raises(InvalidStatusTransition):
            assert_transition(current, target)


class TestToggle:
    def test_pending_becomes_paid(self):
        assert toggled_status("Pending") == "Paid"

    def test_paid_becomes_pending(self):
        assert toggled_status("Paid") == "Pending"

    def test_scheduled_cannot_be_toggled(self):
        assert not can_toggle("Scheduled")
        with pytest.raises(InvalidStatusTransition) as exc_info:
            toggled_status("Scheduled")
        assert exc_info.value.current == "Scheduled"

    def test_invalid_transition_is_a_value_error(self):
        assert issubclass(InvalidStatusTransition, ValueError)
