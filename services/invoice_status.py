"""
services/invoice_status.py
--------------------------
Legal states of an invoice record and the transitions between them.

    Scheduled ──(occurrence delivered, on the historical copy)──▶ Pending
    Pending ◀──(manual toggle)──▶ Paid

Nothing re-enters Scheduled, and a record that was never sent cannot be
marked as paid.
"""

from models.invoice import STATUS_PAID, STATUS_PENDING, STATUS_SCHEDULED, STATUSES

_ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    STATUS_SCHEDULED: frozenset({STATUS_PENDING}),
    STATUS_PENDING: frozenset({STATUS_PAID}),
    STATUS_PAID: frozenset({STATUS_PENDING}),
}

_TOGGLE = {
    STATUS_PENDING: STATUS_PAID,
    STATUS_PAID: STATUS_PENDING,
}


class InvalidStatusTransition(ValueError):
    """Raised when a status change is not permitted."""

    def __init__(self, current: str, target: str | None = None):
        self.current = current
        self.target = target
        if target is None:
            msg = f"Status '{current}' cannot be toggled"
        else:
            msg = f"Invalid status transition: {current} -> {target}"
        super().__init__(msg)


def initial_status(active: bool) -> str:
    """Status of a freshly created record."""
    return STATUS_SCHEDULED if active else STATUS_PENDING


def can_transition(current: str, target: str) -> bool:
    return target in _ALLOWED_TRANSITIONS.get(current, frozenset())


def assert_transition(current: str, target: str) -> None:
    if current not in STATUSES or target not in STATUSES:
        raise InvalidStatusTransition(current, target)
    if not can_transition(current, target):
        raise InvalidStatusTransition(current, target)


def can_toggle(current: str) -> bool:
    return current in _TOGGLE


def toggled_status(current: str) -> str:
    """
    Flip a sent invoice between Pending and Paid.

    Raises:
        InvalidStatusTransition: If the record is still Scheduled (or unknown).
    """
    if not can_toggle(current):
        raise InvalidStatusTransition(current)
    target = _TOGGLE[current]
    assert_transition(current, target)
    return target
