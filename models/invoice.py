"""
models/invoice.py
-----------------
Domain model for scheduled (recurring) and historical invoices.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

CADENCE_MONTHLY = "monthly"
CADENCE_BIWEEKLY = "biweekly"
CADENCES = (CADENCE_MONTHLY, CADENCE_BIWEEKLY)

BIWEEKLY_CUT_OFF_DAYS = (1, 16)

STATUS_SCHEDULED = "Scheduled"
STATUS_PENDING = "Pending"
STATUS_PAID = "Paid"
STATUSES = (STATUS_SCHEDULED, STATUS_PENDING, STATUS_PAID)


@dataclass
class ScheduledInvoice:
    """
    Represents a billing definition or one delivered occurrence of it.

    Active records are recurring definitions processed by the sweep.
    Inactive records are historical: a delivered occurrence of a recurring
    invoice or an immediate one-time send, tracked for payment.

    Attributes:
        id: Database primary key (None for new records).
        recipient: Email address the invoice is sent to.
        amount: Amount in the smallest currency unit (COP has no cents).
        cadence: 'monthly' | 'biweekly'.
        cut_off_day: Day of month anchoring the schedule (1-31, or 1/16 for biweekly).
        concept: Free-text description printed on the invoice.
        active: Whether the sweep picks this record up.
        status: 'Scheduled' | 'Pending' | 'Paid'.
        next_send_date: Next occurrence, as a date in the reference timezone.
        last_sent: Timestamp of the last successful delivery.
        created_at: Timestamp when the record was created.
    """
    recipient: str
    amount: int
    cadence: str  # 'monthly' | 'biweekly'
    cut_off_day: int
    concept: str
    active: bool = True
    status: str = STATUS_SCHEDULED
    next_send_date: Optional[date] = None
    last_sent: Optional[datetime] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def snapshot(self, sent_at: datetime, send_date: date) -> "ScheduledInvoice":
        """Historical copy of this definition for one delivered occurrence."""
        return replace(
            self,
            active=False,
            status=STATUS_PENDING,
            last_sent=sent_at,
            next_send_date=send_date,
            id=None,
            created_at=None,
        )

    def __str__(self) -> str:
        marker = "🔁" if self.active else "📄"
        return (
            f"{marker} {self.concept}: {self.amount:,} → {self.recipient} "
            f"({self.cadence}, día {self.cut_off_day}) [{self.status}] - {self.next_send_date}"
        )
