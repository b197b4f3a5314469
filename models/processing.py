"""
models/processing.py
--------------------
Result objects produced by delivery attempts and due-invoice sweeps.
"""

from dataclasses import asdict, dataclass, field
from typing import Optional

from models.invoice import ScheduledInvoice

RESULT_SUCCESS = "success"
RESULT_ERROR = "error"


@dataclass
class DeliveryResult:
    """Outcome of rendering and transmitting one invoice."""
    success: bool
    error: Optional[str] = None
    message_id: Optional[str] = None


@dataclass
class InvoiceOutcome:
    """Per-record entry of a sweep summary."""
    id: str
    recipient: str
    concept: str
    status: str  # 'success' | 'error'
    error: Optional[str] = None
    history_record_id: Optional[str] = None


@dataclass
class SweepSummary:
    """Aggregate result of one due-invoice sweep."""
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    results: list[InvoiceOutcome] = field(default_factory=list)

    def add(self, outcome: InvoiceOutcome) -> None:
        self.processed += 1
        if outcome.status == RESULT_SUCCESS:
            self.succeeded += 1
        else:
            self.failed += 1
        self.results.append(outcome)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SendNowResult:
    """Outcome of an immediate, user-initiated send."""
    invoice: ScheduledInvoice
    success: bool
    error: Optional[str] = None
