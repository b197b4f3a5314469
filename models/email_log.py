"""
models/email_log.py
-------------------
Audit trail entry written once per delivery attempt.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

OUTCOME_SUCCESS = "success"
OUTCOME_FAILED = "failed"


@dataclass
class EmailLog:
    """
    Append-only record of a single delivery attempt.

    Attributes:
        invoice_id: The recurring definition (or one-time invoice) the attempt belongs to.
        recipient: Address the email was sent to.
        outcome: 'success' | 'failed'.
        error_message: Provider or processing error, if any.
        id: Database primary key (None for new records).
        sent_at: Timestamp of the attempt.
    """
    invoice_id: str
    recipient: str
    outcome: str  # 'success' | 'failed'
    error_message: Optional[str] = None
    id: Optional[int] = None
    sent_at: Optional[datetime] = None
