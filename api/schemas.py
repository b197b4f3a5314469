"""
api/schemas.py
--------------
Request and response bodies of the HTTP API.

Request fields are loosely typed on purpose: values are checked by
services.validation so the API, the bot and the AI parser share one set of
rules and error messages.
"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel

from models.email_log import EmailLog
from models.invoice import ScheduledInvoice
from models.processing import InvoiceOutcome


class InvoiceRequestBody(BaseModel):
    recipient: Optional[str] = None
    amount: Any = None
    cadence: Optional[str] = None
    cut_off_day: Any = None
    concept: Optional[str] = None


class RetroactiveRecordBody(BaseModel):
    sent_on: date


class InvoiceOut(BaseModel):
    id: str
    recipient: str
    amount: int
    cadence: str
    cut_off_day: int
    concept: str
    active: bool
    status: str
    next_send_date: Optional[date] = None
    last_sent: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, invoice: ScheduledInvoice) -> "InvoiceOut":
        return cls(
            id=invoice.id,
            recipient=invoice.recipient,
            amount=invoice.amount,
            cadence=invoice.cadence,
            cut_off_day=invoice.cut_off_day,
            concept=invoice.concept,
            active=invoice.active,
            status=invoice.status,
            next_send_date=invoice.next_send_date,
            last_sent=invoice.last_sent,
            created_at=invoice.created_at,
        )


class InvoiceListOut(BaseModel):
    success: bool = True
    invoices: list[InvoiceOut]


class ScheduleOut(BaseModel):
    success: bool = True
    invoice_id: str
    next_send_date: date
    message: str = "Factura programada exitosamente"


class SendNowOut(BaseModel):
    success: bool
    invoice_id: str
    message: str
    timestamp: datetime


class EmailLogOut(BaseModel):
    id: Optional[int] = None
    invoice_id: str
    recipient: str
    outcome: str
    error_message: Optional[str] = None
    sent_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, log: EmailLog) -> "EmailLogOut":
        return cls(
            id=log.id,
            invoice_id=log.invoice_id,
            recipient=log.recipient,
            outcome=log.outcome,
            error_message=log.error_message,
            sent_at=log.sent_at,
        )


class InvoiceOutcomeOut(BaseModel):
    id: str
    recipient: str
    concept: str
    status: str
    error: Optional[str] = None
    history_record_id: Optional[str] = None

    @classmethod
    def from_model(cls, outcome: InvoiceOutcome) -> "InvoiceOutcomeOut":
        return cls(
            id=outcome.id,
            recipient=outcome.recipient,
            concept=outcome.concept,
            status=outcome.status,
            error=outcome.error,
            history_record_id=outcome.history_record_id,
        )


class SweepOut(BaseModel):
    success: bool = True
    processed: int
    succeeded: int
    failed: int
    results: list[InvoiceOutcomeOut]


class EmailConfigOut(BaseModel):
    configured: bool
    provider: str
    message: str
