"""
services/invoice_service.py
---------------------------
Business logic for creating, sending and tracking invoices.
Shared by the HTTP API and the Telegram operator console.
"""

from datetime import date, datetime
from typing import Optional

from ai.gemini_parser import parse_invoice_request
from models.email_log import OUTCOME_FAILED, OUTCOME_SUCCESS, EmailLog
from models.invoice import ScheduledInvoice
from models.processing import SendNowResult
from repositories.email_log_repo import EmailLogRepository
from repositories.invoice_repo import InvoiceRepository
from services.email_gateway import DeliveryGateway, build_gateway
from services.invoice_processor import deliver_safely, log_attempt
from services.invoice_status import initial_status, toggled_status
from services.schedule_calc import (
    compute_next_send_date,
    now_in_reference_tz,
    reference_noon,
    to_reference_tz,
)
from services.validation import InvoiceRequest, InvoiceValidationError, validate_invoice_request
from utils.logger import get_logger

logger = get_logger(__name__)


class InvoiceNotFoundError(LookupError):
    """Raised when an invoice id does not exist."""

    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice {invoice_id} not found")


class InvoiceService:
    """
    Handles all business logic for invoices outside the scheduled sweep.

    Responsibilities:
        - Schedule recurring invoices.
        - Send one-time invoices immediately.
        - Toggle payment status of sent invoices.
        - File retroactive historical records.
    """

    def __init__(
        self,
        invoice_repo: Optional[InvoiceRepository] = None,
        log_repo: Optional[EmailLogRepository] = None,
        gateway: Optional[DeliveryGateway] = None,
    ):
        self.repo = invoice_repo or InvoiceRepository()
        self.logs = log_repo or EmailLogRepository()
        self.gateway = gateway or build_gateway()

    # ── CREATE ────────────────────────────────────────────

    def schedule(self, request: InvoiceRequest, now: Optional[datetime] = None) -> ScheduledInvoice:
        """
        Persist a recurring invoice definition.

        Returns:
            The saved invoice, with its first next_send_date computed.
        """
        now = to_reference_tz(now) if now else now_in_reference_tz()
        invoice = ScheduledInvoice(
            recipient=request.recipient,
            amount=request.amount,
            cadence=request.cadence,
            cut_off_day=request.cut_off_day,
            concept=request.concept,
            active=True,
            status=initial_status(active=True),
            next_send_date=compute_next_send_date(request.cadence, request.cut_off_day, now),
        )
        saved = self.repo.add(invoice)
        logger.info(
            f"🔁 Scheduled '{saved.concept}' for {saved.recipient} "
            f"({saved.cadence}, day {saved.cut_off_day}); first send {saved.next_send_date}"
        )
        return saved

    def schedule_from_text(self, text: str, now: Optional[datetime] = None) -> dict:
        """
        Parse natural text with Gemini and schedule the result.

        Returns:
            Dict with 'success' and 'invoice', or 'success' False and 'question'.
        """
        parsed = parse_invoice_request(text)

        if "error" in parsed:
            return {"success": False, "question": parsed.get("question", "Intenta de nuevo.")}

        try:
            request = validate_invoice_request(
                parsed.get("recipient"),
                parsed.get("amount"),
                parsed.get("cadence"),
                parsed.get("cut_off_day"),
                parsed.get("concept"),
            )
        except InvoiceValidationError as e:
            logger.warning(f"Parsed invoice request rejected: {e}, parsed: {parsed}")
            return {"success": False, "question": e.message}

        return {"success": True, "invoice": self.schedule(request, now)}

    async def send_now(self, request: InvoiceRequest, now: Optional[datetime] = None) -> SendNowResult:
        """
        Send a one-time invoice dated today, regardless of the cut-off day.

        The record is kept even when delivery fails: it documents a
        user-initiated attempt, and the failure is in the email log.
        """
        now = to_reference_tz(now) if now else now_in_reference_tz()
        invoice = self.repo.add(ScheduledInvoice(
            recipient=request.recipient,
            amount=request.amount,
            cadence=request.cadence,
            cut_off_day=request.cut_off_day,
            concept=request.concept,
            active=False,
            status=initial_status(active=False),
            next_send_date=now.date(),
        ))
        logger.info(f"⚡ Sending invoice #{invoice.id} to {invoice.recipient} now")

        result = await deliver_safely(self.gateway, invoice)

        if result.success:
            self.repo.update(invoice.id, last_sent=now)
            invoice.last_sent = now
            log_attempt(self.logs, invoice, OUTCOME_SUCCESS)
            logger.info(f"✅ Invoice #{invoice.id} sent to {invoice.recipient}")
        else:
            log_attempt(self.logs, invoice, OUTCOME_FAILED, result.error)
            logger.error(f"❌ Immediate send of #{invoice.id} to {invoice.recipient} failed: {result.error}")

        return SendNowResult(invoice=invoice, success=result.success, error=result.error)

    def record_retroactive(self, invoice_id: str, on_date: date, now: Optional[datetime] = None) -> ScheduledInvoice:
        """
        File a historical record of a recurring invoice for a past date,
        e.g. an occurrence sent by hand before the invoice was automated.

        Raises:
            InvoiceNotFoundError: If the invoice does not exist.
            InvoiceValidationError: If the invoice is not recurring or the date is in the future.
        """
        invoice = self.get(invoice_id)
        if not invoice.active:
            raise InvoiceValidationError("invoice_id", "Solo se pueden crear registros de facturas programadas")

        today = (to_reference_tz(now) if now else now_in_reference_tz()).date()
        if on_date > today:
            raise InvoiceValidationError("date", "La fecha no puede estar en el futuro")

        history = self.repo.add(invoice.snapshot(sent_at=reference_noon(on_date), send_date=on_date))
        logger.info(f"📋 Retroactive record #{history.id} of #{invoice_id} for {on_date}")
        return history

    # ── READ ──────────────────────────────────────────────

    def get(self, invoice_id: str) -> ScheduledInvoice:
        invoice = self.repo.get_by_id(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    def list_active(self) -> list[ScheduledInvoice]:
        return self.repo.list_active()

    def list_history(self) -> list[ScheduledInvoice]:
        return self.repo.list_history()

    def list_all(self) -> list[ScheduledInvoice]:
        return self.repo.list_all()

    def email_logs(self, invoice_id: str) -> list[EmailLog]:
        self.get(invoice_id)
        return self.logs.list_for_invoice(invoice_id)

    # ── UPDATE ────────────────────────────────────────────

    def toggle_status(self, invoice_id: str) -> ScheduledInvoice:
        """
        Flip a sent invoice between Pending and Paid.

        Raises:
            InvoiceNotFoundError: If the invoice does not exist.
            InvalidStatusTransition: If the invoice is still Scheduled.
        """
        invoice = self.get(invoice_id)
        new_status = toggled_status(invoice.status)
        self.repo.update(invoice_id, status=new_status)
        logger.info(f"Invoice #{invoice_id} status {invoice.status} -> {new_status}")
        invoice.status = new_status
        return invoice
