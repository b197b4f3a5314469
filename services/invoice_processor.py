"""
services/invoice_processor.py
-----------------------------
The due-invoice sweep.

For every active invoice whose next send date has arrived:
    1. file a historical (Pending) copy of the occurrence,
    2. deliver it,
    3. on success advance the recurring definition to its next date,
       on failure delete the historical copy so it is retried next sweep,
    4. write an email log entry against the recurring definition.

Records are handled one at a time with a pause between deliveries. A failure
on one record never stops the rest of the batch.
"""

import asyncio
from datetime import datetime
from typing import Awaitable, Callable, Optional

from config import SEND_PACING_SECONDS
from models.email_log import OUTCOME_FAILED, OUTCOME_SUCCESS
from models.invoice import ScheduledInvoice
from models.processing import (
    RESULT_ERROR,
    RESULT_SUCCESS,
    DeliveryResult,
    InvoiceOutcome,
    SweepSummary,
)
from repositories.email_log_repo import EmailLogRepository
from repositories.invoice_repo import InvoiceRepository
from services.email_gateway import DeliveryGateway, build_gateway
from services.schedule_calc import compute_next_send_date, now_in_reference_tz, to_reference_tz
from utils.logger import get_logger

logger = get_logger(__name__)


async def deliver_safely(gateway: DeliveryGateway, invoice: ScheduledInvoice) -> DeliveryResult:
    """Call the gateway, turning any exception into a failed result."""
    try:
        return await gateway.deliver(invoice)
    except Exception as e:
        logger.error(f"❌ Gateway raised while delivering to {invoice.recipient}: {e}")
        return DeliveryResult(success=False, error=str(e) or e.__class__.__name__)


def log_attempt(
    logs: EmailLogRepository,
    invoice: ScheduledInvoice,
    outcome: str,
    error: Optional[str] = None,
) -> None:
    """Append to the email log. A failing log store never changes the delivery outcome."""
    try:
        logs.append(invoice.id, invoice.recipient, outcome, error)
    except Exception as e:
        logger.error(f"Could not log {outcome} attempt for invoice #{invoice.id}: {e}")


class DueInvoiceProcessor:
    """
    Processes every invoice that is due, sequentially.

    Holds no global state: the repositories, gateway and pacing are passed in
    (or built from configuration), so triggers can share one instance.
    """

    def __init__(
        self,
        invoice_repo: Optional[InvoiceRepository] = None,
        log_repo: Optional[EmailLogRepository] = None,
        gateway: Optional[DeliveryGateway] = None,
        pacing_seconds: float = SEND_PACING_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.repo = invoice_repo or InvoiceRepository()
        self.logs = log_repo or EmailLogRepository()
        self.gateway = gateway or build_gateway()
        self.pacing_seconds = pacing_seconds
        self._sleep = sleep

    async def process_due_invoices(self, now: Optional[datetime] = None) -> SweepSummary:
        """
        Run one sweep.

        Args:
            now: The current instant; defaults to the wall clock. Normalized to
                the reference timezone before computing "today".

        Returns:
            SweepSummary with counts and one InvoiceOutcome per due record.
        """
        now = to_reference_tz(now) if now else now_in_reference_tz()
        today = now.date()
        summary = SweepSummary()

        due = self.repo.list_active_due_by(today)
        if not due:
            logger.info(f"📋 No invoices due on or before {today}")
            return summary

        logger.info(f"📧 {len(due)} invoice(s) due on or before {today}")

        for index, invoice in enumerate(due):
            if index > 0 and self.pacing_seconds > 0:
                await self._sleep(self.pacing_seconds)
            summary.add(await self._process_one(invoice, now))

        logger.info(
            f"✅ Sweep finished: {summary.processed} processed, "
            f"{summary.succeeded} sent, {summary.failed} failed"
        )
        return summary

    async def _process_one(self, invoice: ScheduledInvoice, now: datetime) -> InvoiceOutcome:
        logger.info(f"📤 Processing '{invoice.concept}' #{invoice.id} for {invoice.recipient}")
        try:
            history = self.repo.add(invoice.snapshot(sent_at=now, send_date=now.date()))
            logger.info(f"📋 Historical record #{history.id} created for #{invoice.id}")

            result = await deliver_safely(self.gateway, history)

            if not result.success:
                self.repo.delete(history.id)
                log_attempt(self.logs, invoice, OUTCOME_FAILED, result.error)
                logger.error(
                    f"❌ Delivery to {invoice.recipient} failed, historical record "
                    f"#{history.id} removed: {result.error}"
                )
                return InvoiceOutcome(
                    id=invoice.id,
                    recipient=invoice.recipient,
                    concept=invoice.concept,
                    status=RESULT_ERROR,
                    error=result.error,
                )

            next_date = compute_next_send_date(invoice.cadence, invoice.cut_off_day, now)
            self.repo.update(invoice.id, last_sent=now, next_send_date=next_date)
            log_attempt(self.logs, invoice, OUTCOME_SUCCESS)
            logger.info(f"✅ Sent '{invoice.concept}' to {invoice.recipient}; next send {next_date}")
            return InvoiceOutcome(
                id=invoice.id,
                recipient=invoice.recipient,
                concept=invoice.concept,
                status=RESULT_SUCCESS,
                history_record_id=history.id,
            )

        except Exception as e:
            error = str(e) or e.__class__.__name__
            logger.exception(f"❌ Unexpected error processing invoice #{invoice.id}: {error}")
            log_attempt(self.logs, invoice, OUTCOME_FAILED, error)
            return InvoiceOutcome(
                id=invoice.id,
                recipient=invoice.recipient,
                concept=invoice.concept,
                status=RESULT_ERROR,
                error=error,
            )
