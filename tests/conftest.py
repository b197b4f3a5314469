import os

os.environ["CRON_SECRET"] = "test-secret"
os.environ["RESEND_API_KEY"] = ""
os.environ["TELEGRAM_BOT_TOKEN"] = ""
os.environ["GEMINI_API_KEY"] = ""
os.environ["REFERENCE_TIMEZONE"] = "America/Bogota"
os.environ["SIMULATED_SEND_DELAY_SECONDS"] = "0"
os.environ["SEND_PACING_SECONDS"] = "0"
os.environ["ALLOWED_USER_IDS"] = ""

import uuid  # noqa: E402
from dataclasses import replace  # noqa: E402
from datetime import date, datetime, timedelta  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from dateutil import tz  # noqa: E402

from models.email_log import EmailLog  # noqa: E402
from models.invoice import ScheduledInvoice  # noqa: E402
from models.processing import DeliveryResult  # noqa: E402
from services.email_gateway import DeliveryGateway  # noqa: E402

BOGOTA = tz.gettz("America/Bogota")

_UPDATABLE = {"active", "status", "next_send_date", "last_sent"}


class InMemoryInvoiceRepository:
    """Same interface as InvoiceRepository, backed by a dict."""

    def __init__(self):
        self.rows: dict[str, ScheduledInvoice] = {}
        self._clock = datetime(2024, 1, 1, tzinfo=tz.UTC)
        self.deleted: list[str] = []

    def add(self, invoice: ScheduledInvoice) -> ScheduledInvoice:
        invoice.id = str(uuid.uuid4())
        if invoice.created_at is None:
            self._clock += timedelta(seconds=1)
            invoice.created_at = self._clock
        self.rows[invoice.id] = replace(invoice)
        return invoice

    def get_by_id(self, invoice_id: str) -> Optional[ScheduledInvoice]:
        row = self.rows.get(invoice_id)
        return replace(row) if row else None

    def list_active_due_by(self, day: date) -> list[ScheduledInvoice]:
        due = [
            r for r in self.rows.values()
            if r.active and r.next_send_date is not None and r.next_send_date <= day
        ]
        due.sort(key=lambda r: (r.next_send_date, r.created_at))
        return [replace(r) for r in due]

    def list_active(self) -> list[ScheduledInvoice]:
        rows = [r for r in self.rows.values() if r.active]
        rows.sort(key=lambda r: (r.next_send_date, r.created_at))
        return [replace(r) for r in rows]

    def list_history(self) -> list[ScheduledInvoice]:
        rows = [r for r in self.rows.values() if not r.active]
        rows.sort(key=lambda r: r.created_at, reverse=True)
        return [replace(r) for r in rows]

    def list_all(self) -> list[ScheduledInvoice]:
        rows = sorted(self.rows.values(), key=lambda r: r.created_at, reverse=True)
        return [replace(r) for r in rows]

    def update(self, invoice_id: str, **fields) -> bool:
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update invoice fields: {sorted(unknown)}")
        row = self.rows.get(invoice_id)
        if row is None:
            return False
        for name, value in fields.items():
            setattr(row, name, value)
        return True

    def delete(self, invoice_id: str) -> bool:
        self.deleted.append(invoice_id)
        return self.rows.pop(invoice_id, None) is not None


class InMemoryEmailLogRepository:
    def __init__(self):
        self.entries: list[EmailLog] = []

    def append(self, invoice_id, recipient, outcome, error_message=None) -> None:
        self.entries.append(EmailLog(
            id=len(self.entries) + 1,
            invoice_id=invoice_id,
            recipient=recipient,
            outcome=outcome,
            error_message=error_message,
            sent_at=datetime.now(tz=tz.UTC),
        ))

    def list_for_invoice(self, invoice_id: str) -> list[EmailLog]:
        return [e for e in reversed(self.entries) if e.invoice_id == invoice_id]


class ScriptedGateway(DeliveryGateway):
    """
    Test gateway. Fails for recipients listed in ``fail_for`` and raises for
    those in ``raise_for``; records every invoice it was asked to deliver.
    """

    name = "scripted"

    def __init__(self, fail_for=(), raise_for=(), configured=False):
        self.fail_for = set(fail_for)
        self.raise_for = set(raise_for)
        self._configured = configured
        self.delivered: list[ScheduledInvoice] = []
        self.closed = False

    @property
    def configured(self) -> bool:
        return self._configured

    async def deliver(self, invoice: ScheduledInvoice) -> DeliveryResult:
        self.delivered.append(invoice)
        if invoice.recipient in self.raise_for:
            raise RuntimeError("SMTP exploded")
        if invoice.recipient in self.fail_for:
            return DeliveryResult(success=False, error="Mailbox unavailable")
        return DeliveryResult(success=True, message_id=f"msg-{len(self.delivered)}")

    async def aclose(self) -> None:
        self.closed = True


def bogota(year, month, day, hour=9, minute=0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=BOGOTA)


def make_invoice(**overrides) -> ScheduledInvoice:
    fields = dict(
        recipient="ana@correo.com",
        amount=1_200_000,
        cadence="monthly",
        cut_off_day=5,
        concept="Arriendo",
        active=True,
        status="Scheduled",
        next_send_date=date(2024, 3, 5),
    )
    fields.update(overrides)
    return ScheduledInvoice(**fields)


@pytest.fixture()
def invoice_repo() -> InMemoryInvoiceRepository:
    return InMemoryInvoiceRepository()


@pytest.fixture()
def log_repo() -> InMemoryEmailLogRepository:
    return InMemoryEmailLogRepository()


@pytest.fixture()
def gateway() -> ScriptedGateway:
    return ScriptedGateway()
