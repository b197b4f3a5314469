"""
services/email_gateway.py
-------------------------
Delivery gateways: render an invoice and transmit it to its recipient.

Two implementations share one interface and are picked by configuration
in :func:`build_gateway`:
    - ResendGateway: real delivery through the Resend REST API.
    - SimulatedGateway: renders everything but only logs the send
      (used when RESEND_API_KEY is not configured).
"""

import asyncio
import base64
from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

import httpx

from config import (
    EMAIL_FROM,
    EMAIL_TIMEOUT_SECONDS,
    RESEND_API_KEY,
    RESEND_API_URL,
    SIMULATED_SEND_DELAY_SECONDS,
)
from models.invoice import ScheduledInvoice
from models.processing import DeliveryResult
from services.email_template import render_email_html, render_subject
from services.pdf_service import render_invoice_pdf
from services.schedule_calc import reference_today
from utils.formatting import cadence_label, format_amount, invoice_number
from utils.logger import get_logger

logger = get_logger(__name__)


class DeliveryGateway(ABC):
    """Renders an invoice document and sends it as one unit."""

    name: str = "gateway"

    @property
    @abstractmethod
    def configured(self) -> bool:
        """True when emails actually leave the system."""

    @abstractmethod
    async def deliver(self, invoice: ScheduledInvoice) -> DeliveryResult:
        """
        Render and transmit the invoice.

        Implementations report provider failures as an unsuccessful
        DeliveryResult; callers still treat a raised exception as a failure.
        """

    async def aclose(self) -> None:
        """Release network resources, if any."""


class SimulatedGateway(DeliveryGateway):
    """Renders the PDF and logs the email instead of sending it."""

    name = "simulated"

    def __init__(self, delay_seconds: float = SIMULATED_SEND_DELAY_SECONDS):
        self.delay_seconds = delay_seconds

    @property
    def configured(self) -> bool:
        return False

    async def deliver(self, invoice: ScheduledInvoice) -> DeliveryResult:
        issued_on = reference_today()
        pdf = render_invoice_pdf(invoice, issued_on)
        logger.info(
            f"📧 [SIMULATED] Invoice {invoice_number(invoice.id)} to {invoice.recipient}: "
            f"{invoice.concept} {format_amount(invoice.amount)} ({cadence_label(invoice.cadence)}), "
            f"PDF {len(pdf)} bytes"
        )
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)
        return DeliveryResult(success=True, message_id=f"simulated-{invoice.id}")


class ResendGateway(DeliveryGateway):
    """Sends the invoice email with the PDF attached through Resend."""

    name = "resend"

    def __init__(
        self,
        api_key: str,
        sender: str = EMAIL_FROM,
        api_url: str = RESEND_API_URL,
        timeout: float = EMAIL_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not api_key:
            raise ValueError("ResendGateway requires an API key")
        self.api_key = api_key
        self.sender = sender
        self.api_url = api_url
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def configured(self) -> bool:
        return True

    def _payload(self, invoice: ScheduledInvoice, issued_on: date) -> dict:
        pdf = render_invoice_pdf(invoice, issued_on)
        return {
            "from": self.sender,
            "to": [invoice.recipient],
            "subject": render_subject(invoice, issued_on),
            "html": render_email_html(invoice, issued_on),
            "attachments": [
                {
                    "filename": f"factura-{invoice_number(invoice.id)}.pdf",
                    "content": base64.b64encode(pdf).decode("ascii"),
                }
            ],
        }

    async def deliver(self, invoice: ScheduledInvoice) -> DeliveryResult:
        payload = self._payload(invoice, reference_today())
        try:
            response = await self._client.post(
                self.api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.HTTPError as e:
            logger.error(f"❌ Resend request failed for {invoice.recipient}: {e}")
            return DeliveryResult(success=False, error=f"Error de conexión con el servicio de correo: {e}")

        if response.is_success:
            try:
                body = response.json()
            except ValueError:
                body = None
            message_id = body.get("id") if isinstance(body, dict) else None
            logger.info(f"✅ Email sent to {invoice.recipient} (Resend id {message_id})")
            return DeliveryResult(success=True, message_id=message_id)

        try:
            detail = response.json().get("message") or response.text
        except ValueError:
            detail = response.text
        logger.error(f"❌ Resend rejected email to {invoice.recipient}: {response.status_code} {detail}")
        return DeliveryResult(success=False, error=detail or f"HTTP {response.status_code}")

    async def aclose(self) -> None:
        await self._client.aclose()


def build_gateway(api_key: str = RESEND_API_KEY) -> DeliveryGateway:
    """Pick the delivery gateway for the current configuration."""
    if api_key:
        logger.info("✅ RESEND_API_KEY configured. Emails will be sent for real.")
        return ResendGateway(api_key=api_key)
    logger.warning("⚠️ RESEND_API_KEY not configured. Emails will be simulated.")
    return SimulatedGateway()
