"""
handlers/invoice_handler.py
---------------------------
Operator commands for invoices.
Supports both structured commands (no AI) and AI-parsed text for /schedule.
"""

import re
from datetime import date

from telegram import Update
from telegram.ext import ContextTypes

from models.invoice import ScheduledInvoice
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from services.invoice_service import InvoiceNotFoundError, InvoiceService
from services.invoice_status import InvalidStatusTransition
from services.validation import InvoiceValidationError, validate_invoice_request
from utils.formatting import cadence_label, format_amount
from utils.logger import get_logger

logger = get_logger(__name__)

_CADENCE_MAP = {
    "mensual": "monthly", "mes": "monthly", "monthly": "monthly",
    "quincenal": "biweekly", "quincena": "biweekly", "biweekly": "biweekly",
}

_STATUS_ES = {"Scheduled": "Programada", "Pending": "Pendiente", "Paid": "Pagada"}

_LIST_LIMIT = 20


def _service(context: ContextTypes.DEFAULT_TYPE) -> InvoiceService:
    """The InvoiceService shared with the HTTP API (stored by main.build_bot)."""
    return context.bot_data["invoice_service"]


def _parse_manual(text: str, with_day: bool = True) -> dict | None:
    """
    Try to parse the structured format:
      correo | monto | frecuencia | día | concepto     (with_day=True)
      correo | monto | frecuencia | concepto           (with_day=False)
    Example:
      ana@correo.com | 1.200.000 | mensual | 5 | Arriendo
    """
    parts = [p.strip() for p in text.split("|")]
    expected = 5 if with_day else 4
    if len(parts) < expected:
        return None

    cadence = _CADENCE_MAP.get(parts[2].lower())
    if not cadence:
        return None

    return {
        "recipient": parts[0],
        "amount": re.sub(r"[^\d.,]", "", parts[1]),
        "cadence": cadence,
        "cut_off_day": parts[3] if with_day else None,
        "concept": " | ".join(parts[expected - 1:]),
    }


def _format_invoice(inv: ScheduledInvoice) -> str:
    status = _STATUS_ES.get(inv.status, inv.status)
    return (
        f"  #{inv.id[:8]} {inv.concept}: {format_amount(inv.amount)} → {inv.recipient}\n"
        f"     {cadence_label(inv.cadence)} día {inv.cut_off_day} · {status} · {inv.next_send_date}"
    )


def _find_by_prefix(service: InvoiceService, prefix: str) -> ScheduledInvoice | None:
    """Resolve the short id shown in listings to a full record."""
    prefix = prefix.strip().lower().lstrip("#")
    if len(prefix) >= 32:
        try:
            return service.get(prefix)
        except InvoiceNotFoundError:
            return None
    matches = [i for i in service.list_all() if i.id.lower().startswith(prefix)]
    return matches[0] if len(matches) == 1 else None


@authorized_only
@rate_limited
async def schedule_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /schedule - create a recurring invoice.

    Structured format (no AI):
        /schedule correo | monto | mensual|quincenal | día | concepto

    Anything else is sent to Gemini.
    """
    if not context.args:
        await update.message.reply_text(
            "📝 *Programar factura*\n\n"
            "*Formato:*\n"
            "`/schedule correo | monto | mensual | día | concepto`\n\n"
            "*Ejemplos:*\n"
            "• `/schedule ana@correo.com | 1.200.000 | mensual | 5 | Arriendo`\n"
            "• `/schedule pagos@empresa.co | 800000 | quincenal | 16 | Honorarios`\n\n"
            "*Quincenal:* solo día 1 o 16",
            parse_mode="Markdown",
        )
        return

    text = " ".join(context.args)
    parsed = _parse_manual(text)

    if parsed:
        try:
            request = validate_invoice_request(**parsed)
        except InvoiceValidationError as e:
            await update.message.reply_text(f"⚠️ {e.message}")
            return
        invoice = _service(context).schedule(request)
    else:
        result = _service(context).schedule_from_text(text)
        if not result.get("success"):
            await update.message.reply_text(f"🤔 {result.get('question', 'Intenta de nuevo.')}")
            return
        invoice = result["invoice"]

    await update.message.reply_text(
        f"🔁 Factura programada:\n"
        f"  📌 {invoice.concept}\n"
        f"  💵 {format_amount(invoice.amount)}\n"
        f"  📧 {invoice.recipient}\n"
        f"  🔄 {cadence_label(invoice.cadence)} (día {invoice.cut_off_day})\n"
        f"  📅 Primer envío: {invoice.next_send_date}\n"
        f"  🔖 #{invoice.id[:8]}"
    )


@authorized_only
@rate_limited
async def send_now_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /send_now - send a one-time invoice immediately.
    Usage: /send_now correo | monto | mensual|quincenal | concepto
    """
    parsed = _parse_manual(" ".join(context.args), with_day=False) if context.args else None
    if not parsed:
        await update.message.reply_text(
            "⚠️ Uso: /send_now correo | monto | mensual|quincenal | concepto\n"
            "Ejemplo: /send_now ana@correo.com | 350000 | mensual | Asesoría"
        )
        return

    try:
        request = validate_invoice_request(**parsed, require_cut_off_day=False)
    except InvoiceValidationError as e:
        await update.message.reply_text(f"⚠️ {e.message}")
        return

    await update.message.reply_text("⚡ Enviando factura...")
    result = await _service(context).send_now(request)
    if result.success:
        await update.message.reply_text(f"✅ Factura #{result.invoice.id[:8]} enviada a {request.recipient}")
    else:
        await update.message.reply_text(f"❌ No se pudo enviar la factura: {result.error}")


@authorized_only
@rate_limited
async def invoices_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /invoices - list active recurring invoices."""
    invoices = _service(context).list_active()
    if not invoices:
        await update.message.reply_text("📭 No hay facturas programadas.")
        return

    lines = ["🔁 Facturas programadas:\n"]
    lines.extend(_format_invoice(inv) for inv in invoices[:_LIST_LIMIT])
    monthly_total = sum(
        inv.amount * (2 if inv.cadence == "biweekly" else 1) for inv in invoices
    )
    lines.append(f"\n💵 Facturación mensual estimada: {format_amount(monthly_total)}")
    await update.message.reply_text("\n".join(lines))


@authorized_only
@rate_limited
async def history_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /history - list sent invoices and their payment status."""
    invoices = _service(context).list_history()
    if not invoices:
        await update.message.reply_text("📭 Todavía no se ha enviado ninguna factura.")
        return

    pending = sum(inv.amount for inv in invoices if inv.status == "Pending")
    lines = ["📄 Facturas enviadas:\n"]
    lines.extend(_format_invoice(inv) for inv in invoices[:_LIST_LIMIT])
    lines.append(f"\n⏳ Pendiente por cobrar: {format_amount(pending)}")
    await update.message.reply_text("\n".join(lines))


@authorized_only
@rate_limited
async def paid_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /paid <id> - toggle a sent invoice between Pendiente and Pagada.
    Usage: /paid 3f2a9c1b
    """
    if not context.args:
        await update.message.reply_text("⚠️ Uso: /paid <id>\nEjemplo: /paid 3f2a9c1b")
        return

    invoice = _find_by_prefix(_service(context), context.args[0])
    if invoice is None:
        await update.message.reply_text(f"⚠️ La factura {context.args[0]} no existe (o el id es ambiguo).")
        return

    try:
        updated = _service(context).toggle_status(invoice.id)
    except InvalidStatusTransition:
        await update.message.reply_text("⚠️ Una factura programada todavía no se ha enviado; no se puede marcar como pagada.")
        return

    await update.message.reply_text(
        f"✅ Factura #{updated.id[:8]} ahora está {_STATUS_ES.get(updated.status, updated.status)}."
    )


@authorized_only
@rate_limited
async def backfill_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /backfill <id> <YYYY-MM-DD> - file a past occurrence of a recurring invoice.
    Usage: /backfill 3f2a9c1b 2024-05-01
    """
    if not context.args or len(context.args) < 2:
        await update.message.reply_text("⚠️ Uso: /backfill <id> <AAAA-MM-DD>")
        return

    try:
        on_date = date.fromisoformat(context.args[1])
    except ValueError:
        await update.message.reply_text("⚠️ La fecha debe tener el formato AAAA-MM-DD.")
        return

    invoice = _find_by_prefix(_service(context), context.args[0])
    if invoice is None:
        await update.message.reply_text(f"⚠️ La factura {context.args[0]} no existe (o el id es ambiguo).")
        return

    try:
        history = _service(context).record_retroactive(invoice.id, on_date)
    except InvoiceValidationError as e:
        await update.message.reply_text(f"⚠️ {e.message}")
        return

    await update.message.reply_text(f"📋 Registro #{history.id[:8]} creado para {on_date}.")


@authorized_only
@rate_limited
async def process_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /process - run the due-invoice sweep now."""
    await update.message.reply_text("🔍 Revisando facturas pendientes de envío...")
    summary = await context.bot_data["processor"].process_due_invoices()

    if summary.processed == 0:
        await update.message.reply_text("📋 No hay facturas para enviar hoy.")
        return

    lines = [f"📧 {summary.processed} procesada(s): ✅ {summary.succeeded} · ❌ {summary.failed}"]
    for outcome in summary.results:
        icon = "✅" if outcome.status == "success" else "❌"
        detail = f" ({outcome.error})" if outcome.error else ""
        lines.append(f"  {icon} {outcome.concept} → {outcome.recipient}{detail}")
    await update.message.reply_text("\n".join(lines))


@authorized_only
@rate_limited
async def email_status_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /email_status - show whether emails are really sent."""
    if _service(context).gateway.configured:
        await update.message.reply_text("✅ Email configurado: los correos se envían con Resend.")
    else:
        await update.message.reply_text(
            "⚠️ Email en modo simulación. Configura RESEND_API_KEY para envíos reales."
        )
