"""
utils/formatting.py
-------------------
Display helpers shared by the PDF, the email body and the bot replies.
"""

from datetime import date

from config import CURRENCY

_MONTHS_ES = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)

_CADENCE_ES = {"monthly": "Mensual", "biweekly": "Quincenal"}


def format_amount(amount: int) -> str:
    """1200000 -> '$1.200.000' (es-CO grouping, no decimals)."""
    return "$" + f"{amount:,}".replace(",", ".")


def format_amount_with_currency(amount: int) -> str:
    return f"{format_amount(amount)} {CURRENCY}"


def format_date_es(day: date) -> str:
    """date(2024, 2, 29) -> '29 de febrero de 2024'."""
    return f"{day.day} de {_MONTHS_ES[day.month - 1]} de {day.year}"


def cadence_label(cadence: str) -> str:
    return _CADENCE_ES.get(cadence, cadence)


def invoice_number(invoice_id: str | None) -> str:
    """Short printable number derived from the record id."""
    if not invoice_id:
        return "0000"
    compact = invoice_id.replace("-", "")
    return compact[:8].upper()
