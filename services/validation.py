"""
services/validation.py
----------------------
Validation of incoming invoice requests (HTTP API, bot commands, AI parser).
"""

import re
from dataclasses import dataclass
from typing import Any, Optional

from models.invoice import BIWEEKLY_CUT_OFF_DAYS, CADENCE_BIWEEKLY, CADENCE_MONTHLY, CADENCES

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# Thousands groups commonly typed for COP amounts: "1.200.000", "1,200,000", "1 200 000".
_AMOUNT_GROUPED = re.compile(r"^\d{1,3}([.,\s_])\d{3}(?:\1\d{3})*$")
_AMOUNT_SEPARATORS = re.compile(r"[.,\s_]")

MAX_CONCEPT_LENGTH = 500


class InvoiceValidationError(ValueError):
    """Malformed invoice input. Never retried; reported back to the caller."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")

    def to_dict(self) -> dict:
        return {"error": self.message, "field": self.field}


@dataclass(frozen=True)
class InvoiceRequest:
    """A validated request to schedule or immediately send an invoice."""
    recipient: str
    amount: int
    cadence: str
    cut_off_day: int
    concept: str


def _parse_amount(value: Any) -> int:
    if isinstance(value, bool):
        raise InvoiceValidationError("amount", "El monto debe ser un número entero mayor a 0")
    if isinstance(value, int):
        amount = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise InvoiceValidationError("amount", "El monto no puede tener decimales")
        amount = int(value)
    else:
        text = str(value).strip().lstrip("$").strip()
        if _AMOUNT_GROUPED.match(text):
            text = _AMOUNT_SEPARATORS.sub("", text)
        elif re.fullmatch(r"\d+[.,]\d+", text):
            raise InvoiceValidationError("amount", "El monto no puede tener decimales")
        if not text.isdecimal():
            raise InvoiceValidationError("amount", "El monto debe ser un número entero mayor a 0")
        amount = int(text)
    if amount <= 0:
        raise InvoiceValidationError("amount", "El monto debe ser un número mayor a 0")
    return amount


def _parse_day(value: Any) -> int:
    if isinstance(value, bool):
        raise InvoiceValidationError("cut_off_day", "El día de corte debe ser un número entero")
    try:
        return int(str(value).strip())
    except ValueError:
        raise InvoiceValidationError("cut_off_day", "El día de corte debe ser un número entero") from None


def validate_invoice_request(
    recipient: Any,
    amount: Any,
    cadence: Any,
    cut_off_day: Any,
    concept: Any,
    require_cut_off_day: bool = True,
    default_cut_off_day: Optional[int] = None,
) -> InvoiceRequest:
    """
    Validate and normalize raw invoice fields.

    Args:
        recipient: Email address.
        amount: Positive integer, or a string of digits with optional thousands separators.
        cadence: 'monthly' or 'biweekly'.
        cut_off_day: 1-31 for monthly, 1 or 16 for biweekly.
        concept: Non-empty description.
        require_cut_off_day: If False, a missing day falls back to ``default_cut_off_day``.
        default_cut_off_day: Day used when none is given (defaults to 1).

    Returns:
        The normalized InvoiceRequest.

    Raises:
        InvoiceValidationError: On the first invalid field.
    """
    recipient = (recipient or "").strip() if isinstance(recipient, str) else recipient
    if not recipient:
        raise InvoiceValidationError("recipient", "El correo del destinatario es requerido")
    if not isinstance(recipient, str) or not _EMAIL_RE.match(recipient):
        raise InvoiceValidationError("recipient", "Formato de email inválido")

    if amount is None or amount == "":
        raise InvoiceValidationError("amount", "El monto es requerido")
    parsed_amount = _parse_amount(amount)

    cadence = cadence.strip().lower() if isinstance(cadence, str) else cadence
    if cadence not in CADENCES:
        raise InvoiceValidationError("cadence", 'La frecuencia debe ser "monthly" o "biweekly"')

    if cut_off_day is None or cut_off_day == "":
        if require_cut_off_day:
            raise InvoiceValidationError("cut_off_day", "El día de corte es requerido")
        day = default_cut_off_day or 1
    else:
        day = _parse_day(cut_off_day)
    if cadence == CADENCE_MONTHLY and not 1 <= day <= 31:
        raise InvoiceValidationError("cut_off_day", "Para mensual, el día debe estar entre 1 y 31")
    if cadence == CADENCE_BIWEEKLY and day not in BIWEEKLY_CUT_OFF_DAYS:
        raise InvoiceValidationError("cut_off_day", "Para quincenal, el día debe ser 1 o 16")

    concept = concept.strip() if isinstance(concept, str) else ""
    if not concept:
        raise InvoiceValidationError("concept", "El concepto es requerido")
    if len(concept) > MAX_CONCEPT_LENGTH:
        raise InvoiceValidationError("concept", f"El concepto no puede superar {MAX_CONCEPT_LENGTH} caracteres")

    return InvoiceRequest(
        recipient=recipient,
        amount=parsed_amount,
        cadence=cadence,
        cut_off_day=day,
        concept=concept,
    )
