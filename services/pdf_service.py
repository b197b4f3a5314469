"""
services/pdf_service.py
-----------------------
Renders the invoice PDF attached to every email (fpdf2, A4, core fonts).
"""

from dataclasses import dataclass
from datetime import date

from fpdf import FPDF

from config import ISSUER_ADDRESS, ISSUER_CITY, ISSUER_FULL_NAME, ISSUER_ID, ISSUER_NAME
from models.invoice import ScheduledInvoice
from utils.formatting import cadence_label, format_amount, format_date_es, invoice_number

_PRIMARY = (255, 102, 51)
_TEXT = (51, 51, 51)
_HEADER_FILL = (240, 240, 240)


@dataclass(frozen=True)
class Issuer:
    """Who the invoice is from."""
    name: str = ISSUER_NAME
    full_name: str = ISSUER_FULL_NAME
    tax_id: str = ISSUER_ID
    address: str = ISSUER_ADDRESS
    city: str = ISSUER_CITY


def _latin1(text: str) -> str:
    # Core PDF fonts only cover latin-1; anything else (emoji, CJK) becomes '?'.
    return text.encode("latin-1", "replace").decode("latin-1")


def render_invoice_pdf(
    invoice: ScheduledInvoice,
    issued_on: date,
    issuer: Issuer | None = None,
) -> bytes:
    """
    Render a one-page invoice.

    Args:
        invoice: The record being billed (usually the historical snapshot).
        issued_on: Date printed as the issue date.
        issuer: Sender details; defaults to the configured issuer.

    Returns:
        The PDF document as bytes.
    """
    issuer = issuer or Issuer()

    pdf = FPDF(orientation="P", unit="mm", format="A4")
    pdf.set_title(_latin1(f"Factura {invoice.concept}"))
    pdf.set_author(_latin1(issuer.full_name or issuer.name))
    pdf.add_page()
    pdf.set_auto_page_break(auto=True, margin=15)

    # --- Header ---
    pdf.set_font("Helvetica", "B", 28)
    pdf.set_text_color(*_PRIMARY)
    pdf.cell(110, 12, _latin1(issuer.name))
    pdf.set_font("Helvetica", "", 12)
    pdf.set_text_color(*_TEXT)
    pdf.cell(0, 12, f"No. {invoice_number(invoice.id)}", align="R", new_x="LMARGIN", new_y="NEXT")
    pdf.cell(0, 8, _latin1(format_date_es(issued_on)), align="R", new_x="LMARGIN", new_y="NEXT")
    pdf.ln(8)

    # --- Issuer ---
    pdf.set_font("Helvetica", "B", 12)
    pdf.cell(0, 7, "Datos del Emisor", new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", "", 10)
    for line in (issuer.full_name, f"C.C. {issuer.tax_id}" if issuer.tax_id else "", issuer.address, issuer.city):
        if line:
            pdf.cell(0, 6, _latin1(line), new_x="LMARGIN", new_y="NEXT")
    pdf.ln(4)

    # --- Bill To ---
    pdf.set_font("Helvetica", "B", 12)
    pdf.cell(0, 7, "Facturado a", new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", "", 10)
    pdf.cell(0, 6, _latin1(invoice.recipient), new_x="LMARGIN", new_y="NEXT")
    pdf.ln(6)

    # --- Line item ---
    pdf.set_fill_color(*_HEADER_FILL)
    pdf.set_font("Helvetica", "B", 10)
    pdf.cell(80, 8, "  Item", fill=True)
    pdf.cell(35, 8, "Frecuencia", fill=True, align="C")
    pdf.cell(25, 8, "Cantidad", fill=True, align="C")
    pdf.cell(0, 8, "Total  ", fill=True, align="R", new_x="LMARGIN", new_y="NEXT")

    pdf.set_font("Helvetica", "", 10)
    pdf.cell(80, 8, _latin1(f"  {invoice.concept}"[:60]))
    pdf.cell(35, 8, cadence_label(invoice.cadence), align="C")
    pdf.cell(25, 8, "1", align="C")
    pdf.cell(0, 8, f"{format_amount(invoice.amount)}  ", align="R", new_x="LMARGIN", new_y="NEXT")
    pdf.ln(4)

    # --- Total ---
    pdf.set_draw_color(*_PRIMARY)
    pdf.line(pdf.l_margin, pdf.get_y(), pdf.w - pdf.r_margin, pdf.get_y())
    pdf.ln(2)
    pdf.set_font("Helvetica", "B", 14)
    pdf.cell(140, 10, "  TOTAL")
    pdf.set_text_color(*_PRIMARY)
    pdf.cell(0, 10, f"{format_amount(invoice.amount)}  ", align="R", new_x="LMARGIN", new_y="NEXT")
    pdf.set_text_color(*_TEXT)
    pdf.ln(10)

    # --- Footer ---
    pdf.set_font("Helvetica", "I", 9)
    pdf.multi_cell(
        0, 5,
        _latin1(f"Factura generada automáticamente por {issuer.name}. "
                "Si tiene preguntas sobre esta factura, responda a este correo."),
    )

    return bytes(pdf.output())
