"""
services/email_template.py
--------------------------
Subject line and HTML body of the invoice email.
"""

from datetime import date
from html import escape

from config import ISSUER_NAME
from models.invoice import ScheduledInvoice
from utils.formatting import cadence_label, format_amount_with_currency, format_date_es, invoice_number

_HTML = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Factura - {concept}</title>
</head>
<body style="font-family: Arial, sans-serif; color: #333; background-color: #f6f9fc; margin: 0; padding: 0;">
  <div style="max-width: 600px; margin: 0 auto; background: #fff; border-radius: 8px; overflow: hidden;">
    <div style="background: #FF6633; color: #fff; padding: 32px; text-align: center;">
      <div style="font-size: 28px; font-weight: bold;">{issuer}</div>
      <p style="margin: 0;">Tu factura automática está lista</p>
    </div>
    <div style="padding: 32px;">
      <h2 style="margin-top: 0;">¡Hola! Tu factura ha sido generada</h2>
      <p>Te enviamos tu factura correspondiente al período actual.</p>
      <table style="width: 100%; background: #f8f9fa; border-left: 4px solid #FF6633; padding: 16px;">
        <tr><td><strong>Concepto:</strong></td><td>{concept}</td></tr>
        <tr><td><strong>Monto:</strong></td><td style="color: #FF6633; font-weight: bold;">{amount}</td></tr>
        <tr><td><strong>Fecha de emisión:</strong></td><td>{issued_on}</td></tr>
        <tr><td><strong>Frecuencia:</strong></td><td>{cadence}</td></tr>
        <tr><td><strong>Factura No.:</strong></td><td>{number}</td></tr>
      </table>
      <p>📎 Encuentra tu factura en formato PDF adjunta a este correo.</p>
    </div>
    <div style="background: #f8f9fa; padding: 24px; text-align: center; font-size: 13px; color: #6c757d;">
      Este es un correo automático generado por {issuer}.
    </div>
  </div>
</body>
</html>
"""


def render_subject(invoice: ScheduledInvoice, issued_on: date) -> str:
    return f"Factura {invoice.concept} - {issued_on.strftime('%d/%m/%Y')}"


def render_email_html(invoice: ScheduledInvoice, issued_on: date) -> str:
    return _HTML.format(
        issuer=escape(ISSUER_NAME),
        concept=escape(invoice.concept),
        amount=escape(format_amount_with_currency(invoice.amount)),
        issued_on=escape(format_date_es(issued_on)),
        cadence=escape(cadence_label(invoice.cadence)),
        number=escape(invoice_number(invoice.id)),
    )
