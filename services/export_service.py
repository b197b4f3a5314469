"""
services/export_service.py
--------------------------
Generates CSV and Excel exports of the invoice history (sent invoices and
their payment status).
"""

import io

import pandas as pd

from models.invoice import ScheduledInvoice
from repositories.invoice_repo import InvoiceRepository
from utils.formatting import cadence_label
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = ["Fecha", "Correo", "Concepto", "Monto", "Frecuencia", "Estado", "Enviada", "ID"]


class ExportService:
    """Generates downloadable invoice-history reports in CSV and Excel formats."""

    def __init__(self, invoice_repo: InvoiceRepository | None = None):
        self.repo = invoice_repo or InvoiceRepository()

    def history_frame(self) -> pd.DataFrame:
        """Historical records as a DataFrame, newest first."""
        invoices: list[ScheduledInvoice] = self.repo.list_history()
        data = [
            {
                "Fecha": inv.next_send_date.isoformat() if inv.next_send_date else "",
                "Correo": inv.recipient,
                "Concepto": inv.concept,
                "Monto": inv.amount,
                "Frecuencia": cadence_label(inv.cadence),
                "Estado": inv.status,
                "Enviada": inv.last_sent.isoformat() if inv.last_sent else "",
                "ID": inv.id,
            }
            for inv in invoices
        ]
        return pd.DataFrame(data, columns=_COLUMNS)

    def export_history_csv(self) -> io.BytesIO:
        """
        Returns:
            A BytesIO buffer containing the CSV data (UTF-8 with BOM for Excel).
        """
        df = self.history_frame()
        buffer = io.BytesIO(df.to_csv(index=False).encode("utf-8-sig"))
        logger.info(f"Exported {len(df)} invoices as CSV")
        return buffer

    def export_history_excel(self) -> io.BytesIO:
        """
        Returns:
            A BytesIO buffer containing an .xlsx workbook with a totals row per status.
        """
        df = self.history_frame()
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Facturas")

            totals = (
                df.groupby("Estado")["Monto"].agg(["count", "sum"])
                .rename(columns={"count": "Facturas", "sum": "Total"})
                .reset_index()
            )
            totals.to_excel(writer, index=False, sheet_name="Resumen")

            sheet = writer.sheets["Facturas"]
            for col_idx, col in enumerate(df.columns, 1):
                max_len = max(df[col].astype(str).map(len).max() if len(df) else 0, len(col)) + 2
                sheet.column_dimensions[sheet.cell(row=1, column=col_idx).column_letter].width = min(max_len, 50)

        buffer.seek(0)
        logger.info(f"Exported {len(df)} invoices as Excel")
        return buffer
