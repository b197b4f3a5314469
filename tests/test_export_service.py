import io
from datetime import date

import pandas as pd

from conftest import bogota, make_invoice
from services.export_service import ExportService


class TestExportService:
    def test_history_frame_only_includes_sent_invoices(self, invoice_repo):
        invoice_repo.add(make_invoice())
        invoice_repo.add(make_invoice(
            active=False, status="Paid", next_send_date=date(2024, 3, 5), last_sent=bogota(2024, 3, 5),
        ))

        frame = ExportService(invoice_repo=invoice_repo).history_frame()

        assert len(frame) == 1
        row = frame.iloc[0]
        assert row["Fecha"] == "2024-03-05"
        assert row["Estado"] == "Paid"
        assert row["Frecuencia"] == "Mensual"
        assert row["Monto"] == 1_200_000

    def test_empty_history_still_has_headers(self, invoice_repo):
        service = ExportService(invoice_repo=invoice_repo)

        frame = pd.read_csv(service.export_history_csv(), encoding="utf-8-sig")

        assert list(frame.columns) == [
            "Fecha", "Correo", "Concepto", "Monto", "Frecuencia", "Estado", "Enviada", "ID",
        ]
        assert frame.empty

    def test_csv_has_bom_for_excel(self, invoice_repo):
        invoice_repo.add(make_invoice(active=False, status="Pending", concept="Diseño"))

        content = ExportService(invoice_repo=invoice_repo).export_history_csv().getvalue()

        assert content.startswith(b"\xef\xbb\xbf")
        assert "Diseño".encode("utf-8") in content

    def test_excel_summary_totals_by_status(self, invoice_repo):
        invoice_repo.add(make_invoice(active=False, status="Pending", amount=100))
        invoice_repo.add(make_invoice(active=False, status="Pending", amount=200))
        invoice_repo.add(make_invoice(active=False, status="Paid", amount=50))

        buffer = ExportService(invoice_repo=invoice_repo).export_history_excel()
        summary = pd.read_excel(io.BytesIO(buffer.getvalue()), sheet_name="Resumen")

        totals = dict(zip(summary["Estado"], summary["Total"]))
        counts = dict(zip(summary["Estado"], summary["Facturas"]))
        assert totals == {"Paid": 50, "Pending": 300}
        assert counts == {"Paid": 1, "Pending": 2}
