"""
api/invoices.py
---------------
Invoice endpoints: schedule, send now, list, toggle status, history, logs, export.
"""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse, StreamingResponse

from api.dependencies import get_export_service, get_invoice_service
from api.schemas import (
    EmailLogOut,
    InvoiceListOut,
    InvoiceOut,
    InvoiceRequestBody,
    RetroactiveRecordBody,
    ScheduleOut,
    SendNowOut,
)
from services.export_service import ExportService
from services.invoice_service import InvoiceService
from services.schedule_calc import now_in_reference_tz
from services.validation import validate_invoice_request

router = APIRouter(prefix="/api/invoices", tags=["invoices"])

_EXPORT_TYPES = {
    "csv": ("text/csv; charset=utf-8", "facturas.csv"),
    "xlsx": ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", "facturas.xlsx"),
}


@router.post("/schedule", response_model=ScheduleOut)
def schedule_invoice(
    body: InvoiceRequestBody,
    service: InvoiceService = Depends(get_invoice_service),
) -> ScheduleOut:
    request = validate_invoice_request(
        body.recipient, body.amount, body.cadence, body.cut_off_day, body.concept,
    )
    invoice = service.schedule(request)
    return ScheduleOut(invoice_id=invoice.id, next_send_date=invoice.next_send_date)


@router.get("/schedule", response_model=InvoiceListOut)
def list_scheduled(service: InvoiceService = Depends(get_invoice_service)) -> InvoiceListOut:
    return InvoiceListOut(invoices=[InvoiceOut.from_model(i) for i in service.list_active()])


@router.post("/send-now")
async def send_now(
    body: InvoiceRequestBody,
    service: InvoiceService = Depends(get_invoice_service),
):
    request = validate_invoice_request(
        body.recipient, body.amount, body.cadence, body.cut_off_day, body.concept,
        require_cut_off_day=False,
    )
    result = await service.send_now(request)
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={
                "success": False,
                "invoice_id": result.invoice.id,
                "error": result.error or "Error enviando la factura por correo",
            },
        )
    return SendNowOut(
        success=True,
        invoice_id=result.invoice.id,
        message="Factura enviada exitosamente por correo",
        timestamp=now_in_reference_tz(),
    )


@router.get("", response_model=InvoiceListOut)
def list_invoices(service: InvoiceService = Depends(get_invoice_service)) -> InvoiceListOut:
    return InvoiceListOut(invoices=[InvoiceOut.from_model(i) for i in service.list_all()])


@router.get("/export")
def export_history(
    format: str = Query("csv", pattern="^(csv|xlsx)$"),
    exporter: ExportService = Depends(get_export_service),
) -> StreamingResponse:
    buffer = exporter.export_history_csv() if format == "csv" else exporter.export_history_excel()
    media_type, filename = _EXPORT_TYPES[format]
    return StreamingResponse(
        buffer,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.patch("/{invoice_id}/status", response_model=InvoiceOut)
def toggle_status(
    invoice_id: str,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceOut:
    return InvoiceOut.from_model(service.toggle_status(invoice_id))


@router.post("/{invoice_id}/history", response_model=InvoiceOut, status_code=status.HTTP_201_CREATED)
def record_retroactive(
    invoice_id: str,
    body: RetroactiveRecordBody,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceOut:
    return InvoiceOut.from_model(service.record_retroactive(invoice_id, body.sent_on))


@router.get("/{invoice_id}/logs", response_model=list[EmailLogOut])
def email_logs(
    invoice_id: str,
    service: InvoiceService = Depends(get_invoice_service),
) -> list[EmailLogOut]:
    return [EmailLogOut.from_model(log) for log in service.email_logs(invoice_id)]
