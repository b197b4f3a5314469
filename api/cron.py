"""
api/cron.py
-----------
External trigger for the due-invoice sweep, called by a cron service with
``Authorization: Bearer <CRON_SECRET>``. GET and POST behave identically. Every other verb is authenticated first and
then answered with 405.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_processor, require_cron_secret
from api.schemas import InvoiceOutcomeOut, SweepOut
from services.invoice_processor import DueInvoiceProcessor
from services.schedule_calc import now_in_reference_tz
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/cron", tags=["cron"])


@router.api_route(
    "/process-invoices",
    methods=["GET", "POST"],
    response_model=SweepOut,
    dependencies=[Depends(require_cron_secret)],
)
async def process_invoices(processor: DueInvoiceProcessor = Depends(get_processor)) -> SweepOut:
    logger.info("🚀 [CRON] Processing due invoices...")
    summary = await processor.process_due_invoices(now_in_reference_tz())
    return SweepOut(
        processed=summary.processed,
        succeeded=summary.succeeded,
        failed=summary.failed,
        results=[InvoiceOutcomeOut.from_model(r) for r in summary.results],
    )


@router.api_route(
    "/process-invoices",
    methods=["PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
    dependencies=[Depends(require_cron_secret)],
    include_in_schema=False,
)
async def process_invoices_other_methods() -> JSONResponse:
    return JSONResponse(
        status_code=405,
        content={"error": "Method Not Allowed"},
        headers={"Allow": "GET, POST"},
    )
