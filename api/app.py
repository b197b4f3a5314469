"""
api/app.py
----------
FastAPI application factory: routers, shared services and error mapping.
"""

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from api import cron, invoices, system
from services.email_gateway import DeliveryGateway, build_gateway
from services.export_service import ExportService
from services.invoice_processor import DueInvoiceProcessor
from services.invoice_service import InvoiceNotFoundError, InvoiceService
from services.invoice_status import InvalidStatusTransition
from services.validation import InvoiceValidationError
from utils.logger import get_logger

logger = get_logger(__name__)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(InvoiceValidationError)
    async def validation_error(request: Request, exc: InvoiceValidationError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=exc.to_dict())

    @app.exception_handler(InvoiceNotFoundError)
    async def not_found(request: Request, exc: InvoiceNotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Factura no encontrada", "invoice_id": exc.invoice_id},
        )

    @app.exception_handler(InvalidStatusTransition)
    async def invalid_transition(request: Request, exc: InvalidStatusTransition) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "error": "Una factura programada no se puede marcar como pagada",
                "status": exc.current,
            },
        )

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


def create_app(
    lifespan=None,
    gateway: Optional[DeliveryGateway] = None,
    invoice_service: Optional[InvoiceService] = None,
    processor: Optional[DueInvoiceProcessor] = None,
    export_service: Optional[ExportService] = None,
) -> FastAPI:
    """
    Build the API.

    Services not passed in are built from configuration and share one
    delivery gateway.
    """
    app = FastAPI(title="Invoice Me API", version="1.0.0", lifespan=lifespan)

    gateway = gateway or build_gateway()
    app.state.gateway = gateway
    app.state.invoice_service = invoice_service or InvoiceService(gateway=gateway)
    app.state.processor = processor or DueInvoiceProcessor(gateway=gateway)
    app.state.export_service = export_service or ExportService()
    app.state.scheduler = None

    _register_error_handlers(app)
    app.include_router(system.router)
    app.include_router(invoices.router)
    app.include_router(cron.router)
    return app
