"""
api/dependencies.py
-------------------
FastAPI dependencies. Services live on ``app.state`` (built by create_app)
and tests swap them through ``app.dependency_overrides``.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

import config
from security.auth import verify_cron_secret
from services.email_gateway import DeliveryGateway
from services.export_service import ExportService
from services.invoice_processor import DueInvoiceProcessor
from services.invoice_service import InvoiceService
from utils.logger import get_logger

logger = get_logger(__name__)


def get_invoice_service(request: Request) -> InvoiceService:
    return request.app.state.invoice_service


def get_processor(request: Request) -> DueInvoiceProcessor:
    return request.app.state.processor


def get_export_service(request: Request) -> ExportService:
    return request.app.state.export_service


def get_gateway(request: Request) -> DeliveryGateway:
    return request.app.state.gateway


def get_cron_secret() -> str:
    return config.CRON_SECRET


def require_cron_secret(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    secret: str = Depends(get_cron_secret),
) -> None:
    """Reject any trigger call without the shared secret, whatever the verb."""
    if not verify_cron_secret(authorization, secret):
        client = request.client.host if request.client else "unknown"
        logger.warning(f"🚫 Unauthorized cron trigger attempt ({request.method} from {client})")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
