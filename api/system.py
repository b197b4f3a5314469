"""
api/system.py
-------------
Health and email-configuration endpoints.
"""

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_gateway
from api.schemas import EmailConfigOut
from db.connection import is_pool_initialized
from services.email_gateway import DeliveryGateway

router = APIRouter(tags=["system"])


@router.get("/healthz")
def healthz(request: Request) -> dict:
    scheduler = getattr(request.app.state, "scheduler", None)
    return {
        "status": "ok",
        "database": is_pool_initialized(),
        "scheduler": scheduler.status() if scheduler else None,
    }


@router.get("/api/email/check-config", response_model=EmailConfigOut)
def check_email_config(gateway: DeliveryGateway = Depends(get_gateway)) -> EmailConfigOut:
    if gateway.configured:
        message = "Email configurado correctamente"
    else:
        message = "Email en modo simulación - configura RESEND_API_KEY para envíos reales"
    return EmailConfigOut(configured=gateway.configured, provider=gateway.name, message=message)
