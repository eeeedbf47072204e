"""
E-Com Plus modules routes.
"""
from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from application.dtos.payments import ListPaymentsRequest
from application.services.list_payments import ListPaymentsConfigError, build_list_payments_response
from core.logging_config import get_logger


router = APIRouter(prefix="/ecom/modules", tags=["E-Com Plus modules"])
logger = get_logger(__name__)


@router.post("/list-payments", summary="List payment gateways")
async def list_payments(payload: ListPaymentsRequest):
    try:
        return build_list_payments_response(payload)
    except ListPaymentsConfigError as exc:
        logger.info("list_payments_unconfigured", error=exc.message)
        return JSONResponse(
            status_code=400,
            content={"error": exc.error_type, "message": exc.message},
        )
