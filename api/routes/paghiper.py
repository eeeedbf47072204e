"""
PagHiper webhook route.

Keep this thin: body decoding only, the pipeline lives in
NotificationService.
"""
from __future__ import annotations

import json
from typing import Any
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from api.dependencies import get_notification_service
from application.services.notification_service import NotificationService


router = APIRouter(prefix="/paghiper", tags=["PagHiper"])


async def _read_body(request: Request) -> Any:
    """JSON or form-encoded body; anything unparsable is returned as None."""
    raw_body = await request.body()
    if not raw_body:
        return None
    ct = (request.headers.get("content-type") or "").lower()
    text = raw_body.decode("utf-8", errors="replace")
    if "application/x-www-form-urlencoded" in ct:
        return dict(parse_qsl(text, keep_blank_values=True))
    try:
        return json.loads(text)
    except ValueError:
        return None


@router.post(
    "/notification",
    status_code=204,
    summary="Receive PagHiper notification",
    responses={400: {"description": "Missing transaction_id"}, 409: {}, 500: {}},
)
async def paghiper_notification(
    request: Request,
    service: NotificationService = Depends(get_notification_service),
):
    outcome = await service.handle(await _read_body(request))
    if outcome.body is None:
        return Response(status_code=outcome.status_code)
    return JSONResponse(status_code=outcome.status_code, content=outcome.body)
