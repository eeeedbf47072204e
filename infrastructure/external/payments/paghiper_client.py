"""
PagHiper API adapter: read the full body of a notification.

PagHiper callbacks only carry ids; the status must be fetched back with
the merchant token.
https://dev.paghiper.com/reference#qq
"""
from __future__ import annotations

from typing import Optional

import httpx

from application.dtos.notifications import NotificationPayload, ProcessorNotification
from core.config import settings
from core.logging_config import get_logger
from domain.notification.exceptions import RequestInfo, ResponseInfo, TransportError
from infrastructure.external.api_clients import BaseAPIClient


logger = get_logger(__name__)


class PagHiperClient(BaseAPIClient):
    service_name = "PagHiper API"
    provider = "paghiper"

    def __init__(self, *, http_client: Optional[httpx.AsyncClient] = None) -> None:
        cfg = settings.paghiper
        super().__init__(
            base_url=cfg.base_url,
            timeout=cfg.timeout,
            max_retries=cfg.max_retries,
            retry_delay=cfg.retry_delay,
            http_client=http_client,
            debug=settings.DEBUG,
        )
        self.notification_path = cfg.notification_path

    async def read_notification(self, payload: NotificationPayload, token: str) -> ProcessorNotification:
        response = await self.post(self.notification_path, json_data=payload.forward_body(token))
        data = response.json() or {}
        status_request = data.get("status_request") if isinstance(data, dict) else None
        if not isinstance(status_request, dict) or status_request.get("result") == "reject":
            message = "Unexpected PagHiper notification response"
            if isinstance(status_request, dict):
                message = status_request.get("response_message") or message
            raise TransportError(
                message,
                request=RequestInfo(method="POST", url=self._build_url(self.notification_path)),
                response=ResponseInfo(status_code=response.status_code, body=data),
            )
        notification = ProcessorNotification.model_validate(data)
        logger.info(
            "paghiper_notification_read",
            transaction_id=payload.transaction_id,
            status=notification.status,
        )
        return notification
