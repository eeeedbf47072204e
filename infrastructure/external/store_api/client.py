"""
E-Com Plus Store API client bound to one authenticated store context.

https://developers.e-com.plus/docs/api/#/store/
"""
from __future__ import annotations

from typing import Callable, Optional

import httpx

from core.config import settings
from domain.notification.entity import StoreContext
from infrastructure.external.api_clients import BaseAPIClient


class StoreApiClient(BaseAPIClient):
    service_name = "Store API"

    def __init__(self, context: StoreContext, *, http_client: Optional[httpx.AsyncClient] = None) -> None:
        cfg = settings.store_api
        super().__init__(
            base_url=cfg.base_url,
            timeout=cfg.timeout,
            max_retries=cfg.max_retries,
            retry_delay=cfg.retry_delay,
            headers=context.headers,
            http_client=http_client,
            debug=settings.DEBUG,
        )
        self.context = context

    @property
    def application_id(self) -> str:
        app_id = self.context.auth.application_id or settings.store_api.application_id
        if not app_id:
            raise RuntimeError("Store API application id is not configured (STORE_API__APPLICATION_ID)")
        return app_id


StoreApiClientFactory = Callable[[StoreContext], StoreApiClient]


def store_api_client_factory(http_client: Optional[httpx.AsyncClient] = None) -> StoreApiClientFactory:
    """Build per-context clients that share one connection pool."""

    def _factory(context: StoreContext) -> StoreApiClient:
        return StoreApiClient(context, http_client=http_client)

    return _factory
