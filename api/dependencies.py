"""
API依赖项 - composition root of the notification pipeline.
"""
from typing import Optional

import httpx
from fastapi import Request

from application.services.notification_service import NotificationService
from infrastructure.cache import get_receipt_cache
from infrastructure.external.payments import get_processor_client
from infrastructure.external.store_api import (
    StoreAppConfigProvider,
    StoreOrderResolver,
    StoreOrderStatusUpdater,
    store_api_client_factory,
)
from infrastructure.repositories.store_auth_repository import SQLAlchemyStoreAuthRepository
from infrastructure.repositories.transaction_repository import SQLAlchemyTransactionRepository


def get_http_client(request: Request) -> Optional[httpx.AsyncClient]:
    """Shared connection pool created in the app lifespan (None outside of it)."""
    return getattr(request.app.state, "http_client", None)


async def get_notification_service(request: Request) -> NotificationService:
    http_client = get_http_client(request)
    client_factory = store_api_client_factory(http_client)
    return NotificationService(
        transactions=SQLAlchemyTransactionRepository(),
        store_auth=SQLAlchemyStoreAuthRepository(),
        merchant_config=StoreAppConfigProvider(client_factory),
        processor=get_processor_client(http_client),
        orders=StoreOrderResolver(client_factory),
        order_status=StoreOrderStatusUpdater(client_factory),
        receipts=get_receipt_cache(),
    )
