"""Order lookup and payment status updates on the Store API."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from application.dtos.notifications import OrderRef
from core.logging_config import get_logger
from domain.notification.entity import FinancialStatus, StoreContext
from infrastructure.external.store_api.client import StoreApiClientFactory
from shared.codes.payment_codes import INTERMEDIATOR_CODE


logger = get_logger(__name__)


class StoreOrderResolver:
    def __init__(self, client_factory: StoreApiClientFactory) -> None:
        self._client_factory = client_factory

    async def list_orders_by_transaction(
        self,
        context: StoreContext,
        transaction_code: str,
        intermediator_code: Optional[str] = None,
    ) -> list[OrderRef]:
        # https://developers.e-com.plus/docs/api/#/store/orders/orders
        params = {"transactions.intermediator.transaction_code": transaction_code}
        if intermediator_code:
            params["transactions.app.intermediator.code"] = intermediator_code
        async with self._client_factory(context) as api:
            data = (await api.get("/orders.json", params=params)).json() or {}
        orders = [OrderRef.model_validate(item) for item in data.get("result") or []]
        logger.info(
            "orders_listed",
            store_id=context.store_id,
            transaction_code=transaction_code,
            count=len(orders),
        )
        return orders


class StoreOrderStatusUpdater:
    def __init__(self, client_factory: StoreApiClientFactory) -> None:
        self._client_factory = client_factory

    async def update_payment_status(
        self,
        context: StoreContext,
        order_id: str,
        status: FinancialStatus,
        notification_code: Optional[str],
    ) -> None:
        body = {
            "date_time": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "status": status.value,
            "flags": [INTERMEDIATOR_CODE],
        }
        if notification_code:
            body["notification_code"] = notification_code
        async with self._client_factory(context) as api:
            await api.post(f"/orders/{order_id}/payments_history.json", json_data=body)
        logger.info(
            "order_payment_status_updated",
            store_id=context.store_id,
            order_id=order_id,
            status=status.value,
        )
