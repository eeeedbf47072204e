"""In-memory collaborators recording every call of the notification pipeline."""
from __future__ import annotations

from typing import Optional

import pytest

from application.dtos.notifications import (
    MerchantConfig,
    NotificationPayload,
    OrderRef,
    ProcessorNotification,
)
from application.services.notification_service import NotificationService
from domain.notification.entity import FinancialStatus, StoreAuth, StoreContext, TransactionRecord
from domain.notification.exceptions import LookupMissError, RequestInfo, ResponseInfo, TransportError


class FakeTransactions:
    def __init__(self, records: dict[str, int]):
        self.records = records
        self.calls: list[str] = []

    async def get(self, transaction_code: str) -> TransactionRecord:
        self.calls.append(transaction_code)
        if transaction_code not in self.records:
            raise LookupMissError(f"Transaction {transaction_code} not found", endpoint="paghiper_transactions")
        return TransactionRecord(transaction_code=transaction_code, store_id=self.records[transaction_code])


class FakeStoreAuth:
    def __init__(self):
        self.calls: list[int] = []

    async def get_auth(self, store_id: int) -> StoreAuth:
        self.calls.append(store_id)
        return StoreAuth(store_id=store_id, my_id="my-1", access_token="at-1")


class FakeMerchantConfig:
    def __init__(self, config: dict):
        self.config = config
        self.calls: list[tuple[StoreContext, bool]] = []

    async def get_config(self, context: StoreContext, include_hidden: bool = False) -> MerchantConfig:
        self.calls.append((context, include_hidden))
        return MerchantConfig.model_validate(self.config)


class FakeProcessor:
    def __init__(self, status: Optional[str] = "paid", error: Optional[Exception] = None):
        self.status = status
        self.error = error
        self.calls: list[tuple[NotificationPayload, str]] = []

    async def read_notification(self, payload: NotificationPayload, token: str) -> ProcessorNotification:
        self.calls.append((payload, token))
        if self.error is not None:
            raise self.error
        return ProcessorNotification.model_validate({"status_request": {"status": self.status}})


class FakeOrders:
    def __init__(self, order_ids: list[str], error: Optional[Exception] = None):
        self.order_ids = order_ids
        self.error = error
        self.calls: list[tuple[StoreContext, str, Optional[str]]] = []

    async def list_orders_by_transaction(self, context, transaction_code, intermediator_code=None):
        self.calls.append((context, transaction_code, intermediator_code))
        if self.error is not None:
            raise self.error
        return [OrderRef.model_validate({"_id": order_id}) for order_id in self.order_ids]


class FakeOrderStatus:
    def __init__(self, failing: Optional[set[str]] = None):
        self.failing = failing or set()
        self.calls: list[tuple[str, FinancialStatus, Optional[str]]] = []
        self.applied: list[str] = []

    async def update_payment_status(self, context, order_id, status, notification_code):
        self.calls.append((order_id, status, notification_code))
        if order_id in self.failing:
            raise TransportError(
                "Order not found",
                request=RequestInfo(method="POST", url=f"https://store.test/v1/orders/{order_id}/payments_history.json"),
                response=ResponseInfo(status_code=404, body={"message": "Order not found"}),
            )
        self.applied.append(order_id)


class FakeReceipts:
    def __init__(self, processed: Optional[set[tuple[str, str]]] = None):
        self.processed = processed or set()
        self.marked: list[tuple[str, str]] = []

    async def is_processed(self, transaction_code: str, notification_id: str) -> bool:
        return (transaction_code, notification_id) in self.processed

    async def mark_processed(self, transaction_code: str, notification_id: str) -> None:
        self.marked.append((transaction_code, notification_id))
        self.processed.add((transaction_code, notification_id))


class Stack:
    """Default happy-path wiring; tests replace single collaborators."""

    def __init__(self):
        self.transactions = FakeTransactions({"T1": 1001})
        self.store_auth = FakeStoreAuth()
        self.merchant_config = FakeMerchantConfig({"paghiper_api_key": "K1", "paghiper_token": "TOK"})
        self.processor = FakeProcessor(status="reserved")
        self.orders = FakeOrders(["O1", "O2"])
        self.order_status = FakeOrderStatus()
        self.receipts: Optional[FakeReceipts] = None

    def service(self) -> NotificationService:
        return NotificationService(
            transactions=self.transactions,
            store_auth=self.store_auth,
            merchant_config=self.merchant_config,
            processor=self.processor,
            orders=self.orders,
            order_status=self.order_status,
            receipts=self.receipts,
        )


@pytest.fixture
def stack() -> Stack:
    return Stack()


@pytest.fixture
def payload() -> dict:
    return {"transaction_id": "T1", "apiKey": "K1", "notification_id": "N1"}
