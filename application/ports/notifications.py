"""
Notification pipeline ports (application/ports) exposing replaceable protocols.

The orchestrator depends on these Protocols; infrastructure implements
adapters. None of them retries internally.
"""
from __future__ import annotations

from typing import Optional, Protocol, Sequence, runtime_checkable

from application.dtos.notifications import (
    MerchantConfig,
    NotificationPayload,
    OrderRef,
    ProcessorNotification,
)
from domain.notification.entity import (
    FinancialStatus,
    StoreAuth,
    StoreContext,
    TransactionRecord,
)


@runtime_checkable
class TransactionLocator(Protocol):
    """Maps a PagHiper transaction code to the store that created it."""

    async def get(self, transaction_code: str) -> TransactionRecord: ...


@runtime_checkable
class StoreAuthProvider(Protocol):
    """Provides Store API credentials of this app for a store."""

    async def get_auth(self, store_id: int) -> StoreAuth: ...


@runtime_checkable
class MerchantConfigProvider(Protocol):
    async def get_config(self, context: StoreContext, include_hidden: bool = False) -> MerchantConfig: ...


@runtime_checkable
class ProcessorClient(Protocol):
    async def read_notification(self, payload: NotificationPayload, token: str) -> ProcessorNotification: ...


@runtime_checkable
class OrderResolver(Protocol):
    async def list_orders_by_transaction(
        self,
        context: StoreContext,
        transaction_code: str,
        intermediator_code: Optional[str] = None,
    ) -> Sequence[OrderRef]: ...


@runtime_checkable
class OrderStatusUpdater(Protocol):
    async def update_payment_status(
        self,
        context: StoreContext,
        order_id: str,
        status: FinancialStatus,
        notification_code: Optional[str],
    ) -> None: ...


@runtime_checkable
class NotificationReceipts(Protocol):
    """Remembers notifications already answered with success."""

    async def is_processed(self, transaction_code: str, notification_id: str) -> bool: ...

    async def mark_processed(self, transaction_code: str, notification_id: str) -> None: ...
