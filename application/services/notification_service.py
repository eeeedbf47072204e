"""
Application service handling PagHiper notification callbacks.

The service walks one callback through the notification state machine:
locate the store owning the transaction, authenticate the callback against
the merchant configuration, read the authoritative status from PagHiper,
map it and push it to every order of the transaction. Collaborators are
injected from the composition root (API) as application ports.

Any failure short-circuits the remaining steps. The failure kind decides the
HTTP answer: expected conflicts (auth mismatch, lookup miss, failed order
updates) answer 409 so PagHiper knows the callback was not applied;
everything else is an operational error answering 500.
"""
from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any, Optional, Sequence

from application.dtos.notifications import (
    MerchantConfig,
    NotificationOutcome,
    NotificationPayload,
    OrderRef,
)
from application.ports.notifications import (
    MerchantConfigProvider,
    NotificationReceipts,
    OrderResolver,
    OrderStatusUpdater,
    ProcessorClient,
    StoreAuthProvider,
    TransactionLocator,
)
from application.services.status_mapper import map_status
from core.logging_config import get_logger
from domain.notification.entity import (
    ALLOWED_TRANSITIONS,
    FinancialStatus,
    NotificationState,
    OrderUpdateFailure,
    StoreContext,
)
from domain.notification.exceptions import (
    NotificationAuthError,
    NotificationError,
    NotificationInputError,
    OrderUpdateError,
    TransportError,
)
from shared.codes.payment_codes import INTERMEDIATOR_CODE


logger = get_logger(__name__)


class NotificationRun:
    """Mutable state of a single callback; never shared between callbacks."""

    def __init__(self, payload: NotificationPayload) -> None:
        self.payload = payload
        self.state = NotificationState.RECEIVED
        self.store_id: Optional[int] = None
        # Already applied on an earlier delivery
        self.duplicate = False

    @property
    def transaction_code(self) -> str:
        return self.payload.transaction_id

    def advance(self, state: NotificationState) -> None:
        if state not in ALLOWED_TRANSITIONS.get(self.state, set()):
            raise RuntimeError(f"Invalid notification transition {self.state.value} -> {state.value}")
        logger.debug(
            "notification_transition",
            transaction_code=self.transaction_code,
            from_state=self.state.value,
            to_state=state.value,
        )
        self.state = state


class NotificationService:
    def __init__(
        self,
        *,
        transactions: TransactionLocator,
        store_auth: StoreAuthProvider,
        merchant_config: MerchantConfigProvider,
        processor: ProcessorClient,
        orders: OrderResolver,
        order_status: OrderStatusUpdater,
        receipts: Optional[NotificationReceipts] = None,
        intermediator_code: Optional[str] = INTERMEDIATOR_CODE,
    ) -> None:
        self.transactions = transactions
        self.store_auth = store_auth
        self.merchant_config = merchant_config
        self.processor = processor
        self.orders = orders
        self.order_status = order_status
        self.receipts = receipts
        self.intermediator_code = intermediator_code

    async def handle(self, body: Any) -> NotificationOutcome:
        try:
            payload = NotificationPayload.parse(body)
        except NotificationInputError as exc:
            logger.info("notification_bad_request", reason=exc.message)
            return NotificationOutcome.bad_request()

        run = NotificationRun(payload)
        logger.info(
            "notification_received",
            transaction_code=run.transaction_code,
            notification_id=payload.notification_id,
        )

        try:
            await self._process(run)
        except Exception as exc:
            return self._reject(run, exc)

        if run.duplicate:
            return NotificationOutcome.done()

        logger.info(
            "notification_done",
            store_id=run.store_id,
            transaction_code=run.transaction_code,
        )
        await self._remember(payload)
        return NotificationOutcome.done()

    async def _process(self, run: NotificationRun) -> None:
        payload = run.payload

        run.advance(NotificationState.LOCATING_STORE)
        record = replace(
            await self.transactions.get(run.transaction_code),
            notification_code=payload.notification_id,
        )
        run.store_id = record.store_id

        run.advance(NotificationState.AUTHENTICATING)
        # Fresh credentials and config for every notification
        auth = await self.store_auth.get_auth(record.store_id)
        context = StoreContext(store_id=record.store_id, auth=auth)
        config = await self.merchant_config.get_config(context, include_hidden=True)
        token = self._authenticate(config, payload)

        # Replays are only recognised once the callback is authenticated
        if await self._already_processed(payload):
            run.duplicate = True
            logger.info(
                "notification_duplicate_ignored",
                store_id=run.store_id,
                transaction_code=run.transaction_code,
                notification_id=payload.notification_id,
            )
            run.advance(NotificationState.DONE)
            return

        run.advance(NotificationState.FETCHING_DETAIL)
        detail = await self.processor.read_notification(payload, token)

        run.advance(NotificationState.MAPPING)
        mapping = map_status(detail.status)
        if mapping.skip:
            logger.info(
                "notification_status_ignored",
                store_id=run.store_id,
                transaction_code=run.transaction_code,
                status=detail.status,
            )
            run.advance(NotificationState.DONE)
            return

        run.advance(NotificationState.RESOLVING_ORDERS)
        orders = await self.orders.list_orders_by_transaction(
            context, run.transaction_code, self.intermediator_code
        )

        run.advance(NotificationState.UPDATING_ORDERS)
        await self._update_orders(context, orders, mapping.platform_status, record.notification_code)
        run.advance(NotificationState.DONE)

    @staticmethod
    def _authenticate(config: MerchantConfig, payload: NotificationPayload) -> str:
        """Sole gate for inbound callbacks: they carry no signature."""
        token = config.paghiper_token
        if not token:
            raise NotificationAuthError("PagHiper token is unset on app hidden data", endpoint="merchant_config")
        if not config.paghiper_api_key or not payload.api_key:
            raise NotificationAuthError("API key is missing", endpoint="merchant_config")
        if config.paghiper_api_key != payload.api_key:
            raise NotificationAuthError(endpoint="merchant_config")
        return token

    async def _update_orders(
        self,
        context: StoreContext,
        orders: Sequence[OrderRef],
        status: FinancialStatus,
        notification_code: Optional[str],
    ) -> None:
        if not orders:
            logger.info("notification_no_orders", store_id=context.store_id, status=status.value)
            return

        results = await asyncio.gather(
            *(
                self.order_status.update_payment_status(context, order.id, status, notification_code)
                for order in orders
            ),
            return_exceptions=True,
        )
        failures = []
        for order, result in zip(orders, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                failures.append(OrderUpdateFailure(order_id=order.id, error=result))
                logger.error(
                    "order_update_failed",
                    store_id=context.store_id,
                    order_id=order.id,
                    status=status.value,
                    error=str(result),
                    details=getattr(result, "details", None),
                )
        logger.info(
            "orders_updated",
            store_id=context.store_id,
            status=status.value,
            total=len(orders),
            failed=len(failures),
        )
        if failures:
            raise OrderUpdateError(failures, total=len(orders))

    def _reject(self, run: NotificationRun, exc: Exception) -> NotificationOutcome:
        failed_state = run.state
        run.state = NotificationState.REJECTED_CONFLICT
        message = exc.message if isinstance(exc, NotificationError) else str(exc)

        if isinstance(exc, NotificationError) and exc.expected:
            logger.info(
                "notification_conflict",
                store_id=run.store_id,
                transaction_code=run.transaction_code,
                endpoint=exc.endpoint or failed_state.value,
                kind=exc.kind.value,
                error=message,
            )
            return NotificationOutcome.rejected(409, message)

        log_fields: dict[str, Any] = {
            "store_id": run.store_id,
            "transaction_code": run.transaction_code,
            "state": failed_state.value,
            "error": message,
            "error_type": type(exc).__name__,
        }
        if isinstance(exc, NotificationError):
            log_fields["kind"] = exc.kind.value
        if isinstance(exc, TransportError):
            log_fields["details"] = exc.details
        logger.error("notification_failed", **log_fields, exc_info=exc)
        return NotificationOutcome.rejected(500, message)

    async def _already_processed(self, payload: NotificationPayload) -> bool:
        if self.receipts is None or not payload.notification_id:
            return False
        try:
            return await self.receipts.is_processed(payload.transaction_id, payload.notification_id)
        except Exception as exc:
            logger.warning("notification_receipt_lookup_failed", error=str(exc))
            return False

    async def _remember(self, payload: NotificationPayload) -> None:
        if self.receipts is None or not payload.notification_id:
            return
        try:
            await self.receipts.mark_processed(payload.transaction_id, payload.notification_id)
        except Exception as exc:
            logger.warning("notification_receipt_store_failed", error=str(exc))
