"""
Notification domain entities: lookup records, store auth and state machine.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class FinancialStatus(str, Enum):
    """Platform (E-Com Plus) order financial status vocabulary."""
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"
    VOIDED = "voided"
    UNDER_ANALYSIS = "under_analysis"
    AUTHORIZED = "authorized"


class NotificationState(str, Enum):
    """States of one notification handling run."""
    RECEIVED = "received"
    LOCATING_STORE = "locating_store"
    AUTHENTICATING = "authenticating"
    FETCHING_DETAIL = "fetching_detail"
    MAPPING = "mapping"
    RESOLVING_ORDERS = "resolving_orders"
    UPDATING_ORDERS = "updating_orders"
    DONE = "done"
    REJECTED_BAD_REQUEST = "rejected_bad_request"
    REJECTED_CONFLICT = "rejected_conflict"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = {
    NotificationState.DONE,
    NotificationState.REJECTED_BAD_REQUEST,
    NotificationState.REJECTED_CONFLICT,
}

# Forward transitions of the happy path; any non-terminal state may also be rejected
ALLOWED_TRANSITIONS: dict[NotificationState, set[NotificationState]] = {
    NotificationState.RECEIVED: {NotificationState.LOCATING_STORE},
    NotificationState.LOCATING_STORE: {NotificationState.AUTHENTICATING},
    NotificationState.AUTHENTICATING: {NotificationState.FETCHING_DETAIL, NotificationState.DONE},
    NotificationState.FETCHING_DETAIL: {NotificationState.MAPPING},
    NotificationState.MAPPING: {NotificationState.RESOLVING_ORDERS, NotificationState.DONE},
    NotificationState.RESOLVING_ORDERS: {NotificationState.UPDATING_ORDERS},
    NotificationState.UPDATING_ORDERS: {NotificationState.DONE},
}


@dataclass(frozen=True)
class TransactionRecord:
    """
    PagHiper transaction code bound to the store that created it.

    ``notification_code`` is the id of the callback being handled, attached by
    the orchestrator and forwarded with every order update.
    """
    transaction_code: str
    store_id: int
    notification_code: Optional[str] = None


@dataclass(frozen=True)
class StoreAuth:
    """
    Store API credentials of this app for one store.

    Never cached by the notification pipeline: fetched once per notification.
    """
    store_id: int
    my_id: str
    access_token: str
    application_id: Optional[str] = None
    expires_at: Optional[datetime] = None


@dataclass(frozen=True)
class StoreContext:
    """Authenticated merchant platform context used by Store API collaborators."""
    store_id: int
    auth: StoreAuth

    @property
    def headers(self) -> dict[str, str]:
        return {
            "X-Store-ID": str(self.store_id),
            "X-My-ID": self.auth.my_id,
            "X-Access-Token": self.auth.access_token,
        }


@dataclass(frozen=True)
class StatusMapping:
    skip: bool
    platform_status: Optional[FinancialStatus] = None


@dataclass
class OrderUpdateFailure:
    order_id: str
    error: BaseException = field(repr=False)

    @property
    def message(self) -> str:
        return str(self.error)
