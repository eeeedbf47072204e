"""
Tagged errors raised along the PagHiper notification pipeline.

Every variant carries a ``kind`` so the orchestrator can classify the failure
as an expected conflict (409) or an operational error (500) without
inspecting ad hoc attributes.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence

from domain.common.exceptions import BusinessException
from domain.notification.entity import OrderUpdateFailure
from shared.codes.payment_codes import PaymentCode


class NotificationErrorKind(str, Enum):
    INPUT = "input_error"
    AUTH = "invalid_client"
    LOOKUP_MISS = "lookup_miss"
    TRANSPORT = "transport_error"
    ORDER_UPDATE = "order_update_failed"


@dataclass(frozen=True)
class RequestInfo:
    method: str
    url: str


@dataclass(frozen=True)
class ResponseInfo:
    status_code: int
    body: Any = None


class NotificationError(BusinessException):
    kind: NotificationErrorKind
    # Expected conflicts answer 409 and are logged on a single line
    expected: bool = True

    def __init__(
        self,
        message: str,
        *,
        code: int,
        error_type: str,
        endpoint: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        self.endpoint = endpoint
        super().__init__(code=code, message=message, error_type=error_type, details=details)


class NotificationInputError(NotificationError):
    kind = NotificationErrorKind.INPUT

    def __init__(self, message: str = "Missing transaction_id", *, field: str = "transaction_id") -> None:
        super().__init__(
            message,
            code=PaymentCode.NOTIFICATION_INPUT_ERROR,
            error_type="NotificationInputError",
        )
        self.field = field


class NotificationAuthError(NotificationError):
    """Callback API key does not match the merchant configuration."""
    kind = NotificationErrorKind.AUTH

    def __init__(self, message: str = "API key does not match", *, endpoint: Optional[str] = None) -> None:
        super().__init__(
            message,
            code=PaymentCode.INVALID_CLIENT,
            error_type="invalidClient",
            endpoint=endpoint,
        )


class LookupMissError(NotificationError):
    """Requested record is absent (NOT_FOUND) or a lookup came back empty (EMPTY)."""
    kind = NotificationErrorKind.LOOKUP_MISS

    def __init__(self, message: str, *, reason: str = "NOT_FOUND", endpoint: Optional[str] = None) -> None:
        super().__init__(
            message,
            code=PaymentCode.LOOKUP_MISS,
            error_type="LookupMiss",
            endpoint=endpoint,
            details={"reason": reason},
        )
        self.reason = reason


class TransportError(NotificationError):
    """Failure of an external HTTP call, with request/response detail when known."""
    kind = NotificationErrorKind.TRANSPORT
    expected = False

    def __init__(
        self,
        message: str,
        *,
        request: Optional[RequestInfo] = None,
        response: Optional[ResponseInfo] = None,
    ) -> None:
        details: dict[str, Any] = {}
        if request is not None:
            details.update({"method": request.method, "url": request.url})
        if response is not None:
            details.update({"status_code": response.status_code, "response": response.body})
        super().__init__(
            message,
            code=PaymentCode.TRANSPORT_ERROR,
            error_type="TransportError",
            endpoint=request.url if request else None,
            details=details or None,
        )
        self.request = request
        self.response = response

    @property
    def status_code(self) -> Optional[int]:
        return self.response.status_code if self.response else None


class OrderUpdateError(NotificationError):
    """
    One or more order payment status updates failed.

    Orders not listed in ``failures`` may already be updated on the platform.
    """
    kind = NotificationErrorKind.ORDER_UPDATE

    def __init__(self, failures: Sequence[OrderUpdateFailure], total: int) -> None:
        self.failures = list(failures)
        self.total = total
        first = self.failures[0]
        endpoint = None
        if isinstance(first.error, TransportError):
            endpoint = first.error.endpoint
        super().__init__(
            f"{len(self.failures)} of {total} order updates failed: {first.message}",
            code=PaymentCode.ORDER_UPDATE_FAILED,
            error_type="OrderUpdateError",
            endpoint=endpoint,
            details={"failed_orders": [f.order_id for f in self.failures], "total": total},
        )
