"""
Notification DTOs (Pydantic v2) used at application boundaries.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from domain.notification.entity import NotificationState
from domain.notification.exceptions import NotificationInputError


NOTIFICATION_ERROR = "paghiper_notification_error"


class NotificationPayload(BaseModel):
    """
    PagHiper callback body.

    Only ``transaction_id``, ``apiKey`` and ``notification_id`` are consumed;
    other fields are kept so the original payload can be forwarded when
    reading the full notification.
    """
    transaction_id: str
    api_key: Optional[str] = Field(default=None, alias="apiKey")
    notification_id: Optional[str] = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("transaction_id", "notification_id", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @classmethod
    def parse(cls, body: Any) -> "NotificationPayload":
        """Validate the raw body, raising NotificationInputError without a transaction id."""
        if not isinstance(body, dict) or not body.get("transaction_id"):
            raise NotificationInputError()
        try:
            return cls.model_validate(body)
        except ValidationError as exc:
            raise NotificationInputError(f"Invalid notification body: {exc.error_count()} errors") from exc

    def forward_body(self, token: str) -> dict[str, Any]:
        body = self.model_dump(by_alias=True, exclude_none=True)
        body["token"] = token
        return body


class MerchantConfig(BaseModel):
    """App configuration of one merchant (public data merged with hidden data)."""
    paghiper_api_key: Optional[str] = None
    paghiper_token: Optional[str] = None
    label: Optional[str] = None
    text: Optional[str] = None
    icon: Optional[str] = None
    discount: Optional[dict[str, Any]] = None
    discount_option_label: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class StatusRequest(BaseModel):
    status: Optional[str] = None
    result: Optional[str] = None
    response_message: Optional[str] = None
    transaction_id: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class ProcessorNotification(BaseModel):
    """Full notification read back from the PagHiper API."""
    status_request: StatusRequest

    model_config = ConfigDict(extra="allow")

    @property
    def status(self) -> Optional[str]:
        return self.status_request.status


class OrderRef(BaseModel):
    id: str = Field(alias="_id")

    model_config = ConfigDict(extra="allow", populate_by_name=True)


@dataclass(frozen=True)
class NotificationOutcome:
    """HTTP answer owed to PagHiper for one callback."""
    status_code: int
    state: NotificationState
    body: Optional[dict[str, Any]] = None

    @classmethod
    def done(cls) -> "NotificationOutcome":
        return cls(status_code=204, state=NotificationState.DONE)

    @classmethod
    def bad_request(cls) -> "NotificationOutcome":
        return cls(status_code=400, state=NotificationState.REJECTED_BAD_REQUEST)

    @classmethod
    def rejected(cls, status_code: int, message: str) -> "NotificationOutcome":
        return cls(
            status_code=status_code,
            state=NotificationState.REJECTED_CONFLICT,
            body={"error": NOTIFICATION_ERROR, "message": message},
        )
