"""
Payment specific codes and PagHiper status mapping.
"""
from __future__ import annotations

from enum import IntEnum


class PaymentCode(IntEnum):
    # Notification pipeline (6xxxx)
    NOTIFICATION_INPUT_ERROR = 60010
    INVALID_CLIENT = 60011
    LOOKUP_MISS = 60012
    TRANSPORT_ERROR = 60013
    ORDER_UPDATE_FAILED = 60014

    # List payments module
    LIST_PAYMENTS_CONFIG_ERROR = 60020


# Identifies this payment integration among the transactions of an order
INTERMEDIATOR = {
    "code": "paghiper",
    "link": "https://www.paghiper.com",
    "name": "PagHiper",
}
INTERMEDIATOR_CODE = INTERMEDIATOR["code"]

# PagHiper status_request.status -> platform financial status.
# Case-sensitive; statuses missing here are ignored.
PAGHIPER_STATUS_TO_FINANCIAL = {
    "pending": "pending",
    "paid": "paid",
    "refunded": "refunded",
    "canceled": "voided",
    "processing": "under_analysis",
    # https://atendimento.paghiper.com/hc/pt-br/articles/360016177713
    "reserved": "authorized",
}
