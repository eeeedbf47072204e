"""
List payments module: describe PagHiper banking billet as a payment gateway.

Pure functions, no I/O. The gateway descriptor is rebuilt for every request
so merchant options never leak between stores.
"""
from __future__ import annotations

import copy
from typing import Any, Optional

from application.dtos.payments import ListPaymentsRequest
from core.settings import payment_settings
from domain.common.exceptions import BusinessException
from shared.codes.payment_codes import INTERMEDIATOR, PaymentCode


# Merchant options copied over the default descriptor when set
CONFIGURABLE_PROPS = ("label", "text", "icon", "discount")


class ListPaymentsConfigError(BusinessException):
    def __init__(self, message: str) -> None:
        super().__init__(
            code=PaymentCode.LIST_PAYMENTS_CONFIG_ERROR,
            message=message,
            error_type="LIST_PAYMENTS_ERR",
        )


def new_payment_gateway(lang: Optional[str] = None) -> dict[str, Any]:
    """Default payment gateway descriptor for the given language."""
    method = payment_settings.method
    labels = method.labels
    label = labels.get(lang or method.default_lang) or labels[method.default_lang]
    gateway: dict[str, Any] = {
        "label": label,
        "payment_method": {
            "code": method.code,
            "name": f"{label} - {INTERMEDIATOR['name']}",
        },
        "intermediator": dict(INTERMEDIATOR),
        "type": "payment",
    }
    if method.icon:
        gateway["icon"] = method.icon
    return gateway


def build_list_payments_response(request: ListPaymentsRequest) -> dict[str, Any]:
    config = request.application.merged_config()
    if not config.get("paghiper_api_key"):
        raise ListPaymentsConfigError(
            "PagHiper API key is unset on app hidden data (merchant must configure the app)"
        )

    params = request.params
    lang = params.lang or payment_settings.method.default_lang
    gateway = new_payment_gateway(lang)
    for prop in CONFIGURABLE_PROPS:
        if config.get(prop):
            gateway[prop] = copy.deepcopy(config[prop])

    response: dict[str, Any] = {"payment_gateways": [gateway]}

    discount = gateway.get("discount")
    if isinstance(discount, dict) and (discount.get("value") or 0) > 0:
        if discount.get("apply_at") != "freight":
            discount_option: dict[str, Any] = {
                "label": config.get("discount_option_label") or gateway["label"],
                "value": discount["value"],
            }
            for prop in ("type", "min_amount"):
                if discount.get(prop):
                    discount_option[prop] = discount[prop]
            response["discount_option"] = discount_option

        if "min_amount" in discount:
            total = params.amount.total if params.amount else None
            if total is not None and discount["min_amount"] is not None and total < discount["min_amount"]:
                del gateway["discount"]
            else:
                del discount["min_amount"]

    return response
