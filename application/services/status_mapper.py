"""PagHiper status -> platform financial status."""
from __future__ import annotations

from domain.notification.entity import FinancialStatus, StatusMapping
from shared.codes.payment_codes import PAGHIPER_STATUS_TO_FINANCIAL


SKIP = StatusMapping(skip=True)


def map_status(processor_status: str | None) -> StatusMapping:
    """Unknown statuses (including ``None``) map to SKIP, never to an error."""
    platform_status = PAGHIPER_STATUS_TO_FINANCIAL.get(processor_status or "")
    if platform_status is None:
        return SKIP
    return StatusMapping(skip=False, platform_status=FinancialStatus(platform_status))
