"""
Payment processor clients.
"""
from __future__ import annotations

from typing import Optional

import httpx

from .paghiper_client import PagHiperClient


def get_processor_client(http_client: Optional[httpx.AsyncClient] = None) -> PagHiperClient:
    return PagHiperClient(http_client=http_client)


__all__ = ["PagHiperClient", "get_processor_client"]
