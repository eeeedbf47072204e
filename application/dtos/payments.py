"""
List payments module DTOs (Pydantic v2).

Only the fields read by the PagHiper app are modelled; the platform sends
a much larger body.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class AmountParams(BaseModel):
    total: Optional[float] = None

    model_config = ConfigDict(extra="allow")


class ListPaymentsParams(BaseModel):
    lang: Optional[str] = None
    amount: Optional[AmountParams] = None

    model_config = ConfigDict(extra="allow")


class ApplicationBody(BaseModel):
    data: Optional[dict[str, Any]] = None
    hidden_data: Optional[dict[str, Any]] = None

    model_config = ConfigDict(extra="allow")

    def merged_config(self) -> dict[str, Any]:
        """Public app data overlaid with hidden data."""
        return {**(self.data or {}), **(self.hidden_data or {})}


class ListPaymentsRequest(BaseModel):
    params: ListPaymentsParams = Field(default_factory=ListPaymentsParams)
    application: ApplicationBody = Field(default_factory=ApplicationBody)

    model_config = ConfigDict(extra="allow")
