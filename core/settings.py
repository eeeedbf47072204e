"""
Payment gateway display settings using pydantic-settings v2 with nested env keys.

This module is isolated so core.config.Settings stays about transport and
storage; everything here only shapes the list-payments module response.
"""
from __future__ import annotations

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field


class PaymentMethodSettings(BaseModel):
    code: str = "banking_billet"
    # Gateway label per request language, "pt_br" is the fallback
    labels: dict[str, str] = Field(
        default_factory=lambda: {
            "pt_br": "Boleto bancário",
            "en_us": "Banking billet",
        }
    )
    icon: Optional[str] = None
    default_lang: str = "pt_br"


class PaymentSettings(BaseSettings):
    method: PaymentMethodSettings = Field(default_factory=PaymentMethodSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PAYMENT__",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )


payment_settings = PaymentSettings()
