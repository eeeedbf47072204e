"""Merchant configuration stored on the app installation (data + hidden_data)."""
from __future__ import annotations

from application.dtos.notifications import MerchantConfig
from core.logging_config import get_logger
from domain.notification.entity import StoreContext
from infrastructure.external.store_api.client import StoreApiClientFactory


logger = get_logger(__name__)


class StoreAppConfigProvider:
    def __init__(self, client_factory: StoreApiClientFactory) -> None:
        self._client_factory = client_factory

    async def get_config(self, context: StoreContext, include_hidden: bool = False) -> MerchantConfig:
        async with self._client_factory(context) as api:
            endpoint = f"/applications/{api.application_id}.json"
            application = (await api.get(endpoint)).json() or {}
            config = dict(application.get("data") or {})
            if include_hidden:
                # Authenticated subresource, never returned with the app body
                hidden = (await api.get(f"/applications/{api.application_id}/hidden_data.json")).json()
                config.update(hidden or {})
        logger.debug(
            "merchant_config_loaded",
            store_id=context.store_id,
            include_hidden=include_hidden,
            keys=sorted(config),
        )
        return MerchantConfig.model_validate(config)
