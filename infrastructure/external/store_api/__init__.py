"""
Store API collaborators of the notification pipeline.
"""
from .client import StoreApiClient, StoreApiClientFactory, store_api_client_factory
from .applications import StoreAppConfigProvider
from .orders import StoreOrderResolver, StoreOrderStatusUpdater

__all__ = [
    "StoreApiClient",
    "StoreApiClientFactory",
    "store_api_client_factory",
    "StoreAppConfigProvider",
    "StoreOrderResolver",
    "StoreOrderStatusUpdater",
]
