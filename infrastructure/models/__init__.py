"""Infrastructure models package exports."""
from .base import Base, metadata
from .transaction import TransactionModel, StoreAuthModel

__all__ = [
    "Base",
    "metadata",
    "TransactionModel",
    "StoreAuthModel",
]
