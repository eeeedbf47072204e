"""
Transaction lookup store - SQLAlchemy implementation of TransactionLocator.
"""
from typing import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.logging_config import get_logger
from domain.notification.entity import TransactionRecord
from domain.notification.exceptions import LookupMissError
from infrastructure.database import AsyncSessionLocal
from infrastructure.models.transaction import TransactionModel


logger = get_logger(__name__)


class SQLAlchemyTransactionRepository:
    """One short session per call: lookups never share state across notifications."""

    def __init__(self, session_factory: Callable[[], AsyncSession] = AsyncSessionLocal):
        self._session_factory = session_factory

    async def get(self, transaction_code: str) -> TransactionRecord:
        async with self._session_factory() as session:
            result = await session.execute(
                select(TransactionModel).where(TransactionModel.transaction_code == transaction_code)
            )
            row = result.scalar_one_or_none()
        if row is None:
            raise LookupMissError(
                f"Transaction {transaction_code} not found",
                reason="NOT_FOUND",
                endpoint=TransactionModel.__tablename__,
            )
        return TransactionRecord(transaction_code=row.transaction_code, store_id=row.store_id)

    async def save(self, transaction_code: str, store_id: int) -> TransactionRecord:
        """Insert or rebind a transaction code to a store."""
        async with self._session_factory() as session:
            async with session.begin():
                row = await session.get(TransactionModel, transaction_code)
                if row is None:
                    session.add(TransactionModel(transaction_code=transaction_code, store_id=store_id))
                else:
                    row.store_id = store_id
        logger.info("transaction_saved", transaction_code=transaction_code, store_id=store_id)
        return TransactionRecord(transaction_code=transaction_code, store_id=store_id)
