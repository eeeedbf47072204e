"""
Store API credentials - SQLAlchemy implementation of StoreAuthProvider.
"""
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.logging_config import get_logger
from domain.notification.entity import StoreAuth
from domain.notification.exceptions import LookupMissError
from infrastructure.database import AsyncSessionLocal
from infrastructure.models.transaction import StoreAuthModel


logger = get_logger(__name__)


class SQLAlchemyStoreAuthRepository:
    def __init__(self, session_factory: Callable[[], AsyncSession] = AsyncSessionLocal):
        self._session_factory = session_factory

    @staticmethod
    def _to_entity(row: StoreAuthModel) -> StoreAuth:
        return StoreAuth(
            store_id=row.store_id,
            my_id=row.my_id,
            access_token=row.access_token,
            application_id=row.application_id,
            expires_at=row.expires_at,
        )

    async def get_auth(self, store_id: int) -> StoreAuth:
        async with self._session_factory() as session:
            row = await session.get(StoreAuthModel, store_id)
        if row is None:
            raise LookupMissError(
                f"No Store API authentication for store #{store_id}",
                reason="NO_AUTH",
                endpoint=StoreAuthModel.__tablename__,
            )
        return self._to_entity(row)

    async def save(
        self,
        store_id: int,
        *,
        my_id: str,
        access_token: str,
        application_id: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> StoreAuth:
        async with self._session_factory() as session:
            async with session.begin():
                row = await session.get(StoreAuthModel, store_id)
                if row is None:
                    row = StoreAuthModel(store_id=store_id)
                    session.add(row)
                row.my_id = my_id
                row.access_token = access_token
                row.application_id = application_id
                row.expires_at = expires_at
            entity = self._to_entity(row)
        logger.info("store_auth_saved", store_id=store_id, my_id=my_id)
        return entity
