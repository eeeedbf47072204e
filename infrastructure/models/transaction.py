"""
PagHiper transaction lookup models - SQLAlchemy ORM
注意：这是基础设施层的实现细节，不是领域模型
"""
from sqlalchemy import Column, Integer, String, DateTime, Text
from datetime import datetime, timezone

from .base import Base


class TransactionModel(Base):
    """PagHiper transaction code -> store id, written when the billet is created."""
    __tablename__ = "paghiper_transactions"

    transaction_code = Column(String(100), primary_key=True, comment="PagHiper transaction_id")
    store_id = Column(Integer, nullable=False, index=True, comment="E-Com Plus store id")
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self):
        return f"<TransactionModel(transaction_code='{self.transaction_code}', store_id={self.store_id})>"


class StoreAuthModel(Base):
    """Store API credentials of this app per store."""
    __tablename__ = "store_auth"

    store_id = Column(Integer, primary_key=True, comment="E-Com Plus store id")
    application_id = Column(String(50), nullable=True, comment="App installation id on the store")
    my_id = Column(String(50), nullable=False, comment="Authentication id (X-My-ID)")
    access_token = Column(Text, nullable=False, comment="X-Access-Token")
    expires_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self):
        return f"<StoreAuthModel(store_id={self.store_id}, my_id='{self.my_id}')>"
