"""
SQLAlchemy model for scored card transactions
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Float, DateTime, Index

from cardwatch.database.postgres_client import Base


class TransactionRecord(Base):
    """Card transaction with its alert label"""
    __tablename__ = "transactions"

    # Assigned upstream, never generated here
    transaction_id = Column(Integer, primary_key=True, autoincrement=False)

    account_no = Column(String(50), nullable=False, index=True)
    merchant = Column(String(100), nullable=False)
    category = Column(String(100), nullable=False)
    amount = Column(Float, nullable=False)
    transaction_date = Column(String(50), nullable=False)
    alert = Column(String(20))

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_transactions_account_recent", "account_no", "transaction_date"),
    )
