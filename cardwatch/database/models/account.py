"""
SQLAlchemy model for account profiles
"""
from datetime import datetime
from sqlalchemy import Column, String, Float, DateTime

from cardwatch.database.postgres_client import Base


class AccountRecord(Base):
    """Card account profile"""
    __tablename__ = "accounts"

    account_no = Column(String(50), primary_key=True)
    holder_name = Column(String(100))
    credit_limit = Column(Float)
    home_region = Column(String(50))
    status = Column(String(20), nullable=False, default="active")

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
