import uuid

from sqlalchemy import Column, String, Float
from database.database import Base


def new_transaction_id() -> str:
    return uuid.uuid4().hex


class TransactionModel(Base):
    __tablename__ = "transactions"

    id = Column(String(32), primary_key=True, default=new_transaction_id)
    amount = Column(Float, nullable=False)
    description = Column(String, nullable=False)
    category = Column(String, index=True, nullable=False)
    type = Column(String, index=True, nullable=False)  # 'expense' or 'income'
    date = Column(String, nullable=False)
    # ISO 8601 UTC timestamps
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)
