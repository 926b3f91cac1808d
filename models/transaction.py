import math
from enum import Enum
from pydantic import BaseModel, Field, field_validator
from typing import Optional


DEFAULT_DESCRIPTION = "No description"
DEFAULT_CATEGORY = "Other"


class TransactionType(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"


def _coerce_amount(value):
    if isinstance(value, bool):
        raise ValueError("amount must be a number")
    if isinstance(value, str):
        value = value.strip()
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValueError("amount must be a number")
    if math.isnan(amount) or math.isinf(amount):
        raise ValueError("amount must be a finite number")
    if amount == 0:
        raise ValueError("amount must not be zero")
    return amount


class TransactionCreate(BaseModel):
    amount: float
    type: TransactionType
    description: Optional[str] = None
    category: Optional[str] = None
    date: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, value):
        return _coerce_amount(value)


class TransactionUpdate(BaseModel):
    """Partial update: only the fields sent by the client are applied"""

    amount: Optional[float] = None
    type: Optional[TransactionType] = None
    description: Optional[str] = None
    category: Optional[str] = None
    date: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, value):
        if value is None:
            return None
        return _coerce_amount(value)


class Transaction(BaseModel):
    id: str
    amount: float
    description: str
    category: str
    type: TransactionType
    date: str
    created_at: str = Field(serialization_alias="createdAt")
    updated_at: str = Field(serialization_alias="updatedAt")

    class Config:
        from_attributes = True
