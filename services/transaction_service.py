import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from database import crud
from models.errors import TransactionNotFound, TransactionValidationError
from models.transaction import (
    DEFAULT_CATEGORY,
    DEFAULT_DESCRIPTION,
    Transaction,
    TransactionCreate,
    TransactionUpdate,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('amount', 'type')


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _clean_description(description: Optional[str]) -> str:
    if description and description.strip():
        return description.strip()
    return DEFAULT_DESCRIPTION


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in e['loc'])}: {e['msg']}" for e in error.errors()
    )


class TransactionService:
    """
    Validates and normalizes transaction payloads before they reach the store,
    and shapes stored records into their JSON representation
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self.clock = clock

    def create(self, db: Session, payload: Dict[str, Any]) -> Dict:
        missing = [name for name in REQUIRED_FIELDS if _is_blank(payload.get(name))]
        if missing:
            logger.info(f"Rejected transaction, missing field(s): {', '.join(missing)}")
            raise TransactionValidationError(
                f"Missing required field(s): {', '.join(missing)}",
                "Amount and type are required",
                received=payload,
            )

        try:
            data = TransactionCreate.model_validate(payload)
        except ValidationError as e:
            logger.info(f"Rejected invalid transaction: {_describe(e)}")
            raise TransactionValidationError(_describe(e), "Invalid transaction data", received=payload) from e

        now = self._timestamp()
        fields = {
            'amount': data.amount,
            'description': _clean_description(data.description),
            'category': data.category or DEFAULT_CATEGORY,
            'type': data.type.value,
            'date': data.date or now,
            'created_at': now,
            'updated_at': now,
        }
        transaction_id = crud.create_transaction(db, fields)
        logger.info(f"Created transaction {transaction_id}")
        return self.get(db, transaction_id)

    def list(
        self,
        db: Session,
        limit: int = 50,
        category: Optional[str] = None,
        transaction_type: Optional[str] = None,
    ) -> List[Dict]:
        transactions = crud.list_transactions(db, limit, category, transaction_type)
        return [self._serialize(t) for t in transactions]

    def get(self, db: Session, transaction_id: str) -> Dict:
        transaction = crud.get_transaction_by_id(db, transaction_id)
        if not transaction:
            raise TransactionNotFound(transaction_id)
        return self._serialize(transaction)

    def update(self, db: Session, transaction_id: str, payload: Dict[str, Any]) -> Dict:
        """
        Partial update. Fields absent from the payload (or sent as null) are
        left untouched; updatedAt is always refreshed.
        """
        try:
            data = TransactionUpdate.model_validate(payload)
        except ValidationError as e:
            logger.info(f"Rejected invalid update for {transaction_id}: {_describe(e)}")
            raise TransactionValidationError(_describe(e), "Invalid transaction data", received=payload) from e

        fields = {
            name: value
            for name, value in data.model_dump(mode="json", exclude_unset=True).items()
            if value is not None
        }
        if 'description' in fields:
            fields['description'] = _clean_description(fields['description'])

        current = crud.get_transaction_by_id(db, transaction_id)
        if not current:
            raise TransactionNotFound(transaction_id)
        fields['updated_at'] = self._timestamp(after=current.updated_at)

        updated = crud.update_transaction(db, transaction_id, fields)
        if not updated:
            raise TransactionNotFound(transaction_id)
        logger.info(f"Updated transaction {transaction_id}: {', '.join(sorted(fields))}")
        return self._serialize(updated)

    def delete(self, db: Session, transaction_id: str) -> None:
        if not crud.delete_transaction(db, transaction_id):
            raise TransactionNotFound(transaction_id)
        logger.info(f"Deleted transaction {transaction_id}")

    def _timestamp(self, after: Optional[str] = None) -> str:
        now = self.clock()
        if after:
            previous = datetime.fromisoformat(after)
            # updatedAt must move forward even when the clock has not
            if now <= previous:
                now = previous + timedelta(microseconds=1)
        return now.isoformat(timespec="microseconds")

    @staticmethod
    def _serialize(transaction) -> Dict:
        return Transaction.model_validate(transaction).model_dump(mode="json", by_alias=True)
