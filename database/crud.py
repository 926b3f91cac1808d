import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database.models import TransactionModel
from models.errors import StoreError

logger = logging.getLogger(__name__)


def _store_failure(db: Session, action: str, error: SQLAlchemyError) -> StoreError:
    db.rollback()
    logger.error(f"Database error while {action}: {str(error)}")
    return StoreError(str(error))

def create_transaction(db: Session, fields: Dict) -> str:
    """Insert a transaction and return its generated id"""
    try:
        db_transaction = TransactionModel(**fields)
        db.add(db_transaction)
        db.commit()
        db.refresh(db_transaction)
        return db_transaction.id
    except SQLAlchemyError as e:
        raise _store_failure(db, "creating a transaction", e) from e

def list_transactions(
    db: Session,
    limit: int = 50,
    category: Optional[str] = None,
    transaction_type: Optional[str] = None,
) -> List[TransactionModel]:
    """Fetch up to `limit` transactions, optionally filtered by category and/or type"""
    try:
        query = db.query(TransactionModel)
        if category:
            query = query.filter(TransactionModel.category == category)
        if transaction_type:
            query = query.filter(TransactionModel.type == transaction_type)
        return query.limit(limit).all()
    except SQLAlchemyError as e:
        raise _store_failure(db, "listing transactions", e) from e

def get_transaction_by_id(db: Session, transaction_id: str) -> Optional[TransactionModel]:
    """Fetch a transaction by id, None when it does not exist"""
    try:
        return db.query(TransactionModel).filter(TransactionModel.id == transaction_id).first()
    except SQLAlchemyError as e:
        raise _store_failure(db, "fetching a transaction", e) from e

def update_transaction(db: Session, transaction_id: str, fields: Dict) -> Optional[TransactionModel]:
    """Apply the given fields to a transaction, None when it does not exist"""
    try:
        transaction = db.query(TransactionModel).filter(TransactionModel.id == transaction_id).first()
        if not transaction:
            return None
        for name, value in fields.items():
            setattr(transaction, name, value)
        db.commit()
        db.refresh(transaction)
        return transaction
    except SQLAlchemyError as e:
        raise _store_failure(db, "updating a transaction", e) from e

def delete_transaction(db: Session, transaction_id: str) -> bool:
    """Delete a transaction, False when it does not exist"""
    try:
        transaction = db.query(TransactionModel).filter(TransactionModel.id == transaction_id).first()
        if not transaction:
            return False
        db.delete(transaction)
        db.commit()
        return True
    except SQLAlchemyError as e:
        raise _store_failure(db, "deleting a transaction", e) from e

def ping(db: Session) -> Dict:
    """Round-trip a trivial query to check the connection"""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        raise _store_failure(db, "checking the connection", e) from e
    return {
        "message": "Database connection successful",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
