from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from database import crud
from models.errors import StoreError, TransactionNotFound, TransactionValidationError
from services.transaction_service import TransactionService


FROZEN = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def frozen_service():
    return TransactionService(clock=lambda: FROZEN)


def test_create_stamps_timestamps(db, frozen_service):
    transaction = frozen_service.create(db, {"amount": 3, "type": "expense"})

    assert transaction["createdAt"] == "2025-03-01T12:00:00.000000+00:00"
    assert transaction["updatedAt"] == transaction["createdAt"]
    assert transaction["date"] == transaction["createdAt"]


def test_update_moves_updated_at_forward_with_a_stopped_clock(db, frozen_service):
    created = frozen_service.create(db, {"amount": 3, "type": "expense"})

    first = frozen_service.update(db, created["id"], {"category": "Bills"})
    second = frozen_service.update(db, created["id"], {})

    assert created["updatedAt"] < first["updatedAt"] < second["updatedAt"]
    assert second["createdAt"] == created["createdAt"]
    assert second["category"] == "Bills"


def test_update_trims_description(db):
    service = TransactionService()
    created = service.create(db, {"amount": 3, "type": "expense", "description": "old"})

    updated = service.update(db, created["id"], {"description": "  new  "})

    assert updated["description"] == "new"


def test_missing_fields_carry_received_payload(db):
    payload = {"description": "no amount"}

    with pytest.raises(TransactionValidationError) as excinfo:
        TransactionService().create(db, payload)

    assert excinfo.value.status_code == 400
    assert excinfo.value.received == payload
    assert "amount" in excinfo.value.error
    assert "type" in excinfo.value.error


def test_get_and_delete_unknown_raise_not_found(db):
    service = TransactionService()

    with pytest.raises(TransactionNotFound):
        service.get(db, "nope")
    with pytest.raises(TransactionNotFound):
        service.delete(db, "nope")


def test_store_client_returns_none_for_missing_records(db):
    assert crud.get_transaction_by_id(db, "nope") is None
    assert crud.update_transaction(db, "nope", {"description": "x"}) is None
    assert crud.delete_transaction(db, "nope") is False


def test_store_client_wraps_database_errors():
    session = MagicMock()
    session.query.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))

    with pytest.raises(StoreError) as excinfo:
        crud.list_transactions(session)

    assert "database is locked" in excinfo.value.error
    session.rollback.assert_called_once()
