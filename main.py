from fastapi import FastAPI, Body, Depends, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import Any, Dict, Optional
import uvicorn
from datetime import datetime, timezone
import os
import logging
from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)

from database import crud
from database.database import init_db, get_db
from models.errors import TallyError, TransactionValidationError
from models.transaction import TransactionType
from services.transaction_service import TransactionService

app = FastAPI(title="Tally API", version="1.0.0")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize database
init_db()

# Initialize services
transaction_service = TransactionService()


def _error_response(status_code: int, error: str, message: str, **extra) -> JSONResponse:
    content = {"success": False, "error": error, "message": message}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))

def _failure(e: Exception, message: str) -> JSONResponse:
    """Convert an error raised while handling a request into the failure envelope"""
    if isinstance(e, TallyError):
        if e.status_code >= 500:
            logger.error(f"{message}: {e.error}")
        extra = {"received": e.received} if isinstance(e, TransactionValidationError) else {}
        return _error_response(e.status_code, e.error, e.message or message, **extra)
    logger.exception(f"{message}: {str(e)}")
    return _error_response(500, str(e), message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and query parameters get the same 400 envelope as schema errors"""
    logger.info(f"Rejected request to {request.url.path}: {exc.errors()}")
    return _error_response(
        400,
        "; ".join(str(e.get("msg")) for e in exc.errors()),
        "Invalid request",
        details=exc.errors(),
        received=exc.body,
    )


@app.get("/")
async def root():
    return {"message": "Tally Backend API", "version": app.version}

@app.get("/api/health")
async def health():
    logger.info("Health endpoint hit")
    return {"status": "Backend is running", "timestamp": datetime.now(timezone.utc).isoformat()}

@app.get("/api/db-test")
def db_test(db: Session = Depends(get_db)):
    """
    Check that the database answers
    """
    try:
        data = crud.ping(db)
        return JSONResponse({
            "success": True,
            "data": data,
            "message": "Database connection working!"
        })
    except Exception as e:
        return _failure(e, "Database connection failed")

@app.post("/api/transactions")
def create_transaction_endpoint(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db)
):
    """
    Create a transaction. amount and type are required.
    """
    try:
        transaction = transaction_service.create(db, payload)
        return JSONResponse(status_code=201, content={
            "success": True,
            "id": transaction["id"],
            "transaction": transaction,
            "message": "Transaction created successfully"
        })
    except Exception as e:
        return _failure(e, "Failed to create transaction")

@app.get("/api/transactions")
def get_transactions(
    limit: int = Query(50, ge=1),
    category: Optional[str] = None,
    transaction_type: Optional[TransactionType] = Query(None, alias="type"),
    db: Session = Depends(get_db)
):
    """
    List transactions, optionally filtered by category and/or type
    """
    try:
        transactions = transaction_service.list(
            db, limit, category, transaction_type.value if transaction_type else None
        )
        return JSONResponse({
            "success": True,
            "transactions": transactions,
            "count": len(transactions),
            "message": "Transactions retrieved successfully"
        })
    except Exception as e:
        return _failure(e, "Failed to fetch transactions")

@app.get("/api/transactions/{transaction_id}")
def get_transaction_endpoint(transaction_id: str, db: Session = Depends(get_db)):
    try:
        transaction = transaction_service.get(db, transaction_id)
        return JSONResponse({
            "success": True,
            "transaction": transaction,
            "message": "Transaction retrieved successfully"
        })
    except Exception as e:
        return _failure(e, "Failed to fetch transaction")

@app.put("/api/transactions/{transaction_id}")
def update_transaction_endpoint(
    transaction_id: str,
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db)
):
    """
    Update only the fields present in the body
    """
    try:
        transaction = transaction_service.update(db, transaction_id, payload)
        return JSONResponse({
            "success": True,
            "transaction": transaction,
            "message": "Transaction updated successfully"
        })
    except Exception as e:
        return _failure(e, "Failed to update transaction")

@app.delete("/api/transactions/{transaction_id}")
def delete_transaction_endpoint(transaction_id: str, db: Session = Depends(get_db)):
    try:
        transaction_service.delete(db, transaction_id)
        return JSONResponse({
            "success": True,
            "message": "Transaction deleted successfully"
        })
    except Exception as e:
        return _failure(e, "Failed to delete transaction")

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
