from typing import Any, Optional


class TallyError(Exception):
    """Base class for errors converted into a JSON failure envelope"""

    status_code = 500

    def __init__(self, error: str, message: Optional[str] = None):
        super().__init__(error)
        self.error = error
        self.message = message


class TransactionValidationError(TallyError):
    """Request body is missing required fields or carries invalid values"""

    status_code = 400

    def __init__(self, error: str, message: str, received: Any = None):
        super().__init__(error, message)
        self.received = received


class TransactionNotFound(TallyError):
    status_code = 404

    def __init__(self, transaction_id: str):
        super().__init__(f"Transaction {transaction_id} does not exist", "Transaction not found")
        self.transaction_id = transaction_id


class StoreError(TallyError):
    """Underlying database fault, distinct from a missing record"""

    status_code = 500
