"""
Session state for one user of the tracker.

A session starts in the ``setup`` state and moves to ``active`` once a name
and a positive monthly budget are given; there is no way back. Transactions
are kept in a :class:`TransactionCache`. Without an API client the cache is
the only copy and ids are millisecond timestamps. With an API client every
create/delete goes to the backend first and the cache mirrors what the
backend returned.
"""
import logging
import math
import time
from datetime import date as date_type
from typing import Dict, List, Optional

from client.api_client import TransactionAPI
from client.cache import TransactionCache
from models.category import categories_for
from services.allocation_service import BudgetAllocation
from services.chart_service import ChartService

logger = logging.getLogger(__name__)

SETUP = 'setup'
ACTIVE = 'active'
TRANSACTION_TYPES = ('expense', 'income')


class SetupError(ValueError):
    pass


class SessionStateError(RuntimeError):
    pass


def signed_amount(amount: float, transaction_type: str) -> float:
    magnitude = abs(amount)
    return -magnitude if transaction_type == 'expense' else magnitude


def _parse_amount(amount) -> float:
    if isinstance(amount, str):
        amount = amount.strip()
    if amount in (None, ''):
        raise ValueError("Amount is required")
    try:
        value = float(amount)
    except (TypeError, ValueError):
        raise ValueError(f"Amount must be a number, got {amount!r}")
    if math.isnan(value) or math.isinf(value):
        raise ValueError(f"Amount must be a finite number, got {amount!r}")
    if value == 0:
        raise ValueError("Amount must not be zero")
    return value


class TallySession:
    def __init__(self, api: Optional[TransactionAPI] = None,
                 allocation: Optional[BudgetAllocation] = None,
                 chart: Optional[ChartService] = None):
        self.state = SETUP
        self.user_name: Optional[str] = None
        self.monthly_budget = 0.0
        self.api = api
        self.transactions = TransactionCache()
        self.allocation = allocation or BudgetAllocation()
        self.chart = chart or ChartService()
        self._last_local_id = 0

    @property
    def is_active(self) -> bool:
        return self.state == ACTIVE

    def setup(self, name: str, budget):
        """Leave the setup state. Needs a name and a positive budget."""
        if self.state != SETUP:
            raise SessionStateError("Session is already set up")
        if not name or not name.strip():
            raise SetupError("Name is required")
        try:
            monthly_budget = float(budget)
        except (TypeError, ValueError):
            raise SetupError(f"Budget must be a number, got {budget!r}")
        if math.isnan(monthly_budget) or math.isinf(monthly_budget):
            raise SetupError(f"Budget must be a finite number, got {budget!r}")
        if monthly_budget <= 0:
            raise SetupError("Budget must be positive")

        self.user_name = name.strip()
        self.monthly_budget = monthly_budget
        self.state = ACTIVE
        logger.info(f"Session set up for {self.user_name} with a budget of {monthly_budget:.2f}")

    def add_transaction(self, amount, transaction_type: str = 'expense', category: Optional[str] = None,
                        description: str = '', date: Optional[str] = None) -> Dict:
        """
        Record a transaction. The stored amount is signed: expenses are
        negative, income positive, whatever the sign of `amount`.
        """
        self._require_active()
        if transaction_type not in TRANSACTION_TYPES:
            raise ValueError(f"Unknown transaction type: {transaction_type}")
        magnitude = abs(_parse_amount(amount))
        categories = categories_for(transaction_type)
        category = category or categories[0]
        if category not in categories:
            raise ValueError(f"Unknown {transaction_type} category: {category}")
        date = date or date_type.today().isoformat()

        if self.api is not None:
            response = self.api.create({
                'amount': magnitude,
                'type': transaction_type,
                'category': category,
                'description': description,
                'date': date,
            })
            transaction = self._from_server(response['transaction'])
        else:
            transaction = {
                'id': self._next_local_id(),
                'amount': signed_amount(magnitude, transaction_type),
                'type': transaction_type,
                'category': category,
                'description': description,
                'date': date,
            }

        self.transactions.add(transaction)
        return transaction

    def delete_transaction(self, transaction_id):
        self._require_active()
        if self.api is not None:
            self.api.delete(transaction_id)
        self.transactions.remove(transaction_id)

    def refresh(self):
        """Reload the cache from the backend, newest first"""
        self._require_active()
        if self.api is None:
            raise SessionStateError("No API client configured")
        response = self.api.get_all()
        records = sorted(
            response.get('transactions', []),
            key=lambda t: t.get('createdAt') or '',
            reverse=True,
        )
        self.transactions.replace(self._from_server(t) for t in records)

    def set_allocation(self, category: str, value) -> bool:
        self._require_active()
        return self.allocation.set_allocation(category, value)

    @property
    def balance(self) -> float:
        return self.chart.balance(self.monthly_budget, self.transactions)

    def balance_class(self) -> str:
        return self.chart.balance_class(self.balance)

    def pie_slices(self) -> List[Dict]:
        return self.chart.pie_slices(self.allocation)

    def legend(self) -> List[Dict]:
        return self.chart.legend(self.allocation, self.monthly_budget)

    def render_chart(self) -> str:
        return self.chart.render_svg(self.pie_slices())

    def _require_active(self):
        if not self.is_active:
            raise SessionStateError("Session is not set up yet")

    def _next_local_id(self) -> int:
        transaction_id = max(int(time.time() * 1000), self._last_local_id + 1)
        self._last_local_id = transaction_id
        return transaction_id

    @staticmethod
    def _from_server(record: Dict) -> Dict:
        return {
            'id': record['id'],
            'amount': signed_amount(record['amount'], record['type']),
            'type': record['type'],
            'category': record.get('category'),
            'description': record.get('description'),
            'date': record.get('date'),
        }
