from typing import Dict, Iterable, Iterator, List

RECENT_COUNT = 5


class TransactionCache:
    """In-memory transactions for the current session, most recent first"""

    def __init__(self):
        self._transactions: List[Dict] = []

    def __iter__(self) -> Iterator[Dict]:
        return iter(self._transactions)

    def __len__(self) -> int:
        return len(self._transactions)

    def __contains__(self, transaction_id) -> bool:
        return any(t['id'] == transaction_id for t in self._transactions)

    def add(self, transaction: Dict):
        self._transactions = [transaction] + self._transactions

    def remove(self, transaction_id):
        self._transactions = [t for t in self._transactions if t['id'] != transaction_id]

    def replace(self, transactions: Iterable[Dict]):
        self._transactions = list(transactions)

    def all(self) -> List[Dict]:
        return list(self._transactions)

    def displayed(self, show_all: bool = False) -> List[Dict]:
        if show_all:
            return self.all()
        return self._transactions[:RECENT_COUNT]
