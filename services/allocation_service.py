import logging
from typing import Dict, Mapping, Optional

from models.category import DEFAULT_ALLOCATIONS, EXPENSE_CATEGORIES

logger = logging.getLogger(__name__)

MAX_TOTAL = 100


class BudgetAllocation:
    """
    Share of the monthly budget, in whole percent, given to each expense
    category. The shares never add up to more than 100.
    """

    def __init__(self, allocations: Optional[Mapping[str, int]] = None):
        if allocations is None:
            allocations = DEFAULT_ALLOCATIONS
        self._allocations = {category: 0 for category in EXPENSE_CATEGORIES}
        for category, value in allocations.items():
            self._check_category(category)
            self._allocations[category] = self._parse_value(value)
        if self.total() > MAX_TOTAL:
            raise ValueError(f"Allocations add up to {self.total()}%, more than {MAX_TOTAL}%")

    def __getitem__(self, category: str) -> int:
        self._check_category(category)
        return self._allocations[category]

    def as_dict(self) -> Dict[str, int]:
        return dict(self._allocations)

    def total(self) -> int:
        return sum(self._allocations.values())

    def would_exceed_total(self, category: str, new_value) -> bool:
        """True if setting `category` to `new_value` would push the total past 100"""
        self._check_category(category)
        new_total = self.total() - self._allocations[category] + self._parse_value(new_value)
        return new_total > MAX_TOTAL

    def max_for(self, category: str) -> int:
        """Largest value `category` can take without breaking the total"""
        self._check_category(category)
        return MAX_TOTAL - (self.total() - self._allocations[category])

    def set_allocation(self, category: str, new_value) -> bool:
        """
        Set the share of `category`. A change that would push the total past
        100 is ignored and the current value kept. Returns whether the change
        was applied.
        """
        value = self._parse_value(new_value)
        if self.would_exceed_total(category, value):
            logger.debug(f"Ignored allocation {category}={value}%, max is {self.max_for(category)}%")
            return False
        self._allocations[category] = value
        return True

    def amount_for(self, category: str, monthly_budget: float) -> float:
        """Money allocated to `category` out of the monthly budget"""
        return (self[category] / 100) * monthly_budget

    @staticmethod
    def _check_category(category: str):
        if category not in EXPENSE_CATEGORIES:
            raise ValueError(f"Unknown expense category: {category}")

    @staticmethod
    def _parse_value(value) -> int:
        if isinstance(value, bool):
            raise ValueError("Allocation must be a whole number")
        if isinstance(value, str):
            value = value.strip()
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            raise ValueError(f"Allocation must be a whole number, got {value!r}")
        if parsed < 0 or parsed > MAX_TOTAL:
            raise ValueError(f"Allocation must be between 0 and {MAX_TOTAL}, got {parsed}")
        return parsed
