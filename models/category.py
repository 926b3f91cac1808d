EXPENSE_CATEGORIES = ['Food', 'Transport', 'Entertainment', 'Shopping', 'Bills', 'Other']
INCOME_CATEGORIES = ['Salary', 'Freelance', 'Investment', 'Gift', 'Other']

# Share of the monthly budget (in percent) given to each expense category at session start
DEFAULT_ALLOCATIONS = {
    'Food': 25,
    'Transport': 15,
    'Entertainment': 10,
    'Shopping': 20,
    'Bills': 25,
    'Other': 5,
}

CATEGORY_COLORS = {
    'Food': '#ef4444',
    'Transport': '#3b82f6',
    'Entertainment': '#10b981',
    'Shopping': '#f59e0b',
    'Bills': '#8b5cf6',
    'Other': '#6b7280',
}


def categories_for(transaction_type: str):
    """Categories offered for a transaction type"""
    if transaction_type == 'income':
        return INCOME_CATEGORIES
    return EXPENSE_CATEGORIES
