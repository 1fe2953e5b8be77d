"""Domain models and types for custos.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- Business logic separated from infrastructure
"""

from custos.domain.models import Category, Expense, ExpenseId, Money, Month, PaidStatus, PaymentMethod

__all__ = ["Category", "Expense", "ExpenseId", "Money", "Month", "PaidStatus", "PaymentMethod"]
