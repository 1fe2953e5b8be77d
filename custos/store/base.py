"""Interface shared by the local and remote expense stores."""

from typing import Protocol

from custos.domain.models import Expense


class ExpenseStore(Protocol):
    """Persistence for the expense list.

    Implementations raise StoreError when a read or write fails.
    """

    def load(self) -> list[Expense]:
        """Fetch the full expense list, newest first."""
        ...

    def create(self, expense: Expense) -> Expense:
        """Persist a new expense and return the stored record."""
        ...

    def set_paid(self, expense_id: str, paid: bool) -> None:
        """Persist the paid flag of one expense."""
        ...

    def delete(self, expense_id: str) -> None:
        """Delete one expense."""
        ...
