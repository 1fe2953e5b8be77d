"""Dashboard application state.

Holds the expense list, the selected month and the table filters, and
runs every mutation against the store. Paid toggles and deletes are
applied locally first and undone if the store write fails.
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import date

from custos.dates import current_month, month_of, parse_month
from custos.domain.aggregation import DashboardView, ExpenseFilters, build_view
from custos.domain.expenses import (
    ExpenseForm,
    build_expense,
    find_expense,
    parse_category,
    parse_payment_method,
    remove_expense,
    replace_expense,
)
from custos.domain.models import ALL, Expense, Month, PaidStatus
from custos.errors import StoreError, ValidationError
from custos.realtime import ChangeEvent, ChangeFeed
from custos.store.base import ExpenseStore

logger = logging.getLogger(__name__)


class Dashboard:
    """State for one dashboard session."""

    def __init__(self, store: ExpenseStore, today: date | None = None) -> None:
        self.store = store
        self.today = today
        self.expenses: list[Expense] = []
        self.month: Month = current_month(today)
        self.filters = ExpenseFilters()
        self._unsubscribe: Callable[[], None] | None = None

    def load(self) -> list[Expense]:
        """Replace the expense list with a fresh read from the store."""
        self.expenses = self.store.load()
        logger.debug("Loaded %d expenses", len(self.expenses))
        return self.expenses

    refresh = load

    def select_month(self, month: str) -> None:
        """Switch the selected month.

        Raises:
            ValidationError: If the month is not a YYYY-MM key.
        """
        try:
            parse_month(month)
        except ValueError:
            raise ValidationError(f"Mês inválido: {month!r} (use AAAA-MM)") from None
        self.month = Month(month)

    def set_filters(
        self,
        query: str = "",
        category: str = ALL,
        payment_method: str = ALL,
        status: str = PaidStatus.ALL.value,
    ) -> ExpenseFilters:
        """Replace the table filters.

        Raises:
            ValidationError: If a filter value is not "all" or a known value.
        """
        if category != ALL:
            category = parse_category(category).value
        if payment_method != ALL:
            payment_method = parse_payment_method(payment_method).value
        if status not in {s.value for s in PaidStatus}:
            raise ValidationError(f"Status desconhecido: {status!r}")

        self.filters = ExpenseFilters(query=query, category=category, payment_method=payment_method, status=status)
        return self.filters

    def add(self, form: ExpenseForm) -> Expense:
        """Validate and save a new expense, then jump to its month.

        Raises:
            ValidationError: If the form is invalid. Nothing is written.
            AuthError: If the remote store has no session.
            StoreError: If the write fails.
        """
        expense = build_expense(form)
        created = self.store.create(expense)
        self.expenses = [created, *[e for e in self.expenses if e.id != created.id]]
        self.month = month_of(created.date)
        return created

    def toggle_paid(self, expense_id: str) -> Expense | None:
        """Flip the paid flag of an expense.

        Returns:
            The updated expense, or None if the id is unknown.

        Raises:
            StoreError: If the write fails. The local flag is restored first.
        """
        previous = find_expense(self.expenses, expense_id)
        if previous is None:
            return None

        updated = replace(previous, paid=not previous.paid)
        self.expenses = replace_expense(self.expenses, updated)
        try:
            self.store.set_paid(expense_id, updated.paid)
        except StoreError:
            logger.error("Could not update expense %s, restoring previous status", expense_id)
            self.expenses = replace_expense(self.expenses, previous)
            raise
        return updated

    def remove(self, expense_id: str) -> bool:
        """Delete an expense.

        Returns:
            True if deleted, False if the id is unknown.

        Raises:
            StoreError: If the write fails. The local list is restored first.
        """
        if find_expense(self.expenses, expense_id) is None:
            return False

        before = list(self.expenses)
        self.expenses = remove_expense(self.expenses, expense_id)
        try:
            self.store.delete(expense_id)
        except StoreError:
            logger.error("Could not delete expense %s, restoring it", expense_id)
            self.expenses = before
            raise
        return True

    def view(self) -> DashboardView:
        """Compute everything shown for the selected month."""
        return build_view(self.expenses, self.month, self.filters, self.today)

    def watch(self, feed: ChangeFeed, on_refresh: Callable[[], None] | None = None) -> None:
        """Re-fetch the full list on every change notification.

        Args:
            feed: Feed to follow.
            on_refresh: Called after each re-fetch (e.g., to re-render).
        """
        self.unwatch()

        def handle(event: ChangeEvent) -> None:
            try:
                self.refresh()
            except StoreError as e:
                logger.warning("Re-fetch after %s failed: %s", event.type.value, e)
                return
            if on_refresh is not None:
                on_refresh()

        self._unsubscribe = feed.subscribe(handle)

    def unwatch(self) -> None:
        """Stop following change notifications."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
