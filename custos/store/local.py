"""Expense store backed by the local key/value table."""

import json
import logging
import sqlite3
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Any

from custos.domain.expenses import remove_expense, seed_expenses
from custos.domain.models import Category, Expense, ExpenseId, Money, PaymentMethod
from custos.errors import StoreError
from custos.store.schema import get_item, set_item

logger = logging.getLogger(__name__)

STORAGE_KEY = "mrl_travel_expenses_v1"


def encode_expense(expense: Expense) -> dict[str, Any]:
    """Convert an expense to its stored JSON shape (amount in centavos)."""
    data: dict[str, Any] = {
        "id": expense.id,
        "date": expense.date,
        "description": expense.description,
        "category": expense.category.value,
        "amountCents": expense.amount,
        "paid": expense.paid,
        "paymentMethod": expense.payment_method.value,
        "recurring": expense.recurring,
    }
    if expense.vendor:
        data["vendor"] = expense.vendor
    if expense.notes:
        data["notes"] = expense.notes
    return data


def decode_expense(data: dict[str, Any]) -> Expense:
    """Build an expense from its stored JSON shape.

    Raises:
        KeyError, ValueError, TypeError: If the entry is malformed.
    """
    amount = data["amountCents"]
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError(f"amountCents must be an integer, got {amount!r}")

    return Expense(
        id=ExpenseId(str(data["id"])),
        date=str(data["date"]),
        description=str(data["description"]),
        category=Category(data["category"]),
        amount=Money(amount),
        paid=bool(data["paid"]),
        payment_method=PaymentMethod(data["paymentMethod"]),
        vendor=data.get("vendor") or None,
        notes=data.get("notes") or None,
        recurring=bool(data.get("recurring", False)),
    )


def decode_blob(raw: str | None) -> list[Expense] | None:
    """Parse the stored list.

    Returns:
        The expenses, or None if the blob is absent or malformed.
    """
    if not raw:
        return None
    try:
        parsed = json.loads(raw)
        if not isinstance(parsed, list):
            return None
        return [decode_expense(item) for item in parsed]
    except (ValueError, KeyError, TypeError, AttributeError):
        return None


class LocalExpenseStore:
    """Keeps the whole expense list as one JSON value.

    Every mutation re-serializes the full list.
    """

    def __init__(self, db_path: Path | None = None, today: date | None = None) -> None:
        self.db_path = db_path
        self.today = today
        self._expenses: list[Expense] = []
        self._loaded = False

    def load(self) -> list[Expense]:
        """Load the stored list, falling back to seed data.

        An absent or unreadable value is replaced by the three seed
        expenses, which are saved straight away so their ids are stable.

        Raises:
            StoreError: If the database cannot be read.
        """
        try:
            raw = get_item(STORAGE_KEY, self.db_path)
        except sqlite3.Error as e:
            raise StoreError(f"Database error: {e}") from e

        expenses = decode_blob(raw)
        if expenses is None:
            logger.debug("No usable stored expenses under %s, using seed data", STORAGE_KEY)
            expenses = seed_expenses(self.today)
            self._save(expenses)

        self._expenses = expenses
        self._loaded = True
        return list(expenses)

    def create(self, expense: Expense) -> Expense:
        """Prepend an expense and save the list."""
        self._save([expense, *self._current()])
        logger.debug("Created expense %s", expense.id)
        return expense

    def set_paid(self, expense_id: str, paid: bool) -> None:
        """Set the paid flag of one expense and save the list."""
        self._save([replace(e, paid=paid) if e.id == expense_id else e for e in self._current()])
        logger.debug("Set paid=%s on expense %s", paid, expense_id)

    def delete(self, expense_id: str) -> None:
        """Remove one expense and save the list."""
        self._save(remove_expense(self._current(), expense_id))
        logger.debug("Deleted expense %s", expense_id)

    def _current(self) -> list[Expense]:
        if not self._loaded:
            self.load()
        return self._expenses

    def _save(self, expenses: list[Expense]) -> None:
        payload = json.dumps([encode_expense(e) for e in expenses], ensure_ascii=False)
        try:
            set_item(STORAGE_KEY, payload, self.db_path)
        except sqlite3.Error as e:
            logger.error("Failed to save expenses: %s", e)
            raise StoreError(f"Database error: {e}") from e
        self._expenses = expenses
