"""Expense store backed by a Supabase (PostgREST) table.

Rows keep the amount in major units (reais); it is converted to and from
centavos here. The ownership column is filled in server-side and is never
sent or read.
"""

import logging
from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from typing import Any

import requests

from custos.auth import Session
from custos.config import SupabaseSettings
from custos.domain.expenses import round_to_cents
from custos.domain.models import Category, Expense, ExpenseId, PaymentMethod
from custos.errors import AuthError, StoreError
from custos.realtime import ChangeEvent, ChangeFeed, ChangeType

logger = logging.getLogger(__name__)

NOT_LOGGED_IN_MESSAGE = "Você precisa estar logado para salvar despesas."


def expense_from_row(row: dict[str, Any]) -> Expense:
    """Build an expense from a table row.

    Raises:
        StoreError: If the row is missing columns or has invalid values.
    """
    try:
        amount = round_to_cents(Decimal(str(row["amount"])))
        return Expense(
            id=ExpenseId(str(row["id"])),
            date=str(row["date"])[:10],
            description=row["description"],
            category=Category(row["category"]),
            amount=amount,
            paid=bool(row["paid"]),
            payment_method=PaymentMethod(row["payment_method"]),
            vendor=row.get("vendor") or None,
            notes=row.get("notes") or None,
            recurring=bool(row.get("recurring") or False),
        )
    except (KeyError, ValueError, InvalidOperation) as e:
        raise StoreError(f"Unexpected expense row: {e}") from e


def row_from_expense(expense: Expense) -> dict[str, Any]:
    """Build the insert payload for an expense (amount in reais)."""
    return {
        "date": expense.date,
        "description": expense.description,
        "category": expense.category.value,
        "payment_method": expense.payment_method.value,
        "amount": expense.amount / 100,
        "paid": expense.paid,
        "recurring": expense.recurring,
        "vendor": expense.vendor,
        "notes": expense.notes,
    }


def error_message(response: requests.Response) -> str:
    """Extract the provider's error message from a failed response."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        for key in ("message", "msg", "error_description", "error"):
            if payload.get(key):
                return str(payload[key])
    return str(payload)


class RemoteExpenseStore:
    """Reads and writes single rows of the remote expense table.

    Successful writes are announced on the change feed, if one is attached.
    """

    def __init__(
        self,
        settings: SupabaseSettings,
        get_session: Callable[[], Session | None],
        feed: ChangeFeed | None = None,
        http: requests.Session | None = None,
    ) -> None:
        self.settings = settings
        self.get_session = get_session
        self.feed = feed
        self.http = http or requests.Session()
        self.table_url = f"{settings.url}/rest/v1/{settings.table}"

    def _headers(self, session: Session | None) -> dict[str, str]:
        token = session.access_token if session else self.settings.anon_key
        return {
            "apikey": self.settings.anon_key,
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def _request(
        self,
        method: str,
        params: dict[str, str],
        session: Session | None,
        payload: dict[str, Any] | None = None,
        prefer: str | None = None,
    ) -> requests.Response:
        headers = self._headers(session)
        if prefer:
            headers["Prefer"] = prefer

        try:
            response = self.http.request(
                method,
                self.table_url,
                params=params,
                json=payload,
                headers=headers,
                timeout=self.settings.timeout,
            )
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, self.settings.table, e)
            raise StoreError(f"Falha de conexão: {e}") from e

        if not response.ok:
            message = error_message(response)
            logger.error("%s %s failed [%s]: %s", method, self.settings.table, response.status_code, message)
            raise StoreError(message)

        return response

    def _rows(self, response: requests.Response) -> list[dict[str, Any]]:
        try:
            rows = response.json()
        except ValueError as e:
            raise StoreError(f"Resposta inválida do servidor: {e}") from e
        if not isinstance(rows, list):
            raise StoreError("Resposta inválida do servidor")
        return rows

    def _publish(self, change: ChangeType, expense_id: str) -> None:
        if self.feed is not None:
            self.feed.publish(ChangeEvent(change, expense_id))

    def load(self) -> list[Expense]:
        """Fetch all rows of the logged-in user, newest date first.

        Raises:
            AuthError: If the session is gone (e.g. its refresh failed).
            StoreError: If the request fails.
        """
        session = self.get_session()
        if session is None:
            raise AuthError(NOT_LOGGED_IN_MESSAGE)

        response = self._request("GET", {"select": "*", "order": "date.desc"}, session)
        rows = self._rows(response)
        logger.debug("Fetched %d expense rows", len(rows))
        return [expense_from_row(row) for row in rows]

    def create(self, expense: Expense) -> Expense:
        """Insert a row. The stored row (with its server id) is returned.

        Raises:
            AuthError: If no one is logged in. No request is made.
            StoreError: If the insert fails.
        """
        session = self.get_session()
        if session is None:
            raise AuthError(NOT_LOGGED_IN_MESSAGE)

        response = self._request(
            "POST",
            {"select": "*"},
            session,
            payload=row_from_expense(expense),
            prefer="return=representation",
        )
        rows = self._rows(response)
        created = expense_from_row(rows[0]) if rows else expense
        logger.debug("Created expense %s", created.id)
        self._publish(ChangeType.INSERT, created.id)
        return created

    def set_paid(self, expense_id: str, paid: bool) -> None:
        """Update the paid column of one row."""
        self._request(
            "PATCH",
            {"id": f"eq.{expense_id}"},
            self.get_session(),
            payload={"paid": paid},
        )
        logger.debug("Set paid=%s on expense %s", paid, expense_id)
        self._publish(ChangeType.UPDATE, expense_id)

    def delete(self, expense_id: str) -> None:
        """Delete one row."""
        self._request("DELETE", {"id": f"eq.{expense_id}"}, self.get_session())
        logger.debug("Deleted expense %s", expense_id)
        self._publish(ChangeType.DELETE, expense_id)
