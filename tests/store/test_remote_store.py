"""Tests for RemoteExpenseStore against a fake HTTP session."""

from typing import Any

import pytest

from custos.auth import Session
from custos.config import SupabaseSettings
from custos.domain.expenses import ExpenseForm, build_expense
from custos.domain.models import Category, Money, PaymentMethod
from custos.errors import AuthError, StoreError
from custos.realtime import ChangeEvent, ChangeFeed, ChangeType
from custos.store.remote import RemoteExpenseStore, expense_from_row, row_from_expense

SESSION = Session(access_token="user-token", refresh_token="r", expires_at=4_000_000_000, user_id="u1")


def make_row(**overrides: Any) -> dict[str, Any]:
    row = {
        "id": 7,
        "created_at": "2024-03-01T12:00:00+00:00",
        "date": "2024-03-01",
        "description": "Assinatura",
        "category": "Sistemas",
        "payment_method": "Cartão",
        "amount": 299.0,
        "paid": True,
        "recurring": True,
        "vendor": None,
        "notes": None,
        "user_id": "u1",
    }
    row.update(overrides)
    return row


def make_store(
    settings: SupabaseSettings, http: Any, session: Session | None = SESSION, feed: ChangeFeed | None = None
) -> RemoteExpenseStore:
    return RemoteExpenseStore(settings, lambda: session, feed=feed, http=http)


class TestRowConversion:
    """Tests for expense_from_row and row_from_expense."""

    def test_amount_converted_to_centavos(self) -> None:
        """Should multiply by 100 and round to the nearest centavo."""
        assert expense_from_row(make_row(amount=299.0)).amount == Money(29900)
        assert expense_from_row(make_row(amount="19.999")).amount == Money(2000)
        assert expense_from_row(make_row(amount=0.1)).amount == Money(10)

    def test_row_fields(self) -> None:
        """Should map columns onto the expense."""
        expense = expense_from_row(make_row(vendor="Plataforma X"))
        assert expense.id == "7"
        assert expense.category == Category.SISTEMAS
        assert expense.payment_method == PaymentMethod.CARTAO
        assert expense.vendor == "Plataforma X"
        assert expense.notes is None

    def test_bad_row(self) -> None:
        """Should raise StoreError for unknown categories."""
        with pytest.raises(StoreError):
            expense_from_row(make_row(category="Food"))

    def test_payload_in_reais_without_owner(self) -> None:
        """Should send reais and never the id or ownership column."""
        expense = build_expense(ExpenseForm(date="2024-03-02", description="Ads", amount="450,00"))
        payload = row_from_expense(expense)
        assert payload["amount"] == 450.0
        assert payload["payment_method"] == "PIX"
        assert "user_id" not in payload
        assert "id" not in payload


class TestLoad:
    """Tests for RemoteExpenseStore.load."""

    def test_fetches_ordered_by_date(self, supabase_settings, fake_http) -> None:
        """Should request all rows ordered by date descending."""
        fake_http.queue(200, [make_row(id=2, date="2024-03-05"), make_row(id=1)])
        expenses = make_store(supabase_settings, fake_http).load()

        call = fake_http.calls[0]
        assert call["method"] == "GET"
        assert call["url"] == "https://demo.supabase.co/rest/v1/expenses"
        assert call["params"] == {"select": "*", "order": "date.desc"}
        assert call["headers"]["Authorization"] == "Bearer user-token"
        assert call["headers"]["apikey"] == "anon-key"
        assert [e.id for e in expenses] == ["2", "1"]

    def test_http_error(self, supabase_settings, fake_http) -> None:
        """Should raise StoreError with the provider message."""
        fake_http.queue(500, {"message": "boom"})
        with pytest.raises(StoreError, match="boom"):
            make_store(supabase_settings, fake_http).load()

    def test_without_session_sends_nothing(self, supabase_settings, fake_http) -> None:
        """Should not fall back to an anonymous read."""
        with pytest.raises(AuthError):
            make_store(supabase_settings, fake_http, session=None).load()
        assert fake_http.calls == []

    def test_connection_error(self, supabase_settings, fake_http, connection_error) -> None:
        """Should wrap transport errors."""
        fake_http.error = connection_error
        with pytest.raises(StoreError):
            make_store(supabase_settings, fake_http).load()


class TestWrites:
    """Tests for create, set_paid and delete."""

    def test_create_without_session_sends_nothing(self, supabase_settings, fake_http) -> None:
        """Should refuse to write when no one is logged in."""
        expense = build_expense(ExpenseForm(date="2024-03-02", description="Ads", amount="1,00"))
        with pytest.raises(AuthError):
            make_store(supabase_settings, fake_http, session=None).create(expense)
        assert fake_http.calls == []

    def test_create_returns_stored_row(self, supabase_settings, fake_http) -> None:
        """Should insert and return the server's representation."""
        events: list[ChangeEvent] = []
        feed = ChangeFeed()
        feed.subscribe(events.append)
        fake_http.queue(201, [make_row(id=99, amount=1.5, description="Ads")])
        expense = build_expense(ExpenseForm(date="2024-03-01", description="Ads", amount="1,50"))

        created = make_store(supabase_settings, fake_http, feed=feed).create(expense)

        call = fake_http.calls[0]
        assert call["method"] == "POST"
        assert call["headers"]["Prefer"] == "return=representation"
        assert call["json"]["amount"] == 1.5
        assert created.id == "99"
        assert created.amount == Money(150)
        assert events == [ChangeEvent(ChangeType.INSERT, "99")]

    def test_set_paid(self, supabase_settings, fake_http) -> None:
        """Should patch only the paid column of the row."""
        fake_http.queue(204, None)
        make_store(supabase_settings, fake_http).set_paid("7", False)

        call = fake_http.calls[0]
        assert call["method"] == "PATCH"
        assert call["params"] == {"id": "eq.7"}
        assert call["json"] == {"paid": False}

    def test_delete(self, supabase_settings, fake_http) -> None:
        """Should delete by id and announce the change."""
        events: list[ChangeEvent] = []
        feed = ChangeFeed()
        feed.subscribe(events.append)
        fake_http.queue(204, None)

        make_store(supabase_settings, fake_http, feed=feed).delete("7")

        assert fake_http.calls[0]["method"] == "DELETE"
        assert fake_http.calls[0]["params"] == {"id": "eq.7"}
        assert events == [ChangeEvent(ChangeType.DELETE, "7")]

    def test_failed_write_publishes_nothing(self, supabase_settings, fake_http) -> None:
        """Should not announce a change that did not happen."""
        events: list[ChangeEvent] = []
        feed = ChangeFeed()
        feed.subscribe(events.append)
        fake_http.queue(403, {"message": "permission denied"})

        with pytest.raises(StoreError, match="permission denied"):
            make_store(supabase_settings, fake_http, feed=feed).set_paid("7", True)
        assert events == []
