"""Tests for the local key/value table and LocalExpenseStore."""

import json
from datetime import date
from pathlib import Path

import pytest

from custos.domain.expenses import ExpenseForm, build_expense
from custos.domain.models import Category, Money
from custos.errors import StoreError
from custos.store.local import STORAGE_KEY, LocalExpenseStore, decode_blob, encode_expense
from custos.store.schema import get_item, init_database, remove_item, set_item


def stored_ids(db_path: Path) -> list[str]:
    raw = get_item(STORAGE_KEY, db_path)
    assert raw is not None
    return [item["id"] for item in json.loads(raw)]


class TestKeyValueTable:
    """Tests for get_item, set_item and remove_item."""

    def test_roundtrip_and_overwrite(self, db_path: Path) -> None:
        """Should store, replace and delete values."""
        init_database(db_path)
        assert get_item("k", db_path) is None

        set_item("k", "one", db_path)
        set_item("k", "two", db_path)
        assert get_item("k", db_path) == "two"

        remove_item("k", db_path)
        assert get_item("k", db_path) is None

    def test_creates_database_on_first_use(self, tmp_path: Path) -> None:
        """Should create the schema if the file does not exist yet."""
        db_path = tmp_path / "nested" / "custos.db"
        set_item("k", "v", db_path)
        assert db_path.exists()
        assert get_item("k", db_path) == "v"


class TestLoad:
    """Tests for LocalExpenseStore.load."""

    def test_absent_blob_yields_seeds(self, db_path: Path, today: date) -> None:
        """Should return the three seed records on first run."""
        expenses = LocalExpenseStore(db_path, today).load()
        assert [e.amount for e in expenses] == [29900, 9900, 45000]
        assert {e.date for e in expenses} == {"2024-03-15"}

    def test_seeds_are_persisted(self, db_path: Path, today: date) -> None:
        """Should save the seeds so ids stay stable between runs."""
        first = LocalExpenseStore(db_path, today).load()
        second = LocalExpenseStore(db_path, today).load()
        assert [e.id for e in first] == [e.id for e in second]

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            '{"an": "object"}',
            '[{"id": "x"}]',
            '[{"id": "x", "date": "2024-01-01", "description": "d", "category": "Food",'
            ' "amountCents": 1, "paid": true, "paymentMethod": "PIX"}]',
        ],
    )
    def test_malformed_blob_yields_seeds(self, db_path: Path, today: date, raw: str) -> None:
        """Should silently replace unreadable content with seeds."""
        set_item(STORAGE_KEY, raw, db_path)
        expenses = LocalExpenseStore(db_path, today).load()
        assert len(expenses) == 3

    def test_empty_list_is_kept(self, db_path: Path, today: date) -> None:
        """Should not re-seed after the user deleted everything."""
        set_item(STORAGE_KEY, "[]", db_path)
        assert LocalExpenseStore(db_path, today).load() == []

    def test_reads_stored_list(self, db_path: Path, today: date) -> None:
        """Should decode a stored list."""
        expense = build_expense(ExpenseForm(date="2024-01-02", description="Curso", amount="10,00"))
        set_item(STORAGE_KEY, json.dumps([encode_expense(expense)]), db_path)
        assert LocalExpenseStore(db_path, today).load() == [expense]


class TestMutations:
    """Tests for create, set_paid and delete."""

    def test_create_prepends_and_persists(self, db_path: Path, today: date) -> None:
        """Should put the new expense first and save the full list."""
        store = LocalExpenseStore(db_path, today)
        seeds = store.load()
        expense = build_expense(ExpenseForm(date="2024-03-01", description="Hotel", amount="800,00"))

        assert store.create(expense) == expense
        assert stored_ids(db_path) == [expense.id, *[e.id for e in seeds]]

    def test_set_paid_persists(self, db_path: Path, today: date) -> None:
        """Should save the new paid flag."""
        store = LocalExpenseStore(db_path, today)
        pending = store.load()[2]

        store.set_paid(pending.id, True)

        reloaded = LocalExpenseStore(db_path, today).load()
        assert next(e for e in reloaded if e.id == pending.id).paid is True

    def test_delete_persists(self, db_path: Path, today: date) -> None:
        """Should save the list without the deleted expense."""
        store = LocalExpenseStore(db_path, today)
        seeds = store.load()

        store.delete(seeds[0].id)

        assert stored_ids(db_path) == [seeds[1].id, seeds[2].id]

    def test_delete_unknown_id_keeps_others(self, db_path: Path, today: date) -> None:
        """Should leave every record in place."""
        store = LocalExpenseStore(db_path, today)
        seeds = store.load()

        store.delete("missing")

        assert stored_ids(db_path) == [e.id for e in seeds]

    def test_mutation_before_load_keeps_stored_list(self, db_path: Path, today: date) -> None:
        """Should read the stored list before writing from a fresh store."""
        seeds = LocalExpenseStore(db_path, today).load()
        expense = build_expense(ExpenseForm(date="2024-03-01", description="Hotel", amount="800,00"))

        LocalExpenseStore(db_path, today).create(expense)
        LocalExpenseStore(db_path, today).set_paid(seeds[2].id, True)
        LocalExpenseStore(db_path, today).delete(seeds[0].id)

        reloaded = LocalExpenseStore(db_path, today).load()
        assert [e.id for e in reloaded] == [expense.id, seeds[1].id, seeds[2].id]
        assert reloaded[2].paid is True

    def test_write_failure_raises_store_error(self, tmp_path: Path, today: date) -> None:
        """Should wrap database errors."""
        db_path = tmp_path / "custos.db"
        db_path.mkdir()
        with pytest.raises(StoreError):
            LocalExpenseStore(db_path, today).load()


class TestCodec:
    """Tests for encode_expense and decode_blob."""

    def test_stored_shape(self) -> None:
        """Should store the amount in centavos under camelCase keys."""
        expense = build_expense(
            ExpenseForm(date="2024-03-01", description="DAS", amount="1.000,00", category="Impostos", vendor="Receita")
        )
        data = encode_expense(expense)
        assert data["amountCents"] == 100000
        assert data["category"] == "Impostos"
        assert data["paymentMethod"] == "PIX"
        assert data["vendor"] == "Receita"
        assert "notes" not in data

    def test_decode_rejects_float_amounts(self) -> None:
        """Should treat a non-integer amount as malformed."""
        raw = json.dumps(
            [
                {
                    "id": "x",
                    "date": "2024-01-01",
                    "description": "d",
                    "category": Category.OUTROS.value,
                    "amountCents": 10.5,
                    "paid": True,
                    "paymentMethod": "PIX",
                }
            ]
        )
        assert decode_blob(raw) is None

    def test_decode_optional_fields(self) -> None:
        """Should default missing optional fields."""
        raw = json.dumps(
            [
                {
                    "id": "x",
                    "date": "2024-01-01",
                    "description": "d",
                    "category": "Outros",
                    "amountCents": 100,
                    "paid": False,
                    "paymentMethod": "Dinheiro",
                }
            ]
        )
        decoded = decode_blob(raw)
        assert decoded is not None
        assert decoded[0].amount == Money(100)
        assert decoded[0].vendor is None
        assert decoded[0].recurring is False
