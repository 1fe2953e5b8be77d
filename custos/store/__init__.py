"""Store layer - provides persistence for the application.

The remote store lives in ``custos.store.remote`` and is imported from
there directly, since it depends on the auth client.
"""

from custos.store.base import ExpenseStore
from custos.store.local import STORAGE_KEY, LocalExpenseStore
from custos.store.schema import database_exists, get_db_path, get_item, init_database, remove_item, set_item

__all__ = [
    # Schema
    "database_exists",
    "get_db_path",
    "get_item",
    "init_database",
    "remove_item",
    "set_item",
    # Stores
    "ExpenseStore",
    "LocalExpenseStore",
    "STORAGE_KEY",
]
