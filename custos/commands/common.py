"""Shared wiring for commands: config, backend selection and the auth gate."""

import sys
from dataclasses import dataclass
from typing import Any, NoReturn

from rich.console import Console

from custos.auth import AuthClient, AuthGate
from custos.config import get_backend, get_supabase_settings, load_config
from custos.dashboard import Dashboard
from custos.errors import ConfigError
from custos.realtime import ChangeFeed
from custos.store.local import LocalExpenseStore
from custos.store.remote import RemoteExpenseStore
from custos.store.schema import get_db_path

console = Console()


@dataclass
class AppContext:
    """Everything a command needs to work on the dashboard."""

    config: dict[str, Any]
    backend: str
    dashboard: Dashboard
    feed: ChangeFeed | None = None
    gate: AuthGate | None = None
    store: LocalExpenseStore | RemoteExpenseStore | None = None


def load_settings() -> dict[str, Any]:
    """Load config or exit with a message."""
    try:
        return load_config()
    except ConfigError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)


def build_auth_client(config: dict[str, Any]) -> AuthClient:
    """Create the auth client for the remote backend.

    Raises:
        ConfigError: If Supabase settings are missing.
    """
    return AuthClient(get_supabase_settings(config), db_path=get_db_path())


def exit_not_logged_in() -> NoReturn:
    """Point the user to the login command and exit."""
    console.print("[yellow]Você não está logado.[/yellow]")
    console.print("[dim]Use 'custos login' para entrar ou 'custos signup' para criar uma conta[/dim]")
    sys.exit(1)


def open_app() -> AppContext:
    """Open the configured backend and load the expense list.

    For the remote backend the auth gate runs first; without a session
    the user is pointed to the login command and the process exits.

    Raises:
        StoreError: If the expense list cannot be loaded.
        AuthError: If the stored session cannot be read.
    """
    config = load_settings()

    try:
        backend = get_backend(config)

        if backend == "local":
            store = LocalExpenseStore(get_db_path())
            dashboard = Dashboard(store)
            dashboard.load()
            return AppContext(config=config, backend=backend, dashboard=dashboard, store=store)

        client = build_auth_client(config)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)

    gate = AuthGate(client)
    gate.start()
    if not gate.authenticated:
        exit_not_logged_in()

    feed = ChangeFeed()
    remote = RemoteExpenseStore(get_supabase_settings(config), client.get_session, feed=feed)
    dashboard = Dashboard(remote)
    dashboard.load()
    return AppContext(config=config, backend=backend, dashboard=dashboard, feed=feed, gate=gate, store=remote)
