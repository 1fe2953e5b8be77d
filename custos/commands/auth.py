"""Account commands for the remote backend (login, signup, logout, whoami)."""

import sys

import typer

from custos.auth import AuthClient
from custos.commands.common import build_auth_client, console, load_settings
from custos.config import get_backend
from custos.errors import ConfigError, CustosError


def _client() -> AuthClient:
    config = load_settings()
    try:
        if get_backend(config) != "remote":
            console.print("[yellow]Login só é usado com o backend remoto (backend = \"remote\")[/yellow]")
            sys.exit(1)
        return build_auth_client(config)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)


def login_command(email: str | None = None, password: str | None = None) -> None:
    """Sign in with email and password."""
    client = _client()
    if email is None:
        email = typer.prompt("Email")
    if password is None:
        password = typer.prompt("Senha", hide_input=True)

    try:
        session = client.sign_in(email, password)
    except CustosError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] Logado como {session.email or email}")


def signup_command(email: str | None = None, password: str | None = None) -> None:
    """Create an account. Sign in afterwards with 'custos login'."""
    client = _client()
    if email is None:
        email = typer.prompt("Email")
    if password is None:
        password = typer.prompt("Senha (mínimo 6 caracteres)", hide_input=True, confirmation_prompt=True)

    try:
        message = client.sign_up(email, password)
    except CustosError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] {message}")


def logout_command() -> None:
    """Sign out and forget the stored session."""
    client = _client()
    try:
        client.sign_out()
    except CustosError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    console.print("[green]✓[/green] Sessão encerrada")


def whoami_command() -> None:
    """Show who is logged in."""
    client = _client()
    try:
        session = client.get_session()
    except CustosError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    if session is None:
        console.print("[yellow]Você não está logado.[/yellow]")
        sys.exit(1)
    console.print(f"{session.email or '-'} [dim]({session.user_id})[/dim]")
