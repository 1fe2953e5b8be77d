"""CLI entry point for custos."""

import typer

from custos.commands.admin import backup_command, init_command
from custos.commands.auth import login_command, logout_command, signup_command, whoami_command
from custos.commands.common import load_settings
from custos.commands.expenses import add_command, delete_command, list_command, months_command, toggle_command
from custos.commands.report import dashboard_command, watch_command
from custos.log import setup_logging

app = typer.Typer(
    name="custos",
    help="Dashboard de Custos - expense tracking with monthly KPIs",
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Dashboard de Custos - expense tracking with monthly KPIs."""
    level = "DEBUG" if verbose else str(load_settings().get("log_level", "WARNING"))
    setup_logging(level)


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing database and config"),
) -> None:
    """Initialize the custos database and configuration."""
    init_command(force)


@app.command(name="backup")
def backup(
    output_dir: str = typer.Option(None, "--output", "-o", help="Backup directory (default: next to the database)"),
) -> None:
    """Backup your database and configuration files."""
    backup_command(output_dir)


@app.command()
def add(
    date: str = typer.Option(None, "--date", "-d", help="Expense date (YYYY-MM-DD or DD/MM/YYYY)"),
    description: str = typer.Option(None, "--description", "-m", help="What the expense was for"),
    amount: str = typer.Option(None, "--amount", "-a", help="Amount in reais, e.g. 299,00"),
    category: str = typer.Option(None, "--category", "-c", help="Category (e.g. Sistemas, Marketing)"),
    method: str = typer.Option(None, "--method", help="Payment method (PIX, Cartão, Boleto, ...)"),
    paid: bool = typer.Option(True, "--paid/--pending", help="Whether the expense is already paid"),
    vendor: str = typer.Option("", "--vendor", help="Vendor"),
    notes: str = typer.Option("", "--notes", help="Notes"),
    recurring: bool = typer.Option(False, "--recurring", help="Mark as a monthly recurring expense"),
) -> None:
    """Add an expense."""
    add_command(date, description, amount, category, method, paid, vendor, notes, recurring)


@app.command(name="list")
def list_expenses(
    month: str = typer.Option(None, "--month", help="Month to show (YYYY-MM, default: current)"),
    search: str = typer.Option("", "--search", "-s", help="Search description, vendor and notes"),
    category: str = typer.Option("all", "--category", "-c", help="Only this category"),
    method: str = typer.Option("all", "--method", help="Only this payment method"),
    status: str = typer.Option("all", "--status", help="'all', 'paid' or 'pending'"),
) -> None:
    """List the expenses of a month."""
    list_command(month, search, category, method, status)


@app.command()
def toggle(expense_id: str) -> None:
    """Toggle an expense between paid and pending."""
    toggle_command(expense_id)


@app.command()
def delete(expense_id: str) -> None:
    """Delete an expense."""
    delete_command(expense_id)


@app.command()
def months() -> None:
    """List the months you can select."""
    months_command()


@app.command()
def dashboard(
    month: str = typer.Option(None, "--month", help="Month to show (YYYY-MM, default: current)"),
) -> None:
    """Show monthly KPIs, spending by category and the 12-month trend."""
    dashboard_command(month)


@app.command()
def watch(
    interval: float = typer.Option(5.0, "--interval", "-i", help="Seconds between checks for changes"),
    month: str = typer.Option(None, "--month", help="Month to show (YYYY-MM, default: current)"),
) -> None:
    """Keep the dashboard open and refresh it when expenses change."""
    watch_command(interval, month)


@app.command()
def login(
    email: str = typer.Option(None, "--email", "-e", help="Account email"),
) -> None:
    """Sign in to the remote backend."""
    login_command(email)


@app.command()
def signup(
    email: str = typer.Option(None, "--email", "-e", help="Account email"),
) -> None:
    """Create an account on the remote backend."""
    signup_command(email)


@app.command()
def logout() -> None:
    """Sign out of the remote backend."""
    logout_command()


@app.command()
def whoami() -> None:
    """Show the logged-in account."""
    whoami_command()


if __name__ == "__main__":
    app()
