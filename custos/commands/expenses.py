"""Expense commands (add, list, toggle, delete, months)."""

import sys

import pandas as pd
import typer
from rich.table import Table

from custos.commands.common import console, open_app
from custos.domain.aggregation import DashboardView
from custos.domain.expenses import ExpenseForm, format_brl
from custos.domain.models import Category, Expense, PaymentMethod
from custos.errors import CustosError


def normalize_date(date: str) -> str:
    """Normalize a user-entered date to YYYY-MM-DD.

    Accepts YYYY-MM-DD as well as day-first formats like DD/MM/YYYY.

    Raises:
        ValueError: If the date cannot be parsed.
    """
    date = date.strip()
    if len(date) == 10 and date[4] == "-":
        return pd.to_datetime(date, format="%Y-%m-%d").strftime("%Y-%m-%d")
    return pd.to_datetime(date, dayfirst=True).strftime("%Y-%m-%d")


def prompt_choice(label: str, options: list[str], default: str) -> str:
    """Prompt for one of a fixed list of values, by number or name."""
    for idx, option in enumerate(options, 1):
        console.print(f"  [dim]{idx}.[/dim] {option}")
    choice = typer.prompt(label, default=default)
    if choice.isdigit() and 1 <= int(choice) <= len(options):
        return options[int(choice) - 1]
    return choice


def render_expense_table(view: DashboardView) -> None:
    """Render the filtered month bucket as a table."""
    table = Table(title=f"Lançamentos - {view.month} ({len(view.filtered)} item(ns) após filtros)")
    table.add_column("ID", style="dim")
    table.add_column("Data", style="cyan")
    table.add_column("Descrição", style="white")
    table.add_column("Categoria")
    table.add_column("Forma")
    table.add_column("Status")
    table.add_column("Valor", justify="right")

    for expense in view.filtered:
        description = expense.description
        details = " • ".join(d for d in (expense.vendor, expense.notes) if d)
        if details:
            description += f"\n[dim]{details}[/dim]"
        if expense.recurring:
            description += " [magenta](recorrente)[/magenta]"

        status = "[green]Pago[/green]" if expense.paid else "[yellow]Pendente[/yellow]"
        table.add_row(
            expense.id,
            expense.date,
            description,
            expense.category.value,
            expense.payment_method.value,
            status,
            format_brl(expense.amount),
        )

    console.print(table)

    if not view.filtered:
        console.print("[dim]Nenhum lançamento encontrado para este mês com os filtros atuais.[/dim]")

    console.print(f"\n[bold]Total (após filtros):[/bold] {format_brl(view.filtered_total)}")


def print_expense(expense: Expense) -> None:
    console.print(f"  Data: {expense.date}")
    console.print(f"  Descrição: {expense.description}")
    console.print(f"  Categoria: {expense.category.value}")
    console.print(f"  Valor: {format_brl(expense.amount)}")
    console.print(f"  Forma: {expense.payment_method.value}")
    console.print(f"  Status: {'Pago' if expense.paid else 'Pendente'}")


def add_command(
    date: str | None,
    description: str | None,
    amount: str | None,
    category: str | None = None,
    payment_method: str | None = None,
    paid: bool = True,
    vendor: str = "",
    notes: str = "",
    recurring: bool = False,
) -> None:
    """Add an expense. Missing required values are prompted for.

    Args:
        date: Expense date (YYYY-MM-DD, DD/MM/YYYY, or other formats).
        description: What the expense was for.
        amount: Amount in reais, comma as decimal separator (e.g., "299,00").
        category: Category name.
        payment_method: Payment method name.
        paid: Whether the expense is already paid.
        vendor: Optional vendor.
        notes: Optional notes.
        recurring: Whether the expense repeats monthly.
    """
    if date is None:
        date = typer.prompt("Data", default=pd.Timestamp.today().strftime("%Y-%m-%d"))
    if description is None:
        description = typer.prompt("Descrição")
    if amount is None:
        amount = typer.prompt("Valor (R$)")
    if category is None:
        category = prompt_choice("Categoria", [c.value for c in Category], Category.SISTEMAS.value)
    if payment_method is None:
        payment_method = prompt_choice("Forma de pagamento", [m.value for m in PaymentMethod], PaymentMethod.PIX.value)

    try:
        normalized_date = normalize_date(date) if date.strip() else ""
    except (ValueError, pd.errors.ParserError) as e:
        console.print(f"[red]Data inválida: {e}[/red]")
        console.print("[dim]Formatos aceitos: AAAA-MM-DD, DD/MM/AAAA, etc.[/dim]")
        sys.exit(1)

    form = ExpenseForm(
        date=normalized_date,
        description=description,
        amount=amount,
        category=category,
        payment_method=payment_method,
        paid=paid,
        vendor=vendor,
        notes=notes,
        recurring=recurring,
    )

    try:
        app = open_app()
        expense = app.dashboard.add(form)
    except CustosError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] Despesa adicionada ({expense.id}):")
    print_expense(expense)


def list_command(
    month: str | None = None,
    search: str = "",
    category: str = "all",
    payment_method: str = "all",
    status: str = "all",
) -> None:
    """List the expenses of a month, narrowed by filters."""
    try:
        app = open_app()
        if month:
            app.dashboard.select_month(month)
        app.dashboard.set_filters(query=search, category=category, payment_method=payment_method, status=status)
        render_expense_table(app.dashboard.view())
    except CustosError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)


def toggle_command(expense_id: str) -> None:
    """Flip the paid status of an expense."""
    try:
        app = open_app()
        updated = app.dashboard.toggle_paid(expense_id)
    except CustosError as e:
        console.print(f"[red]Não foi possível atualizar: {e}[/red]", style="bold")
        sys.exit(1)

    if updated is None:
        console.print(f"[red]Despesa {expense_id} não encontrada[/red]")
        sys.exit(1)

    status = "[green]Pago[/green]" if updated.paid else "[yellow]Pendente[/yellow]"
    console.print(f"[green]✓[/green] {updated.description}: {status}")


def delete_command(expense_id: str) -> None:
    """Delete an expense."""
    try:
        app = open_app()
        deleted = app.dashboard.remove(expense_id)
    except CustosError as e:
        console.print(f"[red]Não foi possível excluir: {e}[/red]", style="bold")
        sys.exit(1)

    if not deleted:
        console.print(f"[yellow]Despesa {expense_id} não encontrada, nada a excluir[/yellow]")
        return

    console.print(f"[green]✓[/green] Despesa {expense_id} excluída")


def months_command() -> None:
    """List the months available for selection."""
    try:
        app = open_app()
        view = app.dashboard.view()
    except CustosError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)

    totals = {point.month: point.amount for point in view.trend}
    for month in view.months:
        marker = "[bold cyan]*[/bold cyan]" if month == view.month else " "
        amount = totals.get(month)
        suffix = f" [dim]{format_brl(amount)}[/dim]" if amount else ""
        console.print(f"{marker} {month}{suffix}")
