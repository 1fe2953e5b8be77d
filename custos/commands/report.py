"""Dashboard and watch commands for viewing monthly KPIs and charts."""

import logging
import sys

from rich.table import Table

from custos.commands.common import console, exit_not_logged_in, open_app
from custos.dates import format_month_label
from custos.domain.aggregation import (
    CategoryTotal,
    DashboardView,
    Kpis,
    TrendPoint,
    calculate_bar_length,
)
from custos.domain.expenses import format_brl
from custos.domain.models import Money
from custos.errors import AuthError, CustosError
from custos.realtime import poll_changes

logger = logging.getLogger(__name__)

BAR_WIDTH = 30


def render_kpis(kpis: Kpis) -> None:
    """Render the four KPI cards as one table row."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Total do mês", justify="right")
    table.add_column("Recorrentes", justify="right")
    table.add_column("Pendentes", justify="right")
    table.add_column("Média 6 meses", justify="right")
    table.add_row(
        format_brl(kpis.total),
        format_brl(kpis.recurring_total),
        f"[yellow]{format_brl(kpis.pending_total)}[/yellow]",
        format_brl(kpis.average_6m),
    )
    console.print(table)


def render_category_chart(by_category: list[CategoryTotal]) -> None:
    """Render the per-category bar chart."""
    console.print("[bold]Gastos por categoria[/bold]\n")
    if not by_category:
        console.print("  [dim]Sem dados para este mês.[/dim]\n")
        return

    max_amount = Money(max(c.amount for c in by_category))
    for item in by_category:
        bar = "█" * calculate_bar_length(item.amount, max_amount, BAR_WIDTH)
        console.print(f"  {item.category.value:16} {format_brl(item.amount):>14} [cyan]{bar}[/cyan]")
    console.print()


def render_trend_chart(trend: list[TrendPoint]) -> None:
    """Render the 12-month trend, oldest month first."""
    console.print("[bold]Evolução (12 meses)[/bold]\n")
    max_amount = Money(max((p.amount for p in trend), default=0))
    for point in trend:
        bar = "█" * calculate_bar_length(point.amount, max_amount, BAR_WIDTH)
        console.print(f"  {format_month_label(point.month):8} {format_brl(point.amount):>14} [green]{bar}[/green]")
    console.print()


def render_dashboard(view: DashboardView) -> None:
    """Render KPIs and both charts for the selected month."""
    console.print(f"[bold cyan]Dashboard de Custos - {view.month}[/bold cyan]\n")
    render_kpis(view.kpis)
    console.print()
    render_category_chart(view.by_category)
    render_trend_chart(view.trend)


def dashboard_command(month: str | None = None) -> None:
    """Show KPIs, category breakdown and 12-month trend."""
    try:
        app = open_app()
        if month:
            app.dashboard.select_month(month)
        render_dashboard(app.dashboard.view())
    except CustosError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)


def watch_command(interval: float = 5.0, month: str | None = None) -> None:
    """Re-render the dashboard whenever the remote table changes."""
    try:
        app = open_app()
        if month:
            app.dashboard.select_month(month)
    except CustosError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)

    gate = app.gate
    if app.feed is None or app.store is None or gate is None or app.backend != "remote":
        console.print("[red]'watch' requires the remote backend[/red]", style="bold")
        sys.exit(1)

    def rerender() -> None:
        console.clear()
        render_dashboard(app.dashboard.view())
        console.print(f"[dim]Atualizando a cada {interval:g}s - Ctrl+C para sair[/dim]")

    app.dashboard.watch(app.feed, on_refresh=rerender)
    rerender()

    try:
        poll_changes(
            app.store,
            app.feed,
            interval,
            should_stop=lambda: not gate.authenticated,
            initial=list(app.dashboard.expenses),
        )
    except KeyboardInterrupt:
        console.print("\n[dim]Parado.[/dim]")
    except AuthError as e:
        if gate.authenticated:
            console.print(f"[red]{e}[/red]", style="bold")
            sys.exit(1)
        logger.info("Session ended while watching: %s", e)
    finally:
        app.dashboard.unwatch()

    if not gate.authenticated:
        exit_not_logged_in()
