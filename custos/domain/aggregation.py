"""Pure functions for dashboard aggregations.

This module contains the functional core for the dashboard views:
- No I/O operations (no database, no console, no network)
- No side effects
- Pure data transformations
- Easy to test

All monetary amounts are in centavos (Money type).
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from custos.dates import current_month, month_of, months_back
from custos.domain.expenses import round_to_cents
from custos.domain.models import ALL, Category, Expense, Money, Month, PaidStatus

TREND_MONTHS = 12
AVERAGE_MONTHS = 6


@dataclass(frozen=True)
class ExpenseFilters:
    """Table filters. Each field is ignored when set to "all" (or empty query)."""

    query: str = ""
    category: str = ALL
    payment_method: str = ALL
    status: str = PaidStatus.ALL.value


@dataclass(frozen=True)
class Kpis:
    """Immutable monthly KPI values."""

    total: Money
    recurring_total: Money
    pending_total: Money
    average_6m: Money


@dataclass(frozen=True)
class CategoryTotal:
    """Sum of one category within a month."""

    category: Category
    amount: Money


@dataclass(frozen=True)
class TrendPoint:
    """Total of one month in the trend series."""

    month: Month
    amount: Money


@dataclass(frozen=True)
class DashboardView:
    """Everything the dashboard renders for one month."""

    month: Month
    months: list[Month]
    month_expenses: list[Expense]
    filtered: list[Expense]
    filtered_total: Money
    kpis: Kpis
    by_category: list[CategoryTotal]
    trend: list[TrendPoint]


def total(expenses: list[Expense]) -> Money:
    """Sum the amounts of the given expenses."""
    return Money(sum(e.amount for e in expenses))


def average_cents(values: list[Money]) -> Money:
    """Arithmetic mean rounded half-up to the nearest centavo (0 for no values)."""
    if not values:
        return Money(0)
    return round_to_cents(Decimal(sum(values)) / len(values) / 100)


def monthly_totals(expenses: list[Expense]) -> dict[Month, Money]:
    """Group expenses by month key and sum each group."""
    totals: dict[Month, int] = defaultdict(int)
    for expense in expenses:
        totals[month_of(expense.date)] += expense.amount
    return {month: Money(amount) for month, amount in totals.items()}


def month_index(expenses: list[Expense], today: date | None = None) -> list[Month]:
    """List selectable months: months with data plus the last 12, newest first.

    Args:
        expenses: All expenses.
        today: Reference date for the trailing window. Defaults to today.

    Returns:
        Unique month keys sorted descending.
    """
    from_data = {month_of(e.date) for e in expenses}
    window = set(months_back(current_month(today), TREND_MONTHS))
    return sorted(from_data | window, reverse=True)


def month_bucket(expenses: list[Expense], month: Month) -> list[Expense]:
    """Expenses dated in ``month``, newest first."""
    in_month = [e for e in expenses if month_of(e.date) == month]
    return sorted(in_month, key=lambda e: e.date, reverse=True)


def matches_filters(expense: Expense, filters: ExpenseFilters) -> bool:
    """Check one expense against every active filter."""
    if filters.category != ALL and expense.category.value != filters.category:
        return False
    if filters.payment_method != ALL and expense.payment_method.value != filters.payment_method:
        return False
    if filters.status == PaidStatus.PAID.value and not expense.paid:
        return False
    if filters.status == PaidStatus.PENDING.value and expense.paid:
        return False

    query = filters.query.strip().lower()
    if not query:
        return True
    haystack = f"{expense.description} {expense.vendor or ''} {expense.notes or ''}".lower()
    return query in haystack


def filter_expenses(expenses: list[Expense], filters: ExpenseFilters) -> list[Expense]:
    """Keep the expenses that pass all filters, preserving order."""
    return [e for e in expenses if matches_filters(e, filters)]


def compute_kpis(expenses: list[Expense], month: Month) -> Kpis:
    """Calculate the KPI cards for a month.

    The 6-month average only counts months that had any spending, so a
    quiet month does not drag the average down.

    Args:
        expenses: All expenses (the average needs other months too).
        month: Selected month.

    Returns:
        Kpis for the month.
    """
    bucket = month_bucket(expenses, month)
    totals = monthly_totals(expenses)

    last_6 = [totals.get(m, Money(0)) for m in months_back(month, AVERAGE_MONTHS)]
    active = [amount for amount in last_6 if amount > 0]

    return Kpis(
        total=total(bucket),
        recurring_total=total([e for e in bucket if e.recurring]),
        pending_total=total([e for e in bucket if not e.paid]),
        average_6m=average_cents(active),
    )


def category_breakdown(expenses: list[Expense]) -> list[CategoryTotal]:
    """Sum amounts per category, largest first.

    Args:
        expenses: Expenses of a single month.

    Returns:
        CategoryTotal list sorted by amount descending. Categories with no
        expenses are omitted.
    """
    sums: dict[Category, int] = defaultdict(int)
    for expense in expenses:
        sums[expense.category] += expense.amount
    ordered = sorted(sums.items(), key=lambda x: x[1], reverse=True)
    return [CategoryTotal(category=cat, amount=Money(amt)) for cat, amt in ordered]


def monthly_trend(expenses: list[Expense], month: Month) -> list[TrendPoint]:
    """Totals for the 12 months ending at ``month``, oldest first.

    Months without expenses are included as zero.
    """
    totals = monthly_totals(expenses)
    window = list(reversed(months_back(month, TREND_MONTHS)))
    return [TrendPoint(month=m, amount=totals.get(m, Money(0))) for m in window]


def build_view(
    expenses: list[Expense],
    month: Month,
    filters: ExpenseFilters,
    today: date | None = None,
) -> DashboardView:
    """Derive every dashboard aggregate for the selected month."""
    bucket = month_bucket(expenses, month)
    filtered = filter_expenses(bucket, filters)

    return DashboardView(
        month=month,
        months=month_index(expenses, today),
        month_expenses=bucket,
        filtered=filtered,
        filtered_total=total(filtered),
        kpis=compute_kpis(expenses, month),
        by_category=category_breakdown(bucket),
        trend=monthly_trend(expenses, month),
    )


def calculate_bar_length(amount: Money, max_amount: Money, bar_width: int) -> int:
    """Calculate chart bar length in characters.

    Args:
        amount: Amount to display.
        max_amount: Maximum amount in the series.
        bar_width: Maximum bar width in characters.

    Returns:
        Bar length in characters.
    """
    if max_amount <= 0:
        return 0
    return int((abs(amount) / max_amount) * bar_width)
