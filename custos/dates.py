"""Date utilities for custos.

Pure functions for year-month key arithmetic and formatting.
"""

from datetime import date, datetime

from custos.domain.models import Month


def parse_month(month: str) -> tuple[int, int]:
    """Split a month key into (year, month) integers.

    Raises:
        ValueError: If the key is not a valid YYYY-MM month.
    """
    dt = datetime.strptime(month, "%Y-%m")
    return dt.year, dt.month


def make_month(year: int, month: int) -> Month:
    """Build a month key from year and month numbers."""
    return Month(f"{year:04d}-{month:02d}")


def month_of(date_str: str) -> Month:
    """Get the month key for a YYYY-MM-DD date.

    Args:
        date_str: Date in YYYY-MM-DD format.

    Returns:
        Month key (YYYY-MM).
    """
    year, month, _ = date_str.split("-", 2)
    return Month(f"{year}-{month}")


def current_month(today: date | None = None) -> Month:
    """Get the month key for today (or the given date)."""
    if today is None:
        today = date.today()
    return make_month(today.year, today.month)


def step_back(month: Month, count: int = 1) -> Month:
    """Step a month key back by ``count`` months.

    Month 1 wraps to month 12 of the prior year, so "2024-01" stepped
    back once is "2023-12".

    Raises:
        ValueError: If the month key is invalid or count is negative.
    """
    if count < 0:
        raise ValueError("count must not be negative")
    year, month_num = parse_month(month)
    index = year * 12 + (month_num - 1) - count
    return make_month(index // 12, index % 12 + 1)


def months_back(month: Month, count: int) -> list[Month]:
    """List ``count`` month keys ending at ``month``, newest first.

    Example:
        months_back("2024-02", 3) == ["2024-02", "2024-01", "2023-12"]
    """
    return [step_back(month, i) for i in range(count)]


def format_month_label(month: Month) -> str:
    """Format a month key for chart axes (e.g., "10/2026")."""
    year, month_num = parse_month(month)
    return f"{month_num:02d}/{year}"
