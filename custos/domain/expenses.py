"""Pure functions for expense creation, validation and money handling.

This module contains the functional core for expense operations:
- No I/O operations (no database, no console, no network)
- No side effects beyond generating new ids
- Easy to test

All monetary amounts are in centavos (Money type).
"""

import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from custos.domain.models import Category, Expense, ExpenseId, Money, PaymentMethod
from custos.errors import ValidationError


@dataclass(frozen=True)
class ExpenseForm:
    """Raw values entered in the "new expense" form."""

    date: str
    description: str
    amount: str
    category: str = Category.SISTEMAS.value
    payment_method: str = PaymentMethod.PIX.value
    paid: bool = True
    vendor: str = ""
    notes: str = ""
    recurring: bool = False


def new_expense_id() -> ExpenseId:
    """Generate an opaque unique expense id."""
    return ExpenseId(uuid.uuid4().hex)


def round_to_cents(value: Decimal) -> Money:
    """Convert a major-unit amount to centavos, rounding half-up."""
    return Money(int((value * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP)))


def parse_amount(amount_str: str) -> Money:
    """Parse a Brazilian-formatted amount into centavos.

    Dots are thousands separators and the comma is the decimal
    separator, so "1.234,56" is 123456 centavos.

    Args:
        amount_str: Amount as typed by the user (e.g., "299,00" or "R$ 1.299,90").

    Returns:
        Amount in centavos.

    Raises:
        ValidationError: If the amount is not a positive number.
    """
    cleaned = amount_str.replace("R$", "").strip().replace(".", "").replace(",", ".")
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        raise ValidationError(f"Valor inválido: {amount_str!r}") from None

    if not value.is_finite() or value <= 0:
        raise ValidationError(f"Valor inválido: {amount_str!r}")

    return round_to_cents(value)


def format_brl(amount: Money) -> str:
    """Format centavos as Brazilian reais.

    Args:
        amount: Amount in centavos.

    Returns:
        Formatted string (e.g., "R$ 1.234,56" or "-R$ 10,00").
    """
    reais, centavos = divmod(abs(amount), 100)
    grouped = f"{reais:,}".replace(",", ".")
    sign = "-" if amount < 0 else ""
    return f"{sign}R$ {grouped},{centavos:02d}"


def parse_category(value: str) -> Category:
    """Look up a category by its display value (case-insensitive).

    Raises:
        ValidationError: If the value is not a known category.
    """
    for category in Category:
        if category.value.lower() == value.strip().lower():
            return category
    raise ValidationError(f"Categoria desconhecida: {value!r}")


def parse_payment_method(value: str) -> PaymentMethod:
    """Look up a payment method by its display value (case-insensitive).

    Raises:
        ValidationError: If the value is not a known payment method.
    """
    for method in PaymentMethod:
        if method.value.lower() == value.strip().lower():
            return method
    raise ValidationError(f"Forma de pagamento desconhecida: {value!r}")


def validate_date(date_str: str) -> str:
    """Check a YYYY-MM-DD date string.

    Raises:
        ValidationError: If the date is empty or not a real calendar date.
    """
    date_str = date_str.strip()
    if not date_str:
        raise ValidationError("Informe a data")
    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError:
        raise ValidationError(f"Data inválida: {date_str!r}") from None
    return date_str


def build_expense(form: ExpenseForm, expense_id: ExpenseId | None = None) -> Expense:
    """Validate a form and turn it into an expense.

    Args:
        form: Values entered by the user.
        expense_id: Id to assign. A new one is generated if None.

    Returns:
        New Expense.

    Raises:
        ValidationError: If date, description or amount are missing or
            invalid, or category/payment method are unknown.
    """
    expense_date = validate_date(form.date)

    description = form.description.strip()
    if not description:
        raise ValidationError("Informe a descrição")

    amount = parse_amount(form.amount)

    return Expense(
        id=expense_id or new_expense_id(),
        date=expense_date,
        description=description,
        category=parse_category(form.category),
        amount=amount,
        paid=form.paid,
        payment_method=parse_payment_method(form.payment_method),
        vendor=form.vendor.strip() or None,
        notes=form.notes.strip() or None,
        recurring=form.recurring,
    )


def toggle_paid(expense: Expense) -> Expense:
    """Return a copy of the expense with its paid flag flipped."""
    return replace(expense, paid=not expense.paid)


def replace_expense(expenses: list[Expense], updated: Expense) -> list[Expense]:
    """Swap the expense with the same id for ``updated``."""
    return [updated if e.id == updated.id else e for e in expenses]


def remove_expense(expenses: list[Expense], expense_id: str) -> list[Expense]:
    """Drop the expense with the given id. Unknown ids leave the list unchanged."""
    return [e for e in expenses if e.id != expense_id]


def find_expense(expenses: list[Expense], expense_id: str) -> Expense | None:
    """Find an expense by id."""
    return next((e for e in expenses if e.id == expense_id), None)


def seed_expenses(today: date | None = None) -> list[Expense]:
    """First-run sample expenses, all dated today.

    Args:
        today: Date to use. Defaults to the current date.

    Returns:
        Three sample expenses totalling R$ 848,00.
    """
    if today is None:
        today = date.today()
    day = today.isoformat()

    return [
        Expense(
            id=new_expense_id(),
            date=day,
            description="Assinatura ferramenta de reservas",
            category=Category.SISTEMAS,
            amount=Money(29900),
            paid=True,
            payment_method=PaymentMethod.CARTAO,
            vendor="Plataforma X",
            notes="Plano mensal",
            recurring=True,
        ),
        Expense(
            id=new_expense_id(),
            date=day,
            description="Chat/IA (workspace)",
            category=Category.IA_ASSINATURAS,
            amount=Money(9900),
            paid=True,
            payment_method=PaymentMethod.CARTAO,
            vendor="IA",
            recurring=True,
        ),
        Expense(
            id=new_expense_id(),
            date=day,
            description="Campanha tráfego pago",
            category=Category.MARKETING,
            amount=Money(45000),
            paid=False,
            payment_method=PaymentMethod.PIX,
            vendor="Meta Ads",
            notes="Pendente",
        ),
    ]
