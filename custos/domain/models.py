"""Domain type definitions for custos.

These types give the dashboard its vocabulary:
- Money: Amount in centavos (minor units)
- Month: Month in YYYY-MM format
- Category / PaymentMethod: closed enumerations
- Expense: the only domain entity
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType

# Money amounts are stored as centavos (minor units) to avoid floating point errors
Money = NewType("Money", int)

# Month is always in YYYY-MM format (e.g., "2025-01")
Month = NewType("Month", str)

ExpenseId = NewType("ExpenseId", str)

# Sentinel filter value meaning "do not filter on this field"
ALL = "all"


class Category(str, Enum):
    """Expense categories."""

    SISTEMAS = "Sistemas"
    IA_ASSINATURAS = "IA/Assinaturas"
    TREINAMENTO = "Treinamento"
    MENTORIAS = "Mentorias"
    VIAGENS = "Viagens"
    SALARIOS = "Salários"
    COMISSOES = "Comissões"
    IMPOSTOS = "Impostos"
    MARKETING = "Marketing"
    OUTROS = "Outros"


class PaymentMethod(str, Enum):
    """How an expense was paid."""

    PIX = "PIX"
    CARTAO = "Cartão"
    BOLETO = "Boleto"
    TRANSFERENCIA = "Transferência"
    DINHEIRO = "Dinheiro"


class PaidStatus(str, Enum):
    """Status filter values."""

    ALL = ALL
    PAID = "paid"
    PENDING = "pending"


@dataclass(frozen=True)
class Expense:
    """Immutable expense record."""

    id: ExpenseId
    date: str  # YYYY-MM-DD
    description: str
    category: Category
    amount: Money
    paid: bool
    payment_method: PaymentMethod
    vendor: str | None = None
    notes: str | None = None
    recurring: bool = False
