# models/transaction.py
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import Column, Integer, ForeignKey, Date, String, Numeric, Enum

from database import db
from ledger.errors import ValidationError


class TransactionKind(str, PyEnum):
    INCOME = "income"
    EXPENSE = "expense"

    @classmethod
    def parse(cls, value) -> "TransactionKind":
        """Acepta el enum o un texto en cualquier combinación de mayúsculas ("Expense", " INCOME ")."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as exc:
            raise ValidationError(f"Tipo de transacción no soportado: {value!r}") from exc


def signed_amount(kind, amount: Decimal) -> Decimal:
    """Efecto sobre el saldo: +importe si es ingreso, -importe si es gasto."""
    if TransactionKind.parse(kind) is TransactionKind.EXPENSE:
        return -amount
    return amount


def parse_date(value) -> date:
    """Fechas de calendario: date tal cual, datetime truncado, str en ISO."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise ValidationError(f"Fecha no válida: {value!r}") from exc
    raise ValidationError(f"Fecha no válida: {value!r}")


class Transaction(db.Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    description = Column(String(255), nullable=False, default="")
    amount = Column(Numeric(12, 2), nullable=False)  # siempre >= 0, el signo lo da kind
    date = Column(Date, nullable=False)
    kind = Column(Enum("income", "expense", name="transaction_kind_enum"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)

    def __repr__(self):
        return f"<Transaction id={self.id} account={self.account_id} date={self.date} kind={self.kind} amount={self.amount}>"

    @property
    def signed_amount(self) -> Decimal:
        return signed_amount(self.kind, Decimal(self.amount))


@dataclass(frozen=True)
class TransactionView:
    """Transacción decorada con los nombres de su categoría y su cuenta (solo lectura)."""

    id: int
    description: str
    amount: Decimal
    date: date
    kind: TransactionKind
    category_id: int
    account_id: int
    category_name: str | None
    account_name: str | None

    @property
    def signed_amount(self) -> Decimal:
        return signed_amount(self.kind, self.amount)

    def to_dict(self):
        return {
            "id": self.id,
            "description": self.description,
            "amount": str(self.amount),
            "date": self.date.isoformat(),
            "kind": self.kind.value,
            "category_id": self.category_id,
            "category_name": self.category_name,
            "account_id": self.account_id,
            "account_name": self.account_name,
        }
